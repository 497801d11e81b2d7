"""预约时间冲突检查。

同一顾客的两个已存预约，其 ``[start, end]`` 闭区间不能重叠：

    candidate.start <= existing.end AND candidate.end >= existing.start

每次插入/更新前都重新查询数据库（不缓存结果，数据可能在加载之后已被修改）。
查询与写入之间存在一个很窄的竞争窗口（另一位操作员可能在此期间插入重叠预约），
这一点与原系统保持一致，不在此处解决。
"""
from datetime import datetime

from loguru import logger

from .records import Appointment
from .repository import AppointmentStore


def intervals_overlap(start_a: datetime, end_a: datetime,
                      start_b: datetime, end_b: datetime) -> bool:
    """闭区间重叠判断（端点相接也算重叠）。"""
    return start_a <= end_b and end_a >= start_b


class ConflictChecker:
    """预约冲突检查器

    Attributes:
        store: 预约仓库，提供 ``count_overlapping`` 查询。
    """

    def __init__(self, store: AppointmentStore) -> None:
        self.store = store

    def can_persist(self, appointment: Appointment) -> bool:
        """判断预约是否可以写入数据库。

        更新已有预约（id != 0）时会排除自身，因此把预约保存为未修改的时间段
        不会与自己冲突。

        Args:
            appointment: 待写入的预约。

        Returns:
            没有重叠预约时返回 True。

        Raises:
            DataAccessFailure: 查询失败（调用方应视为不可写入）。
        """
        count = self.store.count_overlapping(
            appointment.customer_id,
            appointment.start,
            appointment.end,
            exclude_id=appointment.id,
        )
        if count:
            logger.info(
                f"预约冲突: 顾客 {appointment.customer_id} 已有 {count} 个重叠预约"
            )
        return count == 0

    def __call__(self, appointment: Appointment) -> bool:
        return self.can_persist(appointment)


def never_conflicts(record) -> bool:
    """非预约实体使用的冲突检查：始终无冲突。"""
    return True
