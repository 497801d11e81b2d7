"""记录仓库契约 - 核心层消费的数据访问接口

核心层（RecordTable、ConflictChecker）只依赖这里定义的抽象接口，
具体实现位于 database/entity_repos.py（SQLAlchemy）。

所有实现在数据库访问失败时都应抛出 ``DataAccessFailure``。
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from .records import Appointment, Record

R = TypeVar("R", bound=Record)


class RecordRepository(ABC, Generic[R]):
    """单个实体类型的持久化契约"""

    @abstractmethod
    def select(self, record_filter: Optional[Any] = None) -> List[R]:
        """查询记录（保持数据库返回顺序）

        Args:
            record_filter: 实体专属的筛选条件（可选）
        """

    @abstractmethod
    def insert(self, values: Dict[str, Any]) -> int:
        """插入一行，返回生成的 id（0 表示插入失败）"""

    @abstractmethod
    def update(self, record_id: int, values: Dict[str, Any]) -> int:
        """更新一行，返回受影响行数"""

    @abstractmethod
    def delete(self, record_id: int) -> int:
        """删除一行，返回受影响行数"""


class AppointmentStore(RecordRepository[Appointment]):
    """预约仓库契约，额外提供冲突查询与级联删除"""

    @abstractmethod
    def count_overlapping(self, customer_id: int, start: datetime,
                          end: datetime, exclude_id: int = 0) -> int:
        """统计同一顾客与 [start, end] 闭区间重叠的已存预约数量

        Args:
            customer_id: 顾客 id
            start: 候选开始时间
            end: 候选结束时间
            exclude_id: 需要排除的预约 id（更新时为自身 id，0 表示不排除）
        """

    @abstractmethod
    def delete_by_customer(self, customer_id: int) -> int:
        """删除某顾客的全部预约，返回删除行数"""
