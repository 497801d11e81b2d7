"""记录校验引擎。

校验分两层，按顺序执行，遇到第一个错误立即失败：

1. 通用必填校验：遍历实体声明的字段描述符，文本字段去除空白后为空、
   引用字段为 0 时抛出 ``EmptyField``；时间戳字段不参与。
2. 实体专属规则：只有 Appointment 注册了规则（营业时间、先后顺序、同日）。

第二层只在第一层通过后执行。
"""
from dataclasses import dataclass
from datetime import datetime, time, timezone, tzinfo
from typing import Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from loguru import logger

from .errors import (
    CrossesDayBoundary, EmptyField, OutOfBusinessHours, StartAfterEnd,
    ValidationError,
)
from .records import Appointment, FieldKind, Record

EntityRule = Callable[[Record], None]


@dataclass(frozen=True)
class BusinessHours:
    """营业时间配置。

    Attributes:
        timezone: 营业时区名称（IANA），与存储时区、显示时区无关。
        open_hour: 开门整点（含）。
        close_hour: 关门整点，仅在恰好 ``close_hour:00:00`` 时包含。
    """
    timezone: str = "US/Eastern"
    open_hour: int = 8
    close_hour: int = 22

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.timezone)

    def localize(self, value: datetime) -> datetime:
        """把时间转换到营业时区。无时区信息的值按 UTC（存储约定）处理。"""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(self.tz)

    def contains(self, local: datetime) -> bool:
        """判断营业时区下的时间是否在营业时间内。"""
        return time(self.open_hour) <= local.time() <= time(self.close_hour)


def check_required_fields(record: Record) -> None:
    """通用必填校验，报告声明顺序中的第一个空字段。

    Raises:
        EmptyField: 第一个为空的文本字段或为 0 的引用字段。
    """
    for spec in record.FIELDS:
        value = spec.getter(record)
        if spec.kind == FieldKind.TEXT:
            if value is None or len(value.strip()) == 0:
                raise EmptyField(spec.name)
        elif spec.kind == FieldKind.REFERENCE:
            if not value:
                raise EmptyField(spec.name)


def check_appointment(appointment: Appointment, hours: BusinessHours) -> None:
    """预约专属规则。

    顺序：开始晚于结束 → 开始时间营业时间 → 结束时间营业时间 → 同日。
    start 晚于 end 时无论营业时间是否合法都报告 StartAfterEnd，因此该规则排在最前。

    Raises:
        StartAfterEnd: start 晚于 end（按绝对时刻比较）。
        OutOfBusinessHours: start 或 end 不在营业时间内。
        CrossesDayBoundary: 营业时区下 start 与 end 不在同一天。
    """
    start_local = hours.localize(appointment.start)
    end_local = hours.localize(appointment.end)

    if start_local > end_local:
        raise StartAfterEnd()
    if not hours.contains(start_local):
        raise OutOfBusinessHours("start")
    if not hours.contains(end_local):
        raise OutOfBusinessHours("end")
    if start_local.date() != end_local.date():
        raise CrossesDayBoundary()


class ValidationEngine:
    """记录校验引擎。

    Example::

        engine = ValidationEngine(BusinessHours("US/Eastern"))
        engine.validate(customer)          # 失败时抛出 ValidationError
        error = engine.check(appointment)  # 失败时返回错误，成功返回 None
    """

    def __init__(self, hours: Optional[BusinessHours] = None) -> None:
        self.hours = hours or BusinessHours()
        self._rules: Dict[type, List[EntityRule]] = {}
        self.register(Appointment, lambda a: check_appointment(a, self.hours))

    def register(self, record_type: type, rule: EntityRule) -> None:
        """为实体类型注册第二层规则。"""
        self._rules.setdefault(record_type, []).append(rule)

    def validate(self, record: Record) -> None:
        """执行两层校验。

        Raises:
            ValidationError: 第一个失败的规则。
        """
        check_required_fields(record)
        for rule in self._rules.get(type(record), ()):
            rule(record)

    def check(self, record: Record) -> Optional[ValidationError]:
        """执行校验并返回第一个错误（无错误返回 None）。"""
        try:
            self.validate(record)
        except ValidationError as err:
            logger.debug(f"{type(record).__name__} 校验未通过: {err}")
            return err
        return None
