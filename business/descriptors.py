"""实体描述符 - 通用表格/表单引擎使用的能力组合。

一个 EntityDescriptor 把某个实体类型在记录生命周期中需要的全部能力组合在一起：
字段描述符、空白记录工厂、仓库、冲突检查、级联删除、删除事件、表格列定义、
以及非文本字段与表单控件之间的映射。RecordTable 与 EditSession 只面向描述符编程，
不为每个实体派生子类。

非文本字段映射（表单控件名）：
- Customer: ``division_id``（下拉框选择的行政区 id）
- Appointment: ``start_date`` / ``start_hour`` / ``start_minute``、
  ``end_date`` / ``end_hour`` / ``end_minute``（显示时区下的日期与时分），
  ``customer_id`` / ``user_id`` / ``contact_id``（下拉框选择的 id）
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Callable, Generic, Optional, Sequence, Tuple, Type, TypeVar

from interface.base import FormSurface

from .conflicts import never_conflicts
from .events import EventKind
from .records import Appointment, Customer, FieldKind, Record
from .repository import RecordRepository

R = TypeVar("R", bound=Record)


@dataclass(frozen=True)
class Column:
    """表格列定义

    Attributes:
        title: 列标题
        getter: 从记录取显示值
    """
    title: str
    getter: Callable[[Any], Any]


def _no_form_mapping(*args) -> None:
    return None


def _no_dependencies(record) -> bool:
    return True


def _default_deleted_message(record) -> str:
    return f"{type(record).__name__} {record.id} deleted"


@dataclass
class EntityDescriptor(Generic[R]):
    """实体能力组合

    Attributes:
        name: 实体名称（如 'customer'），用于表单标题与日志。
        record_type: 实体类。
        repository: 持久化仓库。
        blank: 空白记录工厂（新建模式的工作副本）。
        columns: 表格列定义。
        conflict_check: 写入前的冲突检查，返回 False 阻止写入。
        delete_dependencies: 删除前的级联删除，返回 False 中止删除。
        deleted_event: 删除成功后发布的事件（可选）。
        load_form: 把非文本字段写入表单 ``(record, surface)``。
        apply_form: 把表单中的非文本字段写回记录 ``(surface, record)``。
        deleted_message: 删除成功后显示的提示（在删除之前计算）。
    """
    name: str
    record_type: Type[R]
    repository: RecordRepository[R]
    blank: Callable[[], R]
    columns: Sequence[Column] = ()
    conflict_check: Callable[[R], bool] = never_conflicts
    delete_dependencies: Callable[[R], bool] = _no_dependencies
    deleted_event: Optional[EventKind] = None
    load_form: Callable[[R, FormSurface], None] = _no_form_mapping
    apply_form: Callable[[FormSurface, R], None] = _no_form_mapping
    deleted_message: Callable[[R], str] = _default_deleted_message

    @property
    def text_fields(self):
        return tuple(
            spec for spec in self.record_type.FIELDS
            if spec.kind == FieldKind.TEXT
        )

    def title_for(self, mode) -> str:
        return f"{mode.value.capitalize()} {self.name}"


# ================================================================
# 非文本字段映射
# ================================================================

def split_timestamp(value: datetime, tz: tzinfo) -> Tuple[date, int, int]:
    """把时间戳拆成显示时区下的（日期, 小时, 分钟），用于日期/时间选择器。"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(tz)
    return local.date(), local.hour, local.minute


def join_timestamp(day: date, hour: int, minute: int, tz: tzinfo) -> datetime:
    """把显示时区下的选择器值组合成 UTC 时间戳。

    Raises:
        ValueError: 日期缺失或时分越界。
    """
    if day is None:
        raise ValueError("date is required")
    if isinstance(day, str):
        day = date.fromisoformat(day)
    local = datetime.combine(day, time(int(hour), int(minute)), tzinfo=tz)
    return local.astimezone(timezone.utc)


def _selected_id(surface: FormSurface, name: str) -> int:
    value = surface.get_value(name)
    if value is None or value == "":
        return 0
    if isinstance(value, Record):
        return value.id
    return int(value)


class CustomerFormMapping:
    """顾客表单的非文本字段映射（行政区下拉框）"""

    def load(self, record: Customer, surface: FormSurface) -> None:
        surface.set_value("division_id", record.division_id or None)

    def apply(self, surface: FormSurface, record: Customer) -> None:
        record.division_id = _selected_id(surface, "division_id")


class AppointmentFormMapping:
    """预约表单的非文本字段映射

    日期/时间选择器在显示时区下工作，写回记录时转换为 UTC。

    Attributes:
        tz: 显示时区。
    """

    REFERENCES = ("customer_id", "user_id", "contact_id")

    def __init__(self, tz: tzinfo) -> None:
        self.tz = tz

    def load(self, record: Appointment, surface: FormSurface) -> None:
        for prefix, value in (("start", record.start), ("end", record.end)):
            day, hour, minute = split_timestamp(value, self.tz)
            surface.set_value(f"{prefix}_date", day)
            surface.set_value(f"{prefix}_hour", hour)
            surface.set_value(f"{prefix}_minute", minute)
        for name in self.REFERENCES:
            surface.set_value(name, getattr(record, name) or None)

    def apply(self, surface: FormSurface, record: Appointment) -> None:
        record.start = self._read_timestamp(surface, "start")
        record.end = self._read_timestamp(surface, "end")
        for name in self.REFERENCES:
            setattr(record, name, _selected_id(surface, name))

    def _read_timestamp(self, surface: FormSurface, prefix: str) -> datetime:
        return join_timestamp(
            surface.get_value(f"{prefix}_date"),
            surface.get_value(f"{prefix}_hour") or 0,
            surface.get_value(f"{prefix}_minute") or 0,
            self.tz,
        )
