"""业务记录（实体）定义。

每个实体都是一个 dataclass，继承自 :class:`Record`，并在类定义完成后
通过 :func:`declare_fields` 声明一组字段描述符 ``FieldSpec``：

    (字段名, 读取函数, 写入函数, 字段类型)

通用的校验、表单绑定、合并逻辑都只遍历这组描述符，不做运行时类型反射。
字段的声明顺序即校验顺序（只报告第一个失败字段）。

实体分两类：
- 可编辑实体：Customer、Appointment
- 只读查找实体：Contact、User、Country、Division（由数据库填充，核心从不修改）
"""
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Sequence, Tuple


class FieldKind(Enum):
    """字段类型"""
    TEXT = "text"              # 短文本，去除空白后不能为空
    REFERENCE = "reference"    # 外键引用，0 表示未选择
    TIMESTAMP = "timestamp"    # 时间戳，构造后必然存在，不参与必填校验


@dataclass(frozen=True)
class FieldSpec:
    """单个可绑定字段的描述符。

    Attributes:
        name: 字段名（与数据库列、表单控件同名）。
        getter: 从记录读取字段值。
        setter: 向记录写入字段值。
        kind: 字段类型。
    """
    name: str
    getter: Callable[["Record"], Any]
    setter: Callable[["Record", Any], None]
    kind: FieldKind


def _accessors(name: str):
    def getter(record):
        return getattr(record, name)

    def setter(record, value):
        setattr(record, name, value)

    return getter, setter


def declare_fields(record_type: type,
                   declarations: Sequence[Tuple[str, FieldKind]]) -> type:
    """为实体类声明字段描述符（类定义时执行一次）。

    Args:
        record_type: 实体类。
        declarations: ``(字段名, 字段类型)`` 列表，顺序即校验顺序。

    Returns:
        实体类本身。

    Raises:
        ValueError: 字段名不是实体的 dataclass 字段。
    """
    known = {f.name for f in dataclasses.fields(record_type)}
    specs = []
    for name, kind in declarations:
        if name not in known:
            raise ValueError(f"{record_type.__name__} has no field '{name}'")
        getter, setter = _accessors(name)
        specs.append(FieldSpec(name, getter, setter, kind))
    record_type.FIELDS = tuple(specs)
    return record_type


def utc_now() -> datetime:
    """当前 UTC 时间（精确到秒）。"""
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass
class Record:
    """所有持久化实体的基类。

    ``id == 0`` 当且仅当记录从未成功插入数据库。

    Attributes:
        id: 主键，0 表示尚未持久化。
    """
    id: int = 0

    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = ()

    @property
    def is_new(self) -> bool:
        return self.id == 0

    def copy(self):
        """返回一个字段值完全相同的新实例（用于编辑副本）。"""
        return dataclasses.replace(self)

    def apply_changes(self, other: "Record"):
        """把另一个实例的全部字段（包括 id）复制到当前实例。

        用于更新成功后原地合并，保证其他持有该行引用的地方也能看到变化。

        Args:
            other: 同类型的另一个实例。

        Returns:
            self
        """
        if type(other) is not type(self):
            raise TypeError(
                f"cannot apply {type(other).__name__} to {type(self).__name__}"
            )
        for f in dataclasses.fields(self):
            setattr(self, f.name, getattr(other, f.name))
        return self

    def to_values(self) -> Dict[str, Any]:
        """按声明顺序导出字段值字典（不含 id），用于插入/更新。"""
        return {spec.name: spec.getter(self) for spec in self.FIELDS}

    def fields_of(self, kind: FieldKind) -> Tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.FIELDS if spec.kind == kind)


# ================================================================
# 可编辑实体
# ================================================================

@dataclass
class Customer(Record):
    """顾客。

    通过软外键拥有零个或多个预约（由应用层保证，不依赖数据库约束）。
    """
    name: str = ""
    address: str = ""
    postal_code: str = ""
    phone: str = ""
    division_id: int = 0

    def __str__(self) -> str:
        return self.name


declare_fields(Customer, [
    ("name", FieldKind.TEXT),
    ("address", FieldKind.TEXT),
    ("postal_code", FieldKind.TEXT),
    ("phone", FieldKind.TEXT),
    ("division_id", FieldKind.REFERENCE),
])


@dataclass
class Appointment(Record):
    """预约。

    start/end 均为带时区的 datetime；写入数据库时统一转换为 UTC。
    """
    title: str = ""
    description: str = ""
    location: str = ""
    type: str = ""
    start: datetime = field(default_factory=utc_now)
    end: datetime = field(default_factory=utc_now)
    customer_id: int = 0
    user_id: int = 0
    contact_id: int = 0

    def __str__(self) -> str:
        return self.title


declare_fields(Appointment, [
    ("title", FieldKind.TEXT),
    ("description", FieldKind.TEXT),
    ("location", FieldKind.TEXT),
    ("type", FieldKind.TEXT),
    ("start", FieldKind.TIMESTAMP),
    ("end", FieldKind.TIMESTAMP),
    ("customer_id", FieldKind.REFERENCE),
    ("user_id", FieldKind.REFERENCE),
    ("contact_id", FieldKind.REFERENCE),
])


# ================================================================
# 只读查找实体
# ================================================================

@dataclass
class Contact(Record):
    name: str = ""
    email: str = ""

    def __str__(self) -> str:
        return self.name


declare_fields(Contact, [("name", FieldKind.TEXT), ("email", FieldKind.TEXT)])


@dataclass
class User(Record):
    name: str = ""

    def __str__(self) -> str:
        return self.name


declare_fields(User, [("name", FieldKind.TEXT)])


@dataclass
class Country(Record):
    country: str = ""

    def __str__(self) -> str:
        return self.country


declare_fields(Country, [("country", FieldKind.TEXT)])


@dataclass
class Division(Record):
    """一级行政区（州/省）。"""
    division: str = ""
    country_id: int = 0

    def __str__(self) -> str:
        return self.division


declare_fields(Division, [
    ("division", FieldKind.TEXT),
    ("country_id", FieldKind.REFERENCE),
])
