"""应用上下文与实体描述符装配。

AppContext 在启动时构建一次，显式传递给需要它的组件
（表格、表单映射、报表、登录），取代全局的连接/时区状态。
"""
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from loguru import logger

from interface.base import Presenter

from .conflicts import ConflictChecker
from .descriptors import (
    AppointmentFormMapping, Column, CustomerFormMapping, EntityDescriptor,
)
from .errors import DataAccessFailure
from .events import EventBus, EventKind
from .records import Appointment, Customer, User
from .validation import BusinessHours, ValidationEngine


def resolve_timezone(name: str) -> tzinfo:
    """时区名称 → tzinfo，空字符串表示本机时区。"""
    if not name:
        return datetime.now().astimezone().tzinfo
    return ZoneInfo(name)


@dataclass
class AppContext:
    """应用上下文

    Attributes:
        settings: 应用配置（config.settings.Settings）。
        db: 数据库管理器（database.DatabaseManager）。
        bus: 事件总线，所有表格共享。
        presenter: 表现层。
        user: 当前登录用户。
        hours: 营业时间（由 settings 生成）。
        display_tz: 显示时区（由 settings 生成）。
        engine: 校验引擎。
    """
    settings: Any
    db: Any
    presenter: Presenter
    bus: EventBus = field(default_factory=EventBus)
    user: Optional[User] = None
    hours: BusinessHours = field(init=False)
    display_tz: tzinfo = field(init=False)
    engine: ValidationEngine = field(init=False)

    def __post_init__(self):
        self.hours = BusinessHours(
            self.settings.business_timezone,
            self.settings.business_open_hour,
            self.settings.business_close_hour,
        )
        self.display_tz = resolve_timezone(self.settings.display_timezone)
        self.engine = ValidationEngine(self.hours)

    def sign_in(self, user: User) -> None:
        """设置当前用户，并用其用户名填充之后写入的审计字段。"""
        self.user = user
        self.db.set_actor(user.name)


def _format_time(value: datetime, tz: tzinfo) -> str:
    return value.astimezone(tz).strftime("%Y-%m-%d %H:%M")


def build_descriptors(context: AppContext) -> Dict[str, EntityDescriptor]:
    """装配顾客与预约的实体描述符。

    Returns:
        ``{"customer": ..., "appointment": ...}``
    """
    db = context.db
    tz = context.display_tz

    def delete_customer_appointments(customer: Customer) -> bool:
        try:
            removed = db.appointments.delete_by_customer(customer.id)
        except DataAccessFailure as e:
            logger.error(f"删除顾客 {customer.id} 的预约失败: {e}")
            return False
        logger.info(f"级联删除顾客 {customer.id} 的 {removed} 个预约")
        return True

    def customer_deleted_message(customer: Customer) -> str:
        try:
            appointments = db.appointments.select_by_customer(customer.id)
        except DataAccessFailure:
            appointments = []
        message = f"Customer {customer.name} (ID {customer.id}) was deleted."
        if appointments:
            removed = ", ".join(f"#{a.id} {a.title}" for a in appointments)
            message += f" Appointments removed: {removed}."
        return message

    def appointment_deleted_message(appointment: Appointment) -> str:
        return (
            f"Appointment ID {appointment.id} of type {appointment.type} "
            f"was canceled."
        )

    customer_mapping = CustomerFormMapping()
    appointment_mapping = AppointmentFormMapping(tz)

    customer = EntityDescriptor(
        name="customer",
        record_type=Customer,
        repository=db.customers,
        blank=Customer,
        columns=(
            Column("ID", lambda c: c.id),
            Column("Name", lambda c: c.name),
            Column("Address", lambda c: c.address),
            Column("Postal Code", lambda c: c.postal_code),
            Column("Phone", lambda c: c.phone),
            Column("Division", lambda c: c.division_id),
        ),
        delete_dependencies=delete_customer_appointments,
        deleted_event=EventKind.CUSTOMER_DELETED,
        load_form=customer_mapping.load,
        apply_form=customer_mapping.apply,
        deleted_message=customer_deleted_message,
    )

    appointment = EntityDescriptor(
        name="appointment",
        record_type=Appointment,
        repository=db.appointments,
        blank=Appointment,
        columns=(
            Column("ID", lambda a: a.id),
            Column("Title", lambda a: a.title),
            Column("Description", lambda a: a.description),
            Column("Location", lambda a: a.location),
            Column("Contact", lambda a: a.contact_id),
            Column("Type", lambda a: a.type),
            Column("Start", lambda a: _format_time(a.start, tz)),
            Column("End", lambda a: _format_time(a.end, tz)),
            Column("Customer", lambda a: a.customer_id),
            Column("User", lambda a: a.user_id),
        ),
        conflict_check=ConflictChecker(db.appointments),
        deleted_event=EventKind.APPOINTMENT_DELETED,
        load_form=appointment_mapping.load,
        apply_form=appointment_mapping.apply,
        deleted_message=appointment_deleted_message,
    )

    return {"customer": customer, "appointment": appointment}
