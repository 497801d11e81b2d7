"""实体仓库 - 记录与数据库之间的数据访问层。

可编辑实体（顾客、预约）的仓库实现 business.repository 中的 RecordRepository
契约：select / insert / update / delete，进出时在 ORM 对象与业务记录
（business.records）之间转换。只读查找实体（联系人、用户、行政区、国家）的仓库
只提供查询和初始化数据所需的 get_or_create。

每个仓库继承 BaseCRUD 获得通用能力，所有数据库异常都转换为 DataAccessFailure。
"""
from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from business import records
from business.filters import AppointmentFilter, Period, filter_options
from business.repository import AppointmentStore, RecordRepository

from .base_crud import BaseCRUD, from_storage, to_storage
from .connection import DatabaseConnection
from .models import (
    Appointment, Contact, Country, Customer, FirstLevelDivision, User,
)


def _attribute_values(model, values: Dict[str, Any]) -> Dict[Any, Any]:
    """把 ``{字段名: 值}`` 转换为 ``{ORM 属性: 值}``，供批量 update 使用。"""
    return {getattr(model, name): value for name, value in values.items()}


class CustomerRepository(BaseCRUD, RecordRepository[records.Customer]):
    """顾客仓库。"""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    @staticmethod
    def _to_record(row: Customer) -> records.Customer:
        return records.Customer(
            id=row.id,
            name=row.name,
            address=row.address,
            postal_code=row.postal_code,
            phone=row.phone,
            division_id=row.division_id,
        )

    def select(self, record_filter: Optional[Any] = None) -> List[records.Customer]:
        """查询全部顾客（按 id 排序）。"""
        return [self._to_record(row) for row in self.get_all(Customer)]

    def insert(self, values: Dict[str, Any]) -> int:
        """插入顾客。

        Args:
            values: 字段值字典（见 ``Record.to_values``）。

        Returns:
            新顾客 ID。
        """
        with self._guard("customers.insert"):
            with self._get_session() as sess:
                customer = Customer(**self._stamp(values, creating=True))
                sess.add(customer)
                sess.commit()
                return customer.id

    def update(self, record_id: int, values: Dict[str, Any]) -> int:
        """更新顾客，返回受影响行数。"""
        with self._guard("customers.update"):
            with self._get_session() as sess:
                count = sess.query(Customer).filter(
                    Customer.id == record_id
                ).update(
                    _attribute_values(Customer, self._stamp(values, creating=False)),
                    synchronize_session=False,
                )
                sess.commit()
                return count

    def delete(self, record_id: int) -> int:
        """删除顾客，返回受影响行数（不会删除其预约，见 AppointmentRepository）。"""
        with self._guard("customers.delete"):
            with self._get_session() as sess:
                count = sess.query(Customer).filter(
                    Customer.id == record_id
                ).delete(synchronize_session=False)
                sess.commit()
                return count

    def get(self, customer_id: int) -> Optional[records.Customer]:
        row = self.get_by_id(Customer, customer_id)
        return self._to_record(row) if row else None


class AppointmentRepository(BaseCRUD, AppointmentStore):
    """预约仓库。

    除 RecordRepository 契约外，还提供冲突查询、按顾客级联删除、
    筛选选项与即将开始的预约查询。时间参数均应为带时区的 datetime。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    @staticmethod
    def _to_record(row: Appointment) -> records.Appointment:
        return records.Appointment(
            id=row.id,
            title=row.title,
            description=row.description,
            location=row.location,
            type=row.type,
            start=from_storage(row.start),
            end=from_storage(row.end),
            customer_id=row.customer_id,
            user_id=row.user_id,
            contact_id=row.contact_id,
        )

    @staticmethod
    def _to_columns(values: Dict[str, Any]) -> Dict[str, Any]:
        converted = dict(values)
        for name in ("start", "end"):
            if converted.get(name) is not None:
                converted[name] = to_storage(converted[name])
        return converted

    def select(self, record_filter: Optional[AppointmentFilter] = None
               ) -> List[records.Appointment]:
        """查询预约（按 id 排序）。

        Args:
            record_filter: 年 + 月/周 筛选条件（可选），按开始时间过滤。
        """
        with self._guard("appointments.select"):
            with self._get_session() as sess:
                query = sess.query(Appointment)
                if record_filter is not None:
                    lower, upper = record_filter.utc_range()
                    query = query.filter(
                        Appointment.start >= to_storage(lower),
                        Appointment.start < to_storage(upper),
                    )
                rows = query.order_by(Appointment.id).all()
                return [self._to_record(row) for row in rows]

    def insert(self, values: Dict[str, Any]) -> int:
        """插入预约，返回新预约 ID。"""
        with self._guard("appointments.insert"):
            with self._get_session() as sess:
                appointment = Appointment(
                    **self._stamp(self._to_columns(values), creating=True)
                )
                sess.add(appointment)
                sess.commit()
                return appointment.id

    def update(self, record_id: int, values: Dict[str, Any]) -> int:
        """更新预约，返回受影响行数。"""
        with self._guard("appointments.update"):
            with self._get_session() as sess:
                stamped = self._stamp(self._to_columns(values), creating=False)
                count = sess.query(Appointment).filter(
                    Appointment.id == record_id
                ).update(
                    _attribute_values(Appointment, stamped),
                    synchronize_session=False,
                )
                sess.commit()
                return count

    def delete(self, record_id: int) -> int:
        """删除预约，返回受影响行数。"""
        with self._guard("appointments.delete"):
            with self._get_session() as sess:
                count = sess.query(Appointment).filter(
                    Appointment.id == record_id
                ).delete(synchronize_session=False)
                sess.commit()
                return count

    def count_overlapping(self, customer_id: int, start: datetime,
                          end: datetime, exclude_id: int = 0) -> int:
        """统计同一顾客与 [start, end] 闭区间重叠的已存预约数量。

        重叠条件：``start <= existing.end AND end >= existing.start``。

        Args:
            customer_id: 顾客ID。
            start: 候选开始时间。
            end: 候选结束时间。
            exclude_id: 需要排除的预约ID（0 表示不排除）。
        """
        with self._guard("appointments.count_overlapping"):
            with self._get_session() as sess:
                query = sess.query(Appointment).filter(
                    Appointment.customer_id == customer_id,
                    Appointment.start <= to_storage(end),
                    Appointment.end >= to_storage(start),
                )
                if exclude_id:
                    query = query.filter(Appointment.id != exclude_id)
                return query.count()

    def delete_by_customer(self, customer_id: int) -> int:
        """删除顾客的全部预约，返回删除行数。"""
        with self._guard("appointments.delete_by_customer"):
            with self._get_session() as sess:
                count = sess.query(Appointment).filter(
                    Appointment.customer_id == customer_id
                ).delete(synchronize_session=False)
                sess.commit()
                return count

    def select_by_customer(self, customer_id: int) -> List[records.Appointment]:
        """查询顾客的全部预约（按 id 排序）。"""
        return [
            self._to_record(row) for row in self.get_all(
                Appointment, filters={"customer_id": customer_id}
            )
        ]

    def select_by_contact(self, contact_id: int) -> List[records.Appointment]:
        """查询联系人的全部预约（按开始时间排序）。"""
        return [
            self._to_record(row) for row in self.get_all(
                Appointment,
                filters={"contact_id": contact_id},
                order_by=Appointment.start,
            )
        ]

    def filter_options(self, tz: tzinfo) -> Dict[int, Dict[Period, List[int]]]:
        """列出已有预约所在的年份及其中的月份/周（显示时区下）。"""
        with self._guard("appointments.filter_options"):
            with self._get_session() as sess:
                starts = [
                    from_storage(start)
                    for (start,) in sess.query(Appointment.start).all()
                ]
        return filter_options(starts, tz)

    def upcoming_for_user(self, user_id: int, now: datetime,
                          window_minutes: int) -> List[records.Appointment]:
        """查询某用户在 [now, now + window] 内开始的预约（按开始时间排序）。"""
        upper = now + timedelta(minutes=window_minutes)
        with self._guard("appointments.upcoming"):
            with self._get_session() as sess:
                rows = sess.query(Appointment).filter(
                    Appointment.user_id == user_id,
                    Appointment.start >= to_storage(now),
                    Appointment.start <= to_storage(upper),
                ).order_by(Appointment.start).all()
                return [self._to_record(row) for row in rows]


# ================================================================
# 只读查找实体
# ================================================================

class ContactRepository(BaseCRUD):
    """联系人仓库。"""

    def select(self) -> List[records.Contact]:
        return [
            records.Contact(id=row.id, name=row.name, email=row.email)
            for row in self.get_all(Contact)
        ]

    def get_or_create(self, name: str, email: str,
                      session: Optional[Session] = None) -> int:
        """获取或创建联系人（按姓名匹配），返回 ID。"""
        def _do(sess):
            contact = sess.query(Contact).filter(Contact.name == name).first()
            if not contact:
                contact = Contact(name=name, email=email)
                sess.add(contact)
                sess.flush()
            return contact.id

        if session:
            return _do(session)

        with self._guard("contacts.get_or_create"):
            with self._get_session() as sess:
                contact_id = _do(sess)
                sess.commit()
                return contact_id


class UserRepository(BaseCRUD):
    """用户仓库。"""

    def select(self) -> List[records.User]:
        return [
            records.User(id=row.id, name=row.name)
            for row in self.get_all(User)
        ]

    def find_credentials(self, name: str) -> Optional[Tuple[records.User, str]]:
        """按用户名查询用户及其密码哈希。

        Returns:
            ``(User, 密码哈希)``，用户不存在时返回 None。
        """
        with self._guard("users.find"):
            with self._get_session() as sess:
                row = sess.query(User).filter(User.name == name).first()
                if row is None:
                    return None
                return records.User(id=row.id, name=row.name), row.password

    def get_or_create(self, name: str, password_hash: str,
                      session: Optional[Session] = None) -> int:
        """获取或创建用户（按用户名匹配），返回 ID。"""
        def _do(sess):
            user = sess.query(User).filter(User.name == name).first()
            if not user:
                user = User(**self._stamp(
                    {"name": name, "password": password_hash}, creating=True
                ))
                sess.add(user)
                sess.flush()
            return user.id

        if session:
            return _do(session)

        with self._guard("users.get_or_create"):
            with self._get_session() as sess:
                user_id = _do(sess)
                sess.commit()
                return user_id


class CountryRepository(BaseCRUD):
    """国家仓库。"""

    def select(self) -> List[records.Country]:
        return [
            records.Country(id=row.id, country=row.country)
            for row in self.get_all(Country)
        ]

    def get_or_create(self, country: str,
                      session: Optional[Session] = None) -> int:
        """获取或创建国家，返回 ID。"""
        def _do(sess):
            row = sess.query(Country).filter(Country.country == country).first()
            if not row:
                row = Country(**self._stamp({"country": country}, creating=True))
                sess.add(row)
                sess.flush()
            return row.id

        if session:
            return _do(session)

        with self._guard("countries.get_or_create"):
            with self._get_session() as sess:
                country_id = _do(sess)
                sess.commit()
                return country_id


class DivisionRepository(BaseCRUD):
    """一级行政区仓库。"""

    def select(self, country_id: Optional[int] = None) -> List[records.Division]:
        """查询行政区。

        Args:
            country_id: 只返回该国家的行政区（可选，用于国家 → 行政区联动下拉框）。
        """
        filters = {"country_id": country_id} if country_id else None
        return [
            records.Division(
                id=row.id, division=row.division, country_id=row.country_id
            )
            for row in self.get_all(FirstLevelDivision, filters=filters)
        ]

    def get_or_create(self, division: str, country_id: int,
                      session: Optional[Session] = None) -> int:
        """获取或创建行政区（按名称 + 国家匹配），返回 ID。"""
        def _do(sess):
            row = sess.query(FirstLevelDivision).filter(
                FirstLevelDivision.division == division,
                FirstLevelDivision.country_id == country_id,
            ).first()
            if not row:
                row = FirstLevelDivision(**self._stamp(
                    {"division": division, "country_id": country_id},
                    creating=True,
                ))
                sess.add(row)
                sess.flush()
            return row.id

        if session:
            return _do(session)

        with self._guard("first_level_divisions.get_or_create"):
            with self._get_session() as sess:
                division_id = _do(sess)
                sess.commit()
                return division_id
