"""SQLAlchemy ORM 模型定义。

本模块定义了所有数据库表的ORM模型，包括：
- 国家、一级行政区、联系人、用户等只读查找数据
- 顾客、预约等可编辑实体

所有时间列都以无时区信息的 UTC 时间保存，进出仓库时再转换为带时区的 datetime。
顾客与预约之间的外键只用于说明关系，级联删除由应用层负责
（SQLite 默认不强制外键约束）。
"""
from datetime import datetime, timezone
from typing import List

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

# SQLAlchemy declarative base，所有模型都继承自此类
Base = declarative_base()

# 允许使用旧式类型注解
Base.__allow_unmapped__ = True


def utc_naive_now() -> datetime:
    """当前 UTC 时间（无时区信息，存储约定）。"""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class AuditMixin:
    """审计字段。

    Attributes:
        create_date: 创建时间（UTC）。
        created_by: 创建人用户名。
        last_update: 最后修改时间（UTC）。
        last_updated_by: 最后修改人用户名。
    """
    # 混入列不带类型注解
    create_date = Column(DateTime, default=utc_naive_now)
    created_by = Column(String(50))
    last_update = Column(DateTime, default=utc_naive_now, onupdate=utc_naive_now)
    last_updated_by = Column(String(50))


class Country(AuditMixin, Base):
    """国家表模型。

    Attributes:
        id: 主键，自增整数。
        country: 国家名称。
    """
    __tablename__ = "countries"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    country: str = Column(String(50), nullable=False, unique=True)

    divisions: List["FirstLevelDivision"] = relationship(
        "FirstLevelDivision", back_populates="country"
    )


class FirstLevelDivision(AuditMixin, Base):
    """一级行政区（州/省）表模型。

    Attributes:
        id: 主键，自增整数。
        division: 行政区名称。
        country_id: 所属国家ID。
    """
    __tablename__ = "first_level_divisions"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    division: str = Column(String(50), nullable=False)
    country_id: int = Column(Integer, ForeignKey("countries.id"), nullable=False)

    country: "Country" = relationship("Country", back_populates="divisions")
    customers: List["Customer"] = relationship("Customer", back_populates="division")


class Customer(AuditMixin, Base):
    """顾客表模型。

    Attributes:
        id: 主键，自增整数。
        name: 顾客姓名。
        address: 地址。
        postal_code: 邮编。
        phone: 电话。
        division_id: 所在一级行政区ID。
    """
    __tablename__ = "customers"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(50), nullable=False)
    address: str = Column(String(100), nullable=False)
    postal_code: str = Column(String(50), nullable=False)
    phone: str = Column(String(50), nullable=False)
    division_id: int = Column(
        Integer, ForeignKey("first_level_divisions.id"), nullable=False
    )

    division: "FirstLevelDivision" = relationship(
        "FirstLevelDivision", back_populates="customers"
    )
    appointments: List["Appointment"] = relationship(
        "Appointment", back_populates="customer"
    )


class User(AuditMixin, Base):
    """用户（操作员）表模型。

    Attributes:
        id: 主键，自增整数。
        name: 登录用户名，唯一。
        password: 密码哈希，Base64(SHA-512)。
    """
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(50), nullable=False, unique=True)
    password: str = Column(Text, nullable=False)

    appointments: List["Appointment"] = relationship(
        "Appointment", back_populates="user"
    )


class Contact(Base):
    """联系人表模型。

    Attributes:
        id: 主键，自增整数。
        name: 联系人姓名。
        email: 邮箱。
    """
    __tablename__ = "contacts"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(50), nullable=False)
    email: str = Column(String(50), nullable=False)

    appointments: List["Appointment"] = relationship(
        "Appointment", back_populates="contact"
    )


class Appointment(AuditMixin, Base):
    """预约表模型。

    ``start``/``end`` 映射到 ``start_time``/``end_time`` 列，以 UTC 保存。

    Attributes:
        id: 主键，自增整数。
        title: 标题。
        description: 描述。
        location: 地点。
        type: 预约类型。
        start: 开始时间（UTC）。
        end: 结束时间（UTC）。
        customer_id: 顾客ID。
        user_id: 负责用户ID。
        contact_id: 联系人ID。
    """
    __tablename__ = "appointments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    title: str = Column(String(50), nullable=False)
    description: str = Column(String(50), nullable=False)
    location: str = Column(String(50), nullable=False)
    type: str = Column(String(50), nullable=False)
    start: datetime = Column("start_time", DateTime, nullable=False, index=True)
    end: datetime = Column("end_time", DateTime, nullable=False)
    customer_id: int = Column(
        Integer, ForeignKey("customers.id"), nullable=False, index=True
    )
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)
    contact_id: int = Column(Integer, ForeignKey("contacts.id"), nullable=False)

    customer: "Customer" = relationship("Customer", back_populates="appointments")
    user: "User" = relationship("User", back_populates="appointments")
    contact: "Contact" = relationship("Contact", back_populates="appointments")
