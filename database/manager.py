"""数据库管理器 - 统一门面（Facade）。

DatabaseManager 是 database 模块的统一入口，组合了所有子仓库：

- ``db.customers`` / ``db.appointments``：可编辑实体仓库（RecordRepository 契约）
- ``db.contacts`` / ``db.users`` / ``db.divisions`` / ``db.countries``：只读查找仓库

整个应用共享同一个 DatabaseManager（同一个引擎），由 AppContext 持有。
"""
from typing import Any, Optional

from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .entity_repos import (
    AppointmentRepository, ContactRepository, CountryRepository,
    CustomerRepository, DivisionRepository, UserRepository,
)


class DatabaseManager:
    """数据库管理器 - 统一门面。

    Attributes:
        conn: 数据库连接管理器。
        customers: 顾客仓库。
        appointments: 预约仓库。
        contacts: 联系人仓库。
        users: 用户仓库。
        divisions: 一级行政区仓库。
        countries: 国家仓库。

    Example::

        db = DatabaseManager("sqlite:///data/scheduler.db")
        db.create_tables()
        db.set_actor("test")

        customer_id = db.customers.insert({...})
        rows = db.appointments.select()
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库管理器。

        Args:
            database_url: 数据库连接URL。如果为None则使用settings配置。
        """
        # 基础设施层
        self.conn = DatabaseConnection(database_url)

        # 可编辑实体仓库
        self.customers = CustomerRepository(self.conn)
        self.appointments = AppointmentRepository(self.conn)

        # 只读查找仓库
        self.contacts = ContactRepository(self.conn)
        self.users = UserRepository(self.conn)
        self.divisions = DivisionRepository(self.conn)
        self.countries = CountryRepository(self.conn)

    # ================================================================
    # 基础设施方法
    # ================================================================

    def create_tables(self) -> None:
        """创建所有数据库表（幂等操作）。"""
        self.conn.create_tables()

    def get_session(self) -> Session:
        """获取数据库会话。"""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """数据库连接URL。"""
        return self.conn.database_url

    @property
    def engine(self):
        """SQLAlchemy 引擎对象。"""
        return self.conn.engine

    @property
    def actor(self) -> str:
        """当前操作人（写入审计字段）。"""
        return self.conn.actor

    def set_actor(self, user_name: str) -> None:
        """设置当前操作人，之后的写入都以该用户名填充审计字段。

        Args:
            user_name: 登录用户名。
        """
        self.conn.actor = user_name

    def execute_raw_sql(self, sql: str,
                        params: Optional[dict] = None) -> Any:
        """执行原始 SQL 语句。

        注意：应优先使用 ORM 方法，仅在必要时使用原始 SQL。
        """
        return self.conn.execute_raw_sql(sql, params)

    def close(self) -> None:
        """关闭数据库连接，释放所有资源。"""
        self.conn.close()
