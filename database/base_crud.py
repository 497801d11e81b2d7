"""通用 CRUD 基类。

所有仓库继承 BaseCRUD，获得：
- 会话管理（``_get_session``）
- 按主键查询、全量查询、计数等通用方法
- SQLAlchemy 异常到 ``DataAccessFailure`` 的统一转换（``_guard``）
- 审计字段填充（``_stamp``）
"""
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Type

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from business.errors import DataAccessFailure

from .connection import DatabaseConnection
from .models import utc_naive_now


def to_storage(value: datetime) -> datetime:
    """带时区的时间 → 无时区 UTC（存储约定）。"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: datetime) -> datetime:
    """无时区 UTC → 带时区的 UTC 时间。"""
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class BaseCRUD:
    """通用 CRUD 基类。

    Attributes:
        conn: 数据库连接管理器。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """把 SQLAlchemy 异常转换为 DataAccessFailure 并记录日志。

        Args:
            operation: 操作名称，如 ``customers.insert``。

        Raises:
            DataAccessFailure: 块内抛出了 SQLAlchemyError。
        """
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"数据库操作失败 [{operation}]: {e}")
            raise DataAccessFailure(operation, e) from e

    def _stamp(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        """填充审计字段，返回新的字典。"""
        stamped = dict(values)
        now = utc_naive_now()
        if creating:
            stamped["create_date"] = now
            stamped["created_by"] = self.conn.actor
        stamped["last_update"] = now
        stamped["last_updated_by"] = self.conn.actor
        return stamped

    def get_by_id(self, model: Type, record_id: int,
                  session: Optional[Session] = None) -> Optional[Any]:
        """按主键查询单个 ORM 对象。

        Args:
            model: ORM 模型类。
            record_id: 主键。
            session: 外部会话（可选）。

        Returns:
            ORM 对象，不存在时返回 None。
        """
        if session:
            return session.get(model, record_id)

        with self._guard(f"{model.__tablename__}.get"):
            with self._get_session() as sess:
                return sess.get(model, record_id)

    def get_all(self, model: Type, filters: Optional[Dict[str, Any]] = None,
                order_by: Optional[Any] = None,
                session: Optional[Session] = None) -> List[Any]:
        """查询全部 ORM 对象。

        Args:
            model: ORM 模型类。
            filters: 等值过滤条件 ``{列名: 值}``（可选）。
            order_by: 排序列（可选，默认按主键）。
            session: 外部会话（可选）。

        Returns:
            ORM 对象列表。
        """
        def _query(sess):
            query = sess.query(model)
            for column, value in (filters or {}).items():
                query = query.filter(getattr(model, column) == value)
            return query.order_by(
                order_by if order_by is not None else model.id
            ).all()

        if session:
            return _query(session)

        with self._guard(f"{model.__tablename__}.select"):
            with self._get_session() as sess:
                return _query(sess)

    def count(self, model: Type, session: Optional[Session] = None) -> int:
        """统计表中的行数。"""
        if session:
            return session.query(model).count()

        with self._guard(f"{model.__tablename__}.count"):
            with self._get_session() as sess:
                return sess.query(model).count()
