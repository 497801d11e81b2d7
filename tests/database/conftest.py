"""Fixtures for isolated database module tests.

``temp_db`` and ``lookups`` come from tests/conftest.py.
"""
from datetime import datetime

import pytest

from database.base_crud import BaseCRUD


@pytest.fixture
def db_conn(temp_db):
    """Yield a DatabaseConnection from the temp_db manager."""
    return temp_db.conn


@pytest.fixture
def base_crud(db_conn):
    """Yield a BaseCRUD instance."""
    return BaseCRUD(db_conn)


@pytest.fixture
def broken_db(temp_db):
    """A manager whose tables have been dropped, so every query fails."""
    temp_db.execute_raw_sql("DROP TABLE appointments")
    temp_db.execute_raw_sql("DROP TABLE customers")
    return temp_db


@pytest.fixture
def sample_datetime():
    """Stable naive UTC datetime for deterministic tests."""
    return datetime(2024, 1, 10, 15, 0, 0)
