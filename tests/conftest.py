"""Shared fixtures.

Every test that touches the database gets a fresh temp-file SQLite
DatabaseManager seeded with one country, one division, one contact and one
user (see ``lookups``).
"""
import os
import shutil
import tempfile
from datetime import datetime
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from business.auth import hash_password
from business.context import AppContext, build_descriptors
from business.records import Appointment, Customer
from config.settings import Settings
from database import DatabaseManager
from interface.base import MemoryPresenter

EASTERN = ZoneInfo("US/Eastern")


def eastern(year, month, day, hour=0, minute=0, second=0):
    """Aware datetime in the default business timezone."""
    return datetime(year, month, day, hour, minute, second, tzinfo=EASTERN)


def make_customer(division_id, name="Alice", **overrides):
    values = dict(
        name=name,
        address="1 Main St",
        postal_code="10001",
        phone="555-0100",
        division_id=division_id,
    )
    values.update(overrides)
    return Customer(**values)


def make_appointment(lookups, customer_id, start, end, title="Checkup", **overrides):
    values = dict(
        title=title,
        description="Routine visit",
        location="Room 1",
        type="Planning Session",
        start=start,
        end=end,
        customer_id=customer_id,
        user_id=lookups.user_id,
        contact_id=lookups.contact_id,
    )
    values.update(overrides)
    return Appointment(**values)


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="scheduler-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def lookups(temp_db):
    """Seed the lookup tables and return their ids."""
    country_id = temp_db.countries.get_or_create("U.S")
    division_id = temp_db.divisions.get_or_create("New York", country_id)
    contact_id = temp_db.contacts.get_or_create("Li Lee", "llee@company.com")
    user_id = temp_db.users.get_or_create("test", hash_password("test"))
    return SimpleNamespace(
        country_id=country_id,
        division_id=division_id,
        contact_id=contact_id,
        user_id=user_id,
    )


@pytest.fixture
def customer_id(temp_db, lookups):
    """A persisted customer."""
    return temp_db.customers.insert(make_customer(lookups.division_id).to_values())


@pytest.fixture
def settings():
    return Settings(
        business_timezone="US/Eastern",
        display_timezone="US/Eastern",
        log_file="",
        login_activity_file="",
    )


@pytest.fixture
def presenter():
    return MemoryPresenter()


@pytest.fixture
def context(settings, temp_db, lookups, presenter):
    """AppContext over the temp database with a MemoryPresenter."""
    return AppContext(settings, temp_db, presenter)


@pytest.fixture
def descriptors(context):
    return build_descriptors(context)
