"""Seed script tests."""
import os
import shutil
import tempfile

import pytest

from business.auth import LoginService
from config.business_config import DefaultSeedConfig
from database import DatabaseManager
from scripts.init_db import init_database


@pytest.fixture
def empty_db():
    temp_dir = tempfile.mkdtemp(prefix="scheduler-seed-")
    manager = DatabaseManager(database_url=f"sqlite:///{os.path.join(temp_dir, 'seed.db')}")
    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


class TestInitDatabase:

    def test_seeds_lookup_tables(self, empty_db):
        init_database(empty_db, DefaultSeedConfig())

        assert [c.country for c in empty_db.countries.select()] == ["U.S", "UK", "Canada"]
        uk = empty_db.countries.select()[1]
        assert [d.division for d in empty_db.divisions.select(uk.id)] == [
            "England", "Wales", "Scotland", "Northern Ireland",
        ]
        assert [c.name for c in empty_db.contacts.select()] == [
            "Anika Costa", "Daniel Garcia", "Li Lee",
        ]

    def test_is_repeatable(self, empty_db):
        init_database(empty_db)
        init_database(empty_db)

        assert len(empty_db.countries.select()) == 3
        assert len(empty_db.users.select()) == 2

    def test_seeded_users_can_sign_in(self, empty_db):
        init_database(empty_db)
        service = LoginService(empty_db.users, empty_db.appointments)
        assert service.authenticate("admin", "admin").name == "admin"
        assert service.authenticate("test", "admin") is None
