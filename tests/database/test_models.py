"""ORM model tests.

Covers table creation, column mapping and audit defaults.
"""
from datetime import datetime

from sqlalchemy import create_engine, inspect

from database.models import (
    Appointment, Base, Contact, Country, Customer, FirstLevelDivision, User,
)


class TestSchema:
    """Tables and columns created by create_tables()."""

    def test_all_tables_created(self, temp_db):
        tables = set(inspect(temp_db.engine).get_table_names())
        assert {
            "countries", "first_level_divisions", "customers",
            "users", "contacts", "appointments",
        } <= tables

    def test_create_tables_is_idempotent(self, temp_db):
        temp_db.create_tables()
        temp_db.create_tables()
        assert "appointments" in inspect(temp_db.engine).get_table_names()

    def test_appointment_times_use_named_columns(self, temp_db):
        columns = {c["name"] for c in inspect(temp_db.engine).get_columns("appointments")}
        assert {"start_time", "end_time"} <= columns
        assert "start" not in columns

    def test_audit_columns_present(self, temp_db):
        columns = {c["name"] for c in inspect(temp_db.engine).get_columns("customers")}
        assert {"create_date", "created_by", "last_update", "last_updated_by"} <= columns

    def test_audit_mixin_columns_copied_to_each_model(self):
        engine = create_engine("sqlite://")
        try:
            Base.metadata.create_all(engine)
            for model in (Country, FirstLevelDivision, Customer, User, Appointment):
                columns = model.__table__.columns
                assert {"create_date", "created_by", "last_update", "last_updated_by"} <= \
                    set(columns.keys())
                assert columns["create_date"].table is model.__table__
        finally:
            engine.dispose()

    def test_metadata_knows_every_model(self):
        for model in (Country, FirstLevelDivision, Customer, User, Contact, Appointment):
            assert model.__tablename__ in Base.metadata.tables


class TestRelationships:

    def test_customer_appointments_relationship(self, temp_db, lookups, sample_datetime):
        with temp_db.get_session() as session:
            customer = Customer(
                name="Bob", address="2 Elm St", postal_code="02110",
                phone="555-0101", division_id=lookups.division_id,
            )
            session.add(customer)
            session.flush()
            session.add(Appointment(
                title="Intro", description="d", location="l", type="t",
                start=sample_datetime, end=sample_datetime,
                customer_id=customer.id, user_id=lookups.user_id,
                contact_id=lookups.contact_id,
            ))
            session.commit()

            loaded = session.get(Customer, customer.id)
            assert len(loaded.appointments) == 1
            assert loaded.appointments[0].title == "Intro"
            assert loaded.division.division == "New York"

    def test_audit_defaults_filled(self, temp_db, lookups):
        with temp_db.get_session() as session:
            contact = session.get(Contact, lookups.contact_id)
            assert contact.name == "Li Lee"
            country = session.get(Country, lookups.country_id)
            assert isinstance(country.create_date, datetime)
            assert country.created_by == "script"
