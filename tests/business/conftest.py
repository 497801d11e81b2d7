"""Fixtures for the record lifecycle engine.

Tables run against the shared context fixture, so tests script user input
by filling the MemoryForm that each session opens.
"""
from datetime import date

import pytest

from business.table import RecordTable


def fill_customer(form, lookups, **overrides):
    values = dict(
        name="Alice",
        address="1 Main St",
        postal_code="10001",
        phone="555-0100",
        division_id=lookups.division_id,
    )
    values.update(overrides)
    return form.fill(**values)


def fill_appointment(form, lookups, customer_id, day=date(2024, 1, 10),
                     start=(10, 0), end=(11, 0), **overrides):
    """Fill an appointment form; times are in the display timezone."""
    values = dict(
        title="Checkup",
        description="Routine visit",
        location="Room 1",
        type="Planning Session",
        start_date=day,
        start_hour=start[0],
        start_minute=start[1],
        end_date=day,
        end_hour=end[0],
        end_minute=end[1],
        customer_id=customer_id,
        user_id=lookups.user_id,
        contact_id=lookups.contact_id,
    )
    values.update(overrides)
    return form.fill(**values)


@pytest.fixture
def customer_table(context, descriptors):
    table = RecordTable(descriptors["customer"], context.presenter, context.engine, context.bus)
    table.load()
    return table


@pytest.fixture
def appointment_table(context, descriptors):
    table = RecordTable(descriptors["appointment"], context.presenter, context.engine, context.bus)
    table.load()
    return table
