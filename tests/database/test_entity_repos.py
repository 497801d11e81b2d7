"""Entity repository tests.

- CustomerRepository: select / insert / update / delete, audit stamping
- AppointmentRepository: CRUD, timezone round trip, overlap counting,
  cascade delete, filters, upcoming query
- Lookup repositories: get_or_create, select
- DataAccessFailure translation
"""
from datetime import timedelta, timezone

import pytest

from business.errors import DataAccessFailure
from business.filters import AppointmentFilter, Period
from database.models import Customer as CustomerRow
from tests.conftest import EASTERN, eastern, make_appointment, make_customer


# ============================================================
# CustomerRepository Tests
# ============================================================
class TestCustomerRepository:

    def test_insert_returns_generated_id(self, temp_db, lookups):
        new_id = temp_db.customers.insert(make_customer(lookups.division_id).to_values())
        assert new_id > 0

    def test_select_returns_records_in_id_order(self, temp_db, lookups):
        first = temp_db.customers.insert(make_customer(lookups.division_id, "A").to_values())
        second = temp_db.customers.insert(make_customer(lookups.division_id, "B").to_values())

        rows = temp_db.customers.select()
        assert [c.id for c in rows] == [first, second]
        assert rows[0].name == "A"
        assert rows[0].division_id == lookups.division_id

    def test_update_changes_every_field(self, temp_db, lookups, customer_id):
        changed = make_customer(
            lookups.division_id, "Renamed",
            address="9 Oak", postal_code="99999", phone="555-9999",
        )
        count = temp_db.customers.update(customer_id, changed.to_values())
        assert count == 1

        stored = temp_db.customers.get(customer_id)
        assert stored.name == "Renamed"
        assert stored.address == "9 Oak"
        assert stored.postal_code == "99999"
        assert stored.phone == "555-9999"

    def test_update_missing_row_affects_nothing(self, temp_db, lookups):
        count = temp_db.customers.update(999, make_customer(lookups.division_id).to_values())
        assert count == 0

    def test_delete(self, temp_db, customer_id):
        assert temp_db.customers.delete(customer_id) == 1
        assert temp_db.customers.get(customer_id) is None
        assert temp_db.customers.delete(customer_id) == 0

    def test_audit_columns_follow_actor(self, temp_db, lookups):
        temp_db.set_actor("test")
        new_id = temp_db.customers.insert(make_customer(lookups.division_id).to_values())
        temp_db.set_actor("admin")
        temp_db.customers.update(new_id, make_customer(lookups.division_id, "B").to_values())

        with temp_db.get_session() as session:
            row = session.get(CustomerRow, new_id)
            assert row.created_by == "test"
            assert row.last_updated_by == "admin"

    def test_insert_missing_required_value_raises(self, temp_db, lookups):
        values = make_customer(lookups.division_id).to_values()
        values.pop("name")
        with pytest.raises(DataAccessFailure) as exc_info:
            temp_db.customers.insert(values)
        assert exc_info.value.operation == "customers.insert"
        assert exc_info.value.cause is not None


# ============================================================
# AppointmentRepository Tests
# ============================================================
class TestAppointmentRepository:

    def test_timestamps_round_trip_as_utc(self, temp_db, lookups, customer_id):
        start = eastern(2024, 1, 10, 10, 0)
        end = eastern(2024, 1, 10, 11, 0)
        new_id = temp_db.appointments.insert(
            make_appointment(lookups, customer_id, start, end).to_values()
        )

        stored = temp_db.appointments.select()[0]
        assert stored.id == new_id
        assert stored.start == start
        assert stored.end == end
        assert stored.start.tzinfo == timezone.utc
        assert stored.start.hour == 15

    def test_update_and_delete(self, temp_db, lookups, customer_id):
        appointment = make_appointment(
            lookups, customer_id, eastern(2024, 1, 10, 10), eastern(2024, 1, 10, 11)
        )
        new_id = temp_db.appointments.insert(appointment.to_values())

        appointment.title = "Follow-up"
        appointment.end = eastern(2024, 1, 10, 12)
        assert temp_db.appointments.update(new_id, appointment.to_values()) == 1

        stored = temp_db.appointments.select()[0]
        assert stored.title == "Follow-up"
        assert stored.end == eastern(2024, 1, 10, 12)

        assert temp_db.appointments.delete(new_id) == 1
        assert temp_db.appointments.select() == []

    def test_delete_by_customer_removes_only_that_customer(self, temp_db, lookups, customer_id):
        other_id = temp_db.customers.insert(make_customer(lookups.division_id, "Other").to_values())
        for hour in (9, 11):
            temp_db.appointments.insert(make_appointment(
                lookups, customer_id, eastern(2024, 1, 10, hour), eastern(2024, 1, 10, hour, 30)
            ).to_values())
        temp_db.appointments.insert(make_appointment(
            lookups, other_id, eastern(2024, 1, 10, 9), eastern(2024, 1, 10, 9, 30)
        ).to_values())

        assert temp_db.appointments.delete_by_customer(customer_id) == 2
        remaining = temp_db.appointments.select()
        assert [a.customer_id for a in remaining] == [other_id]

    def test_select_by_customer_and_contact(self, temp_db, lookups, customer_id):
        temp_db.appointments.insert(make_appointment(
            lookups, customer_id, eastern(2024, 1, 11, 9), eastern(2024, 1, 11, 10), title="Later"
        ).to_values())
        temp_db.appointments.insert(make_appointment(
            lookups, customer_id, eastern(2024, 1, 10, 9), eastern(2024, 1, 10, 10), title="Earlier"
        ).to_values())

        by_customer = temp_db.appointments.select_by_customer(customer_id)
        assert [a.title for a in by_customer] == ["Later", "Earlier"]

        by_contact = temp_db.appointments.select_by_contact(lookups.contact_id)
        assert [a.title for a in by_contact] == ["Earlier", "Later"]


class TestCountOverlapping:
    """Closed-interval overlap counting for one customer."""

    @pytest.fixture
    def existing_id(self, temp_db, lookups, customer_id):
        return temp_db.appointments.insert(make_appointment(
            lookups, customer_id, eastern(2024, 1, 10, 10), eastern(2024, 1, 10, 11)
        ).to_values())

    @pytest.mark.parametrize("start, end", [
        ((10, 30, 0), (10, 45, 0)),   # inside
        ((9, 0, 0), (10, 0, 0)),      # touches start
        ((11, 0, 0), (12, 0, 0)),     # touches end
        ((9, 0, 0), (12, 0, 0)),      # encloses
    ])
    def test_overlapping_intervals_are_counted(self, temp_db, customer_id, existing_id, start, end):
        count = temp_db.appointments.count_overlapping(
            customer_id, eastern(2024, 1, 10, *start), eastern(2024, 1, 10, *end)
        )
        assert count == 1

    def test_one_second_after_end_is_free(self, temp_db, customer_id, existing_id):
        count = temp_db.appointments.count_overlapping(
            customer_id, eastern(2024, 1, 10, 11, 0, 1), eastern(2024, 1, 10, 12)
        )
        assert count == 0

    def test_other_customer_is_ignored(self, temp_db, lookups, existing_id):
        other_id = temp_db.customers.insert(make_customer(lookups.division_id, "Other").to_values())
        count = temp_db.appointments.count_overlapping(
            other_id, eastern(2024, 1, 10, 10), eastern(2024, 1, 10, 11)
        )
        assert count == 0

    def test_excluded_id_is_not_counted(self, temp_db, customer_id, existing_id):
        count = temp_db.appointments.count_overlapping(
            customer_id, eastern(2024, 1, 10, 10), eastern(2024, 1, 10, 11),
            exclude_id=existing_id,
        )
        assert count == 0


class TestAppointmentFilters:

    @pytest.fixture
    def seeded(self, temp_db, lookups, customer_id):
        # 2024-01-31 20:00 Eastern is already February in UTC
        for title, start in (
            ("jan", eastern(2024, 1, 10, 9)),
            ("jan-late", eastern(2024, 1, 31, 20)),
            ("feb", eastern(2024, 2, 14, 9)),
        ):
            temp_db.appointments.insert(make_appointment(
                lookups, customer_id, start, start + timedelta(minutes=30), title=title
            ).to_values())
        return temp_db

    def test_month_filter_uses_display_timezone(self, seeded):
        january = AppointmentFilter(2024, Period.MONTH, 1, tz=EASTERN)
        assert [a.title for a in seeded.appointments.select(january)] == ["jan", "jan-late"]

    def test_month_filter_in_utc(self, seeded):
        january = AppointmentFilter(2024, Period.MONTH, 1)
        assert [a.title for a in seeded.appointments.select(january)] == ["jan"]

    def test_week_filter(self, seeded):
        # 2024-01-10 falls in ISO week 2
        week = AppointmentFilter(2024, Period.WEEK, 2, tz=EASTERN)
        assert [a.title for a in seeded.appointments.select(week)] == ["jan"]

    def test_filter_options(self, seeded):
        options = seeded.appointments.filter_options(EASTERN)
        assert list(options) == [2024]
        assert options[2024][Period.MONTH] == [1, 2]
        assert options[2024][Period.WEEK] == [2, 5, 7]


class TestUpcoming:

    def test_upcoming_for_user_window(self, temp_db, lookups, customer_id):
        now = eastern(2024, 1, 10, 9, 50)
        for title, start in (
            ("soon", eastern(2024, 1, 10, 10, 0)),
            ("edge", eastern(2024, 1, 10, 10, 5)),
            ("later", eastern(2024, 1, 10, 10, 30)),
            ("past", eastern(2024, 1, 10, 9, 0)),
        ):
            temp_db.appointments.insert(make_appointment(
                lookups, customer_id, start, start + timedelta(minutes=20), title=title
            ).to_values())

        upcoming = temp_db.appointments.upcoming_for_user(lookups.user_id, now, 15)
        assert [a.title for a in upcoming] == ["soon", "edge"]

        assert temp_db.appointments.upcoming_for_user(lookups.user_id + 1, now, 15) == []


# ============================================================
# Lookup repositories
# ============================================================
class TestLookupRepositories:

    def test_get_or_create_is_idempotent(self, temp_db, lookups):
        assert temp_db.countries.get_or_create("U.S") == lookups.country_id
        assert temp_db.divisions.get_or_create("New York", lookups.country_id) == lookups.division_id
        assert temp_db.contacts.get_or_create("Li Lee", "x@y.z") == lookups.contact_id
        assert temp_db.users.get_or_create("test", "hash") == lookups.user_id

    def test_divisions_by_country(self, temp_db, lookups):
        uk = temp_db.countries.get_or_create("UK")
        temp_db.divisions.get_or_create("Wales", uk)

        assert [d.division for d in temp_db.divisions.select(uk)] == ["Wales"]
        assert len(temp_db.divisions.select()) == 2

    def test_select_lookups(self, temp_db, lookups):
        assert [c.country for c in temp_db.countries.select()] == ["U.S"]
        assert [c.name for c in temp_db.contacts.select()] == ["Li Lee"]
        assert [u.name for u in temp_db.users.select()] == ["test"]

    def test_find_credentials(self, temp_db, lookups):
        user, password_hash = temp_db.users.find_credentials("test")
        assert user.id == lookups.user_id
        assert password_hash
        assert temp_db.users.find_credentials("nobody") is None


class TestDataAccessFailure:

    def test_select_on_missing_table(self, broken_db):
        with pytest.raises(DataAccessFailure) as exc_info:
            broken_db.appointments.select()
        assert exc_info.value.operation == "appointments.select"

    def test_overlap_on_missing_table(self, broken_db):
        with pytest.raises(DataAccessFailure):
            broken_db.appointments.count_overlapping(
                1, eastern(2024, 1, 10, 10), eastern(2024, 1, 10, 11)
            )

    def test_customer_select_on_missing_table(self, broken_db):
        with pytest.raises(DataAccessFailure) as exc_info:
            broken_db.customers.select()
        assert exc_info.value.operation == "customers.select"
