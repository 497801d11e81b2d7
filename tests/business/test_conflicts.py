"""ConflictChecker tests against a real appointment repository."""
import pytest

from business.conflicts import ConflictChecker, intervals_overlap, never_conflicts
from business.errors import DataAccessFailure
from tests.conftest import eastern, make_appointment, make_customer


@pytest.fixture
def checker(temp_db):
    return ConflictChecker(temp_db.appointments)


@pytest.fixture
def existing(temp_db, lookups, customer_id):
    appointment = make_appointment(
        lookups, customer_id, eastern(2024, 1, 10, 10), eastern(2024, 1, 10, 11)
    )
    appointment.id = temp_db.appointments.insert(appointment.to_values())
    return appointment


def candidate(lookups, customer_id, start, end):
    return make_appointment(
        lookups, customer_id, eastern(2024, 1, 10, *start), eastern(2024, 1, 10, *end)
    )


class TestCanPersist:

    @pytest.mark.parametrize("start, end", [
        ((10, 30), (10, 45)),
        ((9, 0), (10, 0)),
        ((11, 0), (12, 0)),
    ])
    def test_overlaps_are_rejected(self, checker, lookups, customer_id, existing, start, end):
        assert not checker.can_persist(candidate(lookups, customer_id, start, end))

    def test_one_second_after_end_is_accepted(self, checker, lookups, customer_id, existing):
        assert checker.can_persist(candidate(lookups, customer_id, (11, 0, 1), (12, 0)))

    def test_other_customer_is_accepted(self, checker, temp_db, lookups, existing):
        other_id = temp_db.customers.insert(make_customer(lookups.division_id, "Bob").to_values())
        assert checker.can_persist(candidate(lookups, other_id, (10, 0), (11, 0)))

    def test_own_unchanged_interval_is_accepted(self, checker, existing):
        assert checker.can_persist(existing.copy())

    def test_own_id_is_excluded_but_others_still_count(self, checker, temp_db, lookups,
                                                       customer_id, existing):
        second = candidate(lookups, customer_id, (13, 0), (14, 0))
        second.id = temp_db.appointments.insert(second.to_values())

        moved = second.copy()
        moved.start = eastern(2024, 1, 10, 10, 30)
        moved.end = eastern(2024, 1, 10, 11, 30)
        assert not checker.can_persist(moved)

    def test_check_is_not_cached(self, checker, temp_db, lookups, customer_id):
        proposed = candidate(lookups, customer_id, (15, 0), (16, 0))
        assert checker.can_persist(proposed)

        temp_db.appointments.insert(candidate(lookups, customer_id, (15, 30), (16, 30)).to_values())
        assert not checker(proposed)

    def test_data_access_failure_propagates(self, lookups):
        class FailingStore:
            def count_overlapping(self, *args, **kwargs):
                raise DataAccessFailure("appointments.count_overlapping")

        with pytest.raises(DataAccessFailure):
            ConflictChecker(FailingStore()).can_persist(
                candidate(lookups, 1, (10, 0), (11, 0))
            )


class TestHelpers:

    def test_intervals_overlap_is_closed(self):
        a, b, c = eastern(2024, 1, 10, 10), eastern(2024, 1, 10, 11), eastern(2024, 1, 10, 12)
        assert intervals_overlap(a, b, b, c)
        assert not intervals_overlap(a, b, eastern(2024, 1, 10, 11, 0, 1), c)

    def test_never_conflicts(self):
        assert never_conflicts(object())
