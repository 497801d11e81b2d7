"""EventBus tests."""
from business.events import EventBus, EventKind


class TestEventBus:

    def test_handlers_called_in_subscription_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EventKind.CUSTOMER_DELETED, lambda: calls.append("first"))
        bus.subscribe(EventKind.CUSTOMER_DELETED, lambda: calls.append("second"))

        assert bus.publish(EventKind.CUSTOMER_DELETED) == 2
        assert calls == ["first", "second"]

    def test_publish_without_subscribers(self):
        assert EventBus().publish(EventKind.APPOINTMENT_DELETED) == 0

    def test_events_are_independent(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EventKind.CUSTOMER_DELETED, lambda: calls.append("customer"))
        bus.publish(EventKind.APPOINTMENT_DELETED)
        assert calls == []

    def test_duplicate_subscription_called_once(self):
        bus = EventBus()
        calls = []

        def handler():
            calls.append(1)

        bus.subscribe(EventKind.CUSTOMER_DELETED, handler)
        bus.subscribe(EventKind.CUSTOMER_DELETED, handler)
        bus.publish(EventKind.CUSTOMER_DELETED)
        assert calls == [1]
        assert bus.subscriber_count(EventKind.CUSTOMER_DELETED) == 1

    def test_unsubscribe(self):
        bus = EventBus()
        calls = []

        def handler():
            calls.append(1)

        bus.subscribe(EventKind.CUSTOMER_DELETED, handler)
        bus.unsubscribe(EventKind.CUSTOMER_DELETED, handler)
        bus.unsubscribe(EventKind.CUSTOMER_DELETED, handler)
        bus.publish(EventKind.CUSTOMER_DELETED)
        assert calls == []

    def test_handler_subscribing_during_publish_waits_for_next_publish(self):
        bus = EventBus()
        calls = []

        def late():
            calls.append("late")

        def first():
            calls.append("first")
            bus.subscribe(EventKind.CUSTOMER_DELETED, late)

        bus.subscribe(EventKind.CUSTOMER_DELETED, first)
        bus.publish(EventKind.CUSTOMER_DELETED)
        assert calls == ["first"]
        bus.publish(EventKind.CUSTOMER_DELETED)
        assert calls == ["first", "first", "late"]
