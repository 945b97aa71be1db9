"""
Tests for the notification stream
"""

from unittest.mock import Mock

from fee_ledger.events import (
    EventDispatcher, EventPayload, LedgerEvent, fee_collected_event, transfer_event
)


class TestEventPayload:

    def test_transfer_event_amounts_are_strings(self):
        event = transfer_event("a", "b", 2 ** 200)
        assert event.event_type == LedgerEvent.TRANSFER
        assert event.data["amount"] == str(2 ** 200)
        assert len(event.event_id) > 0

    def test_to_dict(self):
        event = fee_collected_event("a", "b", 5, 95)
        data = event.to_dict()
        assert data["event_type"] == "ledger.fee_collected"
        assert data["data"] == {"from": "a", "to": "b", "fee_amount": "5", "net_amount": "95"}


class TestEventDispatcher:

    def test_specific_and_global_handlers(self):
        dispatcher = EventDispatcher()
        specific = Mock(__name__="specific")
        everything = Mock(__name__="everything")
        dispatcher.subscribe(LedgerEvent.TRANSFER, specific)
        dispatcher.subscribe_all(everything)

        transfer = transfer_event("a", "b", 1)
        paused = EventPayload(LedgerEvent.PAUSED, {"account": "owner"})
        dispatcher.publish(transfer)
        dispatcher.publish(paused)

        specific.assert_called_once_with(transfer)
        assert everything.call_count == 2
        assert dispatcher.get_handler_count() == 2

    def test_failing_handler_does_not_propagate(self):
        dispatcher = EventDispatcher()
        dispatcher.subscribe(LedgerEvent.TRANSFER, Mock(side_effect=RuntimeError("boom"), __name__="bad"))
        good = Mock(__name__="good")
        dispatcher.subscribe(LedgerEvent.TRANSFER, good)

        dispatcher.publish(transfer_event("a", "b", 1))

        good.assert_called_once()
        assert len(dispatcher.history()) == 1

    def test_unsubscribe(self):
        dispatcher = EventDispatcher()
        handler = Mock(__name__="handler")
        dispatcher.subscribe(LedgerEvent.TRANSFER, handler)
        dispatcher.unsubscribe(LedgerEvent.TRANSFER, handler)
        dispatcher.unsubscribe(LedgerEvent.TRANSFER, handler)

        dispatcher.publish(transfer_event("a", "b", 1))
        handler.assert_not_called()

    def test_history_is_ordered_and_filterable(self):
        dispatcher = EventDispatcher()
        events = [
            transfer_event("a", "b", 1),
            fee_collected_event("a", "b", 1, 1),
            transfer_event("b", "c", 2),
        ]
        dispatcher.publish_all(events)

        assert dispatcher.history() == events
        assert dispatcher.history(LedgerEvent.TRANSFER) == [events[0], events[2]]
