"""
Notification Stream

Append-only publish/subscribe stream of ledger notifications. Events are
published only after the operation that produced them has committed, and
subscribers can never influence or fail that operation.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid
import logging
from threading import RLock


class LedgerEvent(Enum):
    """Notifications emitted by the ledger"""
    TRANSFER = "ledger.transfer"
    APPROVAL = "ledger.approval"
    FEE_COLLECTED = "ledger.fee_collected"
    TREASURY_CHANGED = "policy.treasury_changed"
    FEE_RATE_CHANGED = "policy.fee_rate_changed"
    EXEMPTION_CHANGED = "policy.exemption_changed"
    PAUSED = "control.paused"
    UNPAUSED = "control.unpaused"


@dataclass
class EventPayload:
    """Payload for ledger notifications"""
    event_type: LedgerEvent
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'event_type': self.event_type.value,
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
            'event_id': self.event_id
        }


def transfer_event(from_account: str, to_account: str, amount: int) -> EventPayload:
    return EventPayload(LedgerEvent.TRANSFER, {
        "from": from_account, "to": to_account, "amount": str(amount)
    })


def approval_event(owner: str, spender: str, amount: int) -> EventPayload:
    return EventPayload(LedgerEvent.APPROVAL, {
        "owner": owner, "spender": spender, "amount": str(amount)
    })


def fee_collected_event(from_account: str, to_account: str, fee_amount: int, net_amount: int) -> EventPayload:
    return EventPayload(LedgerEvent.FEE_COLLECTED, {
        "from": from_account,
        "to": to_account,
        "fee_amount": str(fee_amount),
        "net_amount": str(net_amount),
    })


def _handler_name(handler: Callable) -> str:
    return getattr(handler, '__name__', repr(handler))


class EventDispatcher:
    """Central event dispatcher with an append-only history"""

    def __init__(self):
        self._handlers: Dict[LedgerEvent, List[Callable]] = {}
        self._global_handlers: List[Callable] = []  # catch-all handlers
        self._history: List[EventPayload] = []
        self._lock = RLock()
        self.logger = logging.getLogger("fee_ledger.events")

    def subscribe(self, event_type: LedgerEvent, handler: Callable) -> None:
        """Subscribe to a specific event type"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            self.logger.debug(f"Subscribed handler {_handler_name(handler)} to {event_type.value}")

    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to ALL events"""
        with self._lock:
            self._global_handlers.append(handler)
            self.logger.debug(f"Subscribed global handler {_handler_name(handler)}")

    def unsubscribe(self, event_type: LedgerEvent, handler: Callable) -> None:
        """Unsubscribe from a specific event type"""
        with self._lock:
            try:
                self._handlers.get(event_type, []).remove(handler)
            except ValueError:
                self.logger.warning(f"Handler {_handler_name(handler)} was not subscribed to {event_type.value}")

    def publish(self, event: EventPayload) -> None:
        """Append event to the history and deliver it to all subscribers"""
        with self._lock:
            self._history.append(event)
            self.logger.debug(f"Publishing event {event.event_type.value}")

            handlers = self._handlers.get(event.event_type, []) + self._global_handlers
            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    # Subscribers are observational; never break the committed operation
                    self.logger.error(f"Error in event handler {_handler_name(handler)} for {event.event_type.value}: {e}")

    def publish_all(self, events: List[EventPayload]) -> None:
        for event in events:
            self.publish(event)

    def history(self, event_type: Optional[LedgerEvent] = None) -> List[EventPayload]:
        """Published events in order, optionally filtered by type"""
        with self._lock:
            if event_type is None:
                return list(self._history)
            return [e for e in self._history if e.event_type == event_type]

    def get_handler_count(self, event_type: Optional[LedgerEvent] = None) -> int:
        """Get count of handlers for a specific event type or all"""
        with self._lock:
            if event_type:
                return len(self._handlers.get(event_type, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)
