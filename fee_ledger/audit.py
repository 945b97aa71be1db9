"""
Audit Trail Module

Hash-chained immutable audit log with SHA-256 for tamper detection.
Every committed ledger notification is recorded here.
"""

import hashlib
import json
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .storage import StorageInterface, StorageRecord
from .events import EventPayload, LedgerEvent


@dataclass
class AuditEvent(StorageRecord):
    """
    Immutable audit event with hash chaining for tamper detection
    """
    sequence: int
    event_type: LedgerEvent
    previous_hash: str  # Hash of previous audit event for chaining
    current_hash: str   # SHA-256 hash of this event
    metadata: Dict[str, Any]

    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash to prevent circular reference
        """
        hash_data = {
            'id': self.id,
            'sequence': self.sequence,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'previous_hash': self.previous_hash,
            'metadata': self.metadata
        }

        # Create deterministic JSON string
        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        """Verify that the current hash is correct"""
        return self.current_hash == self.calculate_hash()

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['event_type'] = self.event_type.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        data = dict(data)
        data['created_at'] = datetime.fromisoformat(data['created_at'])
        data['updated_at'] = datetime.fromisoformat(data['updated_at'])
        data['event_type'] = LedgerEvent(data['event_type'])
        return cls(**data)


class AuditTrail:
    """
    Hash-chained audit trail for tamper detection
    """

    def __init__(self, storage: StorageInterface, table_name: str = "audit_events"):
        self.storage = storage
        self.table_name = table_name
        self._lock = threading.Lock()
        self._last_hash = ""
        self._next_sequence = 0
        self._load_last_hash()

    def _load_events(self) -> List[AuditEvent]:
        events = [AuditEvent.from_dict(data) for data in self.storage.load_all(self.table_name)]
        events.sort(key=lambda e: e.sequence)
        return events

    def _load_last_hash(self) -> None:
        """Load the chain tip once; record() keeps it current afterwards"""
        events = self._load_events()
        if events:
            self._last_hash = events[-1].current_hash
            self._next_sequence = events[-1].sequence + 1

    def record(self, payload: EventPayload) -> AuditEvent:
        """Append a committed notification to the chain"""
        with self._lock:
            now = datetime.now(timezone.utc)

            event = AuditEvent(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                sequence=self._next_sequence,
                event_type=payload.event_type,
                previous_hash=self._last_hash,
                current_hash="",  # Will be calculated below
                metadata=dict(payload.data, event_id=payload.event_id)
            )
            event.current_hash = event.calculate_hash()

            self.storage.save(self.table_name, event.id, event.to_dict())

            # Update chain tip only after the event is stored
            self._last_hash = event.current_hash
            self._next_sequence += 1
            return event

    def get_latest_hash(self) -> str:
        """Get the hash of the most recent audit event"""
        return self._last_hash

    def get_all_events(self, event_type: Optional[LedgerEvent] = None) -> List[AuditEvent]:
        events = self._load_events()
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        return events

    def count_events(self) -> int:
        return self.storage.count(self.table_name)

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': []
        }

        events = self._load_events()
        result['total_events'] = len(events)

        previous_hash = ""
        for i, event in enumerate(events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash

        return result
