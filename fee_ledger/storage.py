"""
Storage Backend Module

Record store for ledger state with an in-memory backend (testing) and a
SQLite backend (persistence). Integer amounts are stored as decimal strings
so that 256-bit values survive JSON encoding unchanged.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Tuple, Union
from datetime import datetime, timezone
import sqlite3
import json
import threading
from pathlib import Path
from contextlib import contextmanager
from dataclasses import dataclass, asdict


@dataclass
class StorageRecord:
    """Base class for all stored records"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        result = asdict(self)
        # Convert datetime objects to ISO strings
        result['created_at'] = self.created_at.isoformat()
        result['updated_at'] = self.updated_at.isoformat()
        return result


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage connection"""
        pass

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records whose fields equal every filter value"""
        return [
            record for record in self.load_all(table)
            if all(key in record and record[key] == value for key, value in filters.items())
        ]

    def begin_transaction(self) -> None:
        """Start a database transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """
        Context manager for atomic operations

        Nested blocks join the outermost transaction; only the outermost
        block commits or rolls back.
        """
        depth = getattr(self, '_atomic_depth', 0)
        self._atomic_depth = depth + 1
        if depth == 0:
            self.begin_transaction()
        try:
            yield
        except Exception:
            self._atomic_depth = depth
            if depth == 0:
                self.rollback()
            raise
        self._atomic_depth = depth
        if depth == 0:
            self.commit()


class InMemoryStorage(StorageInterface):
    """In-memory storage implementation for testing"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        # (table, record_id) -> record before the transaction first wrote it
        self._undo: Optional[Dict[Tuple[str, str], Optional[Dict[str, Any]]]] = None
        self._lock = threading.RLock()

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to memory"""
        with self._lock:
            rows = self._data.setdefault(table, {})
            if self._undo is not None and (table, record_id) not in self._undo:
                self._undo[(table, record_id)] = rows.get(record_id)
            # Deep copy to prevent external mutation
            rows[record_id] = json.loads(json.dumps(data, default=str))

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            record = self._data.get(table, {}).get(record_id)
            if record:
                return json.loads(json.dumps(record))
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            return [json.loads(json.dumps(record)) for record in self._data.get(table, {}).values()]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            return len(self._data.get(table, {}))

    def begin_transaction(self) -> None:
        """Start recording previous values of every record written"""
        with self._lock:
            self._undo = {}

    def commit(self) -> None:
        """Discard the undo log"""
        with self._lock:
            self._undo = None

    def rollback(self) -> None:
        """Restore every record written since begin_transaction"""
        with self._lock:
            if self._undo is None:
                return
            for (table, record_id), previous in self._undo.items():
                rows = self._data[table]
                if previous is None:
                    del rows[record_id]
                else:
                    rows[record_id] = previous
                if not rows:
                    del self._data[table]
            self._undo = None

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass


class SQLiteStorage(StorageInterface):
    """SQLite storage implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        # Manual transaction control; statements open a transaction implicitly
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level='DEFERRED')
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._in_transaction = False
        self._tables: set = set()

        if self.db_path != ":memory:":
            with self._lock:
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
                self._connection.commit()

    def _ensure_table(self, table: str) -> None:
        """Ensure table exists with proper schema"""
        if table in self._tables:
            return
        with self._lock:
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            # DDL inside an open transaction is rolled back together with it
            if not self._in_transaction:
                self._connection.commit()
                self._tables.add(table)

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to SQLite"""
        with self._lock:
            self._ensure_table(table)

            now = datetime.now(timezone.utc).isoformat()
            data_json = json.dumps(data, default=str)

            self._connection.execute(f"""
                INSERT OR REPLACE INTO {table} (id, data, created_at, updated_at)
                VALUES (?, ?,
                    COALESCE((SELECT created_at FROM {table} WHERE id = ?), ?),
                    ?)
            """, (record_id, data_json, record_id, now, now))
            if not self._in_transaction:
                self._connection.commit()

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from SQLite"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} WHERE id = ?
            """, (record_id,))
            row = cursor.fetchone()
            if row:
                return json.loads(row['data'])
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT data FROM {table} ORDER BY created_at, rowid
            """)
            return [json.loads(row['data']) for row in cursor.fetchall()]

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            self._ensure_table(table)
            cursor = self._connection.execute(f"""
                SELECT COUNT(*) as count FROM {table}
            """)
            return cursor.fetchone()['count']

    def begin_transaction(self) -> None:
        """Start a database transaction"""
        with self._lock:
            if not self._in_transaction:
                # isolation_level='DEFERRED' opens the transaction on first write
                self._in_transaction = True

    def commit(self) -> None:
        """Commit current transaction"""
        with self._lock:
            if self._in_transaction:
                self._connection.commit()
                self._in_transaction = False

    def rollback(self) -> None:
        """Rollback current transaction"""
        with self._lock:
            if self._in_transaction:
                self._connection.rollback()
                self._in_transaction = False

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


def create_storage(backend: str = "memory", db_path: Union[str, Path] = ":memory:") -> StorageInterface:
    """Build a storage backend by name ('memory' or 'sqlite')"""
    if backend == "memory":
        return InMemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(db_path)
    raise ValueError(f"Unknown storage backend: {backend}")
