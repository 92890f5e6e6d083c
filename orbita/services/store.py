"""
In-memory record store

Stands in for the relational store: records are kept verbatim (secret fields
as ciphertext) and keyed by id.
"""

import logging
import threading
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class InMemoryRecordStore(Generic[RecordT]):
    """
    Thread-safe in-memory store for records with an ``id`` field
    """

    def __init__(self, name: str = "records"):
        """
        Initialize record store

        Args:
            name: Store name used in log messages
        """
        self._name = name
        self._store: Dict[str, RecordT] = {}
        self._lock = threading.RLock()

    def put(self, record: RecordT) -> RecordT:
        """
        Insert or replace a record

        Args:
            record: Record to store

        Returns:
            The stored record
        """
        with self._lock:
            self._store[record.id] = record
            logger.debug(f"Stored {self._name} record {record.id}")
            return record

    def get(self, record_id: str) -> Optional[RecordT]:
        """
        Retrieve a record by ID

        Returns:
            Record if found, None otherwise
        """
        with self._lock:
            return self._store.get(record_id)

    def find(self, predicate: Callable[[RecordT], bool]) -> List[RecordT]:
        """Return all records matching a predicate"""
        with self._lock:
            return [record for record in self._store.values() if predicate(record)]

    def find_one(self, predicate: Callable[[RecordT], bool]) -> Optional[RecordT]:
        """Return the first record matching a predicate, if any"""
        matches = self.find(predicate)
        return matches[0] if matches else None

    def remove(self, record_id: str) -> bool:
        """
        Remove a record from the store

        Returns:
            True if the record was removed, False if not found
        """
        with self._lock:
            if record_id in self._store:
                del self._store[record_id]
                logger.debug(f"Removed {self._name} record {record_id}")
                return True
            return False

    def values(self) -> List[RecordT]:
        with self._lock:
            return list(self._store.values())

    def count(self) -> int:
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        """Clear all records from the store"""
        with self._lock:
            self._store.clear()
            logger.info(f"Cleared all {self._name} records")

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, record_id: str) -> bool:
        return self.get(record_id) is not None
