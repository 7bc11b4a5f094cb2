#!/usr/bin/env python3
"""
Record Store for the Macro Trie Compressor

Ordered, append-only, capacity-bounded collection of byte records.
Records loaded from input sit below the mark; macros created by the
passes are appended after it.
"""

from typing import Iterable, Iterator, List, Optional

from .models import MAX_RECORDS, CapacityExceeded, InvalidRecord, ShrinkInvariantViolated


class RecordStore:
    """
    Bounded list of mutable records.

    Records are only ever appended or shortened; nothing is deleted.
    """

    def __init__(self, capacity: int = MAX_RECORDS, records: Iterable[bytes] = ()):
        """
        Initialize the store.

        Args:
            capacity: Maximum number of records (inputs and macros).
            records: Optional initial records.
        """
        self.capacity = capacity
        self._records: List[bytearray] = []
        self._mark: Optional[int] = None

        for record in records:
            self.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[bytes]:
        return (bytes(r) for r in self._records)

    def append(self, text: bytes) -> int:
        """
        Append a record.

        Returns:
            Record id (slot index) of the new record.

        Raises:
            CapacityExceeded: If the store is full.
            InvalidRecord: If the record contains a NUL byte.
        """
        if len(self._records) >= self.capacity:
            raise CapacityExceeded(
                f"Record store full: capacity is {self.capacity} records"
            )
        if b"\x00" in text:
            raise InvalidRecord(f"Record {len(self._records)} contains a NUL byte")

        self._records.append(bytearray(text))
        return len(self._records) - 1

    def get(self, record_id: int) -> bytes:
        """Get a copy of a record's current contents."""
        return bytes(self._records[record_id])

    def set(self, record_id: int, text: bytes) -> None:
        """
        Replace a record's contents.

        Raises:
            ShrinkInvariantViolated: If the new contents are longer.
        """
        current = self._records[record_id]
        if len(text) > len(current):
            raise ShrinkInvariantViolated(
                f"Record {record_id} would grow from {len(current)} to {len(text)} bytes"
            )
        current[:] = text

    def mark(self) -> int:
        """
        Freeze the boundary between input records and macros.

        Can be called once; later calls return the existing mark.
        """
        if self._mark is None:
            self._mark = len(self._records)
        return self._mark

    def records_before(self, mark: int) -> List[bytes]:
        """Records below the mark (the inputs), in input order."""
        return [bytes(r) for r in self._records[:mark]]

    def records_from(self, mark: int) -> List[bytes]:
        """Records at or above the mark (the macros), in creation order."""
        return [bytes(r) for r in self._records[mark:]]

    def total_bytes(self) -> int:
        return sum(len(r) for r in self._records)
