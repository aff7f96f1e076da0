from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import TimeEntryType
from .model import TimeEntry, TimeEntryFilters


class SequenceWriter(Protocol):
    """Read-then-append access to one employee's entries.

    Obtained from ``TimeEntryRepository.employee_sequence``; no other writer
    for the same employee can interleave until the context exits.
    """

    def last_entry(self) -> Optional[TimeEntry]:
        raise NotImplementedError

    def insert(
        self,
        *,
        entry_type: TimeEntryType,
        timestamp: datetime,
        created_at: datetime,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        raise NotImplementedError


class TimeEntryRepository(Protocol):
    def employee_sequence(self, employee_id: str) -> ContextManager[SequenceWriter]:
        raise NotImplementedError

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def list_entries(self, filters: TimeEntryFilters) -> Sequence[TimeEntry]:
        """Newest first by creation time (ties: higher id first), employee attached."""

        raise NotImplementedError

    def list_for_employee_between(self, employee_id: str, start: datetime, end: datetime) -> Sequence[TimeEntry]:
        """Entries whose timestamp is in [start, end), oldest first."""

        raise NotImplementedError

    def set_approval(self, entry_id: int, *, approved: bool, approved_by: Optional[str] = None) -> bool:
        raise NotImplementedError
