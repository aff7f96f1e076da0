from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import day_bounds, minutes_between, now_local, to_naive_local
from ..common.locks import KeyedLock
from ..common.validators import require_non_empty
from ..core.enums import TimeEntryType, WorkState
from ..core.exceptions import InvalidSequenceError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import DailySummary, EmployeeStatus, TimeEntry, TimeEntryFilters
from .repository import TimeEntryRepository
from .transitions import allowed_next, ensure_transition, state_after

logger = logging.getLogger(__name__)

_TYPE_ORDER = (
    TimeEntryType.CLOCK_IN,
    TimeEntryType.BREAK_START,
    TimeEntryType.BREAK_END,
    TimeEntryType.CLOCK_OUT,
)


def _coerce_type(value) -> TimeEntryType:
    try:
        return TimeEntryType(value)
    except ValueError:
        raise ValidationError(
            issues=[{"path": ["type"], "message": f"Unknown time entry type: {value!r}", "code": "invalid_enum"}]
        )


class TimeEntryService:
    def __init__(
        self,
        entries: TimeEntryRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        locks: KeyedLock | None = None,
    ):
        self._entries = entries
        self._employees = employees
        self._clock = clock
        self._locks = locks or KeyedLock()

    def _require_employee(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def create_entry(
        self,
        employee_id: str,
        entry_type: TimeEntryType,
        *,
        timestamp: datetime | None = None,
        notes: str | None = None,
    ) -> TimeEntry:
        """Record a new entry if it may follow the employee's last one.

        The read of the last entry and the insert run under a per-employee
        lock in this process and inside ``employee_sequence`` in the store,
        so two concurrent submissions cannot both pass the check.
        """

        employee_id = require_non_empty(employee_id, "employeeId")
        entry_type = _coerce_type(entry_type)
        employee = self._require_employee(employee_id)
        if timestamp is not None:
            timestamp = to_naive_local(timestamp)

        with self._locks.hold(employee_id):
            with self._entries.employee_sequence(employee_id) as seq:
                last = seq.last_entry()
                last_type = last.type if last else None
                try:
                    ensure_transition(last_type, entry_type)
                except InvalidSequenceError:
                    logger.info(
                        "Rejected %s for employee %s (last=%s)",
                        entry_type.value, employee_id, last_type.value if last_type else None,
                    )
                    raise

                created_at = self._clock()
                timestamp = timestamp or created_at
                if last and timestamp < last.timestamp:
                    raise ValidationError(
                        "Timestamp is earlier than the previous entry",
                        issues=[
                            {
                                "path": ["timestamp"],
                                "message": f"Must not be earlier than the previous {last.type.value} at {last.timestamp.isoformat()}",
                                "code": "out_of_order",
                            }
                        ],
                    )
                entry = seq.insert(
                    entry_type=entry_type,
                    timestamp=timestamp,
                    created_at=created_at,
                    notes=notes or None,
                )

        logger.info("Recorded %s for employee %s (entry=%s)", entry_type.value, employee_id, entry.entry_id)
        return entry.with_employee(employee)

    def list_entries(
        self,
        *,
        employee_id: str | None = None,
        on_date: date | None = None,
        approved: bool | None = None,
    ) -> Sequence[TimeEntry]:
        filters = TimeEntryFilters(employee_id=employee_id or None, on_date=on_date, approved=approved)
        return self._entries.list_entries(filters)

    def get_entry(self, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(entry_id)
        if not entry:
            raise NotFoundError("Time entry not found")
        return entry

    def set_approval(self, entry_id: int, *, approved: bool, approved_by: str | None = None) -> TimeEntry:
        """Only mutation allowed on a recorded entry."""
        self.get_entry(entry_id)
        self._entries.set_approval(entry_id, approved=approved, approved_by=approved_by)
        logger.info("Entry %s approval set to %s by %s", entry_id, approved, approved_by)
        return self.get_entry(entry_id)

    def current_status(self, employee_id: str) -> EmployeeStatus:
        employee_id = require_non_empty(employee_id, "employeeId")
        self._require_employee(employee_id)

        latest = self._entries.list_entries(TimeEntryFilters(employee_id=employee_id, limit=1))
        last = latest[0] if latest else None
        last_type = last.type if last else None
        nxt = allowed_next(last_type)
        return EmployeeStatus(
            employee_id=employee_id,
            state=state_after(last_type),
            last_type=last_type,
            last_timestamp=last.timestamp if last else None,
            allowed_next=tuple(t for t in _TYPE_ORDER if t in nxt),
        )

    def daily_summary(self, employee_id: str, *, on_date: date | None = None) -> DailySummary:
        """Worked and break minutes for one day.

        Work runs from CLOCK_IN to CLOCK_OUT minus the breaks inside it. A period
        still open at the end of the entries is counted up to now only for today.
        """

        employee_id = require_non_empty(employee_id, "employeeId")
        self._require_employee(employee_id)

        now = self._clock()
        day = on_date or now.date()
        start, end = day_bounds(day)
        entries = tuple(self._entries.list_for_employee_between(employee_id, start, end))

        work = 0
        breaks = 0
        state = WorkState.OFF_DUTY
        since: Optional[datetime] = None

        for entry in entries:
            if since is not None:
                span = minutes_between(since, entry.timestamp)
                if state == WorkState.WORKING:
                    work += span
                elif state == WorkState.ON_BREAK:
                    breaks += span
            state = state_after(entry.type)
            since = entry.timestamp if state != WorkState.OFF_DUTY else None

        open_period = state if state != WorkState.OFF_DUTY else None
        if since is not None and day == now.date():
            span = minutes_between(since, now)
            if state == WorkState.WORKING:
                work += span
            else:
                breaks += span

        return DailySummary(
            employee_id=employee_id,
            work_date=day,
            work_minutes=work,
            break_minutes=breaks,
            open_period=open_period,
            entries=entries,
        )
