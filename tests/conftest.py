from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest

from src.time_tracking.time_tracking.common.datetime_utils import day_bounds
from src.time_tracking.time_tracking.container import Container
from src.time_tracking.time_tracking.core.enums import TimeEntryType
from src.time_tracking.time_tracking.core.exceptions import NotFoundError
from src.time_tracking.time_tracking.employees.model import Employee
from src.time_tracking.time_tracking.main import create_app
from src.time_tracking.time_tracking.time_entries.model import TimeEntry, TimeEntryFilters
from src.time_tracking.time_tracking.time_entries.service import TimeEntryService


class InMemoryEmployees:
    def __init__(self, employees: list[Employee]):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self._by_id.get(employee_id)


class _InMemorySequence:
    def __init__(self, repo: "InMemoryTimeEntries", employee_id: str):
        self._repo = repo
        self._employee_id = employee_id
        self.pending: list[TimeEntry] = []

    def last_entry(self) -> Optional[TimeEntry]:
        return self._repo.last_for(self._employee_id)

    def insert(self, *, entry_type, timestamp, created_at, notes=None) -> TimeEntry:
        entry = TimeEntry(
            entry_id=self._repo.next_id(),
            employee_id=self._employee_id,
            type=entry_type,
            timestamp=timestamp,
            created_at=created_at,
            notes=notes,
        )
        self.pending.append(entry)
        return entry


class InMemoryTimeEntries:
    """Store with commit-on-exit semantics but no locking of its own."""

    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self._rows: dict[int, TimeEntry] = {}
        self._id = 0

    def next_id(self) -> int:
        self._id += 1
        return self._id

    def last_for(self, employee_id: str) -> Optional[TimeEntry]:
        rows = [r for r in self._rows.values() if r.employee_id == employee_id]
        rows.sort(key=lambda r: (r.created_at, r.entry_id), reverse=True)
        return rows[0] if rows else None

    def add(self, entry: TimeEntry) -> None:
        self._rows[entry.entry_id] = entry
        self._id = max(self._id, entry.entry_id)

    @contextmanager
    def employee_sequence(self, employee_id: str):
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")
        seq = _InMemorySequence(self, employee_id)
        yield seq
        for entry in seq.pending:
            self._rows[entry.entry_id] = entry

    def _attach(self, entry: TimeEntry) -> TimeEntry:
        return entry.with_employee(self._employees.get_by_id(entry.employee_id))

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        row = self._rows.get(int(entry_id))
        return self._attach(row) if row else None

    def list_entries(self, filters: TimeEntryFilters):
        rows = list(self._rows.values())
        if filters.employee_id is not None:
            rows = [r for r in rows if r.employee_id == filters.employee_id]
        if filters.on_date is not None:
            start, end = day_bounds(filters.on_date)
            rows = [r for r in rows if start <= r.timestamp < end]
        if filters.approved is not None:
            rows = [r for r in rows if r.approved == filters.approved]
        rows.sort(key=lambda r: (r.created_at, r.entry_id), reverse=True)
        if filters.limit is not None:
            rows = rows[: filters.limit]
        return [self._attach(r) for r in rows]

    def list_for_employee_between(self, employee_id, start, end):
        rows = [r for r in self._rows.values() if r.employee_id == employee_id and start <= r.timestamp < end]
        rows.sort(key=lambda r: (r.created_at, r.entry_id))
        return [self._attach(r) for r in rows]

    def set_approval(self, entry_id, *, approved, approved_by=None) -> bool:
        row = self._rows.get(int(entry_id))
        if not row:
            return False
        self._rows[row.entry_id] = replace(row, approved=approved, approved_by=approved_by if approved else None)
        return True


class SteppingClock:
    """Deterministic clock: every call advances by ``step``."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee(employee_id="emp-1", name="Nguyen Van A", email="a@example.com"),
            Employee(employee_id="emp-2", name="Tran Thi B", email="b@example.com"),
        ]
    )


@pytest.fixture
def entries_repo(employees) -> InMemoryTimeEntries:
    return InMemoryTimeEntries(employees)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock(datetime(2026, 2, 2, 8, 0, 0))


@pytest.fixture
def service(entries_repo, employees, clock) -> TimeEntryService:
    return TimeEntryService(entries_repo, employees, clock=clock)


@pytest.fixture
def client(monkeypatch, entries_repo, employees, service):
    monkeypatch.setenv("APP_ENV", "testing")
    container = Container(employees_repo=employees, time_entries_repo=entries_repo, time_entry_service=service)
    app = create_app(container)
    return app.test_client()


@pytest.fixture
def make_entry():
    def _make(entry_id: int, employee_id: str, entry_type: TimeEntryType, at: datetime, **kwargs) -> TimeEntry:
        return TimeEntry(
            entry_id=entry_id,
            employee_id=employee_id,
            type=entry_type,
            timestamp=at,
            created_at=at,
            **kwargs,
        )

    return _make
