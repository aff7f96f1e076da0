from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

from ..common.datetime_utils import day_bounds
from ..core.enums import TimeEntryType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from ..employees.model import Employee
from .model import TimeEntry, TimeEntryFilters
from .repository import SequenceWriter, TimeEntryRepository

_ENTRY_COLUMNS = """
    te.entry_id, te.employee_id, te.entry_type, te.entry_timestamp, te.created_at,
    te.approved, te.approved_by, te.notes,
    e.name AS employee_name, e.email AS employee_email
"""


def row_to_entry(row: dict) -> TimeEntry:
    employee = None
    if row.get("employee_name") is not None:
        employee = Employee(
            employee_id=str(row["employee_id"]),
            name=row["employee_name"],
            email=row["employee_email"],
        )
    return TimeEntry(
        entry_id=int(row["entry_id"]),
        employee_id=str(row["employee_id"]),
        type=TimeEntryType(row["entry_type"]),
        timestamp=row["entry_timestamp"],
        created_at=row["created_at"],
        approved=bool(row.get("approved")),
        approved_by=row.get("approved_by"),
        notes=row.get("notes"),
        employee=employee,
    )


class _MySQLSequenceWriter(SequenceWriter):
    def __init__(self, cur, employee_id: str):
        self._cur = cur
        self._employee_id = employee_id

    def last_entry(self) -> Optional[TimeEntry]:
        self._cur.execute(
            f"""
            SELECT {_ENTRY_COLUMNS}
            FROM time_entries te
            JOIN employees e ON e.employee_id = te.employee_id
            WHERE te.employee_id=%s
            ORDER BY te.created_at DESC, te.entry_id DESC
            LIMIT 1
            """,
            (self._employee_id,),
        )
        row = fetchone(self._cur)
        return row_to_entry(row) if row else None

    def insert(
        self,
        *,
        entry_type: TimeEntryType,
        timestamp: datetime,
        created_at: datetime,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        self._cur.execute(
            """
            INSERT INTO time_entries(employee_id, entry_type, entry_timestamp, created_at, approved, notes)
            VALUES(%s,%s,%s,%s,0,%s)
            """,
            (self._employee_id, entry_type.value, timestamp, created_at, notes),
        )
        return TimeEntry(
            entry_id=int(self._cur.lastrowid),
            employee_id=self._employee_id,
            type=entry_type,
            timestamp=timestamp,
            created_at=created_at,
            notes=notes,
        )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def employee_sequence(self, employee_id: str) -> Iterator[SequenceWriter]:
        with db_transaction(self._conn_factory) as (_, cur):
            # Row lock on the employee serializes concurrent writers across processes.
            cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (employee_id,))
            if not fetchone(cur):
                raise NotFoundError("Employee not found")
            yield _MySQLSequenceWriter(cur, employee_id)

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries te
                JOIN employees e ON e.employee_id = te.employee_id
                WHERE te.entry_id=%s
                """,
                (int(entry_id),),
            )
            row = fetchone(cur)
            return row_to_entry(row) if row else None

    def list_entries(self, filters: TimeEntryFilters) -> Sequence[TimeEntry]:
        clauses: list[str] = []
        params: list[object] = []

        if filters.employee_id is not None:
            clauses.append("te.employee_id=%s")
            params.append(filters.employee_id)
        if filters.on_date is not None:
            start, end = day_bounds(filters.on_date)
            clauses.append("te.entry_timestamp >= %s AND te.entry_timestamp < %s")
            params.extend([start, end])
        if filters.approved is not None:
            clauses.append("te.approved=%s")
            params.append(1 if filters.approved else 0)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        limit = ""
        if filters.limit is not None:
            limit = "LIMIT %s"
            params.append(int(filters.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries te
                JOIN employees e ON e.employee_id = te.employee_id
                {where}
                ORDER BY te.created_at DESC, te.entry_id DESC
                {limit}
                """,
                tuple(params),
            )
            return [row_to_entry(r) for r in fetchall(cur)]

    def list_for_employee_between(self, employee_id: str, start: datetime, end: datetime) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries te
                JOIN employees e ON e.employee_id = te.employee_id
                WHERE te.employee_id=%s AND te.entry_timestamp >= %s AND te.entry_timestamp < %s
                ORDER BY te.created_at ASC, te.entry_id ASC
                """,
                (employee_id, start, end),
            )
            return [row_to_entry(r) for r in fetchall(cur)]

    def set_approval(self, entry_id: int, *, approved: bool, approved_by: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET approved=%s, approved_by=%s
                WHERE entry_id=%s
                """,
                (1 if approved else 0, approved_by if approved else None, int(entry_id)),
            )
            return cur.rowcount > 0
