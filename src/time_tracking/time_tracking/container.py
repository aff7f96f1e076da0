from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .time_entries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .time_entries.repository import TimeEntryRepository
from .time_entries.service import TimeEntryService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    time_entries_repo: TimeEntryRepository

    time_entry_service: TimeEntryService

    conn: Optional[DatabaseConnection] = None


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    time_entries_repo = MySQLTimeEntryRepository(conn)

    return Container(
        employees_repo=employees_repo,
        time_entries_repo=time_entries_repo,
        time_entry_service=TimeEntryService(time_entries_repo, employees_repo),
        conn=conn,
    )
