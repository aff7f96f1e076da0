from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository


def row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=str(row["employee_id"]),
        name=row["name"],
        email=row["email"],
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id, name, email FROM employees WHERE employee_id=%s",
                (employee_id,),
            )
            row = fetchone(cur)
            return row_to_employee(row) if row else None
