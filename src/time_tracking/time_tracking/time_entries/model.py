from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..core.enums import TimeEntryType, WorkState
from ..employees.model import Employee


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="milliseconds") if value else None


@dataclass(frozen=True)
class TimeEntry:
    """Thực thể miền (domain): Một sự kiện chấm công của nhân viên.

    Bản ghi không đổi sau khi tạo, trừ cờ duyệt (approved / approved_by).
    """

    entry_id: int
    employee_id: str
    type: TimeEntryType
    timestamp: datetime
    created_at: datetime
    approved: bool = False
    approved_by: Optional[str] = None
    notes: Optional[str] = None
    employee: Optional[Employee] = None

    def with_employee(self, employee: Optional[Employee]) -> "TimeEntry":
        return replace(self, employee=employee)

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "employeeId": self.employee_id,
            "type": self.type.value,
            "timestamp": _iso(self.timestamp),
            "createdAt": _iso(self.created_at),
            "approved": self.approved,
            "approvedBy": self.approved_by,
            "notes": self.notes,
            "employee": self.employee.to_dict() if self.employee else None,
        }


@dataclass(frozen=True)
class TimeEntryFilters:
    employee_id: Optional[str] = None
    on_date: Optional[date] = None
    approved: Optional[bool] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class EmployeeStatus:
    """Read-model: trạng thái hiện tại và các thao tác được phép tiếp theo."""

    employee_id: str
    state: WorkState
    last_type: Optional[TimeEntryType]
    last_timestamp: Optional[datetime]
    allowed_next: tuple[TimeEntryType, ...]

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "state": self.state.value,
            "lastType": self.last_type.value if self.last_type else None,
            "lastTimestamp": _iso(self.last_timestamp),
            "allowedNext": [t.value for t in self.allowed_next],
        }


@dataclass(frozen=True)
class DailySummary:
    """Read-model: tổng phút làm việc / nghỉ trong một ngày."""

    employee_id: str
    work_date: date
    work_minutes: int
    break_minutes: int
    open_period: Optional[WorkState]
    entries: tuple[TimeEntry, ...]

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "totalWork": self.work_minutes,
            "totalBreak": self.break_minutes,
            "openPeriod": self.open_period.value if self.open_period else None,
            "entries": [e.to_dict() for e in self.entries],
        }
