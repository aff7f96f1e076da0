from __future__ import annotations

from enum import Enum


class TimeEntryType(str, Enum):
    """Loại sự kiện chấm công được ghi nhận cho nhân viên."""

    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"


class WorkState(str, Enum):
    """Trạng thái hiện tại của nhân viên suy ra từ bản ghi gần nhất."""

    OFF_DUTY = "OFF_DUTY"
    WORKING = "WORKING"
    ON_BREAK = "ON_BREAK"
