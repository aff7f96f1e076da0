"""Example: drive the service layer directly (no Flask).

Controllers stay thin; the sequencing rules live in TimeEntryService.
"""

import importlib

from config import get_settings_module

from src.time_tracking.time_tracking.container import build_container
from src.time_tracking.time_tracking.core.enums import TimeEntryType
from src.time_tracking.time_tracking.core.exceptions import InvalidSequenceError


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    svc = container.time_entry_service

    print(svc.current_status("emp-001").to_dict())
    try:
        entry = svc.create_entry("emp-001", TimeEntryType.CLOCK_IN)
        print(entry.to_dict())
    except InvalidSequenceError as e:
        print(f"Rejected: {e}")
    print(svc.daily_summary("emp-001").to_dict())


if __name__ == "__main__":
    main()
