from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.time_tracking.time_tracking.core.enums import TimeEntryType, WorkState
from src.time_tracking.time_tracking.core.exceptions import InvalidSequenceError, NotFoundError, ValidationError

T = TimeEntryType


def test_full_work_day_sequence(service):
    for entry_type in (T.CLOCK_IN, T.BREAK_START, T.BREAK_END, T.CLOCK_OUT, T.CLOCK_IN):
        entry = service.create_entry("emp-1", entry_type)
        assert entry.type == entry_type
        assert entry.employee.name == "Nguyen Van A"


@pytest.mark.parametrize("first", [T.CLOCK_OUT, T.BREAK_START, T.BREAK_END])
def test_new_employee_must_clock_in_first(service, entries_repo, first):
    with pytest.raises(InvalidSequenceError):
        service.create_entry("emp-1", first)
    assert entries_repo.last_for("emp-1") is None


def test_double_break_start_rejected(service):
    service.create_entry("emp-1", T.CLOCK_IN)
    service.create_entry("emp-1", T.BREAK_START)
    with pytest.raises(InvalidSequenceError, match="Cannot BREAK_START after BREAK_START"):
        service.create_entry("emp-1", T.BREAK_START)


def test_unknown_employee_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.create_entry("ghost", T.CLOCK_IN)


def test_blank_employee_id_is_validation_error(service):
    with pytest.raises(ValidationError) as exc:
        service.create_entry("  ", T.CLOCK_IN)
    assert exc.value.issues[0]["path"] == ["employeeId"]


def test_sequences_are_tracked_per_employee(service):
    service.create_entry("emp-1", T.CLOCK_IN)
    # emp-2 has no history yet, so CLOCK_IN is still the only valid start.
    service.create_entry("emp-2", T.CLOCK_IN)
    with pytest.raises(InvalidSequenceError):
        service.create_entry("emp-2", T.CLOCK_IN)


def test_explicit_timestamp_is_kept_and_aware_values_made_naive(service, clock):
    at = datetime(2026, 2, 2, 7, 45, tzinfo=timezone.utc)
    entry = service.create_entry("emp-1", T.CLOCK_IN, timestamp=at, notes="remote")
    assert entry.timestamp.tzinfo is None
    assert entry.timestamp == at.astimezone().replace(tzinfo=None)
    assert entry.created_at == datetime(2026, 2, 2, 8, 0)
    assert entry.notes == "remote"


def test_timestamp_earlier_than_previous_entry_rejected(service):
    service.create_entry("emp-1", T.CLOCK_IN)

    with pytest.raises(ValidationError) as exc:
        service.create_entry("emp-1", T.CLOCK_OUT, timestamp=datetime(2026, 2, 2, 7, 0))
    assert exc.value.issues[0]["path"] == ["timestamp"]
    assert exc.value.issues[0]["code"] == "out_of_order"
    assert [e.type for e in service.list_entries(employee_id="emp-1")] == [T.CLOCK_IN]

    service.create_entry("emp-1", T.CLOCK_OUT, timestamp=datetime(2026, 2, 2, 12, 0))
    summary = service.daily_summary("emp-1", on_date=date(2026, 2, 2))
    assert summary.work_minutes == 240


def test_timestamp_equal_to_previous_entry_accepted(service):
    first = service.create_entry("emp-1", T.CLOCK_IN, timestamp=datetime(2026, 2, 2, 9, 0))
    second = service.create_entry("emp-1", T.CLOCK_OUT, timestamp=first.timestamp)
    assert second.timestamp == first.timestamp


def test_entry_type_given_as_string_is_coerced(service):
    entry = service.create_entry("emp-1", "CLOCK_IN")
    assert entry.type is T.CLOCK_IN

    with pytest.raises(ValidationError) as exc:
        service.create_entry("emp-1", "FOO")
    assert exc.value.issues[0]["path"] == ["type"]
    assert exc.value.issues[0]["code"] == "invalid_enum"


def test_created_entry_is_listed_once(service):
    created = service.create_entry("emp-1", T.CLOCK_IN)
    service.create_entry("emp-2", T.CLOCK_IN)

    listed = service.list_entries(employee_id="emp-1")
    assert [e.entry_id for e in listed] == [created.entry_id]
    assert listed[0].type == created.type
    assert listed[0].timestamp == created.timestamp


def test_list_is_newest_first_and_filters_approved(service):
    first = service.create_entry("emp-1", T.CLOCK_IN)
    second = service.create_entry("emp-1", T.CLOCK_OUT)
    service.set_approval(first.entry_id, approved=True, approved_by="mgr-1")

    assert [e.entry_id for e in service.list_entries()] == [second.entry_id, first.entry_id]
    assert [e.entry_id for e in service.list_entries(approved=True)] == [first.entry_id]
    assert [e.entry_id for e in service.list_entries(approved=False)] == [second.entry_id]


def test_list_filters_by_date(service, entries_repo, make_entry):
    entries_repo.add(make_entry(1, "emp-1", T.CLOCK_IN, datetime(2026, 2, 1, 9, 0)))
    entries_repo.add(make_entry(2, "emp-1", T.CLOCK_OUT, datetime(2026, 2, 1, 17, 0)))
    entries_repo.add(make_entry(3, "emp-1", T.CLOCK_IN, datetime(2026, 2, 2, 9, 0)))

    rows = service.list_entries(on_date=date(2026, 2, 1))
    assert [e.entry_id for e in rows] == [2, 1]


def test_same_created_at_orders_by_id(service, entries_repo, make_entry):
    at = datetime(2026, 2, 1, 9, 0)
    entries_repo.add(make_entry(1, "emp-1", T.CLOCK_IN, at))
    entries_repo.add(make_entry(2, "emp-1", T.BREAK_START, at))

    # The higher id wins the tie, so BREAK_END is the legal follow-up.
    entry = service.create_entry("emp-1", T.BREAK_END)
    assert entry.entry_id == 3


def test_get_entry_not_found(service):
    with pytest.raises(NotFoundError, match="Time entry not found"):
        service.get_entry(42)


def test_revoking_approval_clears_approver(service):
    entry = service.create_entry("emp-1", T.CLOCK_IN)
    approved = service.set_approval(entry.entry_id, approved=True, approved_by="mgr-1")
    assert approved.approved and approved.approved_by == "mgr-1"

    revoked = service.set_approval(entry.entry_id, approved=False)
    assert not revoked.approved
    assert revoked.approved_by is None
    assert revoked.type == T.CLOCK_IN


def test_current_status_follows_last_entry(service):
    status = service.current_status("emp-1")
    assert status.state == WorkState.OFF_DUTY
    assert status.last_type is None
    assert status.allowed_next == (T.CLOCK_IN,)

    service.create_entry("emp-1", T.CLOCK_IN)
    service.create_entry("emp-1", T.BREAK_START)
    status = service.current_status("emp-1")
    assert status.state == WorkState.ON_BREAK
    assert status.allowed_next == (T.BREAK_END,)

    service.create_entry("emp-1", T.BREAK_END)
    assert service.current_status("emp-1").allowed_next == (T.BREAK_START, T.CLOCK_OUT)


def test_daily_summary_closed_day(service, entries_repo, make_entry):
    day = datetime(2026, 2, 1)
    entries_repo.add(make_entry(1, "emp-1", T.CLOCK_IN, day.replace(hour=8)))
    entries_repo.add(make_entry(2, "emp-1", T.BREAK_START, day.replace(hour=12)))
    entries_repo.add(make_entry(3, "emp-1", T.BREAK_END, day.replace(hour=13)))
    entries_repo.add(make_entry(4, "emp-1", T.CLOCK_OUT, day.replace(hour=17, minute=30)))

    summary = service.daily_summary("emp-1", on_date=day.date())
    assert summary.work_minutes == 8 * 60 + 30
    assert summary.break_minutes == 60
    assert summary.open_period is None
    assert len(summary.entries) == 4


def test_daily_summary_counts_open_period_until_now_for_today(service, entries_repo, make_entry, clock):
    # clock starts at 2026-02-02 08:00
    entries_repo.add(make_entry(1, "emp-1", T.CLOCK_IN, datetime(2026, 2, 2, 6, 0)))
    entries_repo.add(make_entry(2, "emp-1", T.BREAK_START, datetime(2026, 2, 2, 7, 30)))

    summary = service.daily_summary("emp-1")
    assert summary.work_date == date(2026, 2, 2)
    assert summary.work_minutes == 90
    assert summary.break_minutes == 30
    assert summary.open_period == WorkState.ON_BREAK


def test_daily_summary_open_period_on_past_day_not_extended(service, entries_repo, make_entry):
    entries_repo.add(make_entry(1, "emp-1", T.CLOCK_IN, datetime(2026, 1, 30, 9, 0)))
    entries_repo.add(make_entry(2, "emp-1", T.BREAK_START, datetime(2026, 1, 30, 11, 0)))

    summary = service.daily_summary("emp-1", on_date=date(2026, 1, 30))
    assert summary.work_minutes == 120
    assert summary.break_minutes == 0
    assert summary.open_period == WorkState.ON_BREAK


def test_daily_summary_unknown_employee(service):
    with pytest.raises(NotFoundError):
        service.daily_summary("ghost", on_date=date(2026, 2, 1) - timedelta(days=1))
