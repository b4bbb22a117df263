"""Attendance period aggregator.

Classifies every (employee, day) pair of a window into exactly one
attendance category. Resolution order for a single day, first match wins:

    1. attendance record with a recognised flag
    2. approved leave covering the day        → Leave
    3. holiday covering the day               → Holiday
    4. weekly-off weekday                     → Weekend
    5. day on or before today                 → Absent
       day after today                        → unclassified (not due)

All functions are pure; results do not depend on input order.
"""

from __future__ import annotations

import calendar
import logging
import uuid
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, Union

from erp_hr.attendance.schemas import (
    AttendanceBuckets,
    AttendanceRecordSnapshot,
    HolidaySnapshot,
)
from erp_hr.common.constants import AttendanceFlag, AttendancePeriod
from erp_hr.common.dates import parse_calendar_date, parse_interval
from erp_hr.leave.balance import approved_leave_intervals
from erp_hr.leave.schemas import LeaveApplicationSnapshot

logger = logging.getLogger(__name__)

Interval = tuple[date, date]

_BUCKET_FIELDS: dict[AttendanceFlag, str] = {
    AttendanceFlag.present: "present",
    AttendanceFlag.delay: "delay",
    AttendanceFlag.weekend: "weekend",
    AttendanceFlag.holiday: "holiday",
    AttendanceFlag.leave: "leave",
    AttendanceFlag.absent: "absent",
}

# Tie-break when a day has more than one recognised record
_FLAG_ORDER: tuple[AttendanceFlag, ...] = tuple(_BUCKET_FIELDS)


# ── Window ──────────────────────────────────────────────────────────

def build_period_window(period: Union[AttendancePeriod, str], today: date) -> list[date]:
    """Trailing window ending at *today* (inclusive).

    ``weekly`` is 7 days; ``monthly`` is as many days as today's month has.
    """
    period = AttendancePeriod(period)
    if period is AttendancePeriod.weekly:
        length = 7
    else:
        length = calendar.monthrange(today.year, today.month)[1]
    first = today - timedelta(days=length - 1)
    return [first + timedelta(days=i) for i in range(length)]


# ── Indexing helpers ────────────────────────────────────────────────

def _contains(intervals: Iterable[Interval], day: date) -> bool:
    return any(start <= day <= end for start, end in intervals)


def index_records(
    records: Iterable[AttendanceRecordSnapshot],
    employee_ids: Optional[set[uuid.UUID]] = None,
) -> dict[tuple[uuid.UUID, date], AttendanceFlag]:
    """Map ``(employee_id, day)`` to its recognised flag.

    Unknown flags and unparsable dates are skipped. If two recognised
    records share a day, the one earliest in ``_FLAG_ORDER`` is kept.
    """
    index: dict[tuple[uuid.UUID, date], AttendanceFlag] = {}
    for rec in records:
        if employee_ids is not None and rec.employee_id not in employee_ids:
            continue
        day = parse_calendar_date(rec.date)
        if day is None:
            logger.warning(
                "Skipping attendance record for %s with unusable date %r",
                rec.employee_id, rec.date,
            )
            continue
        flag = AttendanceFlag.parse(rec.flag)
        if flag is None:
            logger.debug("Ignoring unrecognised attendance flag %r on %s", rec.flag, day)
            continue
        key = (rec.employee_id, day)
        existing = index.get(key)
        if existing is not None and existing is not flag:
            logger.warning(
                "Conflicting attendance records for %s on %s: %s / %s",
                rec.employee_id, day, existing.value, flag.value,
            )
            flag = min(existing, flag, key=_FLAG_ORDER.index)
        index[key] = flag
    return index


def holiday_intervals(holidays: Iterable[HolidaySnapshot]) -> list[Interval]:
    intervals: list[Interval] = []
    for h in holidays:
        interval = parse_interval(h.from_date, h.to_date, open_end_is_single_day=True)
        if interval is None:
            logger.warning(
                "Skipping holiday %r with unusable dates from=%r to=%r",
                h.name, h.from_date, h.to_date,
            )
            continue
        intervals.append(interval)
    return intervals


# ── Classification ──────────────────────────────────────────────────

def classify_day(
    day: date,
    *,
    record_flag: Optional[AttendanceFlag],
    leave_intervals: Sequence[Interval],
    holidays: Sequence[Interval],
    weekly_offs: set[int],
    today: date,
) -> Optional[AttendanceFlag]:
    """Resolve one employee-day. Returns None for a future day with no record."""
    if record_flag is not None:
        return record_flag
    if _contains(leave_intervals, day):
        return AttendanceFlag.leave
    if _contains(holidays, day):
        return AttendanceFlag.holiday
    if day.weekday() in weekly_offs:
        return AttendanceFlag.weekend
    if day <= today:
        return AttendanceFlag.absent
    return None


def classify_employee_days(
    employee_id: uuid.UUID,
    days: Sequence[date],
    records: Iterable[AttendanceRecordSnapshot],
    applications: Iterable[LeaveApplicationSnapshot],
    holidays: Iterable[HolidaySnapshot],
    weekly_offs: set[int],
    today: date,
) -> dict[date, Optional[AttendanceFlag]]:
    """Day-by-day calendar for a single employee."""
    record_index = index_records(records, {employee_id})
    leave = approved_leave_intervals(
        a for a in applications if a.employee_id == employee_id
    ).get(employee_id, [])
    holiday_list = holiday_intervals(holidays)
    return {
        day: classify_day(
            day,
            record_flag=record_index.get((employee_id, day)),
            leave_intervals=leave,
            holidays=holiday_list,
            weekly_offs=weekly_offs,
            today=today,
        )
        for day in days
    }


def count_flags(flags: Iterable[Optional[AttendanceFlag]]) -> AttendanceBuckets:
    """Fold classified days into bucket counters (None → not_due)."""
    counts = Counter(flags)
    buckets = {field: counts.get(flag, 0) for flag, field in _BUCKET_FIELDS.items()}
    return AttendanceBuckets(**buckets, not_due=counts.get(None, 0))


def aggregate_attendance(
    employee_ids: Iterable[uuid.UUID],
    days: Sequence[date],
    records: Iterable[AttendanceRecordSnapshot],
    applications: Iterable[LeaveApplicationSnapshot],
    holidays: Iterable[HolidaySnapshot],
    weekly_offs: set[int],
    today: date,
) -> AttendanceBuckets:
    """Bucket counts over every (employee, day) pair.

    Inputs about employees outside *employee_ids* are ignored. Each pair
    lands in exactly one bucket, so ``buckets.total == len(ids) * len(days)``.
    """
    ids = list(dict.fromkeys(employee_ids))
    id_set = set(ids)
    record_index = index_records(records, id_set)
    leave_by_employee = approved_leave_intervals(
        a for a in applications if a.employee_id in id_set
    )
    holiday_list = holiday_intervals(holidays)

    flags = (
        classify_day(
            day,
            record_flag=record_index.get((emp_id, day)),
            leave_intervals=leave_by_employee.get(emp_id, []),
            holidays=holiday_list,
            weekly_offs=weekly_offs,
            today=today,
        )
        for emp_id in ids
        for day in days
    )
    return count_flags(flags)
