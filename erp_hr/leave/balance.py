"""Leave-balance calculator.

Pure functions: given a set of leave policies, a snapshot of leave
applications and a reference instant, compute per-type used and remaining
days inside the reference's calendar year. No I/O, inputs are not mutated.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Union

from erp_hr.common.dates import overlap_days, parse_interval, year_bounds
from erp_hr.leave.schemas import (
    LeaveApplicationSnapshot,
    LeaveBalanceReport,
    LeaveBalanceSummary,
    LeavePolicyRule,
)

logger = logging.getLogger(__name__)


def days_in_year(
    application: LeaveApplicationSnapshot,
    year_start: date,
    year_end: date,
) -> int:
    """Inclusive days of *application* that fall inside ``[year_start, year_end]``.

    Applications with missing or unparsable dates contribute 0.
    """
    interval = parse_interval(application.from_date, application.to_date)
    if interval is None:
        logger.warning(
            "Skipping leave application with unusable dates: type=%r from=%r to=%r",
            application.leave_type, application.from_date, application.to_date,
        )
        return 0
    start, end = interval
    return overlap_days(start, end, year_start, year_end)


def calculate_leave_balances(
    policies: Iterable[LeavePolicyRule],
    applications: Iterable[LeaveApplicationSnapshot],
    now: Union[date, datetime],
) -> list[LeaveBalanceSummary]:
    """Per-policy used/remaining days for the calendar year containing *now*.

    Only Approved applications whose ``leave_type`` equals the policy name are
    counted. Overlapping approved applications of one type are each counted
    in full. ``remaining`` never drops below zero.
    """
    year_start, year_end = year_bounds(now)
    approved = [a for a in applications if a.is_approved]

    summaries: list[LeaveBalanceSummary] = []
    for policy in policies:
        used = sum(
            days_in_year(a, year_start, year_end)
            for a in approved
            if a.leave_type == policy.name
        )
        summaries.append(
            LeaveBalanceSummary(
                name=policy.name,
                allowed=policy.allowed,
                used=used,
                remaining=max(0, policy.allowed - used),
            )
        )
    return summaries


def summarize_leave_balances(
    policies: Iterable[LeavePolicyRule],
    applications: Iterable[LeaveApplicationSnapshot],
    now: Union[date, datetime],
    *,
    employee_id=None,
) -> LeaveBalanceReport:
    """Wrap :func:`calculate_leave_balances` with yearly totals."""
    balances = calculate_leave_balances(policies, applications, now)
    return LeaveBalanceReport(
        employee_id=employee_id,
        year=now.year,
        balances=balances,
        total_allowed=sum(b.allowed for b in balances),
        total_used=sum(b.used for b in balances),
        total_remaining=sum(b.remaining for b in balances),
    )


def approved_leave_intervals(
    applications: Iterable[LeaveApplicationSnapshot],
) -> dict[object, list[tuple[date, date]]]:
    """Group the parsed intervals of Approved applications by employee.

    Unusable intervals are dropped with a warning.
    """
    by_employee: dict[object, list[tuple[date, date]]] = {}
    for app in applications:
        if not app.is_approved:
            continue
        interval: Optional[tuple[date, date]] = parse_interval(app.from_date, app.to_date)
        if interval is None:
            logger.warning(
                "Ignoring approved leave for %s with unusable dates from=%r to=%r",
                app.employee_id, app.from_date, app.to_date,
            )
            continue
        by_employee.setdefault(app.employee_id, []).append(interval)
    return by_employee
