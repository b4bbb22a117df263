"""Leave-balance calculator tests — pure functions, no DB."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from erp_hr.common.constants import LeaveStatus
from erp_hr.leave.balance import (
    approved_leave_intervals,
    calculate_leave_balances,
    days_in_year,
    summarize_leave_balances,
)
from erp_hr.leave.schemas import LeaveApplicationSnapshot, LeavePolicyRule

NOW = datetime(2024, 6, 15, 10, 30, tzinfo=timezone.utc)
ANNUAL = LeavePolicyRule(name="Annual", allowed=14)
SICK = LeavePolicyRule(name="Sick", allowed=10)


def _app(
    from_date,
    to_date,
    *,
    leave_type: str = "Annual",
    status="Approved",
    employee_id=None,
) -> LeaveApplicationSnapshot:
    return LeaveApplicationSnapshot(
        employee_id=employee_id,
        leave_type=leave_type,
        from_date=from_date,
        to_date=to_date,
        status=status,
    )


# ═════════════════════════════════════════════════════════════════════
# calculate_leave_balances
# ═════════════════════════════════════════════════════════════════════


class TestCalculateLeaveBalances:

    def test_single_approved_application(self):
        """Mar 1–5 approved → used 5, remaining 9."""
        result = calculate_leave_balances(
            [ANNUAL], [_app(date(2024, 3, 1), date(2024, 3, 5))], NOW,
        )
        assert len(result) == 1
        assert result[0].name == "Annual"
        assert result[0].allowed == 14
        assert result[0].used == 5
        assert result[0].remaining == 9

    def test_overlapping_applications_are_each_counted(self):
        """Mar 1–5 and Mar 4–10 → 5 + 7 = 12 days used."""
        apps = [
            _app(date(2024, 3, 1), date(2024, 3, 5)),
            _app(date(2024, 3, 4), date(2024, 3, 10)),
        ]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 12
        assert annual.remaining == 2

    def test_timestamps_with_time_of_day_count_whole_days(self):
        """Stored timestamps keep their calendar date: Mar 1 09:30 – Mar 3 18:00 → 3."""
        apps = [_app(datetime(2024, 3, 1, 9, 30), datetime(2024, 3, 3, 18, 0))]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 3
        assert annual.remaining == 11

    def test_remaining_is_floored_at_zero(self):
        apps = [_app(date(2024, 1, 1), date(2024, 1, 31))]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 31
        assert annual.remaining == 0

    def test_pending_rejected_cancelled_do_not_count(self):
        apps = [
            _app(date(2024, 3, 1), date(2024, 3, 5), status="Pending"),
            _app(date(2024, 4, 1), date(2024, 4, 5), status="Rejected"),
            _app(date(2024, 5, 1), date(2024, 5, 5), status=LeaveStatus.cancelled),
        ]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 0
        assert annual.remaining == 14

    def test_status_matching_is_case_insensitive(self):
        apps = [
            _app(date(2024, 3, 1), date(2024, 3, 1), status="approved"),
            _app(date(2024, 3, 2), date(2024, 3, 2), status="APPROVED"),
            _app(date(2024, 3, 3), date(2024, 3, 3), status=LeaveStatus.approved),
        ]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 3

    def test_unknown_status_is_ignored(self):
        apps = [_app(date(2024, 3, 1), date(2024, 3, 1), status="Escalated")]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 0

    def test_application_outside_year_counts_zero(self):
        apps = [
            _app(date(2023, 3, 1), date(2023, 3, 5)),
            _app(date(2025, 1, 2), date(2025, 1, 4)),
        ]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 0

    def test_year_start_boundary(self):
        """Dec 28 of the previous year through Jan 3 → 3 in-year days."""
        apps = [_app(date(2023, 12, 28), date(2024, 1, 3))]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 3

    def test_year_end_boundary(self):
        apps = [_app(date(2024, 12, 30), date(2025, 1, 5))]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 2

    def test_leave_type_must_match_policy_name(self):
        apps = [
            _app(date(2024, 3, 1), date(2024, 3, 2), leave_type="Sick"),
            _app(date(2024, 3, 5), date(2024, 3, 5), leave_type="Annual"),
            _app(date(2024, 3, 6), date(2024, 3, 6), leave_type="Casual"),
        ]
        annual, sick = calculate_leave_balances([ANNUAL, SICK], apps, NOW)
        assert (annual.name, annual.used) == ("Annual", 1)
        assert (sick.name, sick.used) == ("Sick", 2)

    def test_policy_order_is_preserved(self):
        result = calculate_leave_balances([SICK, ANNUAL], [], NOW)
        assert [b.name for b in result] == ["Sick", "Annual"]

    def test_policy_without_applications(self):
        (sick,) = calculate_leave_balances([SICK], [], NOW)
        assert sick.used == 0
        assert sick.remaining == 10

    def test_no_policies_returns_empty(self):
        assert calculate_leave_balances([], [_app(date(2024, 3, 1), date(2024, 3, 1))], NOW) == []

    def test_iso_string_and_timestamp_dates(self):
        apps = [
            _app("2024-03-01", "2024-03-03"),
            _app("2024-04-01T00:00:00.000Z", "2024-04-02T00:00:00.000Z"),
        ]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 5

    def test_malformed_dates_contribute_zero(self):
        apps = [
            _app("not-a-date", "2024-03-03"),
            _app(None, date(2024, 3, 3)),
            _app(date(2024, 3, 1), ""),
            _app(date(2024, 5, 1), date(2024, 5, 2)),
        ]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 2

    def test_inverted_interval_counts_zero(self):
        apps = [_app(date(2024, 3, 5), date(2024, 3, 1))]
        (annual,) = calculate_leave_balances([ANNUAL], apps, NOW)
        assert annual.used == 0

    def test_date_reference_is_accepted(self):
        apps = [_app(date(2024, 3, 1), date(2024, 3, 5))]
        (annual,) = calculate_leave_balances([ANNUAL], apps, date(2024, 1, 1))
        assert annual.used == 5

    def test_order_of_applications_is_irrelevant(self):
        apps = [
            _app(date(2024, 3, 1), date(2024, 3, 5)),
            _app(date(2023, 12, 30), date(2024, 1, 2)),
            _app(date(2024, 7, 1), date(2024, 7, 1), status="Pending"),
        ]
        forward = calculate_leave_balances([ANNUAL], apps, NOW)
        backward = calculate_leave_balances([ANNUAL], list(reversed(apps)), NOW)
        assert forward == backward

    def test_inputs_are_not_mutated(self):
        apps = [_app(date(2024, 3, 1), date(2024, 3, 5))]
        before = [a.model_dump() for a in apps]
        calculate_leave_balances([ANNUAL], apps, NOW)
        assert [a.model_dump() for a in apps] == before


# ═════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════


class TestDaysInYear:

    def test_fully_inside(self):
        assert days_in_year(
            _app(date(2024, 2, 27), date(2024, 3, 1)), date(2024, 1, 1), date(2024, 12, 31),
        ) == 4  # 2024 is a leap year

    def test_single_day(self):
        assert days_in_year(
            _app(date(2024, 8, 8), date(2024, 8, 8)), date(2024, 1, 1), date(2024, 12, 31),
        ) == 1


class TestSummarizeLeaveBalances:

    def test_totals(self):
        apps = [
            _app(date(2024, 3, 1), date(2024, 3, 5)),
            _app(date(2024, 3, 4), date(2024, 3, 10)),
            _app(date(2024, 2, 1), date(2024, 2, 3), leave_type="Sick"),
        ]
        report = summarize_leave_balances([ANNUAL, SICK], apps, NOW)
        assert report.year == 2024
        assert report.total_allowed == 24
        assert report.total_used == 15
        assert report.total_remaining == 2 + 7

    def test_empty(self):
        emp_id = uuid.uuid4()
        report = summarize_leave_balances([], [], NOW, employee_id=emp_id)
        assert report.employee_id == emp_id
        assert report.balances == []
        assert report.total_allowed == report.total_used == report.total_remaining == 0


class TestApprovedLeaveIntervals:

    def test_groups_by_employee_and_skips_unapproved(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        apps = [
            _app(date(2024, 3, 1), date(2024, 3, 2), employee_id=a),
            _app(date(2024, 3, 5), date(2024, 3, 5), employee_id=a, status="Pending"),
            _app("2024-04-01", "2024-04-03", employee_id=b),
            _app("garbage", "2024-04-03", employee_id=b),
        ]
        result = approved_leave_intervals(apps)
        assert result[a] == [(date(2024, 3, 1), date(2024, 3, 2))]
        assert result[b] == [(date(2024, 4, 1), date(2024, 4, 3))]
