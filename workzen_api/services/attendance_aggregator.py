# workzen_api/services/attendance_aggregator.py
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import logging

log = logging.getLogger(__name__)

PAID_LEAVE_TYPES = ("paid", "sick", "casual", "annual")
DEFAULT_WORKING_DAYS_PER_WEEK = 5

SATURDAY, SUNDAY = 5, 6


def working_days_in_month(month: int, year: int, working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK) -> int:
    """
    Calendar working days in the month, independent of any attendance rows.
    A 6-day week only skips Sundays; every other configuration skips the weekend.
    """
    days_off = {SUNDAY} if working_days_per_week == 6 else {SATURDAY, SUNDAY}
    _, ndays = calendar.monthrange(year, month)
    return sum(
        1 for day in range(1, ndays + 1)
        if date(year, month, day).weekday() not in days_off
    )


@dataclass(frozen=True)
class AttendanceSummary:
    worked_days: int
    paid_leave_days: Decimal
    total_working_days: int

    @property
    def effective_worked_days(self) -> Decimal:
        return Decimal(self.worked_days) + Decimal(self.paid_leave_days)

    @property
    def wage_proportion(self) -> Decimal:
        if self.total_working_days > 0:
            return self.effective_worked_days / Decimal(self.total_working_days)
        return Decimal(1)


class AttendanceAggregator:
    """Turns attendance + approved paid leave into the wage proportion for a month."""

    def __init__(self, store, default_working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK,
                 paid_leave_types=PAID_LEAVE_TYPES):
        self.store = store
        self.default_working_days_per_week = default_working_days_per_week
        self.paid_leave_types = tuple(paid_leave_types)

    def _days_per_week(self, employee) -> int:
        configured = getattr(employee, "working_days_per_week", None) if employee is not None else None
        return int(configured or self.default_working_days_per_week)

    def aggregate(self, employee_id: int, month: int, year: int) -> AttendanceSummary:
        employee = self.store.get_employee(employee_id)
        total = working_days_in_month(month, year, self._days_per_week(employee))
        if employee is None:
            # unknown employee => no activity, not an error
            return AttendanceSummary(0, Decimal(0), total)

        worked = self.store.count_worked_days(employee_id, month, year)
        paid_leave = self.store.sum_paid_leave_days(employee_id, month, year, self.paid_leave_types)
        summary = AttendanceSummary(int(worked), Decimal(str(paid_leave)), total)
        log.debug(
            "attendance employee=%s period=%02d/%s worked=%s paid_leave=%s total=%s",
            employee_id, month, year, summary.worked_days, summary.paid_leave_days, total,
        )
        return summary
