# workzen_api/services/payroll_generator.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError

from workzen_api.common.errors import (
    InvalidPayPeriodError,
    NoActiveEmployeesError,
    PayrollLockedError,
)
from workzen_api.models.payroll.payroll import PayrollRecord, PayrollLine
from workzen_api.services.activity_log import log_activity
from workzen_api.services.attendance_aggregator import AttendanceAggregator, PAID_LEAVE_TYPES
from workzen_api.services.salary_resolver import SalaryResolver

log = logging.getLogger(__name__)

CENT = Decimal("0.01")


def money(x) -> Decimal:
    """Storage precision for every persisted amount / day count."""
    return Decimal(str(x)).quantize(CENT, rounding=ROUND_HALF_UP)


def validate_period(month, year):
    try:
        month, year = int(month), int(year)
    except (TypeError, ValueError):
        raise InvalidPayPeriodError("Month and year are required")
    if not 1 <= month <= 12:
        raise InvalidPayPeriodError(f"Invalid month {month}; expected 1-12")
    if not 1900 <= year <= 9999:
        raise InvalidPayPeriodError(f"Invalid year {year}")
    return month, year


@dataclass
class GenerationResult:
    month: int
    year: int
    records: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def records_created(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "recordsCreated": self.records_created,
            "records": self.records,
            "errors": self.errors,
        }


class PayrollGenerator:
    """
    Generates (or regenerates) the payroll of every active employee for a month.

    The whole batch is one transaction. Each employee runs inside its own
    SAVEPOINT, so a failure for one employee rolls back only that employee's
    writes and is reported in ``errors`` while the rest of the batch commits.
    """

    def __init__(self, store, aggregator: Optional[AttendanceAggregator] = None,
                 resolver: Optional[SalaryResolver] = None):
        self.store = store
        self.aggregator = aggregator or AttendanceAggregator(store)
        self.resolver = resolver or SalaryResolver(store)

    def generate(self, month, year, actor_id: Optional[int] = None) -> GenerationResult:
        month, year = validate_period(month, year)

        employees = self.store.active_employees()
        if not employees:
            self.store.rollback()
            raise NoActiveEmployeesError("No active employees found")

        result = GenerationResult(month=month, year=year)
        for emp in employees:
            name = emp.full_name
            try:
                with self.store.savepoint():
                    record = self._generate_for(emp, month, year, actor_id)
            except PayrollLockedError:
                log.warning("payroll %02d/%s for employee %s is locked; skipped", month, year, emp.id)
                result.errors.append(f"{name}: Payroll is locked")
            except IntegrityError:
                log.exception("payroll %02d/%s for employee %s collided with another run", month, year, emp.id)
                result.errors.append(f"{name}: Payroll for this period was generated concurrently")
            except Exception as e:
                log.exception("payroll %02d/%s failed for employee %s", month, year, emp.id)
                result.errors.append(f"{name}: {e}")
            else:
                result.records.append({
                    "payroll_id": record.id,
                    "employee_id": emp.id,
                    "employee_name": name,
                    "gross_salary": float(record.gross_salary),
                    "net_salary": float(record.net_salary),
                    "worked_days": float(record.worked_days),
                    "total_days": float(record.total_days),
                })

        self.store.commit()
        log.info("payroll %02d/%s generated: %s records, %s errors",
                 month, year, result.records_created, len(result.errors))
        return result

    def _generate_for(self, emp, month: int, year: int, actor_id: Optional[int]) -> PayrollRecord:
        existing = self.store.find_record(emp.id, month, year, for_update=True)
        if existing is not None and existing.locked:
            raise PayrollLockedError("Payroll is locked")

        summary = self.aggregator.aggregate(emp.id, month, year)
        salary = self.resolver.resolve_for_employee(emp, summary.wage_proportion)
        net_salary = salary.gross_salary - salary.total_deductions

        if existing is not None:
            # full replacement in place: old breakdown goes, every field is recomputed
            record = existing
            record.lines.clear()
            self.store.flush()
        else:
            record = PayrollRecord(employee_id=emp.id, month=month, year=year)

        record.basic_salary = money(salary.basic_salary)
        record.allowances = money(salary.total_allowances)
        record.deductions = money(salary.total_deductions)
        record.provident_fund = money(salary.provident_fund)
        record.professional_tax = money(salary.professional_tax)
        record.gross_salary = money(salary.gross_salary)
        record.net_salary = money(net_salary)
        record.worked_days = money(summary.effective_worked_days)
        record.total_days = money(summary.total_working_days)
        record.status = "pending"
        record.locked = False
        record.payment_date = None
        record.processed_by = actor_id

        for line in salary.breakdown:
            record.lines.append(PayrollLine(
                component_name=line.name,
                component_type=line.kind,
                rate_percentage=money(line.rate_percentage) if line.rate_percentage is not None else None,
                amount=money(line.amount),
            ))
        self.store.add_record(record)

        log_activity(self.store, actor_id, "GENERATE", "Payroll",
                     f"Generated payroll for {emp.full_name} - {month}/{year}")
        log.info(
            "payroll %02d/%s employee=%s proportion=%s gross=%s net=%s",
            month, year, emp.id, summary.wage_proportion, record.gross_salary, record.net_salary,
        )
        return record


def build_generator(store, config) -> PayrollGenerator:
    """Generator wired with the payroll settings from a Flask config mapping."""
    leave_types = config.get("PAYROLL_PAID_LEAVE_TYPES")
    if isinstance(leave_types, str):
        leave_types = [t.strip() for t in leave_types.split(",") if t.strip()]
    aggregator = AttendanceAggregator(
        store,
        default_working_days_per_week=int(config.get("PAYROLL_DEFAULT_WORKING_DAYS_PER_WEEK") or 5),
        paid_leave_types=leave_types or PAID_LEAVE_TYPES,
    )
    return PayrollGenerator(store, aggregator=aggregator, resolver=SalaryResolver(store))
