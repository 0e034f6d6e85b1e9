# workzen_api/services/payroll_store.py
"""
Data-access boundary for the payroll core.

Every query the aggregator, resolver and generator need goes through a
PayrollStore bound to one SQLAlchemy session, so the core never touches the
global session directly and can be driven by a fake in tests.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import case, extract, func, or_

from workzen_api.models.activity import ActivityLog
from workzen_api.models.attendance import Attendance
from workzen_api.models.employee import Employee
from workzen_api.models.leave import LeaveRequest
from workzen_api.models.payroll.components import SalaryComponent
from workzen_api.models.payroll.payroll import PayrollRecord
from workzen_api.models.user import User

WORKED_ATTENDANCE_STATUSES = ("present", "half_day")


class PayrollStore:
    def __init__(self, session):
        self.session = session

    # ---------- transactions ----------
    def savepoint(self):
        return self.session.begin_nested()

    def flush(self):
        self.session.flush()

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()

    # ---------- employee directory ----------
    def active_employees(self) -> List[Employee]:
        return (
            self.session.query(Employee)
            .filter(Employee.status == "active")
            .order_by(Employee.id.asc())
            .all()
        )

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self.session.get(Employee, employee_id)

    def get_user(self, user_id: Optional[int]) -> Optional[User]:
        return self.session.get(User, user_id) if user_id is not None else None

    # ---------- attendance / leave ----------
    def count_worked_days(self, employee_id: int, month: int, year: int) -> int:
        n = (
            self.session.query(func.count(Attendance.id))
            .filter(
                Attendance.employee_id == employee_id,
                extract("month", Attendance.date) == month,
                extract("year", Attendance.date) == year,
                Attendance.status.in_(WORKED_ATTENDANCE_STATUSES),
            )
            .scalar()
        )
        return int(n or 0)

    def sum_paid_leave_days(self, employee_id: int, month: int, year: int,
                            leave_types: Iterable[str]) -> Decimal:
        """Approved paid leave whose start OR end date falls in month/year."""
        total = (
            self.session.query(func.coalesce(func.sum(LeaveRequest.days), 0))
            .filter(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status == "approved",
                LeaveRequest.leave_type.in_(tuple(leave_types)),
                or_(
                    (extract("month", LeaveRequest.start_date) == month)
                    & (extract("year", LeaveRequest.start_date) == year),
                    (extract("month", LeaveRequest.end_date) == month)
                    & (extract("year", LeaveRequest.end_date) == year),
                ),
            )
            .scalar()
        )
        return Decimal(str(total or 0))

    # ---------- salary components ----------
    def active_components(self, employee_id: int) -> List[SalaryComponent]:
        kind_order = case((SalaryComponent.kind == "earning", 0), else_=1)
        return (
            self.session.query(SalaryComponent)
            .filter(SalaryComponent.employee_id == employee_id,
                    SalaryComponent.is_active.is_(True))
            .order_by(kind_order, SalaryComponent.id.asc())
            .all()
        )

    # ---------- payroll records ----------
    def find_record(self, employee_id: int, month: int, year: int,
                    for_update: bool = False) -> Optional[PayrollRecord]:
        q = self.session.query(PayrollRecord).filter(
            PayrollRecord.employee_id == employee_id,
            PayrollRecord.month == month,
            PayrollRecord.year == year,
        )
        if for_update:
            q = q.with_for_update(of=PayrollRecord)
        return q.first()

    def get_record(self, payroll_id: int, for_update: bool = False) -> Optional[PayrollRecord]:
        q = self.session.query(PayrollRecord).filter(PayrollRecord.id == payroll_id)
        if for_update:
            q = q.with_for_update(of=PayrollRecord)
        return q.first()

    def add_record(self, record: PayrollRecord) -> PayrollRecord:
        self.session.add(record)
        self.session.flush()
        return record

    def delete_record(self, record: PayrollRecord):
        # breakdown lines are removed first through the delete-orphan cascade
        self.session.delete(record)
        self.session.flush()

    def history(self, employee_id: int) -> List[PayrollRecord]:
        return (
            self.session.query(PayrollRecord)
            .filter(PayrollRecord.employee_id == employee_id)
            .order_by(PayrollRecord.year.desc(), PayrollRecord.month.desc())
            .all()
        )

    # ---------- audit ----------
    def add_activity(self, entry: ActivityLog):
        self.session.add(entry)
