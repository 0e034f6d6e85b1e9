# workzen_api/services/payroll_service.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional
import logging

from workzen_api.common.errors import (
    InvalidPayrollStatusError,
    PayrollLockedError,
    PayrollNotFoundError,
)
from workzen_api.models.payroll.payroll import PAYROLL_STATUSES, PayrollRecord
from workzen_api.services.activity_log import log_activity
from workzen_api.services.payslip_service import PayslipService

log = logging.getLogger(__name__)


class PayrollService:
    """
    Lifecycle of a generated payroll record:

        pending --(mark paid: payment_date set, locked)--> paid

    A locked record refuses every further status change and deletion.
    """

    def __init__(self, store, payslips: Optional[PayslipService] = None):
        self.store = store
        self.payslips = payslips or PayslipService()

    def get_record(self, payroll_id: int, for_update: bool = False) -> PayrollRecord:
        record = self.store.get_record(payroll_id, for_update=for_update)
        if record is None:
            raise PayrollNotFoundError("Payroll record not found")
        return record

    def update_status(self, payroll_id: int, status: str, payment_date: Optional[date] = None,
                      actor_id: Optional[int] = None) -> PayrollRecord:
        status = (status or "").strip().lower()
        record = self.get_record(payroll_id, for_update=True)
        if status not in PAYROLL_STATUSES:
            self.store.rollback()
            raise InvalidPayrollStatusError(
                f"Invalid status '{status}' (allowed: {', '.join(PAYROLL_STATUSES)})"
            )
        if record.locked:
            self.store.rollback()
            raise PayrollLockedError("Cannot modify locked payroll")

        record.status = status
        if payment_date is not None:
            record.payment_date = payment_date
        if status == "paid":
            record.locked = True
            record.payment_date = payment_date or date.today()

        log_activity(self.store, actor_id, "UPDATE", "Payroll",
                     f"Updated payroll status to {status} for payroll ID {payroll_id}")
        self.store.commit()
        log.info("payroll %s status -> %s (locked=%s)", payroll_id, status, record.locked)
        return record

    def delete(self, payroll_id: int, actor_id: Optional[int] = None) -> None:
        record = self.get_record(payroll_id, for_update=True)
        if record.locked:
            self.store.rollback()
            raise PayrollLockedError("Cannot delete locked payroll")

        self.store.delete_record(record)
        log_activity(self.store, actor_id, "DELETE", "Payroll", f"Deleted payroll ID {payroll_id}")
        self.store.commit()
        log.info("payroll %s deleted", payroll_id)

    def get_payslip(self, payroll_id: int) -> Dict[str, Any]:
        return self.payslips.build_payslip_dto(self.get_record(payroll_id))

    def get_history(self, employee_id: int) -> List[Dict[str, Any]]:
        return [
            {
                "id": r.id,
                "month": r.month,
                "year": r.year,
                "gross_salary": float(r.gross_salary or 0),
                "net_salary": float(r.net_salary or 0),
                "status": r.status,
                "locked": bool(r.locked),
                "payment_date": r.payment_date.isoformat() if r.payment_date else None,
                "worked_days": float(r.worked_days or 0),
                "total_days": float(r.total_days or 0),
            }
            for r in self.store.history(employee_id)
        ]
