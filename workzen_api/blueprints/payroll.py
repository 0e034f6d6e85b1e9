from __future__ import annotations
from datetime import date
from typing import Optional

from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from workzen_api.extensions import db
from workzen_api.common.auth import requires_roles, can_view_employee, current_user_id
from workzen_api.common.errors import APIError
from workzen_api.common.http import ok, fail
from workzen_api.services.payroll_store import PayrollStore
from workzen_api.services.payroll_generator import build_generator
from workzen_api.services.payroll_service import PayrollService

bp = Blueprint("payroll", __name__, url_prefix="/api/v1/payroll")

# ---------- helpers ----------
def _store() -> PayrollStore:
    return PayrollStore(db.session)

def _d(s) -> Optional[date]:
    if not s:
        return None
    try:
        return date.fromisoformat(str(s))
    except ValueError:
        raise APIError("INVALID_DATE", "paymentDate must be YYYY-MM-DD", 422)

# ---------- routes ----------
@bp.post("/generate")
@requires_roles("admin", "payroll")
def generate():
    j = request.get_json(silent=True) or {}
    month, year = j.get("month"), j.get("year")
    if month is None or year is None:
        return fail("Month and year are required", 400)

    current_app.logger.info("payroll generation %s/%s requested by user %s", month, year, current_user_id())
    result = build_generator(_store(), current_app.config).generate(month, year, actor_id=current_user_id())
    return ok(result.to_dict(), message=f"Payroll generated successfully for {result.records_created} employees")

@bp.get("/<int:payroll_id>")
@requires_roles("admin", "payroll")
def get_payroll(payroll_id: int):
    record = PayrollService(_store()).get_record(payroll_id)
    data = record.to_dict()
    data["components"] = [ln.to_dict() for ln in record.lines]
    return ok(data)

@bp.put("/<int:payroll_id>/status")
@requires_roles("admin", "payroll")
def update_status(payroll_id: int):
    j = request.get_json(silent=True) or {}
    status = j.get("status")
    if not status:
        return fail("status is required", 422)
    payment_date = _d(j.get("paymentDate") or j.get("payment_date"))

    record = PayrollService(_store()).update_status(
        payroll_id, status, payment_date=payment_date, actor_id=current_user_id()
    )
    return ok(record.to_dict(), message="Payroll status updated successfully")

@bp.delete("/<int:payroll_id>")
@requires_roles("admin")
def delete_payroll(payroll_id: int):
    PayrollService(_store()).delete(payroll_id, actor_id=current_user_id())
    return ok({"deleted": payroll_id}, message="Payroll deleted successfully")

@bp.get("/payslip/<int:payroll_id>")
@jwt_required()
def get_payslip(payroll_id: int):
    store = _store()
    svc = PayrollService(store)
    record = svc.get_record(payroll_id)
    if not can_view_employee(record.employee_id):
        return fail("Access denied", 403)
    return ok(svc.get_payslip(payroll_id))

@bp.get("/employee/<int:employee_id>")
@jwt_required()
def employee_history(employee_id: int):
    store = _store()
    if not can_view_employee(employee_id):
        return fail("Access denied", 403)
    return ok(PayrollService(store).get_history(employee_id))
