from __future__ import annotations
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from workzen_api.extensions import db
from workzen_api.common.auth import requires_roles, can_view_employee, current_user_id
from workzen_api.common.http import ok, fail
from workzen_api.models.employee import Employee
from workzen_api.models.payroll.components import (
    SalaryComponent, COMPONENT_KINDS, COMPUTATION_TYPES, PERCENTAGE_BASES, COMPONENT_ROLES,
)
from workzen_api.services.activity_log import log_activity
from workzen_api.services.payroll_store import PayrollStore
from workzen_api.services.salary_resolver import SalaryResolver, ROLE_BASIC, ROLE_OTHER_EARNING, ROLE_OTHER_DEDUCTION

bp = Blueprint("salary_components", __name__, url_prefix="/api/v1/salary-components")

# role -> kind it must be attached to (pf may sit on either kind)
ROLE_KINDS = {
    ROLE_BASIC: "earning",
    ROLE_OTHER_EARNING: "earning",
    ROLE_OTHER_DEDUCTION: "deduction",
}

# ---------- helpers ----------
def _dec(x) -> Optional[Decimal]:
    if x is None or x == "":
        return None
    try:
        return Decimal(str(x))
    except (InvalidOperation, ValueError):
        return None

def _validate(j: Dict[str, Any], cur: Optional[SalaryComponent] = None) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Merge payload over the current row and validate the result."""
    def pick(key):
        if key in j:
            return j.get(key)
        return getattr(cur, key) if cur is not None else None

    name = (pick("name") or "").strip()
    kind = (pick("kind") or "").strip().lower()
    computation = (pick("computation") or "").strip().lower()
    value = _dec(pick("value"))
    percentage_of = (pick("percentage_of") or "").strip().lower() or None
    role = (pick("role") or "").strip().lower() or None

    if not name:
        return None, "name is required"
    if kind not in COMPONENT_KINDS:
        return None, f"kind must be one of {', '.join(COMPONENT_KINDS)}"
    if computation not in COMPUTATION_TYPES:
        return None, f"computation must be one of {', '.join(COMPUTATION_TYPES)}"
    if value is None or value < 0:
        return None, "value must be a non-negative number"
    if computation == "percentage":
        if value > 100:
            return None, "percentage value must be <= 100"
        if percentage_of is not None and percentage_of not in PERCENTAGE_BASES:
            return None, f"percentage_of must be one of {', '.join(PERCENTAGE_BASES)}"
    else:
        percentage_of = None
    if role is not None:
        if role not in COMPONENT_ROLES:
            return None, f"role must be one of {', '.join(COMPONENT_ROLES)}"
        if ROLE_KINDS.get(role, kind) != kind:
            return None, f"role '{role}' requires kind '{ROLE_KINDS[role]}'"

    return {
        "name": name, "kind": kind, "computation": computation, "value": value,
        "percentage_of": percentage_of, "role": role,
    }, None

# ---------- routes ----------
@bp.get("/employee/<int:employee_id>")
@jwt_required()
def list_components(employee_id: int):
    if not can_view_employee(employee_id):
        return fail("Not authorized to view salary components", 403)
    emp = db.session.get(Employee, employee_id)
    if not emp:
        return fail("Employee not found", 404)
    rows = PayrollStore(db.session).active_components(employee_id)
    return ok({
        "components": [c.to_dict() for c in rows],
        "salary_info": {
            "wage": float(emp.wage or 0),
            "working_days_per_week": emp.working_days_per_week,
        },
    })

@bp.post("")
@requires_roles("admin")
def create_component():
    j = request.get_json(silent=True) or {}
    emp = db.session.get(Employee, j.get("employee_id")) if j.get("employee_id") else None
    if not emp:
        return fail("Employee not found", 404)
    data, err = _validate(j)
    if err:
        return fail(err, 422)

    c = SalaryComponent(employee_id=emp.id, is_active=True, **data)
    db.session.add(c)
    db.session.flush()
    log_activity(PayrollStore(db.session), current_user_id(), "CREATE", "SALARY_COMPONENT",
                 {"component_id": c.id, "name": c.name, "employee_id": emp.id})
    db.session.commit()
    return ok(c.to_dict(), 201)

@bp.put("/<int:component_id>")
@requires_roles("admin")
def update_component(component_id: int):
    c = db.session.get(SalaryComponent, component_id)
    if not c:
        return fail("Salary component not found", 404)
    j = request.get_json(silent=True) or {}
    data, err = _validate(j, cur=c)
    if err:
        return fail(err, 422)

    for k, v in data.items():
        setattr(c, k, v)
    if "is_active" in j:
        c.is_active = bool(j["is_active"])
    log_activity(PayrollStore(db.session), current_user_id(), "UPDATE", "SALARY_COMPONENT",
                 {"component_id": c.id})
    db.session.commit()
    return ok(c.to_dict())

@bp.delete("/<int:component_id>")
@requires_roles("admin")
def delete_component(component_id: int):
    c = db.session.get(SalaryComponent, component_id)
    if not c:
        return fail("Salary component not found", 404)
    # soft delete; payroll already generated keeps its own breakdown copy
    c.is_active = False
    log_activity(PayrollStore(db.session), current_user_id(), "DELETE", "SALARY_COMPONENT",
                 {"component_id": c.id})
    db.session.commit()
    return ok({"deleted": component_id})

@bp.post("/preview")
@requires_roles("admin", "payroll", "hr")
def preview():
    """Run the payroll resolver for a hypothetical attendance; nothing is stored."""
    j = request.get_json(silent=True) or {}
    emp = db.session.get(Employee, j.get("employee_id")) if j.get("employee_id") else None
    if not emp:
        return fail("Employee not found", 404)

    worked, total = _dec(j.get("worked_days")), _dec(j.get("total_days"))
    if (worked is not None and worked < 0) or (total is not None and total < 0):
        return fail("worked_days / total_days must be non-negative", 422)
    proportion = worked / total if (worked is not None and total) else Decimal(1)

    res = SalaryResolver(PayrollStore(db.session)).resolve_for_employee(emp, proportion)
    net = res.gross_salary - res.total_deductions
    return ok({
        "employee_id": emp.id,
        "wage_proportion": float(proportion),
        "basic_salary": float(res.basic_salary),
        "gross_salary": float(res.gross_salary),
        "total_allowances": float(res.total_allowances),
        "provident_fund": float(res.provident_fund),
        "professional_tax": float(res.professional_tax),
        "total_deductions": float(res.total_deductions),
        "net_salary": float(net),
        "earnings": [
            {"name": ln.name, "rate_percentage": float(ln.rate_percentage) if ln.rate_percentage is not None else None,
             "amount": float(ln.amount)}
            for ln in res.earnings
        ],
        "deductions": [
            {"name": ln.name, "rate_percentage": float(ln.rate_percentage) if ln.rate_percentage is not None else None,
             "amount": float(ln.amount)}
            for ln in res.deductions
        ],
    })
