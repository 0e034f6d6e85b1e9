# workzen_api/common/auth.py
from __future__ import annotations

from functools import wraps
from typing import Optional, Set

from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from workzen_api.common.http import fail
from workzen_api.extensions import db
from workzen_api.models.employee import Employee
from workzen_api.models.security import Role, UserRole


def _collect_roles_from_db(user_id: int) -> Set[str]:
    q = (
        db.session.query(Role.code)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user_id)
        .distinct()
    )
    return {row[0] for row in q.all()}


def current_user_id() -> Optional[int]:
    uid = get_jwt_identity()
    try:
        return int(uid) if uid is not None else None
    except (TypeError, ValueError):
        return None


def current_roles() -> Set[str]:
    """Roles from the JWT claims, falling back to a live DB read."""
    claims = get_jwt() or {}
    roles = set(claims.get("roles") or [])
    if roles:
        return roles
    uid = current_user_id()
    return _collect_roles_from_db(uid) if uid is not None else set()


def requires_roles(*codes: str):
    """
    Require that the current user has AT LEAST ONE of the given role codes.
    - Uses roles in JWT if present; falls back to DB.
    - 'admin' role always passes.
    """
    def outer(fn):
        @wraps(fn)
        @jwt_required()
        def inner(*args, **kwargs):
            uid = current_user_id()
            if uid is None:
                return fail("Unauthorized", status=401)

            roles = current_roles()
            if "admin" in roles:
                return fn(*args, **kwargs)

            if not any(r in roles for r in codes):
                return fail("Forbidden", status=403)

            return fn(*args, **kwargs)
        return inner
    return outer


PRIVILEGED_ROLES = {"admin", "hr", "payroll"}


def can_view_employee(employee_id: int) -> bool:
    """Privileged roles see everyone; an employee only sees their own records."""
    if current_roles() & PRIVILEGED_ROLES:
        return True
    uid = current_user_id()
    if uid is None:
        return False
    emp = Employee.query.filter_by(user_id=uid).first()
    return emp is not None and emp.id == employee_id
