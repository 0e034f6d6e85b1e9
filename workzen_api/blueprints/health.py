from flask import Blueprint
from sqlalchemy import text
from workzen_api.extensions import db
from workzen_api.common.http import ok

bp = Blueprint("health", __name__, url_prefix="/api/health")

@bp.get("")
def health():
    db.session.execute(text("SELECT 1"))
    return ok({"status": "ok"})
