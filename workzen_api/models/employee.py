from datetime import datetime
from workzen_api.extensions import db

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)

    code  = db.Column(db.String(32), unique=True, nullable=False)   # employee code, e.g. EMP-0001
    email = db.Column(db.String(255), unique=True, nullable=False)
    first_name = db.Column(db.String(80), nullable=False)
    last_name  = db.Column(db.String(80), nullable=True)
    position   = db.Column(db.String(120), nullable=True)

    # monthly wage; payroll scales it by attendance
    wage = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    working_days_per_week = db.Column(db.SmallInteger, nullable=True)   # 5 or 6; null => org default

    doj = db.Column(db.Date, nullable=True)   # date of joining
    status = db.Column(db.String(16), default="active", nullable=False)  # active/inactive

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", lazy="joined")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()
