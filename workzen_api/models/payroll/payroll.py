from datetime import datetime
from workzen_api.extensions import db

PAYROLL_STATUSES = ("pending", "paid")


class PayrollRecord(db.Model):
    __tablename__ = "payroll"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    month = db.Column(db.SmallInteger, nullable=False)
    year = db.Column(db.SmallInteger, nullable=False)

    basic_salary = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    allowances = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    deductions = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    provident_fund = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    professional_tax = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    gross_salary = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    net_salary = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    worked_days = db.Column(db.Numeric(10, 2), default=0)   # attendance + paid leave
    total_days = db.Column(db.Numeric(10, 2), default=0)    # working days in the month

    status = db.Column(db.Enum(*PAYROLL_STATUSES, name="payroll_status_enum"), nullable=False, default="pending")
    locked = db.Column(db.Boolean, nullable=False, default=False)
    processed_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    payment_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
    )

    employee = db.relationship("Employee", lazy="joined")
    processor = db.relationship("User", lazy="joined")
    lines = db.relationship(
        "PayrollLine",
        back_populates="payroll",
        cascade="all, delete-orphan",
        order_by="PayrollLine.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "employee_code": self.employee.code if self.employee else None,
            "employee_name": self.employee.full_name if self.employee else None,
            "month": self.month,
            "year": self.year,
            "basic_salary": float(self.basic_salary or 0),
            "allowances": float(self.allowances or 0),
            "deductions": float(self.deductions or 0),
            "provident_fund": float(self.provident_fund or 0),
            "professional_tax": float(self.professional_tax or 0),
            "gross_salary": float(self.gross_salary or 0),
            "net_salary": float(self.net_salary or 0),
            "worked_days": float(self.worked_days or 0),
            "total_days": float(self.total_days or 0),
            "status": self.status,
            "locked": bool(self.locked),
            "processed_by": self.processed_by,
            "processed_by_name": self.processor.full_name if self.processor else None,
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class PayrollLine(db.Model):
    __tablename__ = "payroll_components"

    id = db.Column(db.Integer, primary_key=True)
    payroll_id = db.Column(db.Integer, db.ForeignKey("payroll.id", ondelete="CASCADE"),
                           nullable=False, index=True)
    component_name = db.Column(db.String(120), nullable=False)
    component_type = db.Column(db.String(20), nullable=False)   # earning|deduction
    rate_percentage = db.Column(db.Numeric(6, 2), nullable=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    payroll = db.relationship("PayrollRecord", back_populates="lines")

    def to_dict(self):
        return {
            "id": self.id,
            "component_name": self.component_name,
            "component_type": self.component_type,
            "rate_percentage": float(self.rate_percentage) if self.rate_percentage is not None else None,
            "amount": float(self.amount or 0),
        }
