from datetime import datetime
from workzen_api.extensions import db

COMPONENT_KINDS = ("earning", "deduction")
COMPUTATION_TYPES = ("fixed", "percentage")
PERCENTAGE_BASES = ("wage", "basic_salary", "gross_salary")
COMPONENT_ROLES = ("basic", "pf", "other_earning", "other_deduction")


class SalaryComponent(db.Model):
    __tablename__ = "salary_components"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)   # Basic Salary, HRA, PF, ...
    kind = db.Column(db.Enum(*COMPONENT_KINDS, name="component_kind_enum"), nullable=False)
    computation = db.Column(db.Enum(*COMPUTATION_TYPES, name="component_computation_enum"),
                            nullable=False, default="fixed")
    value = db.Column(db.Numeric(12, 2), nullable=False, default=0)   # amount, or percent
    percentage_of = db.Column(db.String(20), nullable=True)           # wage|basic_salary|gross_salary

    # explicit payroll role; null => derived from the name (legacy rows)
    role = db.Column(db.String(20), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", backref=db.backref("salary_components", lazy="dynamic"))

    def to_dict(self):
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "name": self.name,
            "kind": self.kind,
            "computation": self.computation,
            "value": float(self.value or 0),
            "percentage_of": self.percentage_of,
            "role": self.role,
            "is_active": bool(self.is_active),
        }
