# workzen_api/models/payroll/__init__.py
# Import order matters: components first, then payroll (record + lines).
from workzen_api.extensions import db  # noqa

from .components import SalaryComponent
from .payroll import PayrollRecord, PayrollLine

__all__ = [
    "SalaryComponent",
    "PayrollRecord", "PayrollLine",
]
