"""Seed demo employees, salary components and attendance for one month."""
import calendar
from datetime import date

from workzen_api import create_app
from workzen_api.extensions import db
from workzen_api.models.attendance import Attendance
from workzen_api.models.employee import Employee
from workzen_api.models.payroll.components import SalaryComponent

app = create_app()

DEMO_EMPLOYEES = [
    ("EMP-1001", "asha@workzen.local", "Asha", "Rao", 60000),
    ("EMP-1002", "vikram@workzen.local", "Vikram", "Shah", 35000),
    ("EMP-1003", "neha@workzen.local", "Neha", "Iyer", 18000),
]

def get_or_create_employee(code, email, first, last, wage):
    emp = Employee.query.filter_by(code=code).first()
    if not emp:
        emp = Employee(code=code, email=email, first_name=first, last_name=last,
                       wage=wage, status="active", doj=date(2024, 1, 1))
        db.session.add(emp)
        db.session.flush()
    return emp

def ensure_component(emp, name, kind, computation, value, percentage_of=None, role=None):
    comp = SalaryComponent.query.filter_by(employee_id=emp.id, name=name).first()
    if not comp:
        comp = SalaryComponent(employee_id=emp.id, name=name, kind=kind, computation=computation,
                               value=value, percentage_of=percentage_of, role=role, is_active=True)
        db.session.add(comp)
    return comp

with app.app_context():
    year, month = 2025, 11

    _, ndays = calendar.monthrange(year, month)
    print(f"Seeding {len(DEMO_EMPLOYEES)} employees for {month:02d}/{year}...")

    for code, email, first, last, wage in DEMO_EMPLOYEES:
        emp = get_or_create_employee(code, email, first, last, wage)

        ensure_component(emp, "Basic Salary", "earning", "percentage", 50, "wage", "basic")
        ensure_component(emp, "HRA", "earning", "percentage", 50, "basic_salary", "other_earning")
        ensure_component(emp, "Provident Fund (PF)", "deduction", "percentage", 12, "basic_salary", "pf")

        # present on every weekday
        for day in range(1, ndays + 1):
            d = date(year, month, day)
            if d.weekday() >= 5:
                continue
            if not Attendance.query.filter_by(employee_id=emp.id, date=d).first():
                db.session.add(Attendance(employee_id=emp.id, date=d, status="present"))

    db.session.commit()
    print("Done. Run: flask --app workzen_api.wsgi payroll generate --month 11 --year 2025")
