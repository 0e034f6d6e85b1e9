import os
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from workzen_api import create_app
from workzen_api.extensions import db
from workzen_api.common.errors import InvalidPayPeriodError, NoActiveEmployeesError, PayrollLockedError
from workzen_api.models.activity import ActivityLog
from workzen_api.models.attendance import Attendance
from workzen_api.models.employee import Employee
from workzen_api.models.leave import LeaveRequest
from workzen_api.models.payroll.components import SalaryComponent
from workzen_api.models.payroll.payroll import PayrollRecord, PayrollLine
from workzen_api.services.payroll_generator import PayrollGenerator, build_generator, money
from workzen_api.services.payroll_service import PayrollService
from workzen_api.services.payroll_store import PayrollStore

MONTH, YEAR = 9, 2025   # 22 working days


@pytest.fixture(scope="function")
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app()
    with app.app_context():
        db.create_all()
        yield app


@pytest.fixture(scope="function")
def store(app):
    with app.app_context():
        yield PayrollStore(db.session)


def _weekdays(month=MONTH, year=YEAR):
    d = date(year, month, 1)
    while d.month == month:
        if d.weekday() < 5:
            yield d
        d += timedelta(days=1)


def _employee(code, wage, first="Asha", status="active"):
    emp = Employee(code=code, email=f"{code.lower()}@workzen.local", first_name=first,
                   last_name="Test", wage=wage, status=status)
    db.session.add(emp)
    db.session.flush()
    return emp


def _components(emp):
    db.session.add_all([
        SalaryComponent(employee_id=emp.id, name="Basic Salary", kind="earning",
                        computation="percentage", value=50, percentage_of="wage", is_active=True),
        SalaryComponent(employee_id=emp.id, name="HRA", kind="earning",
                        computation="percentage", value=50, percentage_of="basic_salary", is_active=True),
    ])


def _attend(emp, days):
    for d in days:
        db.session.add(Attendance(employee_id=emp.id, date=d, status="present"))


def _snapshot(record):
    fields = ("basic_salary", "allowances", "deductions", "provident_fund", "professional_tax",
              "gross_salary", "net_salary", "worked_days", "total_days", "status", "locked")
    return (
        tuple(getattr(record, f) for f in fields),
        [(ln.component_name, ln.component_type, ln.rate_percentage, ln.amount) for ln in record.lines],
    )


def test_full_month_end_to_end(store):
    emp = _employee("EMP-1", 60000)
    _components(emp)
    _attend(emp, _weekdays())
    db.session.commit()

    result = PayrollGenerator(store).generate(MONTH, YEAR, actor_id=None)

    assert result.records_created == 1 and result.errors == []
    rec = PayrollRecord.query.filter_by(employee_id=emp.id, month=MONTH, year=YEAR).one()
    assert rec.total_days == Decimal("22")
    assert rec.worked_days == Decimal("22")
    assert rec.basic_salary == Decimal("30000.00")
    assert rec.allowances == Decimal("15000.00")
    assert rec.gross_salary == Decimal("45000.00")
    assert rec.provident_fund == Decimal("3600.00")
    assert rec.professional_tax == Decimal("200.00")
    assert rec.deductions == Decimal("3800.00")
    assert rec.net_salary == Decimal("41200.00")
    assert rec.status == "pending" and rec.locked is False
    assert [ln.component_name for ln in rec.lines] == [
        "Basic Salary", "HRA", "Provident Fund (PF)", "Professional Tax",
    ]


def test_partial_month_with_paid_leave(store):
    emp = _employee("EMP-1", 60000)
    _components(emp)
    days = list(_weekdays())
    _attend(emp, days[:10])
    db.session.add(LeaveRequest(employee_id=emp.id, leave_type="sick", start_date=days[10],
                                end_date=days[10], days=1, status="approved"))
    # neither unapproved nor unpaid leave counts
    db.session.add(LeaveRequest(employee_id=emp.id, leave_type="sick", start_date=days[11],
                                end_date=days[11], days=1, status="pending"))
    db.session.add(LeaveRequest(employee_id=emp.id, leave_type="unpaid", start_date=days[12],
                                end_date=days[12], days=1, status="approved"))
    db.session.commit()

    PayrollGenerator(store).generate(MONTH, YEAR)

    rec = PayrollRecord.query.filter_by(employee_id=emp.id).one()
    assert rec.worked_days == Decimal("11.00")
    assert rec.gross_salary == Decimal("22500.00")
    assert rec.net_salary == Decimal("20500.00")


def test_half_day_counts_as_worked_day(store):
    emp = _employee("EMP-1", 22000)
    days = list(_weekdays())
    db.session.add(Attendance(employee_id=emp.id, date=days[0], status="half_day"))
    db.session.add(Attendance(employee_id=emp.id, date=days[1], status="absent"))
    db.session.commit()

    PayrollGenerator(store).generate(MONTH, YEAR)

    rec = PayrollRecord.query.filter_by(employee_id=emp.id).one()
    assert rec.worked_days == Decimal("1.00")
    assert rec.basic_salary == Decimal("1000.00")


def test_leave_spanning_months_counted_in_both(store):
    emp = _employee("EMP-1", 22000)
    db.session.add(LeaveRequest(employee_id=emp.id, leave_type="annual", start_date=date(2025, 8, 29),
                                end_date=date(2025, 9, 2), days=3, status="approved"))
    db.session.commit()

    gen = PayrollGenerator(store)
    gen.generate(8, 2025)
    gen.generate(9, 2025)

    aug = PayrollRecord.query.filter_by(employee_id=emp.id, month=8).one()
    sep = PayrollRecord.query.filter_by(employee_id=emp.id, month=9).one()
    assert aug.worked_days == Decimal("3.00")
    assert sep.worked_days == Decimal("3.00")


def test_regeneration_is_idempotent_and_unique(store):
    emp = _employee("EMP-1", 60000)
    _components(emp)
    _attend(emp, list(_weekdays())[:15])
    db.session.commit()

    gen = PayrollGenerator(store)
    gen.generate(MONTH, YEAR)
    first = _snapshot(PayrollRecord.query.filter_by(employee_id=emp.id).one())
    gen.generate(MONTH, YEAR)

    rows = PayrollRecord.query.filter_by(employee_id=emp.id, month=MONTH, year=YEAR).all()
    assert len(rows) == 1
    assert _snapshot(rows[0]) == first
    assert PayrollLine.query.count() == len(first[1])


def test_regeneration_picks_up_new_attendance(store):
    emp = _employee("EMP-1", 22000)
    days = list(_weekdays())
    _attend(emp, days[:5])
    db.session.commit()

    gen = PayrollGenerator(store)
    gen.generate(MONTH, YEAR)
    record_id = PayrollRecord.query.one().id

    _attend(emp, days[5:10])
    db.session.commit()
    gen.generate(MONTH, YEAR)

    rec = PayrollRecord.query.one()
    assert rec.id == record_id
    assert rec.worked_days == Decimal("10.00")
    assert rec.basic_salary == Decimal("10000.00")


def test_locked_record_is_never_regenerated(store):
    emp = _employee("EMP-1", 60000)
    _components(emp)
    days = list(_weekdays())
    _attend(emp, days[:5])
    db.session.commit()

    gen = PayrollGenerator(store)
    gen.generate(MONTH, YEAR)
    rec = PayrollRecord.query.one()
    PayrollService(store).update_status(rec.id, "paid", payment_date=date(2025, 10, 1))
    before = _snapshot(PayrollRecord.query.one())

    _attend(emp, days[5:])
    db.session.commit()
    result = gen.generate(MONTH, YEAR)

    assert result.records_created == 0
    assert result.errors == ["Asha Test: Payroll is locked"]
    after = PayrollRecord.query.one()
    assert _snapshot(after) == before
    assert after.payment_date == date(2025, 10, 1)

    with pytest.raises(PayrollLockedError):
        PayrollService(store).update_status(after.id, "pending")
    with pytest.raises(PayrollLockedError):
        PayrollService(store).delete(after.id)
    assert _snapshot(PayrollRecord.query.one()) == before


class MalformedComponentStore(PayrollStore):
    """Serves one employee a component row with a computation the resolver rejects."""

    def __init__(self, session, broken_employee_id):
        super().__init__(session)
        self.broken_employee_id = broken_employee_id

    def active_components(self, employee_id):
        if employee_id == self.broken_employee_id:
            return [SimpleNamespace(name="Odd", kind="earning", computation="formula", value=Decimal(10),
                                    percentage_of=None, role=None, is_active=True)]
        return super().active_components(employee_id)


class StaleLookupStore(PayrollStore):
    """Misses an existing record, as a concurrent run that has not committed yet would."""

    def __init__(self, session, hidden_employee_id):
        super().__init__(session)
        self.hidden_employee_id = hidden_employee_id

    def find_record(self, employee_id, month, year, for_update=False):
        if employee_id == self.hidden_employee_id:
            return None
        return super().find_record(employee_id, month, year, for_update=for_update)


def test_failing_employee_is_isolated(app):
    bad = _employee("EMP-1", 30000, first="Broken")
    good = _employee("EMP-2", 30000, first="Fine")
    _attend(good, _weekdays())
    db.session.commit()

    result = PayrollGenerator(MalformedComponentStore(db.session, bad.id)).generate(MONTH, YEAR)

    assert result.records_created == 1
    assert result.records[0]["employee_id"] == good.id
    assert result.errors == ["Broken Test: component 'Odd' has unsupported computation 'formula'"]
    assert PayrollRecord.query.filter_by(employee_id=bad.id).count() == 0
    assert PayrollRecord.query.filter_by(employee_id=good.id).count() == 1


def test_duplicate_insert_reported_and_rest_committed(app):
    emps = [_employee(f"EMP-{i}", 30000, first=name) for i, name in enumerate(("Asha", "Ravi", "Meera"), 1)]
    db.session.commit()
    PayrollGenerator(PayrollStore(db.session)).generate(MONTH, YEAR)
    ravi_id = emps[1].id

    result = PayrollGenerator(StaleLookupStore(db.session, ravi_id)).generate(MONTH, YEAR)

    assert result.errors == ["Ravi Test: Payroll for this period was generated concurrently"]
    assert result.records_created == 2
    assert {r["employee_id"] for r in result.records} == {emps[0].id, emps[2].id}
    assert PayrollRecord.query.count() == 3
    assert PayrollRecord.query.filter_by(employee_id=ravi_id).count() == 1


def test_inactive_employees_skipped(store):
    _employee("EMP-1", 30000, status="inactive")
    active = _employee("EMP-2", 30000)
    db.session.commit()

    result = PayrollGenerator(store).generate(MONTH, YEAR)

    assert [r["employee_id"] for r in result.records] == [active.id]


def test_no_active_employees(store):
    _employee("EMP-1", 30000, status="inactive")
    db.session.commit()

    with pytest.raises(NoActiveEmployeesError):
        PayrollGenerator(store).generate(MONTH, YEAR)
    assert PayrollRecord.query.count() == 0


@pytest.mark.parametrize("month,year", [(0, 2025), (13, 2025), ("x", 2025), (5, 10)])
def test_invalid_period(store, month, year):
    with pytest.raises(InvalidPayPeriodError):
        PayrollGenerator(store).generate(month, year)


def test_activity_logged_per_employee(store):
    _employee("EMP-1", 30000)
    _employee("EMP-2", 30000, first="Ravi")
    db.session.commit()

    PayrollGenerator(store).generate(MONTH, YEAR)

    rows = ActivityLog.query.filter_by(action="GENERATE").all()
    assert len(rows) == 2
    assert rows[0].details == f"Generated payroll for Asha Test - {MONTH}/{YEAR}"


def test_build_generator_reads_config(app, store):
    app.config["PAYROLL_DEFAULT_WORKING_DAYS_PER_WEEK"] = 6
    app.config["PAYROLL_PAID_LEAVE_TYPES"] = "paid, annual"
    gen = build_generator(store, app.config)

    assert gen.aggregator.default_working_days_per_week == 6
    assert gen.aggregator.paid_leave_types == ("paid", "annual")


def test_money_rounds_half_up():
    assert money(Decimal("10.005")) == Decimal("10.01")
    assert money(Decimal("10.004")) == Decimal("10.00")
