from decimal import Decimal
from types import SimpleNamespace

import pytest

from workzen_api.services.salary_resolver import (
    ComponentConfigError,
    PASS_ORDER,
    PercentageBase,
    SalaryResolver,
    component_roles,
    professional_tax,
)


def _emp(wage):
    return SimpleNamespace(id=1, wage=Decimal(str(wage)))


def _comp(name, kind, computation="fixed", value=0, percentage_of=None, role=None, is_active=True):
    return SimpleNamespace(
        name=name, kind=kind, computation=computation, value=Decimal(str(value)),
        percentage_of=percentage_of, role=role, is_active=is_active,
    )


def _scenario_components():
    return [
        _comp("Basic Salary", "earning", "percentage", 50, "wage"),
        _comp("HRA", "earning", "percentage", 50, "basic_salary"),
    ]


def _line(res, name, kind):
    return next(ln for ln in res.breakdown if ln.name == name and ln.kind == kind)


def test_full_month_scenario():
    res = SalaryResolver().resolve(_emp(60000), _scenario_components(), Decimal(1))

    assert res.basic_salary == Decimal("30000")
    assert _line(res, "HRA", "earning").amount == Decimal("15000")
    assert res.gross_salary == Decimal("45000")
    assert res.total_allowances == Decimal("15000")
    assert res.provident_fund == Decimal("3600")
    assert res.professional_tax == Decimal("200")
    assert res.total_deductions == Decimal("3800")
    assert res.gross_salary - res.total_deductions == Decimal("41200")


def test_partial_month_scales_once():
    res = SalaryResolver().resolve(_emp(60000), _scenario_components(), Decimal(11) / Decimal(22))

    assert res.basic_salary == Decimal("15000")
    assert _line(res, "HRA", "earning").amount == Decimal("7500")
    assert res.gross_salary == Decimal("22500")
    assert res.provident_fund == Decimal("1800")
    assert res.professional_tax == Decimal("200")
    assert res.gross_salary - res.total_deductions == Decimal("20500")


def test_breakdown_order_follows_passes():
    comps = _scenario_components() + [_comp("Canteen", "deduction", "fixed", 500)]
    res = SalaryResolver().resolve(_emp(60000), comps, Decimal(1))

    assert [ln.name for ln in res.breakdown] == [
        "Basic Salary", "HRA", "Provident Fund (PF)", "Professional Tax", "Canteen",
    ]
    assert [ln.kind for ln in res.breakdown] == ["earning", "earning", "deduction", "deduction", "deduction"]
    assert PASS_ORDER[0] == "basic_salary" and PASS_ORDER[-1] == "other_deductions"


def test_basic_fallback_is_whole_wage():
    res = SalaryResolver().resolve(_emp(50000), [], Decimal(1))

    assert res.basic_salary == Decimal("50000")
    assert res.gross_salary == Decimal("50000")
    first = res.breakdown[0]
    assert (first.name, first.kind, first.rate_percentage) == ("Basic Salary", "earning", None)


def test_default_pf_is_twelve_percent_of_basic():
    res = SalaryResolver().resolve(_emp(20000), [], Decimal(1))

    pf = _line(res, "Provident Fund (PF)", "deduction")
    assert pf.amount == Decimal("2400")
    assert pf.rate_percentage == Decimal("12")


def test_configured_pf_percentage_not_rescaled():
    comps = [_comp("Provident Fund", "deduction", "percentage", 10)]
    res = SalaryResolver().resolve(_emp(40000), comps, Decimal("0.5"))

    # basic = 20000 already scaled; 10% of it
    assert res.provident_fund == Decimal("2000")


def test_fixed_components_scale_with_proportion():
    comps = [
        _comp("Conveyance", "earning", "fixed", 1000),
        _comp("Loan EMI", "deduction", "fixed", 400),
    ]
    res = SalaryResolver().resolve(_emp(10000), comps, Decimal("0.5"))

    assert _line(res, "Conveyance", "earning").amount == Decimal("500")
    assert _line(res, "Loan EMI", "deduction").amount == Decimal("200")


def test_gross_base_uses_running_gross():
    comps = [
        _comp("HRA", "earning", "fixed", 10000),
        _comp("Special", "earning", "percentage", 10, "gross_salary"),
    ]
    res = SalaryResolver().resolve(_emp(30000), comps, Decimal(1))

    # gross before "Special" = 30000 + 10000
    assert _line(res, "Special", "earning").amount == Decimal("4000")
    assert res.gross_salary == Decimal("44000")


@pytest.mark.parametrize("raw,expected", [
    (None, PercentageBase.UNSET),
    ("", PercentageBase.UNSET),
    ("  ", PercentageBase.UNSET),
    ("wage", PercentageBase.WAGE),
    ("Basic_Salary", PercentageBase.BASIC_SALARY),
    ("gross_salary", PercentageBase.GROSS_SALARY),
    ("ctc", PercentageBase.UNRECOGNIZED),
])
def test_percentage_base_parse(raw, expected):
    assert PercentageBase.parse(raw) is expected


def test_unset_and_unrecognized_bases_fall_back_to_basic():
    comps = [
        _comp("Bonus A", "earning", "percentage", 10, None),
        _comp("Bonus B", "earning", "percentage", 10, "ctc"),
    ]
    res = SalaryResolver().resolve(_emp(20000), comps, Decimal(1))

    assert _line(res, "Bonus A", "earning").amount == Decimal("2000")
    assert _line(res, "Bonus B", "earning").amount == Decimal("2000")


@pytest.mark.parametrize("gross,tax", [
    ("14000", "0"),
    ("15000", "0"),
    ("18000", "150"),
    ("20000", "150"),
    ("25000", "200"),
    ("50000", "200"),
])
def test_professional_tax_slabs(gross, tax):
    assert professional_tax(Decimal(gross)) == Decimal(tax)


def test_pf_basic_name_plays_two_roles():
    comp = _comp("PF Basic", "earning", "fixed", 20000)
    assert component_roles(comp) == frozenset({"basic", "pf"})

    res = SalaryResolver().resolve(_emp(50000), [comp], Decimal(1))
    assert res.basic_salary == Decimal("20000")
    assert _line(res, "PF Basic", "deduction").amount == Decimal("20000")


def test_explicit_role_overrides_name():
    comp = _comp("PF Basic", "earning", "fixed", 20000, role="basic")
    assert component_roles(comp) == frozenset({"basic"})

    res = SalaryResolver().resolve(_emp(50000), [comp], Decimal(1))
    assert res.basic_salary == Decimal("20000")
    assert res.provident_fund == Decimal("2400")
    assert _line(res, "Provident Fund (PF)", "deduction").rate_percentage == Decimal("12")


def test_legacy_name_rules():
    assert component_roles(_comp("Basic Pay", "earning")) == frozenset({"basic"})
    assert component_roles(_comp("HRA", "earning")) == frozenset({"other_earning"})
    assert component_roles(_comp("Provident Fund", "deduction")) == frozenset({"pf"})
    assert component_roles(_comp("Income Tax", "deduction")) == frozenset({"other_deduction"})


def test_inactive_components_ignored():
    comps = [_comp("HRA", "earning", "fixed", 5000, is_active=False)]
    res = SalaryResolver().resolve(_emp(20000), comps, Decimal(1))

    assert res.gross_salary == Decimal("20000")
    assert all(ln.name != "HRA" for ln in res.breakdown)


def test_unknown_computation_raises():
    comps = [_comp("Odd", "earning", "weird", 10)]
    with pytest.raises(ComponentConfigError):
        SalaryResolver().resolve(_emp(20000), comps, Decimal(1))
