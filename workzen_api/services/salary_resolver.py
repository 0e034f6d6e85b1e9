# workzen_api/services/salary_resolver.py
"""
Salary component resolution.

Components are resolved by an explicitly ordered list of passes; later passes
use the results of earlier ones as percentage bases:

    basic_salary -> other_earnings -> provident_fund -> professional_tax -> other_deductions

Every wage-derived amount is scaled by the attendance wage proportion exactly
once. Percentages taken of basic or gross (PF included) are not scaled again
since those bases already carry it.
No rounding happens here; amounts are quantized when persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import List, Optional, Sequence

ROLE_BASIC = "basic"
ROLE_PF = "pf"
ROLE_OTHER_EARNING = "other_earning"
ROLE_OTHER_DEDUCTION = "other_deduction"

DEFAULT_BASIC_NAME = "Basic Salary"
DEFAULT_PF_NAME = "Provident Fund (PF)"
DEFAULT_PF_RATE = Decimal("12")
PROFESSIONAL_TAX_NAME = "Professional Tax"

# (upper bound of gross, monthly tax); anything above the last bound pays the ceiling
PROFESSIONAL_TAX_SLABS = (
    (Decimal("15000"), Decimal("0")),
    (Decimal("20000"), Decimal("150")),
    (Decimal("30000"), Decimal("200")),
)
PROFESSIONAL_TAX_CEILING = Decimal("200")

PASS_ORDER = (
    "basic_salary",
    "other_earnings",
    "provident_fund",
    "professional_tax",
    "other_deductions",
)

HUNDRED = Decimal(100)


class ComponentConfigError(ValueError):
    """A salary component row that cannot be resolved."""


class PercentageBase(Enum):
    WAGE = "wage"
    BASIC_SALARY = "basic_salary"
    GROSS_SALARY = "gross_salary"
    UNSET = "unset"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, raw) -> "PercentageBase":
        if raw is None or not str(raw).strip():
            return cls.UNSET
        key = str(raw).strip().lower()
        for member in (cls.WAGE, cls.BASIC_SALARY, cls.GROSS_SALARY):
            if member.value == key:
                return member
        return cls.UNRECOGNIZED


def professional_tax(gross_salary) -> Decimal:
    gross = _dec(gross_salary)
    for upper, tax in PROFESSIONAL_TAX_SLABS:
        if gross <= upper:
            return tax
    return PROFESSIONAL_TAX_CEILING


def component_roles(component) -> frozenset:
    """
    Payroll roles a component plays.

    An explicit ``role`` is authoritative. Untagged rows fall back to the legacy
    name rules, which can assign two roles at once: an earning called
    "PF Basic" is both the basic component and the PF component.
    """
    if getattr(component, "role", None):
        return frozenset({component.role})

    name = (component.name or "").lower()
    is_pf_name = "pf" in name or "provident" in name
    roles = set()
    if component.kind == "earning":
        roles.add(ROLE_BASIC if "basic" in name else ROLE_OTHER_EARNING)
    elif component.kind == "deduction" and not is_pf_name:
        roles.add(ROLE_OTHER_DEDUCTION)
    if is_pf_name:
        roles.add(ROLE_PF)
    return frozenset(roles)


def _dec(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    if x is None:
        raise ComponentConfigError("missing numeric value")
    try:
        return Decimal(str(x))
    except (InvalidOperation, ValueError) as e:
        raise ComponentConfigError(f"invalid numeric value {x!r}") from e


@dataclass(frozen=True)
class ComponentLine:
    name: str
    kind: str                       # earning | deduction
    rate_percentage: Optional[Decimal]
    amount: Decimal


@dataclass
class SalaryBreakdown:
    basic_salary: Decimal = Decimal(0)
    gross_salary: Decimal = Decimal(0)
    total_allowances: Decimal = Decimal(0)
    provident_fund: Decimal = Decimal(0)
    professional_tax: Decimal = Decimal(0)
    total_deductions: Decimal = Decimal(0)
    breakdown: List[ComponentLine] = field(default_factory=list)

    @property
    def earnings(self) -> List[ComponentLine]:
        return [ln for ln in self.breakdown if ln.kind == "earning"]

    @property
    def deductions(self) -> List[ComponentLine]:
        return [ln for ln in self.breakdown if ln.kind == "deduction"]


@dataclass
class _State:
    wage: Decimal
    wage_proportion: Decimal
    components: Sequence
    result: SalaryBreakdown = field(default_factory=SalaryBreakdown)

    def with_role(self, role: str) -> list:
        return [c for c in self.components if role in component_roles(c)]

    def base_for(self, base: PercentageBase) -> Decimal:
        if base is PercentageBase.WAGE:
            return self.wage
        if base is PercentageBase.GROSS_SALARY:
            return self.result.gross_salary
        # BASIC_SALARY, plus the UNSET / UNRECOGNIZED fallbacks
        return self.result.basic_salary


class SalaryResolver:
    def __init__(self, store=None):
        self.store = store

    # ---------- entry points ----------
    def resolve(self, employee, components: Sequence, wage_proportion) -> SalaryBreakdown:
        state = _State(
            wage=_dec(employee.wage or 0),
            wage_proportion=_dec(wage_proportion),
            components=[c for c in components if c.is_active],
        )
        for name in PASS_ORDER:
            getattr(self, f"_{name}_pass")(state)
        return state.result

    def resolve_for_employee(self, employee, wage_proportion) -> SalaryBreakdown:
        return self.resolve(employee, self.store.active_components(employee.id), wage_proportion)

    # ---------- helpers ----------
    @staticmethod
    def _rate(component) -> Optional[Decimal]:
        return _dec(component.value) if component.computation == "percentage" else None

    @staticmethod
    def _check_computation(component):
        if component.computation not in ("fixed", "percentage"):
            raise ComponentConfigError(
                f"component {component.name!r} has unsupported computation {component.computation!r}"
            )

    def _scaled_amount(self, component, state: _State) -> Decimal:
        self._check_computation(component)
        value = _dec(component.value)
        if component.computation == "percentage":
            base_kind = PercentageBase.parse(component.percentage_of)
            amount = state.base_for(base_kind) * value / HUNDRED
            # basic and gross already carry the proportion
            if base_kind is PercentageBase.WAGE:
                amount *= state.wage_proportion
            return amount
        return value * state.wage_proportion

    # ---------- passes ----------
    def _basic_salary_pass(self, state: _State):
        res = state.result
        basics = state.with_role(ROLE_BASIC)
        if basics:
            comp = basics[0]
            self._check_computation(comp)
            value = _dec(comp.value)
            if comp.computation == "percentage":
                res.basic_salary = (state.wage * value / HUNDRED) * state.wage_proportion
            else:
                res.basic_salary = value * state.wage_proportion
            res.breakdown.append(ComponentLine(comp.name, "earning", self._rate(comp), res.basic_salary))
        else:
            # the whole wage is basic
            res.basic_salary = state.wage * state.wage_proportion
            res.breakdown.append(ComponentLine(DEFAULT_BASIC_NAME, "earning", None, res.basic_salary))
        res.gross_salary = res.basic_salary

    def _other_earnings_pass(self, state: _State):
        res = state.result
        for comp in state.with_role(ROLE_OTHER_EARNING):
            amount = self._scaled_amount(comp, state)
            res.gross_salary += amount
            res.total_allowances += amount
            res.breakdown.append(ComponentLine(comp.name, "earning", self._rate(comp), amount))

    def _provident_fund_pass(self, state: _State):
        res = state.result
        pfs = state.with_role(ROLE_PF)
        if pfs:
            comp = pfs[0]
            self._check_computation(comp)
            value = _dec(comp.value)
            if comp.computation == "percentage":
                res.provident_fund = res.basic_salary * value / HUNDRED
            else:
                res.provident_fund = value * state.wage_proportion
            line = ComponentLine(comp.name, "deduction", self._rate(comp), res.provident_fund)
        else:
            res.provident_fund = res.basic_salary * DEFAULT_PF_RATE / HUNDRED
            line = ComponentLine(DEFAULT_PF_NAME, "deduction", DEFAULT_PF_RATE, res.provident_fund)
        res.total_deductions += res.provident_fund
        res.breakdown.append(line)

    def _professional_tax_pass(self, state: _State):
        res = state.result
        res.professional_tax = professional_tax(res.gross_salary)
        res.total_deductions += res.professional_tax
        res.breakdown.append(ComponentLine(PROFESSIONAL_TAX_NAME, "deduction", None, res.professional_tax))

    def _other_deductions_pass(self, state: _State):
        res = state.result
        for comp in state.with_role(ROLE_OTHER_DEDUCTION):
            amount = self._scaled_amount(comp, state)
            res.total_deductions += amount
            res.breakdown.append(ComponentLine(comp.name, "deduction", self._rate(comp), amount))
