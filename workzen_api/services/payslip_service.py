from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import List, Dict, Any

from workzen_api.models.payroll.payroll import PayrollRecord


@dataclass
class PayslipComponent:
    name: str
    rate_percentage: float | None
    amount: float


@dataclass
class PayslipDTO:
    payroll: Dict[str, Any]
    employee: Dict[str, Any]
    attendance: Dict[str, Any]
    earnings: List[PayslipComponent]
    deductions: List[PayslipComponent]
    totals: Dict[str, Any]


class PayslipService:
    def build_payslip_dto(self, record: PayrollRecord) -> dict:
        """
        Payroll record plus its breakdown split into earnings and deductions,
        each list kept in the order the lines were generated.
        """
        emp = record.employee

        earnings = []
        deductions = []
        gross_earnings = Decimal("0.00")
        total_deductions = Decimal("0.00")

        for line in record.lines:
            amt = Decimal(str(line.amount or 0))
            entry = PayslipComponent(
                name=line.component_name,
                rate_percentage=float(line.rate_percentage) if line.rate_percentage is not None else None,
                amount=float(amt),
            )
            if line.component_type == "earning":
                earnings.append(entry)
                gross_earnings += amt
            else:
                deductions.append(entry)
                total_deductions += amt

        dto = PayslipDTO(
            payroll=record.to_dict(),
            employee={
                "id": emp.id,
                "code": emp.code,
                "name": emp.full_name,
                "email": emp.email,
                "position": emp.position,
                "doj": str(emp.doj) if emp.doj else None,
            },
            attendance={
                "worked_days": float(record.worked_days or 0),
                "total_days": float(record.total_days or 0),
            },
            earnings=earnings,
            deductions=deductions,
            totals={
                "gross_earnings": float(gross_earnings),
                "total_deductions": float(total_deductions),
                "gross_salary": float(record.gross_salary or 0),
                "net_salary": float(record.net_salary or 0),
            },
        )
        return asdict(dto)
