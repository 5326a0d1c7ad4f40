from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

MIXED_SALARY_MODEL = "혼합"


@dataclass(frozen=True)
class PayrollRow:
    """월간 노무비 집계 한 줄 (per worker, before deductions)."""

    worker_id: str
    name: str
    role: str
    total_man_day: float
    unit_price: float
    gross_pay: float
    salary_model: str = ""


@dataclass(frozen=True)
class TaxBreakdown:
    income: int = 0
    resident: int = 0

    @property
    def total(self) -> int:
        return self.income + self.resident


@dataclass(frozen=True)
class InsuranceBreakdown:
    """4대보험 (국민연금/건강/장기요양/고용)."""

    pension: int = 0
    health: int = 0
    care: int = 0
    employment: int = 0

    @property
    def total(self) -> int:
        return self.pension + self.health + self.care + self.employment


@dataclass(frozen=True)
class ProcessedPayrollRow:
    row: PayrollRow
    reported_days: float
    remaining_days: float
    reported_gross: float
    remaining_gross: float
    tax: TaxBreakdown
    insurance: InsuranceBreakdown
    advance_deduction: float
    deduction_details: dict[str, float] = field(default_factory=dict)

    @property
    def total_deductions(self) -> float:
        return self.tax.total + self.insurance.total + self.advance_deduction

    @property
    def net_pay(self) -> float:
        return self.row.gross_pay - self.total_deductions


@dataclass(frozen=True)
class PayrollTotals:
    man_day: float = 0.0
    gross_pay: float = 0.0
    tax: int = 0
    insurance: int = 0
    advance: float = 0.0
    net_pay: float = 0.0


@dataclass(frozen=True)
class AdvancePayment:
    """가불/공제 내역 (worker, team, month).

    Ten fixed columns plus `items` for deduction items added by an admin.
    """

    worker_id: str
    worker_name: str
    team_id: str
    team_name: str
    year_month: str
    prev_month_carryover: float = 0
    accommodation: float = 0
    private_room: float = 0
    gloves: float = 0
    deposit: float = 0
    fines: float = 0
    electricity: float = 0
    gas: float = 0
    internet: float = 0
    water: float = 0
    items: dict[str, float] = field(default_factory=dict)
    id: Optional[str] = None

    @property
    def doc_id(self) -> str:
        return self.id or f"{self.team_id}_{self.worker_id}_{self.year_month}"


@dataclass(frozen=True)
class PersonnelHistory:
    """기간별 인원 내역 (one worker, summed over a date range)."""

    worker_id: str
    name: str
    id_number: str
    salary_model: str
    team_name: str
    total_man_day: float
    unit_price: float
    total_amount: float
