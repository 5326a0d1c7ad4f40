"""Flat payroll deductions used by the payment draft pages.

Unlike the team labor cost calculator, every insurance premium and the
withholding tax apply to the whole gross pay and round half up to the won.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Optional, TypeVar

from ..core.constants import DEFAULT_TAX_RATE
from .config_model import DEFAULT_INSURANCE_CONFIG, InsuranceConfig

T = TypeVar("T")


def round_won(amount: float) -> int:
    return math.floor(amount + 0.5)


@dataclass(frozen=True)
class DeductionResult:
    pension: int
    health: int
    care: int
    employment: int
    income_tax: int
    advance_deduction: float

    @property
    def total_insurance(self) -> int:
        return self.pension + self.health + self.care + self.employment

    @property
    def total_deduction(self) -> float:
        return self.total_insurance + self.income_tax + self.advance_deduction


def calculate_payroll_deductions(
    gross_pay: float,
    *,
    insurance: Optional[InsuranceConfig] = None,
    tax_rate: Optional[float] = None,
    advance_deduction: float = 0,
) -> tuple[DeductionResult, float]:
    """Returns (deductions, net pay). None settings fall back to the defaults."""
    insurance = insurance or DEFAULT_INSURANCE_CONFIG
    rate = DEFAULT_TAX_RATE if tax_rate is None else tax_rate

    health = round_won(gross_pay * insurance.health_rate)
    result = DeductionResult(
        pension=round_won(gross_pay * insurance.pension_rate),
        health=health,
        care=round_won(health * insurance.care_rate_of_health),
        employment=round_won(gross_pay * insurance.employment_rate),
        income_tax=round_won(gross_pay * rate),
        advance_deduction=advance_deduction,
    )
    return result, gross_pay - result.total_deduction


def calculate_total_net_pay(
    workers: Iterable[T],
    gross_pay: Callable[[T], float],
    advance_deduction: Callable[[T], float],
    *,
    insurance: Optional[InsuranceConfig] = None,
    tax_rate: Optional[float] = None,
) -> float:
    total = 0.0
    for worker in workers:
        _, net = calculate_payroll_deductions(
            gross_pay(worker),
            insurance=insurance,
            tax_rate=tax_rate,
            advance_deduction=advance_deduction(worker),
        )
        total += net
    return total


def format_rate_as_percent(rate: float, decimals: int = 1) -> str:
    """0.045 -> '4.5%'."""
    quantum = Decimal(1).scaleb(-decimals)
    percent = Decimal(repr(rate * 100)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{percent}%"


def format_currency(amount: float) -> str:
    """1000000 -> '1,000,000'. Fractions are kept up to three digits."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.3f}".rstrip("0").rstrip(".")
