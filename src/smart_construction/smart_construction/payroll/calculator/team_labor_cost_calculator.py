from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from ...core.constants import INCOME_TAX_DIVISOR
from ...core.exceptions import ValidationError
from ..config_model import LEGACY_DEDUCTION_FIELDS, PayrollConfig
from ..model import (
    AdvancePayment,
    InsuranceBreakdown,
    PayrollRow,
    PayrollTotals,
    ProcessedPayrollRow,
    TaxBreakdown,
)
from .base import PayrollCalculator


@dataclass(frozen=True)
class CalculationOptions:
    """Toggles on the 노무비 청구서 screen.

    split_mode: 분리신고, man-days above `split_threshold` are reported separately.
    insurance_mode: 4대보험 on the reported portion, tax only on the remainder.
    """

    split_mode: bool = False
    split_threshold: int = 8
    insurance_mode: bool = False

    def __post_init__(self):
        if self.split_threshold < 0:
            raise ValidationError("분리 기준 공수는 0 이상이어야 합니다.")


def split_tax(taxable: float, tax_rate: float) -> TaxBreakdown:
    """3.3% withholding split into income tax and resident tax (1/11 of total)."""
    total = math.floor(taxable * tax_rate)
    income = math.floor(total / INCOME_TAX_DIVISOR)
    return TaxBreakdown(income=income, resident=max(0, total - income))


def deduction_value(advance: Optional[AdvancePayment], deduction_id: str) -> float:
    if advance is None:
        return 0
    attr = LEGACY_DEDUCTION_FIELDS.get(deduction_id)
    if attr:
        return getattr(advance, attr) or 0
    return advance.items.get(deduction_id, 0)


class TeamLaborCostCalculator(PayrollCalculator):
    """팀별 노무비: floor rounding at every tax/insurance step."""

    def __init__(self, config: PayrollConfig, options: Optional[CalculationOptions] = None):
        self._config = config
        self._options = options or CalculationOptions()

    @property
    def options(self) -> CalculationOptions:
        return self._options

    def advance_deduction(self, advance: Optional[AdvancePayment]) -> tuple[float, dict[str, float]]:
        details = {item.id: deduction_value(advance, item.id) for item in self._config.active_deduction_items}
        return sum(details.values()), details

    def _insurance(self, reported_gross: float) -> InsuranceBreakdown:
        ins = self._config.insurance
        health = math.floor(reported_gross * ins.health_rate)
        return InsuranceBreakdown(
            pension=math.floor(reported_gross * ins.pension_rate),
            health=health,
            care=math.floor(health * ins.care_rate_of_health),
            employment=math.floor(reported_gross * ins.employment_rate),
        )

    def is_insurance_eligible(self, reported_days: float) -> bool:
        return reported_days >= self._config.insurance.threshold_days

    def process_row(self, row: PayrollRow, advance: Optional[AdvancePayment] = None) -> ProcessedPayrollRow:
        opts = self._options
        reported_days = row.total_man_day
        remaining_days = 0.0
        reported_gross = row.gross_pay
        remaining_gross = 0.0

        if opts.split_mode:
            reported_days = min(row.total_man_day, opts.split_threshold)
            remaining_days = row.total_man_day - reported_days
            reported_gross = reported_days * row.unit_price
            remaining_gross = remaining_days * row.unit_price

        tax = TaxBreakdown()
        insurance = InsuranceBreakdown()
        if opts.insurance_mode:
            if self.is_insurance_eligible(reported_days):
                insurance = self._insurance(reported_gross)
            if opts.split_mode and remaining_gross > 0:
                tax = split_tax(remaining_gross, self._config.tax_rate)
        else:
            tax = split_tax(reported_gross, self._config.tax_rate)

        advance_total, details = self.advance_deduction(advance)
        return ProcessedPayrollRow(
            row=row,
            reported_days=reported_days,
            remaining_days=remaining_days,
            reported_gross=reported_gross,
            remaining_gross=remaining_gross,
            tax=tax,
            insurance=insurance,
            advance_deduction=advance_total,
            deduction_details=details,
        )

    def sort_key(self, processed: ProcessedPayrollRow):
        # False sorts first, so negate the "goes on top" flags.
        needs_split = self._options.split_mode and processed.remaining_days > 0
        eligible = self._options.insurance_mode and self.is_insurance_eligible(processed.reported_days)
        return (not needs_split, not eligible, processed.row.name)


def summarize(rows: Iterable[ProcessedPayrollRow]) -> PayrollTotals:
    man_day = gross = advance = net = 0.0
    tax = insurance = 0
    for r in rows:
        man_day += r.row.total_man_day
        gross += r.row.gross_pay
        tax += r.tax.total
        insurance += r.insurance.total
        advance += r.advance_deduction
        net += r.net_pay
    return PayrollTotals(
        man_day=man_day,
        gross_pay=gross,
        tax=tax,
        insurance=insurance,
        advance=advance,
        net_pay=net,
    )
