import math

import pytest

from src.smart_construction.smart_construction.core.exceptions import ValidationError
from src.smart_construction.smart_construction.payroll.calculator.team_labor_cost_calculator import (
    CalculationOptions,
    TeamLaborCostCalculator,
    split_tax,
    summarize,
)
from src.smart_construction.smart_construction.payroll.config_model import (
    DeductionItem,
    InsuranceConfig,
    PayrollConfig,
)
from src.smart_construction.smart_construction.payroll.model import AdvancePayment, PayrollRow


def _row(worker_id, name, days, price=100000):
    return PayrollRow(
        worker_id=worker_id,
        name=name,
        role="일반",
        total_man_day=days,
        unit_price=price,
        gross_pay=days * price,
    )


def test_split_tax_divides_total_into_income_and_resident():
    tax = split_tax(200000, 0.033)
    total = math.floor(200000 * 0.033)
    income = math.floor(total / 1.1)
    assert tax.income == income
    assert tax.resident == total - income
    assert tax.total == total


def test_split_tax_of_zero_is_zero():
    tax = split_tax(0, 0.033)
    assert (tax.income, tax.resident) == (0, 0)


def test_default_mode_taxes_full_gross():
    calc = TeamLaborCostCalculator(PayrollConfig())
    processed = calc.process_row(_row("w1", "가", 10))

    assert processed.reported_days == 10
    assert processed.remaining_days == 0
    assert processed.insurance.total == 0
    assert processed.tax.total == math.floor(1000000 * 0.033)


def test_split_and_insurance_end_to_end():
    config = PayrollConfig(insurance=InsuranceConfig(threshold_days=8, pension_rate=0.045))
    calc = TeamLaborCostCalculator(config, CalculationOptions(split_mode=True, split_threshold=8, insurance_mode=True))

    a, b = calc.process([_row("w-a", "가", 8), _row("w-b", "나", 10)])
    by_id = {a.row.worker_id: a, b.row.worker_id: b}
    worker_a, worker_b = by_id["w-a"], by_id["w-b"]

    ins = config.insurance
    health = math.floor(800000 * ins.health_rate)
    expected_insurance = (
        math.floor(800000 * ins.pension_rate)
        + health
        + math.floor(health * ins.care_rate_of_health)
        + math.floor(800000 * ins.employment_rate)
    )

    assert worker_a.reported_days == 8
    assert worker_a.remaining_days == 0
    assert worker_a.insurance.total == expected_insurance
    assert worker_a.tax.total == 0

    assert worker_b.reported_days == 8
    assert worker_b.remaining_days == 2
    assert worker_b.remaining_gross == 200000
    assert worker_b.insurance.total == expected_insurance
    assert worker_b.tax.total == 6600
    assert worker_b.tax.income + worker_b.tax.resident == 6600


def test_insurance_skipped_below_threshold_days():
    calc = TeamLaborCostCalculator(PayrollConfig(), CalculationOptions(insurance_mode=True))
    processed = calc.process_row(_row("w1", "가", 5))
    assert processed.insurance.total == 0
    assert processed.tax.total == 0


def test_sort_puts_split_rows_first_then_eligible_then_name():
    calc = TeamLaborCostCalculator(
        PayrollConfig(),
        CalculationOptions(split_mode=True, split_threshold=8, insurance_mode=True),
    )
    rows = [_row("w1", "다", 3), _row("w2", "나", 8), _row("w3", "가", 12), _row("w4", "라", 2)]

    names = [p.row.name for p in calc.process(rows)]
    assert names == ["가", "나", "다", "라"]


def test_advance_deduction_uses_active_items_only():
    config = PayrollConfig(
        deduction_items=(
            DeductionItem("accommodation", "숙소비", 1),
            DeductionItem("gloves", "장갑", 2, is_active=False),
            DeductionItem("custom_1", "식대", 3),
        )
    )
    advance = AdvancePayment(
        worker_id="w1",
        worker_name="가",
        team_id="t1",
        team_name="팀",
        year_month="2025-03",
        accommodation=50000,
        gloves=3000,
        items={"custom_1": 20000},
    )
    calc = TeamLaborCostCalculator(config)
    processed = calc.process_row(_row("w1", "가", 10), advance)

    assert processed.advance_deduction == 70000
    assert processed.deduction_details == {"accommodation": 50000, "custom_1": 20000}
    assert processed.net_pay == 1000000 - processed.tax.total - 70000


def test_summarize_adds_up_rows():
    calc = TeamLaborCostCalculator(PayrollConfig())
    processed = calc.process([_row("w1", "가", 10), _row("w2", "나", 5)])
    totals = summarize(processed)

    assert totals.man_day == 15
    assert totals.gross_pay == 1500000
    assert totals.tax == sum(p.tax.total for p in processed)
    assert totals.net_pay == sum(p.net_pay for p in processed)


def test_negative_split_threshold_rejected():
    with pytest.raises(ValidationError):
        CalculationOptions(split_threshold=-1)


@pytest.mark.parametrize("threshold", [0, 1, 8])
@pytest.mark.parametrize("days", [0, 1, 7.5, 8, 8.5, 12])
def test_split_keeps_total_man_days(threshold, days):
    calc = TeamLaborCostCalculator(PayrollConfig(), CalculationOptions(split_mode=True, split_threshold=threshold))
    processed = calc.process_row(_row("w1", "가", days))

    assert processed.reported_days == min(days, threshold)
    assert processed.reported_days + processed.remaining_days == days
    assert processed.reported_gross + processed.remaining_gross == processed.row.gross_pay


def test_zero_threshold_reports_nothing():
    calc = TeamLaborCostCalculator(PayrollConfig(), CalculationOptions(split_mode=True, split_threshold=0))
    processed = calc.process_row(_row("w1", "가", 7.5))

    assert processed.reported_days == 0
    assert processed.remaining_days == 7.5
    assert processed.reported_gross == 0
    assert processed.remaining_gross == 750000


@pytest.mark.parametrize(
    "options",
    [
        CalculationOptions(),
        CalculationOptions(split_mode=True),
        CalculationOptions(insurance_mode=True),
        CalculationOptions(split_mode=True, insurance_mode=True),
    ],
)
def test_zero_rates_and_no_advance_pay_full_gross(options):
    config = PayrollConfig(
        tax_rate=0,
        insurance=InsuranceConfig(pension_rate=0, health_rate=0, care_rate_of_health=0, employment_rate=0),
    )
    calc = TeamLaborCostCalculator(config, options)

    for processed in calc.process([_row("w1", "가", 10), _row("w2", "나", 8.5), _row("w3", "다", 3)]):
        assert processed.total_deductions == 0
        assert processed.net_pay == processed.row.gross_pay


@pytest.mark.parametrize("days", [8, 8.5, 10, 20])
def test_split_without_insurance_mode_never_deducts_insurance(days):
    calc = TeamLaborCostCalculator(PayrollConfig(), CalculationOptions(split_mode=True, split_threshold=8))
    processed = calc.process_row(_row("w1", "가", days))

    assert processed.insurance.total == 0
    assert processed.tax.total == math.floor(processed.reported_gross * 0.033)


@pytest.mark.parametrize("days", [8, 8.5, 10, 20])
def test_insurance_mode_without_split_has_no_tax_for_eligible_rows(days):
    calc = TeamLaborCostCalculator(PayrollConfig(), CalculationOptions(insurance_mode=True))
    processed = calc.process_row(_row("w1", "가", days))

    assert calc.is_insurance_eligible(processed.reported_days)
    assert processed.remaining_days == 0
    assert processed.insurance.total > 0
    assert processed.tax.total == 0
