from src.smart_construction.smart_construction.payroll.deductions import (
    calculate_payroll_deductions,
    calculate_total_net_pay,
    format_currency,
    format_rate_as_percent,
    round_won,
)


def test_round_won_rounds_half_up():
    assert round_won(4590.5) == 4591
    assert round_won(4590.49) == 4590


def test_deductions_apply_to_whole_gross():
    result, net = calculate_payroll_deductions(1000000)

    assert result.pension == 45000
    assert result.health == 35450
    assert result.care == 4591
    assert result.employment == 9000
    assert result.income_tax == 33000
    assert result.total_insurance == 45000 + 35450 + 4591 + 9000
    assert net == 1000000 - result.total_deduction


def test_advance_is_subtracted_from_net():
    _, without = calculate_payroll_deductions(1000000)
    _, with_advance = calculate_payroll_deductions(1000000, advance_deduction=50000)
    assert without - with_advance == 50000


def test_zero_tax_rate_is_respected():
    result, _ = calculate_payroll_deductions(1000000, tax_rate=0)
    assert result.income_tax == 0


def test_total_net_pay_sums_each_worker():
    workers = [{"gross": 1000000, "advance": 0}, {"gross": 1000000, "advance": 100000}]
    total = calculate_total_net_pay(workers, lambda w: w["gross"], lambda w: w["advance"])

    _, net = calculate_payroll_deductions(1000000)
    assert total == net * 2 - 100000


def test_formatting_helpers():
    assert format_rate_as_percent(0.045) == "4.5%"
    assert format_rate_as_percent(0.033) == "3.3%"
    assert format_currency(1000000) == "1,000,000"
    assert format_currency(1234.5) == "1,234.5"
