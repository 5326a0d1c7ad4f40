from datetime import date

import pytest
from openpyxl import load_workbook

from src.smart_construction.smart_construction.core.exceptions import ValidationError
from src.smart_construction.smart_construction.payroll.advance_service import AdvancePaymentService, advance_from_dict
from src.smart_construction.smart_construction.payroll.config_service import PayrollConfigService
from src.smart_construction.smart_construction.payroll.deductions import calculate_payroll_deductions
from src.smart_construction.smart_construction.payroll.model import MIXED_SALARY_MODEL
from src.smart_construction.smart_construction.payroll.service import PayrollService
from src.smart_construction.smart_construction.payroll.tax_office_export import (
    SHEET_NAME,
    build_tax_office_workbook,
    export_filename,
)
from src.smart_construction.smart_construction.reports.model import DailyReport, ReportWorker
from tests.conftest import InMemoryAdvances, InMemoryReports, InMemorySettings


def _report(day, team_id, site_id, *entries):
    return DailyReport(
        id=f"{day.isoformat()}-{team_id}-{site_id}",
        date=day,
        team_id=team_id,
        team_name=team_id,
        site_id=site_id,
        site_name=site_id,
        workers=tuple(entries),
    )


@pytest.fixture
def payroll_reports():
    return InMemoryReports(
        [
            _report(
                date(2025, 3, 3),
                "t-main",
                "s-1",
                ReportWorker("w-a", "김철수", man_day=1, unit_price=100000, salary_model="일급제"),
                ReportWorker("w-b", "이영희", man_day=0.5),
            ),
            _report(
                date(2025, 3, 4),
                "t-main",
                "s-1",
                ReportWorker("w-a", "김철수", man_day=1, unit_price=120000, salary_model="월급제"),
            ),
            _report(
                date(2025, 3, 4),
                "t-sup",
                "s-2",
                ReportWorker("w-c", "박민수", man_day=1),
                ReportWorker("w-x", "퇴사자", man_day=1, unit_price=90000),
            ),
            _report(date(2025, 4, 1), "t-main", "s-1", ReportWorker("w-a", "김철수", man_day=1, unit_price=100000)),
        ]
    )


@pytest.fixture
def advances():
    return AdvancePaymentService(InMemoryAdvances())


@pytest.fixture
def payroll(payroll_reports, workers, teams, companies, advances):
    return PayrollService(
        payroll_reports,
        workers,
        teams,
        companies,
        advances,
        PayrollConfigService(InMemorySettings()),
    )


def test_payroll_data_aggregates_month_per_worker(payroll):
    rows = {r.worker_id: r for r in payroll.get_payroll_data(2025, 3, team_id="t-main")}

    assert set(rows) == {"w-a", "w-b"}
    assert rows["w-a"].total_man_day == 2
    assert rows["w-a"].gross_pay == 220000
    assert rows["w-a"].salary_model == MIXED_SALARY_MODEL
    assert rows["w-b"].unit_price == 100000
    assert rows["w-b"].gross_pay == 50000


def test_payroll_data_resolves_support_salary_model_from_team_type(payroll):
    rows = {r.worker_id: r for r in payroll.get_payroll_data(2025, 3, team_id="t-sup")}
    assert rows["w-c"].salary_model == "지원팀"
    assert rows["w-x"].salary_model == "일급제"


def test_team_invoice_applies_advances_only_for_a_team(payroll, advances):
    advances.save(advance_from_dict({"worker_id": "w-a", "team_id": "t-main", "year_month": "2025-03", "gloves": 3000}))

    with_team = payroll.build_team_invoice(2025, 3, team_id="t-main")
    without_team = payroll.build_team_invoice(2025, 3)

    row_a = next(r for r in with_team.rows if r.row.worker_id == "w-a")
    assert row_a.advance_deduction == 3000
    assert with_team.totals.advance == 3000
    assert without_team.totals.advance == 0


def test_personnel_history_skips_unknown_workers(payroll):
    history = payroll.personnel_history(date(2025, 3, 1), date(2025, 3, 31))
    assert [h.worker_id for h in history] == ["w-a", "w-c", "w-b"]


def test_personnel_history_filters(payroll):
    partner = payroll.personnel_history(date(2025, 3, 1), date(2025, 3, 31), company_type="partner")
    assert [h.name for h in partner] == ["박민수"]
    assert partner[0].total_amount == 150000

    one = payroll.personnel_history(date(2025, 3, 1), date(2025, 3, 31), worker_id="w-a", descending=True)
    assert len(one) == 1 and one[0].total_man_day == 2

    daily = payroll.personnel_history(date(2025, 3, 1), date(2025, 3, 31), salary_model="월급제")
    assert [h.worker_id for h in daily] == ["w-a"]
    assert daily[0].total_amount == 120000


def test_tax_office_workbook_layout(payroll):
    start, end = date(2025, 3, 1), date(2025, 3, 31)
    history = payroll.personnel_history(start, end)

    ws = load_workbook(build_tax_office_workbook(history, start, end))[SHEET_NAME]

    assert ws.cell(row=1, column=1).value == "세무서 제출 자료"
    assert [ws.cell(row=3, column=c).value for c in range(1, 5)] == ["번호", "이름", "주민등록번호", "본봉"]
    assert ws.cell(row=4, column=2).value == "김철수"
    assert isinstance(ws.cell(row=4, column=4).value, (int, float))
    total_row = 4 + len(history)
    assert ws.cell(row=total_row, column=3).value == "합계"
    assert ws.cell(row=total_row, column=4).value == sum(h.total_amount for h in history)
    assert export_filename(start, end) == "세무서제출자료_2025-03-01_2025-03-31.xlsx"


def test_tax_office_workbook_requires_rows():
    with pytest.raises(ValidationError):
        build_tax_office_workbook([], date(2025, 3, 1), date(2025, 3, 31))


def test_payment_draft_applies_flat_deductions(payroll, advances):
    advances.save(advance_from_dict({"worker_id": "w-a", "team_id": "t-main", "year_month": "2025-03", "fines": 10000}))

    draft = payroll.payment_draft(2025, 3, team_id="t-main")

    assert [line.row.worker_id for line in draft.lines] == ["w-a", "w-b"]
    first, net = calculate_payroll_deductions(220000, advance_deduction=10000)
    assert draft.lines[0].deductions == first
    assert draft.lines[0].net_pay == net
    assert draft.total_net_pay == sum(line.net_pay for line in draft.lines)
