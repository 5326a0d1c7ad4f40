from datetime import date

import pytest

from src.smart_construction.smart_construction.core.exceptions import ValidationError
from src.smart_construction.smart_construction.dashboard.service import DashboardService
from src.smart_construction.smart_construction.reports.model import DailyReport
from tests.conftest import InMemoryReports


def _report(day, team_id, site_id, man_day):
    return DailyReport(
        id=f"{day}-{team_id}-{site_id}",
        date=day,
        team_id=team_id,
        team_name={"t-main": "본팀", "t-sup": "홍반장팀"}[team_id],
        site_id=site_id,
        site_name={"s-1": "강남현장", "s-2": "판교현장"}[site_id],
        total_man_day=man_day,
        total_amount=man_day * 100000,
    )


@pytest.fixture
def service(companies, teams, sites, workers, fixed_now):
    reports = InMemoryReports(
        [
            _report(date(2025, 3, 15), "t-main", "s-1", 2),
            _report(date(2025, 3, 15), "t-sup", "s-1", 1),
            _report(date(2025, 3, 10), "t-main", "s-2", 3),
            _report(date(2025, 2, 28), "t-main", "s-1", 5),
        ]
    )
    return DashboardService(companies, teams, sites, workers, reports, primary_keyword="청연", clock=lambda: fixed_now)


def test_summary_counts_and_support(service):
    summary = service.summary()

    assert summary.workers.total == 3
    assert summary.workers.active == 3
    assert summary.companies.total == 2
    assert summary.reports.today == 2
    assert summary.reports.this_month == 3
    assert summary.reports.today_man_day == 3
    assert summary.reports.this_month_man_day == 6
    assert summary.support.inbound == 1
    assert summary.support.outbound == 3
    assert summary.support.total == 4
    assert summary.recent_reports[0].date == date(2025, 3, 15)


def test_man_days_grouped_and_sorted(service):
    by_team = service.man_days_by_team(date(2025, 3, 1), date(2025, 3, 15))
    assert [(b.key, b.man_day, b.report_count) for b in by_team] == [("t-main", 5, 2), ("t-sup", 1, 1)]

    by_site = service.man_days_by_site(date(2025, 2, 1), date(2025, 3, 31))
    assert [(b.name, b.man_day) for b in by_site] == [("강남현장", 8), ("판교현장", 3)]
    assert by_site[0].amount == 800000


def test_daily_trend_is_zero_filled(service):
    points = service.daily_trend(date(2025, 3, 14), date(2025, 3, 16))
    assert [(p.date.day, p.man_day, p.report_count) for p in points] == [(14, 0, 0), (15, 3, 2), (16, 0, 0)]


def test_reversed_range_rejected(service):
    with pytest.raises(ValidationError):
        service.daily_trend(date(2025, 3, 16), date(2025, 3, 14))
