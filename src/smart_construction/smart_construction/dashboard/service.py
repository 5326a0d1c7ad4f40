from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..companies.repository import CompanyRepository
from ..core.enums import SiteStatus, TeamStatus
from ..core.exceptions import ValidationError
from ..reports.model import DailyReport
from ..reports.repository import DailyReportRepository
from ..sites.repository import SiteRepository
from ..teams.repository import TeamRepository
from ..workers.repository import WorkerRepository
from .model import CountPair, DailyTrendPoint, DashboardSummary, ManDayBucket, ReportStats, SupportStats

RECENT_REPORT_COUNT = 5
EMPLOYED_STATUS = "재직"


def _group(
    reports: Iterable[DailyReport],
    key_of: Callable[[DailyReport], str],
    name_of: Callable[[DailyReport], str],
) -> list[ManDayBucket]:
    buckets: dict[str, dict] = {}
    for report in reports:
        key = key_of(report) or ""
        bucket = buckets.setdefault(key, {"name": name_of(report), "man_day": 0.0, "amount": 0.0, "count": 0})
        bucket["man_day"] += report.total_man_day or 0
        bucket["amount"] += report.total_amount or 0
        bucket["count"] += 1
    result = [
        ManDayBucket(key=k, name=v["name"], man_day=v["man_day"], amount=v["amount"], report_count=v["count"])
        for k, v in buckets.items()
    ]
    result.sort(key=lambda b: (-b.man_day, b.name))
    return result


class DashboardService:
    """Read-only aggregates over master data and daily reports."""

    def __init__(
        self,
        companies: CompanyRepository,
        teams: TeamRepository,
        sites: SiteRepository,
        workers: WorkerRepository,
        reports: DailyReportRepository,
        *,
        primary_keyword: str,
        clock=now_local,
    ):
        self._companies = companies
        self._teams = teams
        self._sites = sites
        self._workers = workers
        self._reports = reports
        self._primary_keyword = primary_keyword
        self._clock = clock

    def summary(self, today: Optional[date] = None) -> DashboardSummary:
        today = today or self._clock().date()
        month_start = today.replace(day=1)

        companies = list(self._companies.list_all())
        teams = list(self._teams.list_all())
        sites = list(self._sites.list_all())
        workers = list(self._workers.list_all())
        month_reports = list(self._reports.list_by_range(month_start, today))
        today_reports = [r for r in month_reports if r.date == today]

        primary = next((c for c in companies if self._primary_keyword and self._primary_keyword in c.name), None)
        if primary is None and companies:
            primary = companies[0]

        return DashboardSummary(
            companies=CountPair(total=len(companies), active=sum(1 for c in companies if c.is_active)),
            teams=CountPair(total=len(teams), active=sum(1 for t in teams if t.status == TeamStatus.ACTIVE)),
            sites=CountPair(total=len(sites), active=sum(1 for s in sites if s.status == SiteStatus.ACTIVE)),
            workers=CountPair(total=len(workers), active=sum(1 for w in workers if w.status == EMPLOYED_STATUS)),
            reports=ReportStats(
                today=len(today_reports),
                this_month=len(month_reports),
                today_man_day=sum(r.total_man_day or 0 for r in today_reports),
                this_month_man_day=sum(r.total_man_day or 0 for r in month_reports),
            ),
            support=self._support(month_reports, sites, teams, primary.id if primary else None),
            recent_reports=tuple(sorted(month_reports, key=lambda r: r.date, reverse=True)[:RECENT_REPORT_COUNT]),
        )

    @staticmethod
    def _support(reports: Sequence[DailyReport], sites, teams, company_id: Optional[str]) -> SupportStats:
        if not company_id:
            return SupportStats()
        site_company = {s.id: s.company_id for s in sites}
        team_company = {t.id: t.company_id for t in teams}
        inbound = outbound = 0.0
        for report in reports:
            if report.site_id not in site_company or report.team_id not in team_company:
                continue
            ours_site = site_company[report.site_id] == company_id
            ours_team = team_company[report.team_id] == company_id
            if ours_site and not ours_team:
                inbound += report.total_man_day or 0
            elif ours_team and not ours_site:
                outbound += report.total_man_day or 0
        return SupportStats(inbound=inbound, outbound=outbound)

    def _range_reports(self, start: date, end: date) -> Sequence[DailyReport]:
        if start > end:
            raise ValidationError("조회 시작일이 종료일보다 늦습니다.")
        return self._reports.list_by_range(start, end)

    def man_days_by_site(self, start: date, end: date) -> list[ManDayBucket]:
        return _group(self._range_reports(start, end), lambda r: r.site_id, lambda r: r.site_name)

    def man_days_by_team(self, start: date, end: date) -> list[ManDayBucket]:
        return _group(self._range_reports(start, end), lambda r: r.team_id, lambda r: r.team_name)

    def daily_trend(self, start: date, end: date) -> list[DailyTrendPoint]:
        """One point per calendar day, zero-filled."""
        totals: dict[date, list] = {}
        for report in self._range_reports(start, end):
            entry = totals.setdefault(report.date, [0.0, 0])
            entry[0] += report.total_man_day or 0
            entry[1] += 1

        points = []
        day = start
        while day <= end:
            man_day, count = totals.get(day, (0.0, 0))
            points.append(DailyTrendPoint(date=day, man_day=man_day, report_count=count))
            day += timedelta(days=1)
        return points
