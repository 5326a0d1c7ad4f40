from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.smart_construction.smart_construction.common.events import EventBus
from src.smart_construction.smart_construction.companies.model import Company
from src.smart_construction.smart_construction.core.enums import CompanyType, TeamType
from src.smart_construction.smart_construction.database.mysql_base import new_id
from src.smart_construction.smart_construction.payroll.model import AdvancePayment
from src.smart_construction.smart_construction.reports.model import DailyReport
from src.smart_construction.smart_construction.sites.model import Site
from src.smart_construction.smart_construction.teams.model import Team
from src.smart_construction.smart_construction.workers.model import Worker


def _patched(item, patch: dict):
    values = {k: tuple(v) if isinstance(v, list) else v for k, v in patch.items()}
    return replace(item, **values)


class InMemoryMaster:
    """Shared behaviour of the company/team/site/worker fakes."""

    def __init__(self, items=()):
        self.items: dict[str, object] = {i.id: i for i in items}
        self.man_day: dict[str, float] = {}
        self.fail_create = False
        self.fail_update = False

    def list_all(self):
        return sorted(self.items.values(), key=lambda i: i.name)

    def get_by_id(self, item_id: str):
        return self.items.get(item_id)

    def create(self, item) -> str:
        if self.fail_create:
            raise RuntimeError("write failed")
        item_id = item.id or new_id()
        self.items[item_id] = replace(item, id=item_id)
        return item_id

    def update(self, item_id: str, patch: dict) -> bool:
        if self.fail_update:
            raise RuntimeError("write failed")
        if item_id not in self.items:
            return False
        self.items[item_id] = _patched(self.items[item_id], patch)
        return True

    def increment_man_day(self, item_id: str, amount: float) -> None:
        self.man_day[item_id] = self.man_day.get(item_id, 0) + amount


class InMemoryCompanies(InMemoryMaster):
    def delete(self, company_id: str) -> bool:
        return self.items.pop(company_id, None) is not None


class InMemoryTeams(InMemoryMaster):
    def update_by_company(self, company_id: str, patch: dict) -> int:
        ids = [t.id for t in self.items.values() if t.company_id == company_id]
        for team_id in ids:
            self.update(team_id, patch)
        return len(ids)


class InMemorySites(InMemoryMaster):
    def update_by_team(self, team_id: str, patch: dict) -> int:
        ids = [s.id for s in self.items.values() if s.responsible_team_id == team_id]
        for site_id in ids:
            self.update(site_id, patch)
        return len(ids)


class InMemoryWorkers(InMemoryMaster):
    def update_many(self, worker_ids, patch: dict) -> int:
        if self.fail_update:
            raise RuntimeError("write failed")
        return sum(1 for w in worker_ids if self.update(w, patch))

    def update_each(self, patches) -> int:
        if self.fail_update:
            raise RuntimeError("write failed")
        return sum(1 for worker_id, patch in patches if self.update(worker_id, patch))

    def update_by_reference(self, column: str, ref_id: str, patch: dict) -> int:
        ids = [w.id for w in self.items.values() if getattr(w, column) == ref_id]
        for worker_id in ids:
            self.update(worker_id, patch)
        return len(ids)


class InMemoryReports:
    def __init__(self, reports=()):
        self.reports: list[DailyReport] = list(reports)

    def list_by_date(self, day: date, *, team_id: Optional[str] = None):
        return [r for r in self.reports if r.date == day and (not team_id or r.team_id == team_id)]

    def list_by_range(self, start: date, end: date, *, team_id=None, site_id=None):
        found = [
            r
            for r in self.reports
            if start <= r.date <= end and (not team_id or r.team_id == team_id) and (not site_id or r.site_id == site_id)
        ]
        return sorted(found, key=lambda r: r.date, reverse=True)

    def last_report_date(self, team_id: Optional[str] = None):
        dates = [r.date for r in self.reports if not team_id or r.team_id == team_id]
        return max(dates) if dates else None

    def exists(self, day: date, team_id: str, site_id: str) -> bool:
        return any(r.date == day and r.team_id == team_id and r.site_id == site_id for r in self.reports)

    def create(self, report: DailyReport) -> str:
        report_id = report.id or new_id()
        self.reports.append(replace(report, id=report_id))
        return report_id

    def replace_for_date(self, day: date, team_ids, reports):
        deleted = [r for r in self.reports if r.date == day and r.team_id in team_ids]
        self.reports = [r for r in self.reports if r not in deleted]
        for report in reports:
            self.create(report)
        return deleted


class InMemoryAdvances:
    def __init__(self):
        self.payments: dict[str, AdvancePayment] = {}

    def list_by_month(self, year_month: str, *, team_id: Optional[str] = None):
        return [
            p
            for p in self.payments.values()
            if p.year_month == year_month and (not team_id or p.team_id == team_id)
        ]

    def upsert(self, payment: AdvancePayment) -> str:
        self.payments[payment.doc_id] = payment
        return payment.doc_id

    def delete(self, payment_id: str) -> bool:
        return self.payments.pop(payment_id, None) is not None


class InMemorySettings:
    def __init__(self, docs: Optional[dict] = None):
        self.docs: dict[str, dict] = docs or {}
        self.merges: list[dict] = []
        self.drop_writes = False

    def get(self, doc_id: str):
        data = self.docs.get(doc_id)
        return dict(data) if data is not None else None

    def merge(self, doc_id: str, patch: dict) -> None:
        self.merges.append(patch)
        if self.drop_writes:
            return
        self.docs.setdefault(doc_id, {}).update(patch)


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 15, 9, 30, 0)


@pytest.fixture
def primary_company():
    return Company(id="c-cy", name="청연건설", type=CompanyType.CONTRACTOR)


@pytest.fixture
def partner_company():
    return Company(id="c-pt", name="(HGD) 홍길동 건설", ceo_name="홍길동", type=CompanyType.PARTNER)


@pytest.fixture
def companies(primary_company, partner_company):
    return InMemoryCompanies([primary_company, partner_company])


@pytest.fixture
def teams():
    return InMemoryTeams(
        [
            Team(id="t-main", name="본팀", type=TeamType.CONSTRUCTION, company_id="c-cy", company_name="청연건설"),
            Team(id="t-sup", name="홍반장팀", type=TeamType.SUPPORT, company_id="c-pt", company_name="(HGD) 홍길동 건설"),
        ]
    )


@pytest.fixture
def sites():
    return InMemorySites(
        [
            Site(id="s-1", name="강남현장", company_id="c-cy", company_name="청연건설", responsible_team_id="t-main"),
            Site(id="s-2", name="판교현장", company_id="c-other", company_name="대우"),
        ]
    )


@pytest.fixture
def workers():
    return InMemoryWorkers(
        [
            Worker(
                id="w-a",
                name="김철수",
                id_number="800101",
                role="반장",
                team_type="시공팀",
                team_id="t-main",
                team_name="본팀",
                company_id="c-cy",
                company_name="청연건설",
                salary_model="일급제",
                unit_price=100000,
            ),
            Worker(
                id="w-b",
                name="이영희",
                id_number="850505",
                role="기능공",
                team_type="시공팀",
                team_id="t-main",
                team_name="본팀",
                company_id="c-cy",
                company_name="청연건설",
                salary_model="일급제",
                unit_price=100000,
            ),
            Worker(
                id="w-c",
                name="박민수",
                id_number="900909",
                role="일반",
                team_type="지원팀",
                team_id="t-sup",
                team_name="홍반장팀",
                company_id="c-pt",
                company_name="(HGD) 홍길동 건설",
                salary_model="지원팀",
                unit_price=150000,
            ),
        ]
    )


@pytest.fixture
def reports():
    return InMemoryReports()


@pytest.fixture
def events():
    return EventBus()
