from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from ..common.commands import run_optimistic
from ..common.datetime_utils import generate_code, now_local, parse_iso_date
from ..common.events import EventBus, MasterDataChanged
from ..common.romanization import build_partner_display_name
from ..common.validators import collect_issues, is_blank, raise_first
from ..companies.model import Company
from ..companies.repository import CompanyRepository
from ..core.constants import PRIMARY_COMPANY_KEYWORD
from ..core.enums import CompanyStatus, CompanyType, SalaryModel, SiteStatus, TeamStatus, TeamType, WorkerStatus
from ..core.exceptions import PartialWriteError, ValidationError
from ..database.mysql_base import new_id
from ..sites.model import Site
from ..sites.repository import SiteRepository
from ..teams.model import Team
from ..teams.repository import TeamRepository
from ..workers.model import Worker
from ..workers.repository import WorkerRepository
from .forms import CompanyForm, PartnerCompanyForm, SiteForm, TeamForm, WorkerForm
from .snapshot import MasterDataSnapshot

logger = logging.getLogger(__name__)

QUICK_TEAM_TYPES = (TeamType.CONSTRUCTION.value, TeamType.SUPPORT.value)
WORKER_SALARY_MODELS = (SalaryModel.DAILY.value, SalaryModel.MONTHLY.value, SalaryModel.SUPPORT.value)
CONSTRUCTION_SALARY_MODELS = (SalaryModel.DAILY.value, SalaryModel.MONTHLY.value)

MISSING_PRIMARY = f"시공팀 등록은 {PRIMARY_COMPANY_KEYWORD} 회사가 필요합니다. 회사 데이터를 확인해주세요."
PRIMARY_PINNED = f"시공팀은 회사가 {PRIMARY_COMPANY_KEYWORD}으로 고정입니다."
PARTNER_COMPANY_REQUIRED = "지원팀은 협력사 회사를 선택해주세요."
PARTNER_TEAM_REQUIRED = "협력사 팀을 선택해주세요."


@dataclass(frozen=True)
class PartnerRegistration:
    company_id: str
    team_id: str


def _worker_rules(form: WorkerForm, unit_price: float, snapshot: MasterDataSnapshot) -> list:
    primary = snapshot.primary_company
    primary_id = primary.id if primary else ""
    construction = form.team_type == TeamType.CONSTRUCTION.value
    support = form.team_type == TeamType.SUPPORT.value
    return [
        lambda: "작업자 이름을 입력해주세요." if is_blank(form.name) else None,
        lambda: "작업자 식별번호(주민/생년)를 입력해주세요." if is_blank(form.id_number) else None,
        lambda: "팀구분을 선택해주세요." if form.team_type not in QUICK_TEAM_TYPES else None,
        lambda: "단가는 0 이상이어야 합니다." if unit_price < 0 else None,
        lambda: "급여방식을 선택해주세요." if form.salary_model not in WORKER_SALARY_MODELS else None,
        lambda: "직책을 입력해주세요." if is_blank(form.role) else None,
        lambda: "시공팀은 회사를 선택해주세요." if construction and is_blank(form.company_id) else None,
        lambda: MISSING_PRIMARY if construction and not primary_id else None,
        lambda: PRIMARY_PINNED if construction and primary_id and form.company_id != primary_id else None,
        lambda: PARTNER_COMPANY_REQUIRED if support and is_blank(form.company_id) else None,
        lambda: "지원팀은 협력사 팀을 선택해주세요." if support and is_blank(form.support_team_id) else None,
        lambda: "지원팀은 급여방식이 지원팀으로 고정입니다."
        if support and form.salary_model != SalaryModel.SUPPORT.value
        else None,
        lambda: "시공팀은 급여방식이 일급제/월급제만 가능합니다."
        if construction and form.salary_model not in CONSTRUCTION_SALARY_MODELS
        else None,
    ]


def _team_rules(form: TeamForm, snapshot: MasterDataSnapshot) -> list:
    primary = snapshot.primary_company
    primary_id = primary.id if primary else ""
    construction = form.type == TeamType.CONSTRUCTION.value
    support = form.type == TeamType.SUPPORT.value
    partners = snapshot.partner_company_ids
    return [
        lambda: "팀명을 입력해주세요." if is_blank(form.name) else None,
        lambda: "팀구분은 시공팀/지원팀만 가능합니다." if form.type not in QUICK_TEAM_TYPES else None,
        lambda: MISSING_PRIMARY if construction and not primary_id else None,
        lambda: PRIMARY_PINNED if construction and primary_id and form.company_id != primary_id else None,
        lambda: PARTNER_COMPANY_REQUIRED if support and is_blank(form.company_id) else None,
        lambda: PARTNER_COMPANY_REQUIRED
        if support and not is_blank(form.company_id) and form.company_id not in partners
        else None,
        lambda: "팀장은 선택한 작업자에 포함되어야 합니다."
        if form.leader_worker_id and form.leader_worker_id not in form.selected_worker_ids
        else None,
    ]


def _site_rules(form: SiteForm, snapshot: MasterDataSnapshot) -> list:
    def team_company_mismatch() -> Optional[str]:
        if is_blank(form.company_id) or is_blank(form.responsible_team_id):
            return None
        team = snapshot.team(form.responsible_team_id)
        if team and team.company_id and team.company_id != form.company_id:
            return "선택한 회사에 속한 담당팀을 선택해주세요."
        return None

    return [
        lambda: "현장명을 입력해주세요." if is_blank(form.name) else None,
        lambda: "시작일을 입력해주세요." if is_blank(form.start_date) else None,
        lambda: "종료일을 입력해주세요." if is_blank(form.end_date) else None,
        lambda: "선택한 회사가 유효하지 않습니다."
        if not is_blank(form.company_id) and snapshot.company(form.company_id) is None
        else None,
        lambda: "선택한 담당팀이 유효하지 않습니다."
        if not is_blank(form.responsible_team_id) and snapshot.team(form.responsible_team_id) is None
        else None,
        team_company_mismatch,
    ]


def _company_rules(form: CompanyForm) -> list:
    return [
        lambda: "회사명을 입력해주세요." if is_blank(form.name) else None,
        lambda: "사업자번호를 입력해주세요." if is_blank(form.business_number) else None,
        lambda: "대표자명을 입력해주세요." if is_blank(form.ceo_name) else None,
        lambda: "전화번호를 입력해주세요." if is_blank(form.phone) else None,
    ]


def _parse_unit_price(value) -> float:
    try:
        number = float(value if value not in (None, "") else 0)
    except (TypeError, ValueError):
        raise ValidationError("단가가 올바르지 않습니다.")
    if not math.isfinite(number):
        raise ValidationError("단가가 올바르지 않습니다.")
    return number


def _parse_form_date(value: str):
    try:
        return parse_iso_date(value.strip())
    except ValueError:
        raise ValidationError("날짜 형식이 올바르지 않습니다 (YYYY-MM-DD).")


class QuickRegisterService:
    """빠른 등록: worker, team, site and company forms.

    Each write patches the snapshot optimistically (reverted if the write
    fails) and then publishes MasterDataChanged.
    """

    def __init__(
        self,
        companies: CompanyRepository,
        teams: TeamRepository,
        sites: SiteRepository,
        workers: WorkerRepository,
        events: EventBus,
        *,
        primary_keyword: str = PRIMARY_COMPANY_KEYWORD,
        clock: Callable[[], datetime] = now_local,
    ):
        self._companies = companies
        self._teams = teams
        self._sites = sites
        self._workers = workers
        self._events = events
        self._primary_keyword = primary_keyword
        self._clock = clock

    def load_snapshot(self) -> MasterDataSnapshot:
        return MasterDataSnapshot(
            companies=list(self._companies.list_all()),
            teams=list(self._teams.list_all()),
            sites=list(self._sites.list_all()),
            workers=list(self._workers.list_all()),
            primary_keyword=self._primary_keyword,
        )

    def register_worker(self, form: WorkerForm, snapshot: Optional[MasterDataSnapshot] = None) -> str:
        snapshot = snapshot or self.load_snapshot()
        unit_price = _parse_unit_price(form.unit_price)
        if form.team_type == TeamType.SUPPORT.value:
            form = replace(form, salary_model=SalaryModel.SUPPORT.value)

        raise_first(collect_issues(_worker_rules(form, unit_price, snapshot)))

        support = form.team_type == TeamType.SUPPORT.value
        partners = snapshot.partner_company_ids
        if support and form.company_id not in partners:
            raise ValidationError(PARTNER_COMPANY_REQUIRED)

        company = snapshot.company(form.company_id)
        support_team = snapshot.team(form.support_team_id) if support else None
        if not support and company is None:
            raise ValidationError("회사를 선택해주세요.")
        if support:
            if support_team is None:
                raise ValidationError(PARTNER_TEAM_REQUIRED)
            if support_team.company_id and support_team.company_id != form.company_id:
                raise ValidationError("선택한 협력사 회사에 속한 팀을 선택해주세요.")
            if support_team.company_id and support_team.company_id not in partners:
                raise ValidationError(PARTNER_TEAM_REQUIRED)

        worker = Worker(
            id=new_id(),
            name=form.name.strip(),
            id_number=form.id_number.strip(),
            role=form.role.strip(),
            team_type=form.team_type,
            team_id=support_team.id if support_team else None,
            team_name=support_team.name if support_team else "",
            company_id=(support_team.company_id if support_team else None) or (company.id if company else None),
            company_name=(support_team.company_name if support_team else "") or (company.name if company else ""),
            salary_model=form.salary_model,
            pay_type=form.salary_model,
            unit_price=unit_price,
            status=WorkerStatus.EMPLOYED.value,
            bank_name=form.bank_name,
            account_number=form.account_number,
            account_holder=form.account_holder,
        )
        worker_id = run_optimistic(snapshot.prepend("workers", worker), lambda: self._workers.create(worker))
        logger.info("Quick-registered worker %s (%s)", worker.name, worker_id)
        self._events.publish(MasterDataChanged(workers=True))
        return worker_id

    def register_team(self, form: TeamForm, snapshot: Optional[MasterDataSnapshot] = None) -> str:
        snapshot = snapshot or self.load_snapshot()
        raise_first(collect_issues(_team_rules(form, snapshot)))

        construction = form.type == TeamType.CONSTRUCTION.value
        primary = snapshot.primary_company
        company_id = primary.id if construction and primary else form.company_id
        company = snapshot.company(company_id)
        company_name = company.name if company else (primary.name if construction and primary else "")

        leader = snapshot.worker(form.leader_worker_id) if form.leader_worker_id else None
        selected = set(form.selected_worker_ids)
        members = [w for w in snapshot.workers if w.id in selected]
        member_ids = [w.id for w in members]

        team_type = TeamType(form.type)
        team = Team(
            id=new_id(),
            name=form.name.strip(),
            type=team_type,
            company_id=company_id or None,
            company_name=company_name,
            leader_id=leader.id if leader else None,
            leader_name=leader.name if leader else "",
            member_ids=tuple(member_ids),
            member_names=tuple(w.name for w in members),
            status=TeamStatus.ACTIVE,
            default_salary_model=SalaryModel.SUPPORT if team_type == TeamType.SUPPORT else SalaryModel.DAILY,
        )
        team_id = run_optimistic(snapshot.prepend("teams", team), lambda: self._teams.create(team))

        if member_ids:
            patch = {
                "team_id": team_id,
                "team_name": team.name,
                "team_type": team_type.value,
                "company_id": team.company_id,
                "company_name": company_name,
                "leader_name": team.leader_name,
            }
            try:
                run_optimistic(
                    snapshot.patch_workers(member_ids, patch),
                    lambda: self._workers.update_many(member_ids, patch),
                )
            except Exception as e:
                logger.warning("Team %s saved but member update failed: %s", team_id, e)
                raise PartialWriteError("팀은 등록되었지만 작업자 팀 정보 갱신에 실패했습니다.", written_id=team_id) from e

        logger.info("Quick-registered team %s with %d members", team.name, len(member_ids))
        self._events.publish(MasterDataChanged(teams=True, workers=True))
        return team_id

    def register_site(self, form: SiteForm, snapshot: Optional[MasterDataSnapshot] = None) -> str:
        snapshot = snapshot or self.load_snapshot()
        code = generate_code("SITE", self._clock())
        raise_first(collect_issues(_site_rules(form, snapshot)))

        company = snapshot.company(form.company_id) if not is_blank(form.company_id) else None
        team = snapshot.team(form.responsible_team_id) if not is_blank(form.responsible_team_id) else None
        site = Site(
            id=new_id(),
            name=form.name.strip(),
            code=code,
            company_id=company.id if company else None,
            company_name=company.name if company else "",
            responsible_team_id=team.id if team else None,
            responsible_team_name=team.name if team else "",
            status=SiteStatus.ACTIVE,
            start_date=_parse_form_date(form.start_date),
            end_date=_parse_form_date(form.end_date),
        )
        site_id = run_optimistic(snapshot.prepend("sites", site), lambda: self._sites.create(site))
        logger.info("Quick-registered site %s (%s)", site.name, code)
        self._events.publish(MasterDataChanged(sites=True))
        return site_id

    def _register_company(
        self,
        form: CompanyForm,
        company_type: CompanyType,
        snapshot: MasterDataSnapshot,
        *,
        name: Optional[str] = None,
    ) -> Company:
        raise_first(collect_issues(_company_rules(form)))
        prefix = "PTN" if company_type == CompanyType.PARTNER else "CST"
        company = Company(
            id=new_id(),
            name=name or form.name.strip(),
            code=generate_code(prefix, self._clock()),
            business_number=form.business_number.strip(),
            ceo_name=form.ceo_name.strip(),
            phone=form.phone.strip(),
            type=company_type,
            status=CompanyStatus.ACTIVE,
            bank_name=form.bank_name,
            account_number=form.account_number,
            account_holder=form.account_holder,
        )
        run_optimistic(snapshot.prepend("companies", company), lambda: self._companies.create(company))
        logger.info("Quick-registered %s %s (%s)", company_type.value, company.name, company.code)
        return company

    def register_construction_company(self, form: CompanyForm, snapshot: Optional[MasterDataSnapshot] = None) -> str:
        snapshot = snapshot or self.load_snapshot()
        company = self._register_company(form, CompanyType.CONSTRUCTION, snapshot)
        self._events.publish(MasterDataChanged(companies=True))
        return company.id

    def register_partner_company(
        self,
        form: PartnerCompanyForm,
        snapshot: Optional[MasterDataSnapshot] = None,
    ) -> PartnerRegistration:
        """Company and its 지원팀 are two writes; a failed team write leaves the company in place."""
        snapshot = snapshot or self.load_snapshot()
        team_name = form.team_name.strip()
        if not team_name:
            raise ValidationError("팀명을 입력해주세요.")

        display_name = build_partner_display_name(form.company.name.strip(), form.company.ceo_name.strip())
        company = self._register_company(form.company, CompanyType.PARTNER, snapshot, name=display_name)

        team = Team(
            id=new_id(),
            name=team_name,
            type=TeamType.SUPPORT,
            company_id=company.id,
            company_name=company.name,
            leader_name=company.ceo_name,
            status=TeamStatus.ACTIVE,
            default_salary_model=SalaryModel.SUPPORT,
        )
        try:
            team_id = run_optimistic(snapshot.prepend("teams", team), lambda: self._teams.create(team))
        except Exception as e:
            logger.warning("Partner company %s saved but team creation failed: %s", company.id, e)
            raise PartialWriteError(
                "협력사는 등록되었지만 팀 등록에 실패했습니다. 팀을 직접 등록해주세요.",
                written_id=company.id,
            ) from e

        self._events.publish(MasterDataChanged(companies=True, teams=True))
        return PartnerRegistration(company_id=company.id, team_id=team_id)
