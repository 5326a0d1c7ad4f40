from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import month_range
from ..companies.repository import CompanyRepository
from ..core.constants import DEFAULT_PAYROLL_ROLE
from ..core.enums import CompanyType, SalaryModel, TeamType
from ..reports.model import ReportWorker
from ..reports.repository import DailyReportRepository
from ..teams.repository import TeamRepository
from ..workers.model import Worker
from ..workers.repository import WorkerRepository
from .advance_service import AdvancePaymentService
from .calculator.base import PayrollCalculator
from .calculator.team_labor_cost_calculator import CalculationOptions, TeamLaborCostCalculator, summarize
from .config_model import PayrollConfig
from .config_service import PayrollConfigService
from .deductions import DeductionResult, calculate_payroll_deductions, calculate_total_net_pay
from .model import MIXED_SALARY_MODEL, PayrollRow, PayrollTotals, PersonnelHistory, ProcessedPayrollRow

logger = logging.getLogger(__name__)

COMPANY_TYPE_FILTERS = {
    "construction": CompanyType.CONTRACTOR,
    "partner": CompanyType.PARTNER,
}


def resolve_salary_model(entry: ReportWorker, master: Optional[Worker]) -> str:
    """Snapshot on the report, then pay type, then the worker's team type."""
    if entry.salary_model.strip():
        return entry.salary_model
    if entry.pay_type.strip():
        return entry.pay_type
    team_type = master.team_type if master else ""
    if team_type == TeamType.SUPPORT.value:
        return SalaryModel.SUPPORT.value
    if team_type == TeamType.SERVICE.value:
        return SalaryModel.SERVICE.value
    return SalaryModel.DAILY.value


def merge_salary_model(current: Optional[str], incoming: str) -> str:
    if current is None:
        return incoming
    if current != incoming:
        return MIXED_SALARY_MODEL
    return current


@dataclass
class _Aggregate:
    worker_id: str
    name: str
    role: str
    unit_price: float
    salary_model: str
    total_man_day: float = 0.0
    total_gross: float = 0.0


@dataclass(frozen=True)
class TeamLaborCostInvoice:
    """노무비 청구서: processed rows, their totals and the config used."""

    year: int
    month: int
    team_id: Optional[str]
    options: CalculationOptions
    config: PayrollConfig
    rows: list[ProcessedPayrollRow]
    totals: PayrollTotals


@dataclass(frozen=True)
class PaymentDraftLine:
    row: PayrollRow
    deductions: DeductionResult
    net_pay: float


@dataclass(frozen=True)
class PaymentDraft:
    """지급 명세서 초안."""

    year: int
    month: int
    team_id: Optional[str]
    config: PayrollConfig
    lines: list[PaymentDraftLine]
    total_net_pay: float


class PayrollService:
    """Use case: monthly payroll data, labor cost invoice and personnel history."""

    def __init__(
        self,
        reports: DailyReportRepository,
        workers: WorkerRepository,
        teams: TeamRepository,
        companies: CompanyRepository,
        advances: AdvancePaymentService,
        config: PayrollConfigService,
    ):
        self._reports = reports
        self._workers = workers
        self._teams = teams
        self._companies = companies
        self._advances = advances
        self._config = config

    def get_payroll_data(
        self,
        year: int,
        month: int,
        *,
        team_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> list[PayrollRow]:
        start, end = month_range(year, month)
        reports = self._reports.list_by_range(start, end, team_id=team_id, site_id=site_id)
        masters = {w.id: w for w in self._workers.list_all()}

        aggregates: dict[str, _Aggregate] = {}
        for report in reports:
            for entry in report.workers:
                key = entry.worker_id or entry.name
                master = masters.get(key)
                unit_price = entry.unit_price if entry.unit_price is not None else (master.unit_price if master else 0)
                salary_model = resolve_salary_model(entry, master)

                agg = aggregates.get(key)
                if agg is None:
                    agg = _Aggregate(
                        worker_id=key,
                        name=entry.name,
                        role=entry.role or DEFAULT_PAYROLL_ROLE,
                        unit_price=unit_price,
                        salary_model=salary_model,
                    )
                    aggregates[key] = agg

                agg.total_man_day += entry.man_day or 0
                agg.total_gross += (entry.man_day or 0) * unit_price
                # latest snapshot wins
                agg.unit_price = unit_price
                agg.salary_model = merge_salary_model(agg.salary_model, salary_model)

        return [
            PayrollRow(
                worker_id=a.worker_id,
                name=a.name,
                role=a.role,
                total_man_day=a.total_man_day,
                unit_price=a.unit_price,
                gross_pay=a.total_gross,
                salary_model=a.salary_model or SalaryModel.DAILY.value,
            )
            for a in aggregates.values()
        ]

    def build_team_invoice(
        self,
        year: int,
        month: int,
        *,
        team_id: Optional[str] = None,
        site_id: Optional[str] = None,
        options: Optional[CalculationOptions] = None,
        apply_advances: bool = True,
        calculator: Optional[PayrollCalculator] = None,
    ) -> TeamLaborCostInvoice:
        options = options or CalculationOptions()
        config = self._config.get_config()
        calculator = calculator or TeamLaborCostCalculator(config, options)

        rows = self.get_payroll_data(year, month, team_id=team_id, site_id=site_id)
        advances = self._advances.advances_by_worker(year, month, team_id) if apply_advances and team_id else {}
        processed = calculator.process(rows, advances)

        logger.info(
            "Built labor cost invoice %04d-%02d team=%s rows=%d advances=%d",
            year,
            month,
            team_id,
            len(processed),
            len(advances),
        )
        return TeamLaborCostInvoice(
            year=year,
            month=month,
            team_id=team_id,
            options=options,
            config=config,
            rows=processed,
            totals=summarize(processed),
        )

    def payment_draft(self, year: int, month: int, *, team_id: Optional[str] = None) -> PaymentDraft:
        """Flat deductions on each worker's whole gross pay, advances included when a team is given."""
        config = self._config.get_config()
        rows = sorted(self.get_payroll_data(year, month, team_id=team_id), key=lambda r: r.name)
        advances = self._advances.advances_by_worker(year, month, team_id) if team_id else {}

        calculator = TeamLaborCostCalculator(config)
        advance_totals = {r.worker_id: calculator.advance_deduction(advances.get(r.worker_id))[0] for r in rows}

        lines = []
        for row in rows:
            deductions, net = calculate_payroll_deductions(
                row.gross_pay,
                insurance=config.insurance,
                tax_rate=config.tax_rate,
                advance_deduction=advance_totals[row.worker_id],
            )
            lines.append(PaymentDraftLine(row=row, deductions=deductions, net_pay=net))

        total = calculate_total_net_pay(
            rows,
            lambda r: r.gross_pay,
            lambda r: advance_totals[r.worker_id],
            insurance=config.insurance,
            tax_rate=config.tax_rate,
        )
        return PaymentDraft(
            year=year,
            month=month,
            team_id=team_id,
            config=config,
            lines=lines,
            total_net_pay=total,
        )

    def personnel_history(
        self,
        start: date,
        end: date,
        *,
        team_id: Optional[str] = None,
        worker_id: Optional[str] = None,
        salary_model: Optional[str] = None,
        company_type: Optional[str] = None,
        descending: bool = False,
    ) -> list[PersonnelHistory]:
        """Per-worker man-days and amount; report workers missing from the master list are skipped."""
        masters = {w.id: w for w in self._workers.list_all()}
        teams = {t.id: t for t in self._teams.list_all()}
        companies = {c.id: c for c in self._companies.list_all()}
        wanted_type = COMPANY_TYPE_FILTERS.get(company_type or "")

        stats: dict[str, list[float]] = {}
        models: dict[str, str] = {}
        for report in self._reports.list_by_range(start, end):
            if wanted_type is not None:
                team = teams.get(report.team_id)
                company = companies.get(team.company_id) if team and team.company_id else None
                if company is None or company.type != wanted_type:
                    continue
            if team_id and report.team_id != team_id:
                continue

            for entry in report.workers:
                if worker_id and entry.worker_id != worker_id:
                    continue
                master = masters.get(entry.worker_id)
                if master is None:
                    continue

                model = resolve_salary_model(entry, master)
                if salary_model and model != salary_model:
                    continue
                models[entry.worker_id] = merge_salary_model(models.get(entry.worker_id), model)

                unit_price = entry.unit_price or master.unit_price or 0
                current = stats.setdefault(entry.worker_id, [0.0, 0.0])
                current[0] += entry.man_day
                current[1] += entry.man_day * unit_price

        result = [
            PersonnelHistory(
                worker_id=wid,
                name=masters[wid].name,
                id_number=masters[wid].id_number,
                salary_model=models[wid],
                team_name=masters[wid].team_name,
                total_man_day=man_day,
                unit_price=masters[wid].unit_price,
                total_amount=amount,
            )
            for wid, (man_day, amount) in stats.items()
        ]
        result.sort(key=lambda h: h.name, reverse=descending)
        return result

