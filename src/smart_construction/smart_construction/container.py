from __future__ import annotations

import logging
from dataclasses import dataclass

from .common.events import EventBus, MasterDataChanged
from .companies.mysql_company_repository import MySQLCompanyRepository
from .companies.service import CompanyService
from .core.constants import DEFAULT_INVOICE_GATEWAY_URL, PRIMARY_COMPANY_KEYWORD
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .integrity.service import DataIntegrityService
from .invoicing.client import TaxInvoiceClient
from .invoicing.mysql_invoice_repository import MySQLInvoiceRepository
from .invoicing.service import InvoiceService
from .payroll.advance_service import AdvancePaymentService
from .payroll.config_service import PayrollConfigService
from .payroll.mysql_advance_repository import MySQLAdvancePaymentRepository
from .payroll.mysql_settings_repository import MySQLSettingsRepository
from .payroll.service import PayrollService
from .registration.service import QuickRegisterService
from .reports.allocation_service import AllocationService
from .reports.mysql_report_repository import MySQLDailyReportRepository
from .reports.service import DailyReportService
from .sites.mysql_site_repository import MySQLSiteRepository
from .sites.service import SiteService
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.service import TeamService
from .workers.mysql_worker_repository import MySQLWorkerRepository
from .workers.service import WorkerService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    events: EventBus

    companies_repo: MySQLCompanyRepository
    teams_repo: MySQLTeamRepository
    sites_repo: MySQLSiteRepository
    workers_repo: MySQLWorkerRepository
    reports_repo: MySQLDailyReportRepository
    advances_repo: MySQLAdvancePaymentRepository
    settings_repo: MySQLSettingsRepository
    invoices_repo: MySQLInvoiceRepository

    company_service: CompanyService
    team_service: TeamService
    site_service: SiteService
    worker_service: WorkerService
    daily_report_service: DailyReportService
    allocation_service: AllocationService
    payroll_config_service: PayrollConfigService
    advance_payment_service: AdvancePaymentService
    payroll_service: PayrollService
    quick_register_service: QuickRegisterService
    data_integrity_service: DataIntegrityService
    invoice_service: InvoiceService
    dashboard_service: DashboardService


def _log_master_data_change(event: MasterDataChanged) -> None:
    changed = [name for name, flag in event.as_dict().items() if flag]
    logger.info("Master data changed: %s", ", ".join(changed) or "-")


def build_container(
    *,
    db_config: dict,
    primary_keyword: str = PRIMARY_COMPANY_KEYWORD,
    invoice_gateway_url: str = DEFAULT_INVOICE_GATEWAY_URL,
    invoice_gateway_timeout: float = 30,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    events = EventBus()
    events.subscribe(MasterDataChanged, _log_master_data_change)

    companies_repo = MySQLCompanyRepository(conn)
    teams_repo = MySQLTeamRepository(conn)
    sites_repo = MySQLSiteRepository(conn)
    workers_repo = MySQLWorkerRepository(conn)
    reports_repo = MySQLDailyReportRepository(conn)
    advances_repo = MySQLAdvancePaymentRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)
    invoices_repo = MySQLInvoiceRepository(conn)

    company_service = CompanyService(companies_repo, teams_repo, workers_repo, primary_keyword=primary_keyword)
    team_service = TeamService(teams_repo, companies_repo, workers_repo, sites_repo)
    site_service = SiteService(sites_repo, workers_repo)
    worker_service = WorkerService(workers_repo, teams_repo, sites_repo, companies_repo)
    daily_report_service = DailyReportService(reports_repo, workers_repo, teams_repo, sites_repo, companies_repo)
    allocation_service = AllocationService(daily_report_service, workers_repo, teams_repo, sites_repo)
    payroll_config_service = PayrollConfigService(settings_repo)
    advance_payment_service = AdvancePaymentService(advances_repo)
    payroll_service = PayrollService(
        reports_repo,
        workers_repo,
        teams_repo,
        companies_repo,
        advance_payment_service,
        payroll_config_service,
    )
    quick_register_service = QuickRegisterService(
        companies_repo,
        teams_repo,
        sites_repo,
        workers_repo,
        events,
        primary_keyword=primary_keyword,
    )
    data_integrity_service = DataIntegrityService(workers_repo, teams_repo, sites_repo, companies_repo)
    invoice_service = InvoiceService(
        TaxInvoiceClient(invoice_gateway_url, timeout=invoice_gateway_timeout),
        invoices_repo,
    )
    dashboard_service = DashboardService(
        companies_repo,
        teams_repo,
        sites_repo,
        workers_repo,
        reports_repo,
        primary_keyword=primary_keyword,
    )

    return Container(
        conn=conn,
        events=events,
        companies_repo=companies_repo,
        teams_repo=teams_repo,
        sites_repo=sites_repo,
        workers_repo=workers_repo,
        reports_repo=reports_repo,
        advances_repo=advances_repo,
        settings_repo=settings_repo,
        invoices_repo=invoices_repo,
        company_service=company_service,
        team_service=team_service,
        site_service=site_service,
        worker_service=worker_service,
        daily_report_service=daily_report_service,
        allocation_service=allocation_service,
        payroll_config_service=payroll_config_service,
        advance_payment_service=advance_payment_service,
        payroll_service=payroll_service,
        quick_register_service=quick_register_service,
        data_integrity_service=data_integrity_service,
        invoice_service=invoice_service,
        dashboard_service=dashboard_service,
    )
