from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, dumps_json, fetchall, fetchone, loads_json, new_id, placeholders
from .model import DailyReport, ReportWorker
from .repository import DailyReportRepository

_COLUMNS = (
    "report_date",
    "team_id",
    "team_name",
    "site_id",
    "site_name",
    "responsible_team_id",
    "responsible_team_name",
    "writer_id",
    "workers",
    "total_man_day",
    "total_amount",
    "work_content",
    "weather",
)
_SELECT = f"SELECT id, {', '.join(_COLUMNS)} FROM daily_reports"


def _worker_to_json(w: ReportWorker) -> dict:
    return {
        "worker_id": w.worker_id,
        "name": w.name,
        "role": w.role,
        "status": w.status.value,
        "man_day": w.man_day,
        "work_content": w.work_content,
        "team_id": w.team_id,
        "unit_price": w.unit_price,
        "salary_model": w.salary_model,
        "pay_type": w.pay_type,
    }


def _worker_from_json(data: dict) -> ReportWorker:
    unit_price = data.get("unit_price")
    return ReportWorker(
        worker_id=str(data.get("worker_id") or ""),
        name=data.get("name") or "",
        role=data.get("role") or "",
        status=AttendanceStatus(data.get("status") or AttendanceStatus.ATTENDANCE.value),
        man_day=float(data.get("man_day") or 0),
        work_content=data.get("work_content") or "",
        team_id=data.get("team_id"),
        unit_price=float(unit_price) if unit_price is not None else None,
        salary_model=data.get("salary_model") or "",
        pay_type=data.get("pay_type") or "",
    )


def _row_to_report(row: dict) -> DailyReport:
    return DailyReport(
        id=row["id"],
        date=as_date(row["report_date"]),
        team_id=row.get("team_id") or "",
        team_name=row.get("team_name") or "",
        site_id=row.get("site_id") or "",
        site_name=row.get("site_name") or "",
        responsible_team_id=row.get("responsible_team_id"),
        responsible_team_name=row.get("responsible_team_name") or "",
        writer_id=row.get("writer_id") or "",
        workers=tuple(_worker_from_json(w) for w in loads_json(row.get("workers"), [])),
        total_man_day=float(row.get("total_man_day") or 0),
        total_amount=float(row.get("total_amount") or 0),
        work_content=row.get("work_content") or "",
        weather=row.get("weather") or "",
    )


def _insert(cur, report: DailyReport) -> str:
    report_id = report.id or new_id()
    cur.execute(
        f"""
        INSERT INTO daily_reports(id, {', '.join(_COLUMNS)})
        VALUES(%s, {placeholders(_COLUMNS)})
        """,
        (
            report_id,
            report.date,
            report.team_id,
            report.team_name,
            report.site_id,
            report.site_name,
            report.responsible_team_id,
            report.responsible_team_name,
            report.writer_id,
            dumps_json([_worker_to_json(w) for w in report.workers]),
            report.total_man_day,
            report.total_amount,
            report.work_content,
            report.weather,
        ),
    )
    return report_id


class MySQLDailyReportRepository(DailyReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_date(self, day: date, *, team_id: Optional[str] = None) -> Sequence[DailyReport]:
        sql = f"{_SELECT} WHERE report_date=%s"
        params: list = [day]
        if team_id:
            sql += " AND team_id=%s"
            params.append(team_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_report(r) for r in fetchall(cur)]

    def list_by_range(
        self,
        start: date,
        end: date,
        *,
        team_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> Sequence[DailyReport]:
        sql = f"{_SELECT} WHERE report_date BETWEEN %s AND %s"
        params: list = [start, end]
        if team_id:
            sql += " AND team_id=%s"
            params.append(team_id)
        if site_id:
            sql += " AND site_id=%s"
            params.append(site_id)
        sql += " ORDER BY report_date DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_report(r) for r in fetchall(cur)]

    def last_report_date(self, team_id: Optional[str] = None) -> Optional[date]:
        sql = "SELECT MAX(report_date) AS last_date FROM daily_reports"
        params: tuple = ()
        if team_id:
            sql += " WHERE team_id=%s"
            params = (team_id,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            row = fetchone(cur)
            return as_date(row.get("last_date")) if row else None

    def exists(self, day: date, team_id: str, site_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM daily_reports WHERE report_date=%s AND team_id=%s AND site_id=%s LIMIT 1",
                (day, team_id, site_id),
            )
            return fetchone(cur) is not None

    def create(self, report: DailyReport) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert(cur, report)

    def replace_for_date(self, day: date, team_ids: Sequence[str], reports: Sequence[DailyReport]) -> list[DailyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            deleted: list[DailyReport] = []
            if team_ids:
                cur.execute(
                    f"{_SELECT} WHERE report_date=%s AND team_id IN ({placeholders(team_ids)}) FOR UPDATE",
                    (day, *team_ids),
                )
                deleted = [_row_to_report(r) for r in fetchall(cur)]
                cur.execute(
                    f"DELETE FROM daily_reports WHERE report_date=%s AND team_id IN ({placeholders(team_ids)})",
                    (day, *team_ids),
                )
            for report in reports:
                _insert(cur, report)
            return deleted
