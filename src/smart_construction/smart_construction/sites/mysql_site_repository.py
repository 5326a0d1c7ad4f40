from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SiteStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, build_update, db_cursor, fetchall, fetchone, new_id
from .model import Site
from .repository import SiteRepository

_COLUMNS = (
    "name",
    "code",
    "address",
    "company_id",
    "company_name",
    "responsible_team_id",
    "responsible_team_name",
    "status",
    "start_date",
    "end_date",
    "total_man_day",
)


def _row_to_site(row: dict) -> Site:
    return Site(
        id=row["id"],
        name=row["name"],
        code=row.get("code") or "",
        address=row.get("address") or "",
        company_id=row.get("company_id"),
        company_name=row.get("company_name") or "",
        responsible_team_id=row.get("responsible_team_id"),
        responsible_team_name=row.get("responsible_team_name") or "",
        status=SiteStatus(row.get("status") or SiteStatus.ACTIVE.value),
        start_date=as_date(row.get("start_date")),
        end_date=as_date(row.get("end_date")),
        total_man_day=float(row.get("total_man_day") or 0),
    )


class MySQLSiteRepository(SiteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM sites ORDER BY name")
            return [_row_to_site(r) for r in fetchall(cur)]

    def get_by_id(self, site_id: str) -> Optional[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM sites WHERE id=%s", (site_id,))
            row = fetchone(cur)
            return _row_to_site(row) if row else None

    def create(self, site: Site) -> str:
        site_id = site.id or new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO sites(id, {', '.join(_COLUMNS)})
                VALUES(%s, {', '.join(['%s'] * len(_COLUMNS))})
                """,
                (
                    site_id,
                    site.name,
                    site.code,
                    site.address,
                    site.company_id,
                    site.company_name,
                    site.responsible_team_id,
                    site.responsible_team_name,
                    site.status.value,
                    site.start_date,
                    site.end_date,
                    site.total_man_day,
                ),
            )
        return site_id

    def update(self, site_id: str, patch: dict) -> bool:
        if not patch:
            return False
        sql, params = build_update("sites", patch, allowed=_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE id=%s", (*params, site_id))
            return cur.rowcount > 0

    def update_by_team(self, team_id: str, patch: dict) -> int:
        if not patch:
            return 0
        sql, params = build_update("sites", patch, allowed=_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE responsible_team_id=%s", (*params, team_id))
            return int(cur.rowcount)

    def increment_man_day(self, site_id: str, amount: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sites SET total_man_day = COALESCE(total_man_day, 0) + %s WHERE id=%s",
                (amount, site_id),
            )
