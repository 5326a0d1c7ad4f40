from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SalaryModel, TeamStatus, TeamType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, dumps_json, fetchall, fetchone, loads_json, new_id
from .model import Team
from .repository import TeamRepository

_COLUMNS = (
    "name",
    "type",
    "company_id",
    "company_name",
    "leader_id",
    "leader_name",
    "member_ids",
    "member_names",
    "status",
    "default_salary_model",
    "total_man_day",
)
_JSON_COLUMNS = ("member_ids", "member_names")


def _row_to_team(row: dict) -> Team:
    return Team(
        id=row["id"],
        name=row["name"],
        type=TeamType(row.get("type") or TeamType.CONSTRUCTION.value),
        company_id=row.get("company_id"),
        company_name=row.get("company_name") or "",
        leader_id=row.get("leader_id"),
        leader_name=row.get("leader_name") or "",
        member_ids=tuple(loads_json(row.get("member_ids"), [])),
        member_names=tuple(loads_json(row.get("member_names"), [])),
        status=TeamStatus(row.get("status") or TeamStatus.ACTIVE.value),
        default_salary_model=SalaryModel(row.get("default_salary_model") or SalaryModel.DAILY.value),
        total_man_day=float(row.get("total_man_day") or 0),
    )


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM teams ORDER BY name")
            return [_row_to_team(r) for r in fetchall(cur)]

    def get_by_id(self, team_id: str) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM teams WHERE id=%s", (team_id,))
            row = fetchone(cur)
            return _row_to_team(row) if row else None

    def create(self, team: Team) -> str:
        team_id = team.id or new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO teams(id, {', '.join(_COLUMNS)})
                VALUES(%s, {', '.join(['%s'] * len(_COLUMNS))})
                """,
                (
                    team_id,
                    team.name,
                    team.type.value,
                    team.company_id,
                    team.company_name,
                    team.leader_id,
                    team.leader_name,
                    dumps_json(list(team.member_ids)),
                    dumps_json(list(team.member_names)),
                    team.status.value,
                    team.default_salary_model.value,
                    team.total_man_day,
                ),
            )
        return team_id

    def update(self, team_id: str, patch: dict) -> bool:
        if not patch:
            return False
        sql, params = build_update("teams", patch, allowed=_COLUMNS, json_fields=_JSON_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE id=%s", (*params, team_id))
            return cur.rowcount > 0

    def update_by_company(self, company_id: str, patch: dict) -> int:
        if not patch:
            return 0
        sql, params = build_update("teams", patch, allowed=_COLUMNS, json_fields=_JSON_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE company_id=%s", (*params, company_id))
            return int(cur.rowcount)

    def increment_man_day(self, team_id: str, amount: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE teams SET total_man_day = COALESCE(total_man_day, 0) + %s WHERE id=%s",
                (amount, team_id),
            )
