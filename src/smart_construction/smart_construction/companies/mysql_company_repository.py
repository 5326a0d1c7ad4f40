from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import CompanyStatus, CompanyType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, fetchall, fetchone, new_id
from .model import Company
from .repository import CompanyRepository

_COLUMNS = (
    "name",
    "code",
    "business_number",
    "ceo_name",
    "address",
    "phone",
    "email",
    "type",
    "status",
    "bank_name",
    "account_number",
    "account_holder",
    "total_man_day",
)


def _row_to_company(row: dict) -> Company:
    return Company(
        id=row["id"],
        name=row["name"],
        code=row.get("code") or "",
        business_number=row.get("business_number") or "",
        ceo_name=row.get("ceo_name") or "",
        address=row.get("address") or "",
        phone=row.get("phone") or "",
        email=row.get("email") or "",
        type=CompanyType(row.get("type") or CompanyType.UNSPECIFIED.value),
        status=CompanyStatus(row.get("status") or CompanyStatus.ACTIVE.value),
        bank_name=row.get("bank_name") or "",
        account_number=row.get("account_number") or "",
        account_holder=row.get("account_holder") or "",
        total_man_day=float(row.get("total_man_day") or 0),
    )


class MySQLCompanyRepository(CompanyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Company]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM companies ORDER BY name")
            return [_row_to_company(r) for r in fetchall(cur)]

    def get_by_id(self, company_id: str) -> Optional[Company]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM companies WHERE id=%s", (company_id,))
            row = fetchone(cur)
            return _row_to_company(row) if row else None

    def create(self, company: Company) -> str:
        company_id = company.id or new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO companies(id, {', '.join(_COLUMNS)})
                VALUES(%s, {', '.join(['%s'] * len(_COLUMNS))})
                """,
                (
                    company_id,
                    company.name,
                    company.code,
                    company.business_number,
                    company.ceo_name,
                    company.address,
                    company.phone,
                    company.email,
                    company.type.value,
                    company.status.value,
                    company.bank_name,
                    company.account_number,
                    company.account_holder,
                    company.total_man_day,
                ),
            )
        return company_id

    def update(self, company_id: str, patch: dict) -> bool:
        if not patch:
            return False
        sql, params = build_update("companies", patch, allowed=_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE id=%s", (*params, company_id))
            return cur.rowcount > 0

    def delete(self, company_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM companies WHERE id=%s", (company_id,))
            return cur.rowcount > 0

    def increment_man_day(self, company_id: str, amount: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE companies SET total_man_day = COALESCE(total_man_day, 0) + %s WHERE id=%s",
                (amount, company_id),
            )
