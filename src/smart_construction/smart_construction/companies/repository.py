from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Company


class CompanyRepository(Protocol):
    """Repository interface for Company.

    Services depend on this interface, not on a concrete database.
    """

    def list_all(self) -> Sequence[Company]:
        raise NotImplementedError

    def get_by_id(self, company_id: str) -> Optional[Company]:
        raise NotImplementedError

    def create(self, company: Company) -> str:
        raise NotImplementedError

    def update(self, company_id: str, patch: dict) -> bool:
        raise NotImplementedError

    def delete(self, company_id: str) -> bool:
        raise NotImplementedError

    def increment_man_day(self, company_id: str, amount: float) -> None:
        raise NotImplementedError
