from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Team


class TeamRepository(Protocol):
    def list_all(self) -> Sequence[Team]:
        raise NotImplementedError

    def get_by_id(self, team_id: str) -> Optional[Team]:
        raise NotImplementedError

    def create(self, team: Team) -> str:
        raise NotImplementedError

    def update(self, team_id: str, patch: dict) -> bool:
        raise NotImplementedError

    def update_by_company(self, company_id: str, patch: dict) -> int:
        raise NotImplementedError

    def increment_man_day(self, team_id: str, amount: float) -> None:
        raise NotImplementedError
