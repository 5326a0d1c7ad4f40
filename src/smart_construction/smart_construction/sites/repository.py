from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Site


class SiteRepository(Protocol):
    def list_all(self) -> Sequence[Site]:
        raise NotImplementedError

    def get_by_id(self, site_id: str) -> Optional[Site]:
        raise NotImplementedError

    def create(self, site: Site) -> str:
        raise NotImplementedError

    def update(self, site_id: str, patch: dict) -> bool:
        raise NotImplementedError

    def update_by_team(self, team_id: str, patch: dict) -> int:
        raise NotImplementedError

    def increment_man_day(self, site_id: str, amount: float) -> None:
        raise NotImplementedError
