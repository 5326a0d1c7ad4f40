from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from ..common.commands import CallbackCommand, Command
from ..companies.model import Company
from ..core.enums import CompanyType
from ..sites.model import Site
from ..teams.model import Team
from ..workers.model import Worker


@dataclass
class MasterDataSnapshot:
    """Master lists the quick-register panel validates against.

    Newly registered records are prepended, matching what the lists show.
    """

    companies: list[Company] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    sites: list[Site] = field(default_factory=list)
    workers: list[Worker] = field(default_factory=list)
    primary_keyword: str = ""

    @property
    def primary_company(self) -> Optional[Company]:
        if not self.primary_keyword:
            return None
        return next((c for c in self.companies if self.primary_keyword in c.name), None)

    @property
    def partner_company_ids(self) -> set[str]:
        return {c.id for c in self.companies if c.type == CompanyType.PARTNER}

    def company(self, company_id: str) -> Optional[Company]:
        return next((c for c in self.companies if c.id == company_id), None)

    def team(self, team_id: str) -> Optional[Team]:
        return next((t for t in self.teams if t.id == team_id), None)

    def worker(self, worker_id: str) -> Optional[Worker]:
        return next((w for w in self.workers if w.id == worker_id), None)

    def prepend(self, collection: str, item) -> Command:
        items: list = getattr(self, collection)

        def apply():
            items.insert(0, item)

        def revert():
            if item in items:
                items.remove(item)

        return CallbackCommand(apply, revert)

    def patch_workers(self, worker_ids: Sequence[str], patch: dict) -> Command:
        wanted = set(worker_ids)
        previous: dict[int, Worker] = {}

        def apply():
            previous.clear()
            for index, worker in enumerate(self.workers):
                if worker.id in wanted:
                    previous[index] = worker
                    self.workers[index] = replace(worker, **patch)

        def revert():
            for index, worker in previous.items():
                self.workers[index] = worker

        return CallbackCommand(apply, revert)
