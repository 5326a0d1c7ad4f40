from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Worker

REFERENCE_COLUMNS = ("team_id", "site_id", "company_id")


class WorkerRepository(Protocol):
    def list_all(self) -> Sequence[Worker]:
        raise NotImplementedError

    def get_by_id(self, worker_id: str) -> Optional[Worker]:
        raise NotImplementedError

    def create(self, worker: Worker) -> str:
        raise NotImplementedError

    def update(self, worker_id: str, patch: dict) -> bool:
        raise NotImplementedError

    def update_many(self, worker_ids: Sequence[str], patch: dict) -> int:
        """Apply the same patch to every id in one write."""
        raise NotImplementedError

    def update_each(self, patches: Sequence[tuple[str, dict]]) -> int:
        """Apply a different patch per worker in one write."""
        raise NotImplementedError

    def update_by_reference(self, column: str, ref_id: str, patch: dict) -> int:
        raise NotImplementedError

    def increment_man_day(self, worker_id: str, amount: float) -> None:
        raise NotImplementedError
