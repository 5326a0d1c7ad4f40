from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.validators import require_non_empty, require_non_negative
from ..companies.repository import CompanyRepository
from ..core.enums import WorkerStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..sites.repository import SiteRepository
from ..teams.repository import TeamRepository
from .bulk_edit import BulkWorkerEdit
from .model import Worker
from .repository import WorkerRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "id_number",
    "contact",
    "role",
    "team_type",
    "team_id",
    "team_name",
    "company_id",
    "company_name",
    "site_id",
    "site_name",
    "leader_name",
    "salary_model",
    "pay_type",
    "unit_price",
    "status",
    "bank_name",
    "account_number",
    "account_holder",
)


class WorkerService:
    """Use case: manage workers (작업자 관리). Workers retire by status, not delete."""

    def __init__(
        self,
        workers: WorkerRepository,
        teams: TeamRepository,
        sites: SiteRepository,
        companies: CompanyRepository,
    ):
        self._workers = workers
        self._teams = teams
        self._sites = sites
        self._companies = companies

    def list_workers(
        self,
        *,
        team_id: Optional[str] = None,
        site_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Worker]:
        workers: Sequence[Worker] = self._workers.list_all()
        return [
            w
            for w in workers
            if (team_id is None or w.team_id == team_id)
            and (site_id is None or w.site_id == site_id)
            and (status is None or w.status == status)
        ]

    def get(self, worker_id: str) -> Worker:
        worker = self._workers.get_by_id(worker_id)
        if not worker:
            raise NotFoundError("작업자를 찾을 수 없습니다.")
        return worker

    def create(self, worker: Worker) -> str:
        name = require_non_empty(worker.name, "작업자 이름을 입력해주세요.")
        unit_price = require_non_negative(worker.unit_price, "단가는 0 이상이어야 합니다.")
        return self._workers.create(replace(worker, name=name, unit_price=unit_price, total_man_day=0.0))

    def update(self, worker_id: str, patch: dict) -> None:
        self.get(worker_id)
        patch = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
        if "name" in patch:
            patch["name"] = require_non_empty(patch["name"], "작업자 이름을 입력해주세요.")
        if "unit_price" in patch:
            patch["unit_price"] = require_non_negative(patch["unit_price"], "단가는 0 이상이어야 합니다.")
        self._workers.update(worker_id, patch)

    def retire(self, worker_id: str) -> None:
        self.get(worker_id)
        self._workers.update(worker_id, {"status": WorkerStatus.RETIRED.value})

    def bulk_update(self, worker_ids: Sequence[str], form: BulkWorkerEdit) -> int:
        """One combined patch for every selected worker, written as a single batch."""
        ids = [w for w in dict.fromkeys(worker_ids) if w]
        if not ids:
            raise ValidationError("수정할 작업자를 선택해주세요.")

        patch = form.build_patch(
            teams=self._teams.list_all(),
            sites=self._sites.list_all(),
            companies=self._companies.list_all(),
        )
        updated = self._workers.update_many(ids, patch)
        logger.info("Bulk updated %d/%d workers (fields=%s)", updated, len(ids), ",".join(sorted(patch)))
        return updated
