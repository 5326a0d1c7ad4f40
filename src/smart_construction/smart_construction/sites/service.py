from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty
from ..core.enums import SiteStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..workers.repository import WorkerRepository
from .model import Site
from .repository import SiteRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
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
)


class SiteService:
    """Use case: manage sites (현장 관리). Sites are closed by status, not deleted."""

    def __init__(self, sites: SiteRepository, workers: WorkerRepository):
        self._sites = sites
        self._workers = workers

    def list_sites(self, *, status: SiteStatus | None = None) -> list[Site]:
        sites: Sequence[Site] = self._sites.list_all()
        if status:
            return [s for s in sites if s.status == status]
        return list(sites)

    def get(self, site_id: str) -> Site:
        site = self._sites.get_by_id(site_id)
        if not site:
            raise NotFoundError("현장을 찾을 수 없습니다.")
        return site

    def create(self, site: Site) -> str:
        name = require_non_empty(site.name, "현장명을 입력해주세요.")
        if site.start_date and site.end_date and site.end_date < site.start_date:
            raise ValidationError("종료일은 시작일 이후여야 합니다.")
        return self._sites.create(replace(site, name=name, total_man_day=0.0))

    def update(self, site_id: str, patch: dict) -> None:
        current = self.get(site_id)
        patch = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
        if "name" in patch:
            patch["name"] = require_non_empty(patch["name"], "현장명을 입력해주세요.")
        try:
            if "status" in patch:
                patch["status"] = SiteStatus(patch["status"])
            for key in ("start_date", "end_date"):
                if isinstance(patch.get(key), str):
                    patch[key] = parse_iso_date(patch[key]) if patch[key] else None
        except ValueError:
            raise ValidationError("현장 상태 또는 날짜 형식이 올바르지 않습니다.")
        self._sites.update(site_id, patch)

        new_name = patch.get("name")
        if new_name and new_name != current.name:
            synced = self._workers.update_by_reference("site_id", site_id, {"site_name": new_name})
            logger.info("Site %s renamed: synced %d workers", site_id, synced)

    def change_status(self, site_id: str, status: SiteStatus) -> None:
        self.get(site_id)
        self._sites.update(site_id, {"status": status})
