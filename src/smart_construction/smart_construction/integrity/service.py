from __future__ import annotations

import logging
from typing import Iterator, Sequence

from ..companies.repository import CompanyRepository
from ..core.constants import INTEGRITY_BATCH_SIZE
from ..core.enums import DiscrepancyType
from ..core.exceptions import NotFoundError, ValidationError
from ..sites.repository import SiteRepository
from ..teams.repository import TeamRepository
from ..workers.repository import WorkerRepository
from .scanner import Discrepancy, ScanResult, scan_workers

logger = logging.getLogger(__name__)

MASTER_DELETED_MESSAGE = "원본 데이터(팀/현장/회사)가 삭제되어 복구할 수 없습니다. 수동으로 작업자를 수정해주세요."


def _chunks(items: Sequence, size: int) -> Iterator[Sequence]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class DataIntegrityService:
    """Finds and repairs workers whose copied team/site/company names drifted."""

    def __init__(
        self,
        workers: WorkerRepository,
        teams: TeamRepository,
        sites: SiteRepository,
        companies: CompanyRepository,
        *,
        batch_size: int = INTEGRITY_BATCH_SIZE,
    ):
        self._workers = workers
        self._teams = teams
        self._sites = sites
        self._companies = companies
        self._batch_size = batch_size

    def scan(self) -> ScanResult:
        result = scan_workers(
            self._workers.list_all(),
            team_names={t.id: t.name for t in self._teams.list_all()},
            site_names={s.id: s.name for s in self._sites.list_all()},
            company_names={c.id: c.name for c in self._companies.list_all()},
        )
        logger.info(
            "Integrity scan: workers=%d issues=%d fixable=%d",
            result.stats.total_workers,
            result.stats.issues,
            len(result.fixable),
        )
        return result

    def fix_one(self, issue: Discrepancy) -> None:
        if not issue.master_exists:
            raise ValidationError(MASTER_DELETED_MESSAGE)
        if not self._workers.update(issue.worker_id, {issue.name_field: issue.correct_name}):
            raise NotFoundError("작업자를 찾을 수 없습니다.")

    def fix_by_key(self, worker_id: str, kind: DiscrepancyType) -> ScanResult:
        """Re-scan, fix the matching issue and return the refreshed result."""
        current = self.scan()
        issue = next(
            (d for d in current.discrepancies if d.worker_id == worker_id and d.type == kind),
            None,
        )
        if issue is None:
            raise NotFoundError("이미 수정되었거나 존재하지 않는 항목입니다.")
        self.fix_one(issue)
        return self.scan()

    def fix_all(self) -> tuple[int, ScanResult]:
        """Fix every issue whose master still exists, in batches; deleted masters are left alone."""
        fixable = self.scan().fixable
        fixed = 0
        for chunk in _chunks(fixable, self._batch_size):
            fixed += self._workers.update_each([(d.worker_id, {d.name_field: d.correct_name}) for d in chunk])
            logger.info("Integrity fix batch committed: %d", len(chunk))
        return fixed, self.scan()
