from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ..core.enums import DiscrepancyType
from ..workers.model import Worker

EMPTY_NAME = "(없음)"

DELETED_NAME = {
    DiscrepancyType.TEAM: "(삭제된 팀)",
    DiscrepancyType.SITE: "(삭제된 현장)",
    DiscrepancyType.COMPANY: "(삭제된 회사)",
}

# discrepancy type -> (worker id attribute, worker name attribute)
WORKER_FIELDS = {
    DiscrepancyType.TEAM: ("team_id", "team_name"),
    DiscrepancyType.SITE: ("site_id", "site_name"),
    DiscrepancyType.COMPANY: ("company_id", "company_name"),
}


@dataclass(frozen=True)
class Discrepancy:
    type: DiscrepancyType
    worker_id: str
    worker_name: str
    target_id: str
    current_name: str
    correct_name: str
    master_exists: bool

    @property
    def name_field(self) -> str:
        return WORKER_FIELDS[self.type][1]


@dataclass(frozen=True)
class ScanStats:
    total_workers: int = 0
    scanned: int = 0
    issues: int = 0


@dataclass(frozen=True)
class ScanResult:
    discrepancies: list[Discrepancy]
    stats: ScanStats

    @property
    def fixable(self) -> list[Discrepancy]:
        return [d for d in self.discrepancies if d.master_exists]


def _check(
    worker: Worker,
    kind: DiscrepancyType,
    names: Mapping[str, str],
) -> Optional[Discrepancy]:
    id_attr, name_attr = WORKER_FIELDS[kind]
    target_id = getattr(worker, id_attr)
    if not target_id:
        return None

    current = getattr(worker, name_attr) or ""
    master_name = names.get(target_id)
    if master_name is not None and current == master_name:
        return None

    return Discrepancy(
        type=kind,
        worker_id=worker.id,
        worker_name=worker.name,
        target_id=target_id,
        current_name=current or EMPTY_NAME,
        correct_name=master_name if master_name is not None else DELETED_NAME[kind],
        master_exists=master_name is not None,
    )


def scan_workers(
    workers: Iterable[Worker],
    *,
    team_names: Mapping[str, str],
    site_names: Mapping[str, str],
    company_names: Mapping[str, str],
) -> ScanResult:
    """Compare each worker's copied team/site/company name with the master record."""
    lookups = {
        DiscrepancyType.TEAM: team_names,
        DiscrepancyType.SITE: site_names,
        DiscrepancyType.COMPANY: company_names,
    }
    workers = list(workers)
    issues: list[Discrepancy] = []
    for worker in workers:
        for kind, names in lookups.items():
            found = _check(worker, kind, names)
            if found:
                issues.append(found)

    return ScanResult(
        discrepancies=issues,
        stats=ScanStats(total_workers=len(workers), scanned=len(workers), issues=len(issues)),
    )
