from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Optional, Sequence

from ..common.datetime_utils import year_month
from ..common.validators import require_non_empty
from .advance_repository import AdvancePaymentRepository
from .config_model import LEGACY_DEDUCTION_FIELDS
from .model import AdvancePayment

logger = logging.getLogger(__name__)


def _finite_or_zero(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value) if math.isfinite(value) else 0.0


def normalize_items(items: Any) -> dict[str, float]:
    """Blank or non-string keys are dropped, non-finite amounts become 0."""
    if not isinstance(items, dict):
        return {}
    return {
        key: _finite_or_zero(value)
        for key, value in items.items()
        if isinstance(key, str) and key.strip()
    }


def advance_from_dict(data: dict) -> AdvancePayment:
    """Build from a request body; legacy amounts accept either the stored id or the attribute name."""
    amounts = {}
    for deduction_id, attr in LEGACY_DEDUCTION_FIELDS.items():
        raw = data.get(attr, data.get(deduction_id))
        amounts[attr] = _finite_or_zero(raw)
    return AdvancePayment(
        worker_id=require_non_empty(data.get("worker_id"), "작업자를 선택해주세요."),
        worker_name=str(data.get("worker_name") or ""),
        team_id=require_non_empty(data.get("team_id"), "팀을 선택해주세요."),
        team_name=str(data.get("team_name") or ""),
        year_month=require_non_empty(data.get("year_month"), "년월을 입력해주세요."),
        items=normalize_items(data.get("items")),
        **amounts,
    )


class AdvancePaymentService:
    """가불/공제 내역: one record per (team, worker, month)."""

    def __init__(self, advances: AdvancePaymentRepository):
        self._advances = advances

    def list_advances(self, year: int, month: int, team_id: Optional[str] = None) -> Sequence[AdvancePayment]:
        return self._advances.list_by_month(year_month(year, month), team_id=team_id)

    def advances_by_worker(self, year: int, month: int, team_id: Optional[str] = None) -> dict[str, AdvancePayment]:
        return {a.worker_id: a for a in self.list_advances(year, month, team_id)}

    def save(self, payment: AdvancePayment) -> str:
        doc_id = f"{payment.team_id}_{payment.worker_id}_{payment.year_month}"
        payment_id = self._advances.upsert(replace(payment, id=doc_id, items=normalize_items(payment.items)))
        logger.info("Saved advance payment %s", payment_id)
        return payment_id

    def delete(self, payment_id: str) -> bool:
        return self._advances.delete(payment_id)
