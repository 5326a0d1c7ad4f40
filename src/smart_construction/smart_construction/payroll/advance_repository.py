from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AdvancePayment


class AdvancePaymentRepository(Protocol):
    def list_by_month(self, year_month: str, *, team_id: Optional[str] = None) -> Sequence[AdvancePayment]:
        raise NotImplementedError

    def upsert(self, payment: AdvancePayment) -> str:
        raise NotImplementedError

    def delete(self, payment_id: str) -> bool:
        raise NotImplementedError
