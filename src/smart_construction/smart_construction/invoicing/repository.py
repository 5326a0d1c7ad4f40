from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import InvoiceRecord


class InvoiceRepository(Protocol):
    def list_recent(self, limit: int) -> Sequence[InvoiceRecord]:
        raise NotImplementedError

    def get_by_send_key(self, send_key: str) -> Optional[InvoiceRecord]:
        raise NotImplementedError

    def create(self, record: InvoiceRecord) -> str:
        raise NotImplementedError

    def update_status(self, invoice_id: str, status: str) -> bool:
        raise NotImplementedError
