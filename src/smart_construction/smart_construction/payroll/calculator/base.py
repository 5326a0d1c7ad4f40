from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence

from ..model import AdvancePayment, PayrollRow, ProcessedPayrollRow


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def process_row(self, row: PayrollRow, advance: Optional[AdvancePayment] = None) -> ProcessedPayrollRow:
        raise NotImplementedError

    @abstractmethod
    def sort_key(self, processed: ProcessedPayrollRow):
        raise NotImplementedError

    def process(
        self,
        rows: Sequence[PayrollRow],
        advances: Optional[Mapping[str, AdvancePayment]] = None,
    ) -> list[ProcessedPayrollRow]:
        advances = advances or {}
        processed = [self.process_row(r, advances.get(r.worker_id)) for r in rows]
        return sorted(processed, key=self.sort_key)
