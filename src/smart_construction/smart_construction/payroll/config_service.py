from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from ..common.datetime_utils import epoch_millis, now_local
from ..core.constants import PAYROLL_CONFIG_DOC
from ..core.exceptions import ValidationError, WriteVerificationError
from .config_model import (
    DEFAULT_PAYROLL_CONFIG,
    DeductionItem,
    InsuranceConfig,
    PayrollConfig,
    sanitize_config,
)
from .settings_repository import SettingsRepository

logger = logging.getLogger(__name__)

NOT_APPLIED_MESSAGE = (
    f"저장은 요청했지만, 서버 문서(settings/{PAYROLL_CONFIG_DOC})에 값이 반영되지 않았습니다. "
    "권한 또는 연결 상태를 확인해주세요."
)
EMPTY_LABEL_MESSAGE = "공제항목 이름은 비어있을 수 없습니다."


def _percent(value: Any, message: str) -> float:
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(message)
    if not math.isfinite(number) or number < 0:
        raise ValidationError(message)
    return number


def tax_rate_from_percent(value: Any) -> float:
    """'3.3' -> 0.033."""
    return _percent(value, "0 이상의 숫자를 입력해주세요.") / 100


def insurance_from_percent(
    *,
    threshold_days: Any,
    pension: Any,
    health: Any,
    care_of_health: Any,
    employment: Any,
) -> InsuranceConfig:
    try:
        days = math.floor(float(threshold_days))
    except (TypeError, ValueError, OverflowError):
        days = 0
    if days <= 0:
        raise ValidationError("보험 적용 기준 공수는 1 이상의 숫자여야 합니다.")

    message = "보험 요율은 0 이상의 숫자여야 합니다."
    return InsuranceConfig(
        threshold_days=days,
        pension_rate=_percent(pension, message) / 100,
        health_rate=_percent(health, message) / 100,
        care_rate_of_health=_percent(care_of_health, message) / 100,
        employment_rate=_percent(employment, message) / 100,
    )


def add_custom_item(
    items: Iterable[DeductionItem],
    label: str,
    *,
    now: Optional[datetime] = None,
) -> list[DeductionItem]:
    """Append an admin-defined item (`custom_<ms>`) after the last one."""
    label = (label or "").strip()
    if not label:
        raise ValidationError(EMPTY_LABEL_MESSAGE)
    current = list(items)
    max_order = max([item.order for item in current] + [0])
    return current + [DeductionItem(f"custom_{epoch_millis(now)}", label, max_order + 1, True)]


class PayrollConfigService:
    """Shared payroll settings document with read-after-write verification."""

    def __init__(self, settings: SettingsRepository, *, clock: Callable[[], datetime] = now_local):
        self._settings = settings
        self._clock = clock

    def get_config(self) -> PayrollConfig:
        """Load the document, creating it or backfilling missing keys."""
        data = self._settings.get(PAYROLL_CONFIG_DOC)
        if data is None:
            try:
                self._settings.merge(PAYROLL_CONFIG_DOC, DEFAULT_PAYROLL_CONFIG.as_document())
            except Exception:
                logger.exception("Failed to create default payroll config")
            return DEFAULT_PAYROLL_CONFIG

        defaults = DEFAULT_PAYROLL_CONFIG.as_document()
        patch = {key: value for key, value in defaults.items() if key not in data}
        if patch:
            try:
                self._settings.merge(PAYROLL_CONFIG_DOC, patch)
                logger.info("Backfilled payroll config keys: %s", ", ".join(sorted(patch)))
            except Exception:
                logger.exception("Failed to backfill payroll config defaults")

        return sanitize_config(data)

    def _write(self, patch: dict, matches: Callable[[PayrollConfig], bool]) -> PayrollConfig:
        self._settings.merge(PAYROLL_CONFIG_DOC, patch)
        stored = self.get_config()
        if not matches(stored):
            logger.warning("Payroll config write not reflected in %s", PAYROLL_CONFIG_DOC)
            raise WriteVerificationError(NOT_APPLIED_MESSAGE, stored=stored)
        return stored

    def update_tax_rate(self, tax_rate: float) -> PayrollConfig:
        safe = sanitize_config({"tax_rate": tax_rate})
        return self._write(
            {"tax_rate": safe.tax_rate},
            lambda stored: stored.tax_rate == safe.tax_rate,
        )

    def update_deduction_items(self, items: Iterable[DeductionItem]) -> PayrollConfig:
        items = list(items)
        if any(not (item.label or "").strip() for item in items):
            raise ValidationError(EMPTY_LABEL_MESSAGE)
        normalized = sorted(
            (DeductionItem(i.id, i.label.strip(), i.order, i.is_active) for i in items),
            key=lambda i: i.order,
        )
        safe = sanitize_config({"deduction_items": [i.as_dict() for i in normalized]})
        return self._write(
            {"deduction_items": [i.as_dict() for i in safe.deduction_items]},
            lambda stored: stored.deduction_items == safe.deduction_items,
        )

    def add_deduction_item(self, label: str) -> PayrollConfig:
        current = self.get_config()
        items = add_custom_item(current.sorted_deduction_items, label, now=self._clock())
        return self.update_deduction_items(items)

    def update_insurance_config(self, insurance: InsuranceConfig) -> PayrollConfig:
        safe = sanitize_config({"insurance_config": insurance.as_dict()})
        return self._write(
            {"insurance_config": safe.insurance.as_dict()},
            lambda stored: stored.insurance == safe.insurance,
        )

    def save_config(self, config: PayrollConfig) -> PayrollConfig:
        safe = sanitize_config(config.as_document())
        return self._write(
            safe.as_document(),
            lambda stored: stored.as_document() == safe.as_document(),
        )
