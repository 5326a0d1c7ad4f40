from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from ..core.constants import DEFAULT_TAX_RATE


@dataclass(frozen=True)
class DeductionItem:
    """공제항목 (column on the labor cost sheet)."""

    id: str
    label: str
    order: float = 0
    is_active: bool = True

    def as_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "order": self.order, "is_active": self.is_active}


@dataclass(frozen=True)
class InsuranceConfig:
    """4대보험 요율. care is a rate of the health premium, not of gross pay."""

    threshold_days: int = 8
    pension_rate: float = 0.045
    health_rate: float = 0.03545
    care_rate_of_health: float = 0.1295
    employment_rate: float = 0.009

    def as_dict(self) -> dict:
        return {
            "threshold_days": self.threshold_days,
            "pension_rate": self.pension_rate,
            "health_rate": self.health_rate,
            "care_rate_of_health": self.care_rate_of_health,
            "employment_rate": self.employment_rate,
        }


# Deduction ids stored in the config document -> AdvancePayment attribute.
LEGACY_DEDUCTION_FIELDS: dict[str, str] = {
    "prevMonthCarryover": "prev_month_carryover",
    "accommodation": "accommodation",
    "privateRoom": "private_room",
    "gloves": "gloves",
    "deposit": "deposit",
    "fines": "fines",
    "electricity": "electricity",
    "gas": "gas",
    "internet": "internet",
    "water": "water",
}

DEFAULT_DEDUCTION_ITEMS: tuple[DeductionItem, ...] = (
    DeductionItem("prevMonthCarryover", "전월이월", 1),
    DeductionItem("accommodation", "숙소비", 2),
    DeductionItem("privateRoom", "개인방", 3),
    DeductionItem("gloves", "장갑", 4),
    DeductionItem("deposit", "보증금", 5),
    DeductionItem("fines", "과태료", 6),
    DeductionItem("electricity", "전기료", 7),
    DeductionItem("gas", "도시가스", 8),
    DeductionItem("internet", "인터넷", 9),
    DeductionItem("water", "수도세", 10),
)

DEFAULT_INSURANCE_CONFIG = InsuranceConfig()


def is_legacy_deduction_id(deduction_id: str) -> bool:
    return deduction_id in LEGACY_DEDUCTION_FIELDS


@dataclass(frozen=True)
class PayrollConfig:
    tax_rate: float = DEFAULT_TAX_RATE
    deduction_items: tuple[DeductionItem, ...] = DEFAULT_DEDUCTION_ITEMS
    insurance: InsuranceConfig = DEFAULT_INSURANCE_CONFIG
    updated_at: Optional[datetime] = None

    @property
    def sorted_deduction_items(self) -> list[DeductionItem]:
        return sorted(self.deduction_items, key=lambda item: item.order)

    @property
    def active_deduction_items(self) -> list[DeductionItem]:
        return [item for item in self.sorted_deduction_items if item.is_active]

    def with_items(self, items) -> "PayrollConfig":
        return replace(self, deduction_items=tuple(items))

    def as_document(self) -> dict:
        """Shape stored in the settings table (no updated_at)."""
        return {
            "tax_rate": self.tax_rate,
            "deduction_items": [item.as_dict() for item in self.deduction_items],
            "insurance_config": self.insurance.as_dict(),
        }


DEFAULT_PAYROLL_CONFIG = PayrollConfig()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _rate(value: Any, default: float) -> float:
    return float(value) if _is_number(value) and value >= 0 else default


def _sanitize_item(raw: Any) -> Optional[DeductionItem]:
    if not isinstance(raw, dict):
        return None
    item_id = raw.get("id").strip() if isinstance(raw.get("id"), str) else ""
    label = raw.get("label").strip() if isinstance(raw.get("label"), str) else ""
    if not item_id or not label:
        return None
    order = raw.get("order") if _is_number(raw.get("order")) else 0
    is_active = raw.get("is_active") if isinstance(raw.get("is_active"), bool) else True
    return DeductionItem(item_id, label, order, is_active)


def _sanitize_insurance(raw: Any) -> InsuranceConfig:
    obj = raw if isinstance(raw, dict) else {}
    defaults = DEFAULT_INSURANCE_CONFIG

    threshold = obj.get("threshold_days")
    threshold_days = math.floor(threshold) if _is_number(threshold) and threshold > 0 else defaults.threshold_days

    return InsuranceConfig(
        threshold_days=int(threshold_days),
        pension_rate=_rate(obj.get("pension_rate"), defaults.pension_rate),
        health_rate=_rate(obj.get("health_rate"), defaults.health_rate),
        care_rate_of_health=_rate(obj.get("care_rate_of_health"), defaults.care_rate_of_health),
        employment_rate=_rate(obj.get("employment_rate"), defaults.employment_rate),
    )


def sanitize_config(raw: Any) -> PayrollConfig:
    """Coerce a stored (or partial) document into a valid PayrollConfig.

    Invalid or missing values fall back to the defaults field by field;
    deduction items without an id or label are dropped.
    """
    if not isinstance(raw, dict):
        return DEFAULT_PAYROLL_CONFIG

    items_raw = raw.get("deduction_items")
    if isinstance(items_raw, list):
        items = tuple(item for item in (_sanitize_item(it) for it in items_raw) if item is not None)
    else:
        items = DEFAULT_DEDUCTION_ITEMS

    updated_at = raw.get("updated_at")
    return PayrollConfig(
        tax_rate=_rate(raw.get("tax_rate"), DEFAULT_TAX_RATE),
        deduction_items=items,
        insurance=_sanitize_insurance(raw.get("insurance_config")),
        updated_at=updated_at if isinstance(updated_at, datetime) else None,
    )
