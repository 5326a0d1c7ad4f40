from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..core.constants import DEFAULT_BULK_ROLE
from ..core.enums import SalaryModel, WorkerStatus
from ..core.exceptions import ValidationError

BULK_FIELDS = ("team_id", "site_id", "company_id", "role", "salary_model", "status", "unit_price")

NAME_FIELD_FOR = {
    "team_id": "team_name",
    "site_id": "site_name",
    "company_id": "company_name",
}

FIELD_DEFAULTS: dict[str, Any] = {
    "team_id": "",
    "site_id": "",
    "company_id": "",
    "role": DEFAULT_BULK_ROLE,
    "salary_model": SalaryModel.DAILY.value,
    "status": WorkerStatus.ACTIVE.value,
    "unit_price": 0,
}


def _names_by_id(items: Iterable[Any]) -> dict[str, str]:
    return {item.id: item.name for item in items}


@dataclass
class BulkWorkerEdit:
    """일괄 수정 form: only checked fields end up in the patch."""

    values: dict[str, Any] = field(default_factory=dict)

    @property
    def selected_fields(self) -> list[str]:
        return [f for f in BULK_FIELDS if f in self.values]

    def check(self, field_name: str) -> None:
        if field_name not in BULK_FIELDS:
            raise ValidationError(f"일괄 수정할 수 없는 항목입니다: {field_name}")
        self.values.setdefault(field_name, FIELD_DEFAULTS[field_name])

    def uncheck(self, field_name: str) -> None:
        self.values.pop(field_name, None)

    def toggle(self, field_name: str) -> None:
        if field_name in self.values:
            self.uncheck(field_name)
        else:
            self.check(field_name)

    def set(self, field_name: str, value: Any) -> None:
        self.check(field_name)
        self.values[field_name] = value

    @classmethod
    def from_dict(cls, data: dict) -> "BulkWorkerEdit":
        """Keys present in `data` count as checked."""
        form = cls()
        for key, value in data.items():
            form.set(key, FIELD_DEFAULTS[key] if value is None and key in FIELD_DEFAULTS else value)
        return form

    def build_patch(
        self,
        *,
        teams: Iterable[Any] = (),
        sites: Iterable[Any] = (),
        companies: Iterable[Any] = (),
    ) -> dict[str, Any]:
        """Combined partial update with names resolved from the chosen ids."""
        if not self.selected_fields:
            raise ValidationError("수정할 항목을 하나 이상 선택해주세요.")

        lookups = {
            "team_id": _names_by_id(teams),
            "site_id": _names_by_id(sites),
            "company_id": _names_by_id(companies),
        }

        patch: dict[str, Any] = {}
        for field_name in self.selected_fields:
            value = self.values[field_name]
            if field_name in NAME_FIELD_FOR:
                ref_id: Optional[str] = value or None
                patch[field_name] = ref_id
                name = lookups[field_name].get(ref_id) if ref_id else None
                if name is not None:
                    patch[NAME_FIELD_FOR[field_name]] = name
            elif field_name == "unit_price":
                try:
                    patch[field_name] = float(value or 0)
                except (TypeError, ValueError):
                    raise ValidationError("단가는 숫자여야 합니다.")
            else:
                patch[field_name] = value
        return patch
