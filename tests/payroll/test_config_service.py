import pytest

from src.smart_construction.smart_construction.core.constants import PAYROLL_CONFIG_DOC
from src.smart_construction.smart_construction.core.exceptions import ValidationError, WriteVerificationError
from src.smart_construction.smart_construction.payroll.config_model import (
    DEFAULT_PAYROLL_CONFIG,
    InsuranceConfig,
    sanitize_config,
)
from src.smart_construction.smart_construction.payroll.config_service import (
    PayrollConfigService,
    insurance_from_percent,
    tax_rate_from_percent,
)
from tests.conftest import InMemorySettings


def test_sanitize_falls_back_field_by_field():
    config = sanitize_config(
        {
            "tax_rate": -1,
            "deduction_items": [{"id": "", "label": "빈값"}, {"id": "meal", "label": " 식대 ", "order": 3}],
            "insurance_config": {"threshold_days": 0, "pension_rate": 0.05},
        }
    )

    assert config.tax_rate == DEFAULT_PAYROLL_CONFIG.tax_rate
    assert [(i.id, i.label, i.order, i.is_active) for i in config.deduction_items] == [("meal", "식대", 3, True)]
    assert config.insurance.threshold_days == 8
    assert config.insurance.pension_rate == 0.05


def test_sanitize_non_dict_returns_defaults():
    assert sanitize_config(None) is DEFAULT_PAYROLL_CONFIG


def test_get_config_creates_missing_document(fixed_now):
    settings = InMemorySettings()
    service = PayrollConfigService(settings, clock=lambda: fixed_now)

    config = service.get_config()

    assert config == DEFAULT_PAYROLL_CONFIG
    assert settings.docs[PAYROLL_CONFIG_DOC]["tax_rate"] == DEFAULT_PAYROLL_CONFIG.tax_rate


def test_get_config_backfills_missing_keys():
    settings = InMemorySettings({PAYROLL_CONFIG_DOC: {"tax_rate": 0.05}})
    service = PayrollConfigService(settings)

    config = service.get_config()

    assert config.tax_rate == 0.05
    assert set(settings.docs[PAYROLL_CONFIG_DOC]) == {"tax_rate", "deduction_items", "insurance_config"}


def test_update_tax_rate_round_trips():
    settings = InMemorySettings({PAYROLL_CONFIG_DOC: DEFAULT_PAYROLL_CONFIG.as_document()})
    service = PayrollConfigService(settings)

    stored = service.update_tax_rate(0.05)
    assert stored.tax_rate == 0.05


def test_write_not_reflected_raises_with_stored_value():
    settings = InMemorySettings({PAYROLL_CONFIG_DOC: DEFAULT_PAYROLL_CONFIG.as_document()})
    settings.drop_writes = True
    service = PayrollConfigService(settings)

    with pytest.raises(WriteVerificationError) as exc:
        service.update_tax_rate(0.05)
    assert exc.value.stored.tax_rate == DEFAULT_PAYROLL_CONFIG.tax_rate


def test_add_deduction_item_appends_custom_item(fixed_now):
    settings = InMemorySettings({PAYROLL_CONFIG_DOC: DEFAULT_PAYROLL_CONFIG.as_document()})
    service = PayrollConfigService(settings, clock=lambda: fixed_now)

    stored = service.add_deduction_item("  식대 ")
    added = stored.sorted_deduction_items[-1]

    assert added.id == f"custom_{int(fixed_now.timestamp() * 1000)}"
    assert added.label == "식대"
    assert added.order == 11


def test_blank_deduction_label_rejected():
    service = PayrollConfigService(InMemorySettings({PAYROLL_CONFIG_DOC: DEFAULT_PAYROLL_CONFIG.as_document()}))
    with pytest.raises(ValidationError):
        service.add_deduction_item("   ")


def test_update_insurance_config():
    settings = InMemorySettings({PAYROLL_CONFIG_DOC: DEFAULT_PAYROLL_CONFIG.as_document()})
    service = PayrollConfigService(settings)

    stored = service.update_insurance_config(InsuranceConfig(threshold_days=10, pension_rate=0.05))
    assert stored.insurance.threshold_days == 10
    assert stored.insurance.pension_rate == 0.05


def test_percent_inputs():
    assert tax_rate_from_percent("3.3") == pytest.approx(0.033)
    with pytest.raises(ValidationError):
        tax_rate_from_percent("abc")

    insurance = insurance_from_percent(threshold_days="8.7", pension="4.5", health="3.545", care_of_health="12.95", employment="0.9")
    assert insurance.threshold_days == 8
    assert insurance.pension_rate == pytest.approx(0.045)

    with pytest.raises(ValidationError):
        insurance_from_percent(threshold_days="0", pension="1", health="1", care_of_health="1", employment="1")
