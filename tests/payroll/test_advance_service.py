import pytest

from src.smart_construction.smart_construction.core.exceptions import ValidationError
from src.smart_construction.smart_construction.payroll.advance_service import (
    AdvancePaymentService,
    advance_from_dict,
    normalize_items,
)
from tests.conftest import InMemoryAdvances


def test_normalize_items_drops_bad_keys_and_zeroes_bad_amounts():
    items = normalize_items({"meal": 1000, " ": 5, 3: 7, "inf": float("inf"), "text": "x", "flag": True})
    assert items == {"meal": 1000.0, "inf": 0.0, "text": 0.0, "flag": 0.0}


def test_normalize_items_non_dict():
    assert normalize_items(None) == {}


def test_advance_from_dict_accepts_both_field_names():
    payment = advance_from_dict(
        {
            "worker_id": "w1",
            "team_id": "t1",
            "year_month": "2025-03",
            "prevMonthCarryover": 10000,
            "private_room": 20000,
        }
    )
    assert payment.prev_month_carryover == 10000
    assert payment.private_room == 20000
    assert payment.gloves == 0


def test_advance_from_dict_requires_worker():
    with pytest.raises(ValidationError):
        advance_from_dict({"team_id": "t1", "year_month": "2025-03"})


def test_save_uses_team_worker_month_id():
    repo = InMemoryAdvances()
    service = AdvancePaymentService(repo)
    payment = advance_from_dict({"worker_id": "w1", "team_id": "t1", "year_month": "2025-03", "accommodation": 5000})

    first = service.save(payment)
    second = service.save(payment)

    assert first == second == "t1_w1_2025-03"
    assert len(repo.payments) == 1
    assert service.advances_by_worker(2025, 3)["w1"].accommodation == 5000
    assert service.delete(first) is True
    assert service.list_advances(2025, 3) == []
