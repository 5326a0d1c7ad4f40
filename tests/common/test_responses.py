from datetime import date

import pytest
from flask import Flask

from src.smart_construction.smart_construction.common.responses import domain_error, ok
from src.smart_construction.smart_construction.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
    WriteVerificationError,
)
from src.smart_construction.smart_construction.reports.model import DailyReport


@pytest.fixture
def app():
    app = Flask(__name__)
    with app.app_context():
        yield app


@pytest.mark.parametrize(
    "error, status, key",
    [
        (ValidationError("a", ["a", "b"]), 400, "issues"),
        (NotFoundError("x"), 404, None),
        (WriteVerificationError("x", stored={"tax_rate": 0.033}), 409, "stored"),
        (PartialWriteError("x", written_id="c-1"), 500, "written_id"),
        (ExternalServiceError("x", code=-4), 502, "code"),
    ],
)
def test_domain_error_status_codes(app, error, status, key):
    response, code = domain_error(error)
    body = response.get_json()

    assert code == status
    assert body["success"] is False
    if key:
        assert key in body


def test_ok_serializes_dataclasses_and_dates(app):
    report = DailyReport(id="r1", date=date(2025, 3, 14), team_id="t", team_name="팀", site_id="s", site_name="현장")
    response, code = ok(report, message="저장되었습니다.")
    body = response.get_json()

    assert code == 200
    assert body["data"]["date"] == "2025-03-14"
    assert body["data"]["workers"] == []
    assert body["message"] == "저장되었습니다."
