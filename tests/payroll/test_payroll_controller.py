from types import SimpleNamespace

import pytest
from flask import Flask

from src.smart_construction.smart_construction.payroll.controller import register, split_threshold
from src.smart_construction.smart_construction.payroll.model import PayrollTotals


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 8),
        ("", 8),
        ("5", 5),
        ("7.9", 7),
        ("0", 1),
        ("-3", 1),
        ("abc", 1),
        ("nan", 1),
        ("inf", 1),
        ("-inf", 1),
    ],
)
def test_split_threshold_parsing(raw, expected):
    assert split_threshold(raw) == expected


class RecordingPayroll:
    def __init__(self):
        self.options = None

    def build_team_invoice(self, year, month, *, team_id=None, options=None, apply_advances=True):
        self.options = options
        return SimpleNamespace(
            year=year,
            month=month,
            team_id=team_id,
            options=options,
            config={},
            rows=[],
            totals=PayrollTotals(),
        )


def test_team_invoice_with_infinite_threshold_is_not_a_server_error():
    payroll = RecordingPayroll()
    app = Flask(__name__)
    register(app, SimpleNamespace(payroll_service=payroll, payroll_config_service=None, advance_payment_service=None))

    response = app.test_client().get("/api/payroll/team-invoice?year=2025&month=3&split=1&threshold=inf")

    assert response.status_code == 200
    assert payroll.options.split_mode is True
    assert payroll.options.split_threshold == 1
