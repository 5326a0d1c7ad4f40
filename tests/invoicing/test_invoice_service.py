from datetime import date

import pytest
import requests

from src.smart_construction.smart_construction.core.enums import PurposeType
from src.smart_construction.smart_construction.core.exceptions import (
    ExternalServiceError,
    PartialWriteError,
    ValidationError,
)
from src.smart_construction.smart_construction.invoicing.client import (
    NETWORK_ERROR_MESSAGE,
    TaxInvoiceClient,
    calculate_tax,
    gateway_error_message,
    request_to_payload,
)
from src.smart_construction.smart_construction.invoicing.service import InvoiceService, build_invoice_request


class FakeResponse:
    def __init__(self, body):
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    def __init__(self, body=None, error=None):
        self.body = body
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return FakeResponse(self.body)


class InMemoryInvoices:
    def __init__(self, fail=False):
        self.records = []
        self.fail = fail

    def list_recent(self, limit):
        return self.records[:limit]

    def get_by_send_key(self, send_key):
        return next((r for r in self.records if r.send_key == send_key), None)

    def create(self, record):
        if self.fail:
            raise RuntimeError("insert failed")
        self.records.append(record)
        return record.id

    def update_status(self, send_key, status):
        return False


FORM = {
    "invoicer": {"corp_num": "123-45-67890", "corp_name": "청연건설"},
    "invoicee": {"corp_num": "2223334444", "corp_name": "대우"},
    "items": [
        {"item_name": "노무비", "qty": 2, "unit_cost": 150005},
        {"item_name": "", "supply_cost": 999},
        {"item_name": "자재비", "supply_cost": 100000, "tax": 9000},
    ],
}


def test_calculate_tax_floors():
    assert calculate_tax(300010) == 30001
    assert calculate_tax(15) == 1


def test_gateway_error_messages():
    assert gateway_error_message(-3) == "잘못된 사업자번호"
    assert gateway_error_message(-7) == "오류 발생 (코드: -7)"


def test_build_request_skips_unnamed_items_and_sums_totals():
    req = build_invoice_request(FORM, today=date(2025, 3, 15))

    assert req.invoicer.corp_num == "1234567890"
    assert [i.serial_num for i in req.items] == [1, 2]
    assert req.items[0].supply_cost == 300010
    assert req.items[0].tax == 30001
    assert req.supply_cost_total == 400010
    assert req.tax_total == 39001
    assert req.total_amount == 439011
    assert req.write_date == "20250315"
    assert req.purpose_type == PurposeType.CLAIM


def test_build_request_validation():
    with pytest.raises(ValidationError):
        build_invoice_request({**FORM, "invoicee": {}})
    with pytest.raises(ValidationError):
        build_invoice_request({**FORM, "items": [{"item_name": " "}]})
    with pytest.raises(ValidationError):
        build_invoice_request({**FORM, "purpose_type": "기타"})
    with pytest.raises(ValidationError):
        build_invoice_request({**FORM, "write_date": "2025.03.15"})


def test_item_keeps_explicit_zero_qty():
    req = build_invoice_request(
        {**FORM, "items": [{"item_name": "노무비", "qty": 0, "unit_cost": 150000}, {"item_name": "자재비", "unit_cost": 5000}]}
    )

    assert req.items[0].qty == 0
    assert req.items[0].supply_cost == 0
    assert req.items[1].qty == 1
    assert req.items[1].supply_cost == 5000
    assert req.supply_cost_total == 5000


@pytest.mark.parametrize("qty", [-1, "-0.5", "abc", "inf"])
def test_item_rejects_bad_qty(qty):
    with pytest.raises(ValidationError):
        build_invoice_request({**FORM, "items": [{"item_name": "노무비", "qty": qty, "unit_cost": 1000}]})


def test_payload_uses_gateway_keys():
    payload = request_to_payload(build_invoice_request(FORM, today=date(2025, 3, 15)))
    assert payload["invoicerCorpNum"] == "1234567890"
    assert payload["invoiceeCorpName"] == "대우"
    assert payload["purposeType"] == "청구"
    assert payload["items"][1]["itemName"] == "자재비"


def test_client_issue_posts_payload():
    session = FakeSession({"success": True, "invoiceNum": "INV-1", "sendKey": "SK-1"})
    client = TaxInvoiceClient("http://gateway.test/api/", session=session)

    response = client.issue(build_invoice_request(FORM))

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://gateway.test/api/tax-invoice/issue")
    assert kwargs["json"]["supplyCostTotal"] == 400010
    assert response.send_key == "SK-1"


def test_client_maps_gateway_failure_code():
    client = TaxInvoiceClient("http://gateway.test/api", session=FakeSession({"success": False, "code": -4}))
    with pytest.raises(ExternalServiceError) as exc:
        client.status("SK-1")
    assert str(exc.value) == "중복된 문서번호"
    assert exc.value.code == -4


def test_client_network_and_body_errors():
    offline = TaxInvoiceClient(session=FakeSession(error=requests.ConnectionError("down")))
    with pytest.raises(ExternalServiceError) as exc:
        offline.list_remote()
    assert str(exc.value) == NETWORK_ERROR_MESSAGE

    garbled = TaxInvoiceClient(session=FakeSession(ValueError("not json")))
    with pytest.raises(ExternalServiceError):
        garbled.list_remote()


def test_list_remote_sends_limit():
    session = FakeSession({"success": True, "invoices": [{"invoiceNum": "1"}]})
    assert TaxInvoiceClient(session=session).list_remote(5) == [{"invoiceNum": "1"}]
    assert session.calls[0][2]["params"] == {"limit": 5}


def test_issue_records_history():
    invoices = InMemoryInvoices()
    client = TaxInvoiceClient(session=FakeSession({"success": True, "invoiceNum": "INV-1", "sendKey": "SK-1"}))
    service = InvoiceService(client, invoices)

    response, record_id = service.issue(build_invoice_request(FORM), site_id="s-1")

    assert response.invoice_num == "INV-1"
    record = invoices.records[0]
    assert record.id == record_id
    assert record.site_id == "s-1"
    assert record.total_amount == 439011
    assert service.history() == [record]


def test_issue_then_record_failure_is_partial_write():
    client = TaxInvoiceClient(session=FakeSession({"success": True, "invoiceNum": "INV-1", "sendKey": "SK-1"}))
    service = InvoiceService(client, InMemoryInvoices(fail=True))

    with pytest.raises(PartialWriteError) as exc:
        service.issue(build_invoice_request(FORM))
    assert exc.value.written_id == "SK-1"
