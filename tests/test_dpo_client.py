import threading
import time
import xml.etree.ElementTree as ET
from datetime import datetime
from decimal import Decimal
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from app.core.exceptions import ExternalServiceError, PaymentGatewayRejected, PaymentGatewayTimeout
from app.services.dpo_client import DpoClient, DpoConfig, format_amount, parse_response

CREATED = b"""<?xml version="1.0" encoding="utf-8"?>
<API3G><Result>000</Result><ResultExplanation>Transaction created</ResultExplanation>
<TransToken>72983CAC-5DB1-4C7F-BD88-352066B71592</TransToken><TransRef>1285DB12G</TransRef></API3G>"""

REJECTED = b"""<?xml version="1.0" encoding="utf-8"?>
<API3G><Result>801</Result><ResultExplanation>Request missing company token</ResultExplanation></API3G>"""

VERIFIED = b"""<?xml version="1.0" encoding="utf-8"?>
<API3G><Result>000</Result><ResultExplanation>Transaction Paid</ResultExplanation>
<TransactionApproval>938204312</TransactionApproval></API3G>"""


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.text = content.decode("utf-8", "replace")
        self.status_code = status_code


@pytest.fixture()
def posted(monkeypatch):
    """Capture Session.post calls; set ``posted.reply`` to a response or an exception."""
    class Recorder:
        reply = FakeResponse(CREATED)
        calls = []

    def fake_post(self, url, data=None, headers=None, timeout=None):
        Recorder.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if isinstance(Recorder.reply, Exception):
            raise Recorder.reply
        return Recorder.reply

    Recorder.calls = []
    monkeypatch.setattr(requests.Session, "post", fake_post)
    return Recorder


def _client(**overrides):
    cfg = DpoConfig(api_url="https://gateway.test/API/v6/", company_token="COMPANY", timeout=3.0, **overrides)
    return DpoClient(cfg, slots=threading.BoundedSemaphore(2))


def _create(client):
    return client.create_token(
        amount=Decimal("85000"), currency="UGX", company_ref="pay-1",
        redirect_url="http://api.test/payments/pay-1/airport-pickups/success",
        back_url="http://api.test/payments/pay-1/airport-pickups/failure",
        service_description="Airport pickup from EBB", service_date=datetime(2026, 3, 7, 14, 5),
    )


def test_create_token_request_document(posted):
    assert _create(_client()) == "72983CAC-5DB1-4C7F-BD88-352066B71592"

    call = posted.calls[0]
    assert call["url"] == "https://gateway.test/API/v6/"
    assert call["headers"]["Content-Type"] == "application/xml"
    assert call["timeout"] == 3.0

    root = ET.fromstring(call["data"])
    assert root.tag == "API3G"
    assert root.findtext("CompanyToken") == "COMPANY"
    assert root.findtext("Request") == "createToken"
    assert root.findtext("Transaction/PaymentAmount") == "85000"
    assert root.findtext("Transaction/PaymentCurrency") == "UGX"
    assert root.findtext("Transaction/CompanyRef") == "pay-1"
    assert root.findtext("Transaction/PTL") == "5"
    assert root.findtext("Services/Service/ServiceType") == "45"
    assert root.findtext("Services/Service/ServiceDate") == "2026/03/07 14:05"


def test_rejection_raises_with_gateway_explanation(posted):
    posted.reply = FakeResponse(REJECTED)
    with pytest.raises(PaymentGatewayRejected) as exc:
        _create(_client())
    assert exc.value.result_code == "801"
    assert exc.value.explanation == "Request missing company token"


def test_success_without_token_is_rejected(posted):
    posted.reply = FakeResponse(b"<API3G><Result>000</Result></API3G>")
    with pytest.raises(PaymentGatewayRejected):
        _create(_client())


def test_read_timeout_is_distinct(posted):
    posted.reply = requests.ReadTimeout("slow")
    with pytest.raises(PaymentGatewayTimeout):
        _create(_client())


def test_connect_failure_is_plain_external_error(posted):
    posted.reply = requests.ConnectTimeout("unreachable")
    with pytest.raises(ExternalServiceError) as exc:
        _create(_client())
    assert not isinstance(exc.value, PaymentGatewayTimeout)
    assert exc.value.status_code == 500


@pytest.mark.parametrize("reply", [FakeResponse(b"<html>oops", 200), FakeResponse(b"down", 503)])
def test_bad_responses_are_external_errors(posted, reply):
    posted.reply = reply
    with pytest.raises(ExternalServiceError):
        _create(_client())


def test_slots_are_released_and_bounded(posted):
    slots = threading.BoundedSemaphore(1)
    client = DpoClient(DpoConfig(api_url="https://gateway.test/", company_token="C", timeout=0.01), slots=slots)

    posted.reply = requests.ReadTimeout("slow")
    with pytest.raises(PaymentGatewayTimeout):
        _create(client)
    assert slots.acquire(blocking=False)  # released after the failure

    with pytest.raises(ExternalServiceError, match="busy"):
        _create(client)
    slots.release()


def test_verify_token(posted):
    posted.reply = FakeResponse(VERIFIED)
    result = _client().verify_token("TT-1")
    assert result.paid and not result.pending
    assert result.approval == "938204312"
    assert ET.fromstring(posted.calls[0]["data"]).findtext("TransactionToken") == "TT-1"


def test_create_token_retries_connect_errors_only():
    retry = _client(max_retries=3)._retry(idempotent=False)
    assert retry.connect == 3
    assert retry.read == 0
    assert retry.status == 0


def test_amount_formatting():
    assert format_amount(Decimal("85000.40"), "UGX") == "85000"
    assert format_amount(Decimal("12.5"), "usd") == "12.50"


def test_parse_response_flattens_children():
    assert parse_response(CREATED)["TransRef"] == "1285DB12G"


@pytest.fixture()
def gateway():
    """A local HTTP gateway; tests script its replies through ``gateway.replies``."""
    class Gateway:
        hits = 0
        delay = 0.0
        replies = []

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            self.rfile.read(int(self.headers.get("Content-Length", 0)))
            Gateway.hits += 1
            time.sleep(Gateway.delay)
            status, body = Gateway.replies.pop(0) if Gateway.replies else (200, VERIFIED)
            try:
                self.send_response(status)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)
            except OSError:
                pass  # client already gave up

        def log_message(self, format, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    Gateway.url = f"http://127.0.0.1:{server.server_address[1]}/API/v6/"
    yield Gateway
    server.shutdown()
    server.server_close()


def test_create_token_read_timeout_is_sent_once(gateway):
    gateway.delay = 1.0
    client = DpoClient(DpoConfig(api_url=gateway.url, company_token="C", timeout=0.3, max_retries=3))
    with pytest.raises(PaymentGatewayTimeout):
        _create(client)
    assert gateway.hits == 1


def test_create_token_server_errors_are_not_retried(gateway):
    gateway.replies = [(503, b"unavailable")]
    client = DpoClient(DpoConfig(api_url=gateway.url, company_token="C", timeout=2.0, max_retries=3))
    with pytest.raises(ExternalServiceError):
        _create(client)
    assert gateway.hits == 1


def test_verify_token_retries_gateway_unavailability(gateway):
    gateway.replies = [(503, b"unavailable"), (503, b"unavailable"), (200, VERIFIED)]
    client = DpoClient(DpoConfig(api_url=gateway.url, company_token="C", timeout=2.0, max_retries=2))
    assert client.verify_token("TT-1").paid
    assert gateway.hits == 3
