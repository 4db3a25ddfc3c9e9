import logging
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from app.core.exceptions import ExternalServiceError, PaymentGatewayRejected, PaymentGatewayTimeout

logger = logging.getLogger(__name__)

RESULT_OK = "000"
RESULT_NOT_PAID_YET = "900"
ZERO_DECIMAL_CURRENCIES = {"UGX"}


@dataclass
class DpoConfig:
    api_url: str            # https://secure.3gdirectpay.com/API/v6/
    company_token: str
    service_type: str = "45"
    ptl: int = 5            # payment time limit (hours)
    timeout: float = 20.0
    max_retries: int = 2


@dataclass
class VerifyResult:
    result_code: str
    explanation: str
    approval: str = ""
    trans_ref: str = ""

    @property
    def paid(self) -> bool:
        return self.result_code == RESULT_OK

    @property
    def pending(self) -> bool:
        return self.result_code == RESULT_NOT_PAID_YET


def format_amount(amount, currency: str) -> str:
    value = Decimal(str(amount))
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return str(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _text(parent: ET.Element, tag: str, value) -> ET.Element:
    el = ET.SubElement(parent, tag)
    el.text = str(value)
    return el


def parse_response(body: bytes | str) -> dict[str, str]:
    """Flatten the API3G response into {tag: text} for its direct children."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ExternalServiceError("Payment gateway returned an invalid response") from e
    return {child.tag: (child.text or "").strip() for child in root}


class DpoClient:
    def __init__(self, cfg: DpoConfig, slots: threading.BoundedSemaphore | None = None):
        self.cfg = cfg
        # Caps concurrent outbound calls; shared across clients when passed in.
        self._slots = slots or threading.BoundedSemaphore(10)

    def build_create_token_xml(self, *, amount, currency: str, company_ref: str, redirect_url: str,
                               back_url: str, service_description: str, service_date: datetime) -> bytes:
        root = ET.Element("API3G")
        _text(root, "CompanyToken", self.cfg.company_token)
        _text(root, "Request", "createToken")
        tx = ET.SubElement(root, "Transaction")
        _text(tx, "PaymentAmount", format_amount(amount, currency))
        _text(tx, "PaymentCurrency", currency.upper())
        _text(tx, "CompanyRef", company_ref)
        _text(tx, "RedirectURL", redirect_url)
        _text(tx, "BackURL", back_url)
        _text(tx, "CompanyRefUnique", "0")
        _text(tx, "PTL", self.cfg.ptl)
        service = ET.SubElement(ET.SubElement(root, "Services"), "Service")
        _text(service, "ServiceType", self.cfg.service_type)
        _text(service, "ServiceDescription", service_description)
        _text(service, "ServiceDate", service_date.strftime("%Y/%m/%d %H:%M"))
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def build_verify_token_xml(self, transaction_token: str) -> bytes:
        root = ET.Element("API3G")
        _text(root, "CompanyToken", self.cfg.company_token)
        _text(root, "Request", "verifyToken")
        _text(root, "TransactionToken", transaction_token)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def _retry(self, idempotent: bool) -> Retry:
        if idempotent:
            return Retry(total=self.cfg.max_retries, backoff_factor=0.5,
                         allowed_methods=frozenset({"POST"}), status_forcelist=(502, 503, 504),
                         raise_on_status=False)
        # createToken is not idempotent: retry only when the request never left (connect errors).
        return Retry(total=self.cfg.max_retries, connect=self.cfg.max_retries, read=0, status=0,
                     other=0, backoff_factor=0.5, raise_on_status=False)

    def request(self, body: bytes, idempotent: bool = False) -> dict[str, str]:
        if not self._slots.acquire(timeout=self.cfg.timeout):
            raise ExternalServiceError("Payment gateway is busy, please try again")
        try:
            with requests.Session() as http:
                adapter = HTTPAdapter(max_retries=self._retry(idempotent))
                http.mount("https://", adapter)
                http.mount("http://", adapter)
                r = http.post(self.cfg.api_url, data=body, headers={"Content-Type": "application/xml"},
                              timeout=self.cfg.timeout)
        except requests.ConnectTimeout as e:
            logger.error("DPO connect timeout: %s", e)
            raise ExternalServiceError("Payment gateway unreachable") from e
        except requests.Timeout as e:
            logger.error("DPO read timeout after %ss: %s", self.cfg.timeout, e)
            raise PaymentGatewayTimeout() from e
        except requests.RequestException as e:
            logger.error("DPO request failed: %s", e)
            raise ExternalServiceError("Payment gateway request failed") from e
        finally:
            self._slots.release()

        if r.status_code >= 400:
            logger.error("DPO HTTP %s: %s", r.status_code, (r.text or "")[:500])
            raise ExternalServiceError("Payment gateway request failed")
        return parse_response(r.content)

    def create_token(self, *, amount, currency: str, company_ref: str, redirect_url: str, back_url: str,
                     service_description: str, service_date: datetime) -> str:
        body = self.build_create_token_xml(
            amount=amount, currency=currency, company_ref=company_ref, redirect_url=redirect_url,
            back_url=back_url, service_description=service_description, service_date=service_date,
        )
        data = self.request(body, idempotent=False)
        result = data.get("Result", "")
        token = data.get("TransToken") or data.get("TransactionToken") or ""
        if result != RESULT_OK or not token:
            explanation = data.get("ResultExplanation", "")
            logger.warning("DPO createToken rejected ref=%s result=%s: %s", company_ref, result, explanation)
            raise PaymentGatewayRejected(result_code=result, explanation=explanation)
        return token

    def verify_token(self, transaction_token: str) -> VerifyResult:
        data = self.request(self.build_verify_token_xml(transaction_token), idempotent=True)
        if not data.get("Result"):
            raise ExternalServiceError("Payment gateway returned an invalid response")
        return VerifyResult(
            result_code=data["Result"],
            explanation=data.get("ResultExplanation", ""),
            approval=data.get("TransactionApproval", ""),
            trans_ref=data.get("TransactionRef", "") or data.get("TransRef", ""),
        )
