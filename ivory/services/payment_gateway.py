# ivory/services/payment_gateway.py
import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

import requests
from requests import RequestException

from ivory.domain.errors import PaymentGatewayError
from ivory.utils.retry import http_retry
from ivory.utils.settings import PAYSTACK_BASE_URL, PAYSTACK_SECRET_KEY
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

SUCCESS = "success"


def to_minor_units(amount) -> int:
    """Major currency units (naira) -> gateway minor units (kobo)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_paid_at(value) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable paid_at from gateway: {value!r}")
        return None


def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), raw_body, hashlib.sha512).hexdigest()


def verify_webhook_signature(raw_body: bytes, signature: str | None, secret: str) -> bool:
    if not signature or not secret:
        return False
    return hmac.compare_digest(compute_signature(raw_body, secret), signature)


@dataclass
class PaymentVerification:
    """Gateway's canonical view of a transaction."""

    reference: str
    status: str
    channel: str | None = None
    paid_at: datetime | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def successful(self) -> bool:
        return self.status == SUCCESS

    @property
    def order_id(self) -> int | None:
        raw = (self.metadata or {}).get("orderId")
        try:
            return int(raw) if raw is not None else None
        except (TypeError, ValueError):
            return None

    @classmethod
    def from_payload(cls, data: dict) -> "PaymentVerification":
        return cls(
            reference=data.get("reference"),
            status=data.get("status") or "unknown",
            channel=data.get("channel"),
            paid_at=parse_paid_at(data.get("paid_at") or data.get("paidAt")),
            metadata=data.get("metadata") or {},
        )


class PaystackClient:
    def __init__(self, secret_key: str | None = None, base_url: str | None = None, timeout: int = 10):
        self.secret_key = secret_key if secret_key is not None else PAYSTACK_SECRET_KEY
        self.base_url = (base_url or PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def initiate(
        self,
        amount,
        currency: str,
        email: str,
        callback_url: str,
        reference: str,
        metadata: dict,
    ) -> str:
        """
        Opens a payment session and returns the authorization URL for the payer.
        Not retried: a second POST could open a second session.
        """
        url = f"{self.base_url}/transaction/initialize"
        body = {
            "email": email,
            "amount": to_minor_units(amount),
            "currency": currency,
            "callback_url": callback_url,
            "reference": reference,
            "metadata": metadata,
        }
        logger.info(f"PaystackClient POST {url} reference={reference} amount={body['amount']}")

        try:
            resp = requests.post(url, json=body, headers=self._headers(), timeout=self.timeout)
        except RequestException as e:
            raise PaymentGatewayError("Payment initialization failed", details=str(e)) from e

        if not resp.ok:
            raise PaymentGatewayError("Payment initialization failed", details=resp.text)

        data = (resp.json() or {}).get("data") or {}
        authorization_url = data.get("authorization_url")
        if not authorization_url:
            raise PaymentGatewayError("Payment initialization failed", details=resp.text)
        return authorization_url

    @http_retry()
    def _fetch_transaction(self, reference: str) -> requests.Response:
        url = f"{self.base_url}/transaction/verify/{reference}"
        logger.info(f"PaystackClient GET {url}")
        return requests.get(url, headers=self._headers(), timeout=self.timeout)

    def verify(self, reference: str) -> PaymentVerification:
        try:
            resp = self._fetch_transaction(reference)
        except RequestException as e:
            raise PaymentGatewayError("Payment verification failed", details=str(e)) from e

        if not resp.ok:
            raise PaymentGatewayError("Payment verification failed", details=resp.text)

        data = (resp.json() or {}).get("data")
        if not data:
            raise PaymentGatewayError("Unknown payment reference", details=reference)

        verification = PaymentVerification.from_payload(data)
        if not verification.reference:
            verification.reference = reference
        return verification
