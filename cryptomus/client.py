import json
import logging
from typing import Any, Optional, Union

import httpx

from cryptomus.core.config import DEFAULT_BASE_URL, Settings, get_settings
from cryptomus.core.errors import ValidationError
from cryptomus.schemas.webhook import (
    ResendWebhookRequest,
    ResendWebhookResponse,
    TestWebhookRequest,
    TestWebhookResponse,
    Webhook,
)
from cryptomus.services import webhook_verify
from cryptomus.services.sign import sign_request

logger = logging.getLogger(__name__)

RESEND_WEBHOOK_ENDPOINT = "/payment/resend"
TEST_PAYMENT_WEBHOOK_ENDPOINT = "/test-webhook/payment"
TEST_PAYOUT_WEBHOOK_ENDPOINT = "/test-webhook/payout"


class Cryptomus:
    """
    Client for the Cryptomus merchant API.

    Holds the merchant id and both API keys: the payment key signs payment
    requests and verifies payment webhooks, the payout key does the same for
    payouts. Transport errors (httpx.HTTPError) and decode errors
    (pydantic.ValidationError) reach the caller unchanged; nothing is retried.
    """

    def __init__(
        self,
        merchant_id: str,
        payment_api_key: str,
        payout_api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self._merchant_id = merchant_id
        self._payment_api_key = payment_api_key
        self._payout_api_key = payout_api_key
        self.base_url = base_url.rstrip("/")
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> "Cryptomus":
        settings = settings or get_settings()
        return cls(
            merchant_id=settings.merchant_id,
            payment_api_key=settings.payment_api_key,
            payout_api_key=settings.payout_api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            http_client=http_client,
        )

    @property
    def merchant_id(self) -> str:
        return self._merchant_id

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> "Cryptomus":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---------- transport ----------
    def _fetch(
        self, method: str, endpoint: str, payload: dict[str, Any], api_key: str
    ) -> httpx.Response:
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        headers = {
            "merchant": self._merchant_id,
            "sign": sign_request(api_key, body),
            "Content-Type": "application/json",
        }
        logger.info(f"{method} {endpoint}")
        r = self._http.request(
            method, f"{self.base_url}{endpoint}", content=body, headers=headers
        )
        logger.info(f"{method} {endpoint} -> {r.status_code}")
        r.raise_for_status()
        return r

    # ---------- webhooks ----------
    def parse_webhook(
        self, raw_body: Union[bytes, str], verify_sign: bool = True
    ) -> Webhook:
        """
        Decode an inbound webhook body and check its signature.

        The key is picked by the notification type. On success the returned
        record has ``sign`` cleared; with ``verify_sign=False`` it is returned
        as received.
        """
        return webhook_verify.parse_webhook(
            raw_body,
            self._payment_api_key,
            self._payout_api_key,
            verify_sign=verify_sign,
        )

    def resend_webhook(self, request: ResendWebhookRequest) -> ResendWebhookResponse:
        if not request.has_identifier():
            raise ValidationError(
                "you should pass one of required values [uuid, order_id]"
            )

        r = self._fetch(
            "POST", RESEND_WEBHOOK_ENDPOINT, request.payload(), self._payment_api_key
        )
        return ResendWebhookResponse.model_validate_json(r.content)

    def test_payment_webhook(self, request: TestWebhookRequest) -> TestWebhookResponse:
        r = self._fetch(
            "POST",
            TEST_PAYMENT_WEBHOOK_ENDPOINT,
            request.payload(),
            self._payment_api_key,
        )
        return TestWebhookResponse.model_validate_json(r.content)

    def test_payout_webhook(self, request: TestWebhookRequest) -> TestWebhookResponse:
        r = self._fetch(
            "POST",
            TEST_PAYOUT_WEBHOOK_ENDPOINT,
            request.payload(),
            self._payout_api_key,
        )
        return TestWebhookResponse.model_validate_json(r.content)
