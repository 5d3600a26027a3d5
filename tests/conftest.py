import json
import logging
import os
from typing import Iterator

import pytest

# Set test environment variables
os.environ.update(
    {
        "CRYPTOMUS_MERCHANT_ID": "merchant-test",
        "CRYPTOMUS_PAYMENT_API_KEY": "payment-key",
        "CRYPTOMUS_PAYOUT_API_KEY": "payout-key",
        "CRYPTOMUS_BASE_URL": "https://api.cryptomus.test/v1",
    }
)

# Import package modules after setting environment variables
from cryptomus.client import Cryptomus
from cryptomus.core.config import Settings, get_settings
from cryptomus.schemas.webhook import Webhook
from cryptomus.services.webhook_verify import sign_webhook

logger = logging.getLogger(__name__)


@pytest.fixture
def settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def client(settings: Settings) -> Iterator[Cryptomus]:
    c = Cryptomus.from_settings(settings)
    yield c
    c.close()


@pytest.fixture
def payment_webhook_data() -> dict:
    return {
        "type": "payment",
        "uuid": "62f88b36-a9d5-4fa6-aa26-e040c3dbf26d",
        "order_id": "97a75bf8eda5cca41ba9d2e104840fcd",
        "amount": "3.00000000",
        "payment_amount": "3.00000000",
        "payment_amount_usd": "0.23",
        "merchant_amount": "2.94000000",
        "commission": "0.06000000",
        "is_final": True,
        "status": "paid",
        "from": "THgEWubVc8tPKXLJ4VZ5zbiiAK7AgqSeGH",
        "wallet_address_uuid": None,
        "network": "tron",
        "currency": "TRX",
        "payer_currency": "TRX",
        "additional_data": "https://shop.example/orders/97a75bf8",
        "convert": {
            "to_currency": "USDT",
            "commission": None,
            "rate": "0.07700000",
            "amount": "0.22638000",
        },
        "txid": "6f0d9c8374db57cac0d806251473de754f361c83a03cd805f74aa9da3193486b",
    }


@pytest.fixture
def payout_webhook_data() -> dict:
    return {
        "type": "payout",
        "uuid": "a7c0caec-a594-4aaa-b1c4-77d511857594",
        "order_id": "payout-1",
        "amount": "12.5",
        "merchant_amount": "12.8",
        "commission": "0.3",
        "is_final": True,
        "status": "paid",
        "currency": "USDT",
        "network": "tron",
        "payer_currency": "USDT",
        "payer_amount": "12.5",
        "txid": "0x9f1c",
    }


def _signed_body(data: dict, api_key: str) -> bytes:
    sign = sign_webhook(Webhook.model_validate(data), api_key)
    logger.info(f"Test signature: {sign}")
    return json.dumps({**data, "sign": sign}).encode()


@pytest.fixture
def signed_payment_body(payment_webhook_data: dict, settings: Settings) -> bytes:
    return _signed_body(payment_webhook_data, settings.payment_api_key)


@pytest.fixture
def signed_payout_body(payout_webhook_data: dict, settings: Settings) -> bytes:
    return _signed_body(payout_webhook_data, settings.payout_api_key)
