import hmac
import json
import logging
import re
from typing import Union

from cryptomus.core.errors import (
    InvalidSignatureError,
    MissingSignatureError,
    UnknownWebhookTypeError,
)
from cryptomus.schemas.webhook import Webhook, WebhookType
from cryptomus.services.sign import sign_request

logger = logging.getLogger(__name__)

# A slash preceded by an even run of backslashes (zero included) is unescaped.
_UNESCAPED_SLASH = re.compile(r"(?<!\\)((?:\\\\)*)/")


def escape_slashes(text: str) -> str:
    """Write every ``/`` as ``\\/``, the way the vendor's JSON encoder does."""
    return _UNESCAPED_SLASH.sub(r"\1\\/", text)


def canonicalize(webhook: Webhook) -> bytes:
    """Serialize a webhook into the exact bytes its signature covers."""
    encoded = json.dumps(
        webhook.to_signed_dict(), ensure_ascii=False, separators=(",", ":")
    )
    return escape_slashes(encoded).encode("utf-8")


def sign_webhook(webhook: Webhook, api_key: str) -> str:
    return sign_request(api_key, canonicalize(webhook))


def select_api_key(webhook_type: str, payment_api_key: str, payout_api_key: str) -> str:
    try:
        kind = WebhookType(webhook_type)
    except ValueError:
        raise UnknownWebhookTypeError(webhook_type) from None

    match kind:
        case WebhookType.PAYMENT:
            return payment_api_key
        case WebhookType.PAYOUT:
            return payout_api_key


def verify(webhook: Webhook, payment_api_key: str, payout_api_key: str) -> Webhook:
    """
    Check the signature embedded in ``webhook``.

    The ``sign`` field is cleared on the record whether or not verification
    succeeds. Raises MissingSignatureError, UnknownWebhookTypeError or
    InvalidSignatureError.
    """
    if webhook.sign is None:
        logger.warning(f"Rejected {webhook.type} webhook {webhook.uuid}: no signature")
        raise MissingSignatureError()

    received = webhook.sign
    webhook.sign = None

    api_key = select_api_key(webhook.type, payment_api_key, payout_api_key)

    payload = canonicalize(webhook)
    logger.debug(f"Canonical webhook payload: {payload!r}")
    expected = sign_request(api_key, payload)

    if not hmac.compare_digest(expected.encode(), received.encode()):
        logger.warning(f"Rejected {webhook.type} webhook {webhook.uuid}: bad signature")
        raise InvalidSignatureError()

    logger.info(f"Verified {webhook.type} webhook {webhook.uuid}")
    return webhook


def parse_webhook(
    raw_body: Union[bytes, str],
    payment_api_key: str,
    payout_api_key: str,
    verify_sign: bool = True,
) -> Webhook:
    """
    Decode an inbound notification and, if asked, verify it.

    Decode failures propagate as pydantic.ValidationError.
    """
    webhook = Webhook.model_validate_json(raw_body)
    if verify_sign:
        verify(webhook, payment_api_key, payout_api_key)
    return webhook
