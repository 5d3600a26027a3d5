#!/usr/bin/env python3

import json
import sys

from cryptomus.schemas.webhook import Webhook
from cryptomus.services.webhook_verify import sign_webhook


def make_webhook_signature(api_key: str, payload: str) -> str:
    """Generate the signature Cryptomus would attach to a webhook, for testing."""
    webhook = Webhook.model_validate_json(payload)
    return sign_webhook(webhook, api_key)


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: make_sig.py <api_key> <payload>")
        sys.exit(1)

    api_key = sys.argv[1]
    payload = sys.argv[2]

    # Validate payload is valid JSON
    try:
        json.loads(payload)
    except json.JSONDecodeError:
        print("Error: Payload must be valid JSON", file=sys.stderr)
        sys.exit(1)

    print(make_webhook_signature(api_key, payload))
