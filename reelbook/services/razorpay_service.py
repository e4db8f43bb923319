"""Razorpay integration for payment processing.

Wraps the Razorpay Python SDK for order creation. Amounts sent to the
gateway are in paise; everything stored locally is in rupees.

Callback verification is a local HMAC check and never calls the gateway:
the signature is HMAC-SHA256 over ``"<order_id>|<payment_id>"`` keyed with
the account's key secret, hex encoded.
"""

import hashlib
import hmac

import razorpay
import requests
from razorpay.errors import BadRequestError, GatewayError, ServerError

from reelbook.core.config import settings


# Failures the SDK can surface from an order call
GATEWAY_ERRORS = (BadRequestError, GatewayError, ServerError, requests.RequestException)


def _client() -> razorpay.Client:
    """Build a client from the configured key pair."""
    return razorpay.Client(auth=(settings.razorpay_key_id, settings.razorpay_key_secret))


def create_order(amount_paise: int, receipt: str, notes: dict | None = None) -> dict:
    """Open an order on the gateway. Returns the order object as a dict (``id``, ``amount``, ...)."""
    return _client().order.create(
        {
            "amount": amount_paise,
            "currency": settings.payment_currency,
            "receipt": receipt,
            "notes": {k: str(v) for k, v in (notes or {}).items() if v is not None},
        }
    )


def compute_signature(order_id: str, payment_id: str, secret: str | None = None) -> str:
    key = settings.razorpay_key_secret if secret is None else secret
    payload = f"{order_id}|{payment_id}".encode()
    return hmac.new(key.encode(), payload, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str | None = None) -> bool:
    """Check a checkout callback signature. Hex case is ignored."""
    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode(), signature.lower().encode())


def compute_webhook_signature(payload: bytes, secret: str | None = None) -> str:
    key = settings.razorpay_webhook_secret if secret is None else secret
    return hmac.new(key.encode(), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: bytes, signature: str, secret: str | None = None) -> bool:
    """Check the ``X-Razorpay-Signature`` header against the raw request body."""
    key = settings.razorpay_webhook_secret if secret is None else secret
    if not key:
        return False
    expected = compute_webhook_signature(payload, key)
    return hmac.compare_digest(expected.encode(), signature.lower().encode())
