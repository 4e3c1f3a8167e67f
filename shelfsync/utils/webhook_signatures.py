"""
Webhook signature validation - verify incoming Shopify webhooks are authentic.

Shopify signs every webhook with HMAC-SHA256 over the raw request body, keyed
with the app's API secret, and sends the base64 digest in X-Shopify-Hmac-Sha256.
The body must be verified exactly as received, before any JSON parsing.
"""
import base64
import hashlib
import hmac
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)

SHOPIFY_HMAC_HEADER = "X-Shopify-Hmac-Sha256"


def compute_shopify_hmac(body: bytes, secret: Union[str, bytes]) -> str:
    """Base64-encoded HMAC-SHA256 of body, as Shopify sends it."""
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    digest = hmac.new(key, body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_shopify_hmac(
    body: bytes,
    signature: Optional[str],
    secret: Union[str, bytes],
) -> bool:
    """
    Validate a Shopify webhook signature.
    Returns True only for a matching signature. Missing signature, empty
    secret, or a length mismatch are all plain non-matches. Never raises.
    """
    if not secret or not signature:
        return False

    try:
        expected = compute_shopify_hmac(body, secret).encode("ascii")
        candidate = signature.strip().encode("utf-8")
    except Exception as e:
        logger.error("Shopify HMAC computation error: %s", str(e))
        return False

    # compare_digest requires equal-length inputs to stay constant-time
    if len(candidate) != len(expected):
        return False
    return hmac.compare_digest(expected, candidate)


def validate_shopify_request(request, body: bytes, secret: str) -> bool:
    """Check the signature header of a FastAPI request against its raw body."""
    signature = request.headers.get(SHOPIFY_HMAC_HEADER)
    return verify_shopify_hmac(body, signature, secret)
