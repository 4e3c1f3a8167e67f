"""
Tests for shelfsync/utils/webhook_signatures.py - Shopify HMAC verification.
"""
import base64
import hashlib
import hmac
from unittest.mock import MagicMock, patch

from shelfsync.utils.webhook_signatures import (
    SHOPIFY_HMAC_HEADER,
    compute_shopify_hmac,
    validate_shopify_request,
    verify_shopify_hmac,
)

SECRET = "hush"
BODY = b'{"inventory_item_id":42,"available":7}'


def _reference_signature(body: bytes, secret: str) -> str:
    return base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()


class TestComputeShopifyHmac:
    def test_matches_reference_hmac(self):
        assert compute_shopify_hmac(BODY, SECRET) == _reference_signature(BODY, SECRET)

    def test_accepts_bytes_secret(self):
        assert compute_shopify_hmac(BODY, SECRET.encode()) == compute_shopify_hmac(BODY, SECRET)

    def test_is_base64_of_32_byte_digest(self):
        assert len(base64.b64decode(compute_shopify_hmac(BODY, SECRET))) == 32


class TestVerifyShopifyHmac:
    def test_valid_signature_accepted(self):
        assert verify_shopify_hmac(BODY, _reference_signature(BODY, SECRET), SECRET) is True

    def test_valid_signature_for_various_bodies(self):
        for body in (b"", b"{}", b"\x00\xff binary", '{"name":"café"}'.encode()):
            assert verify_shopify_hmac(body, compute_shopify_hmac(body, SECRET), SECRET)

    def test_tampered_signature_rejected(self):
        good = compute_shopify_hmac(BODY, SECRET)
        flipped = ("A" if good[0] != "A" else "B") + good[1:]
        assert verify_shopify_hmac(BODY, flipped, SECRET) is False

    def test_last_character_tampered_rejected(self):
        good = compute_shopify_hmac(BODY, SECRET)
        # Final char before '=' padding
        idx = len(good.rstrip("=")) - 1
        swapped = good[:idx] + ("A" if good[idx] != "A" else "B") + good[idx + 1:]
        assert verify_shopify_hmac(BODY, swapped, SECRET) is False

    def test_cross_body_signature_rejected(self):
        other = b'{"inventory_item_id":42,"available":8}'
        assert verify_shopify_hmac(BODY, compute_shopify_hmac(other, SECRET), SECRET) is False

    def test_wrong_secret_rejected(self):
        assert verify_shopify_hmac(BODY, compute_shopify_hmac(BODY, "other"), SECRET) is False

    def test_reserialized_body_rejected(self):
        """Whitespace differences after a JSON round trip break the signature."""
        spaced = b'{"inventory_item_id": 42, "available": 7}'
        assert verify_shopify_hmac(spaced, compute_shopify_hmac(BODY, SECRET), SECRET) is False

    def test_missing_signature_rejected(self):
        assert verify_shopify_hmac(BODY, None, SECRET) is False
        assert verify_shopify_hmac(BODY, "", SECRET) is False

    def test_empty_secret_rejects_everything(self):
        assert verify_shopify_hmac(BODY, compute_shopify_hmac(BODY, ""), "") is False

    def test_bogus_signature_rejected(self):
        assert verify_shopify_hmac(BODY, "bogus", SECRET) is False

    def test_length_mismatch_skips_digest_comparison(self):
        """Unequal lengths are rejected before compare_digest is reached."""
        with patch("shelfsync.utils.webhook_signatures.hmac.compare_digest") as mock_cmp:
            assert verify_shopify_hmac(BODY, "short", SECRET) is False
        mock_cmp.assert_not_called()

    def test_equal_length_uses_constant_time_compare(self):
        good = compute_shopify_hmac(BODY, SECRET)
        with patch(
            "shelfsync.utils.webhook_signatures.hmac.compare_digest",
            return_value=False,
        ) as mock_cmp:
            assert verify_shopify_hmac(BODY, good, SECRET) is False
        mock_cmp.assert_called_once_with(good.encode(), good.encode())

    def test_surrounding_whitespace_tolerated(self):
        good = compute_shopify_hmac(BODY, SECRET)
        assert verify_shopify_hmac(BODY, f" {good} ", SECRET) is True

    def test_non_ascii_signature_does_not_raise(self):
        assert verify_shopify_hmac(BODY, "é" * 44, SECRET) is False


class TestValidateShopifyRequest:
    def test_reads_signature_header(self):
        request = MagicMock()
        request.headers = {SHOPIFY_HMAC_HEADER: compute_shopify_hmac(BODY, SECRET)}
        assert validate_shopify_request(request, BODY, SECRET) is True

    def test_missing_header_rejected(self):
        request = MagicMock()
        request.headers = {}
        assert validate_shopify_request(request, BODY, SECRET) is False
