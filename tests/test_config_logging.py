"""
Tests for shelfsync/config.py and shelfsync/utils/logging.py.
"""
import json
import logging

import pytest
from pydantic import ValidationError

from conftest import make_settings
from shelfsync.config import Settings
from shelfsync.utils.logging import (
    StructuredJsonFormatter,
    configure_structured_logging,
    generate_correlation_id,
    get_correlation_id,
    get_shopify_delivery,
    reset_shopify_delivery,
    set_correlation_id,
    set_shopify_delivery,
)


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in ("PORT", "APP_PORT", "SHOPIFY_API_VERSION", "SHOPIFY_WEBHOOK_TOPIC", "INVENTORY_LOG_CAPACITY"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)

        assert settings.app_port == 3000
        assert settings.shopify_api_version == "2024-04"
        assert settings.shopify_webhook_topic == "inventory_levels/update"
        assert settings.inventory_log_capacity == 20
        assert settings.shopify_timeout_seconds == 10.0

    def test_reads_original_environment_names(self, monkeypatch):
        monkeypatch.setenv("SHOPIFY_STORE_DOMAIN", "env-store.myshopify.com")
        monkeypatch.setenv("SHOPIFY_API_SECRET", "env-secret")
        monkeypatch.setenv("SHOPIFY_APP_SERVER", "https://env.example.com/")
        monkeypatch.setenv("PORT", "8080")

        settings = Settings(_env_file=None)

        assert settings.shopify_store_domain == "env-store.myshopify.com"
        assert settings.shopify_api_secret == "env-secret"
        assert settings.app_port == 8080
        assert settings.inventory_webhook_address == "https://env.example.com/webhook/inventory"

    def test_frozen(self):
        settings = make_settings()
        with pytest.raises(ValidationError):
            settings.shopify_api_secret = "changed"

    def test_xero_callback_defaults_to_app_server(self):
        settings = make_settings(shopify_app_server="https://a.example.com")
        assert settings.xero_callback_url == "https://a.example.com/xero/callback"

    def test_xero_callback_override(self):
        settings = make_settings(xero_redirect_uri="https://b.example.com/cb")
        assert settings.xero_callback_url == "https://b.example.com/cb"

    def test_missing_values(self):
        settings = make_settings(shopify_access_token="", xero_client_secret="")
        assert settings.missing_values() == ["SHOPIFY_ACCESS_TOKEN", "XERO_CLIENT_SECRET"]
        assert make_settings().missing_values() == []

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValidationError):
            make_settings(inventory_log_capacity=0)


class TestStructuredLogging:
    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord("shelfsync.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formats_json_line(self):
        set_correlation_id("cid-1")
        line = StructuredJsonFormatter().format(self._record())
        data = json.loads(line)

        assert data["level"] == "INFO"
        assert data["logger"] == "shelfsync.test"
        assert data["message"] == "hello world"
        assert data["correlation_id"] == "cid-1"

    def test_includes_known_extras(self):
        line = StructuredJsonFormatter().format(
            self._record(topic="inventory_levels/update", inventory_item_id=42, password="x"),
        )
        data = json.loads(line)

        assert data["topic"] == "inventory_levels/update"
        assert data["inventory_item_id"] == 42
        assert "password" not in data

    def test_includes_shopify_delivery_context(self):
        token = set_shopify_delivery({
            "X-Shopify-Topic": "inventory_levels/update",
            "X-Shopify-Webhook-Id": "b54557e4-bdd9-4b37-8a5f-bf7d70bcd043",
            "X-Shopify-Shop-Domain": "test-store.myshopify.com",
        })
        try:
            data = json.loads(StructuredJsonFormatter().format(self._record()))
        finally:
            reset_shopify_delivery(token)

        assert data["shopify_topic"] == "inventory_levels/update"
        assert data["shopify_webhook_id"] == "b54557e4-bdd9-4b37-8a5f-bf7d70bcd043"
        assert data["shopify_shop"] == "test-store.myshopify.com"
        assert "shopify_triggered_at" not in data
        assert get_shopify_delivery() is None

    def test_no_delivery_context_outside_webhooks(self):
        data = json.loads(StructuredJsonFormatter().format(self._record()))
        assert not any(key.startswith("shopify_") for key in data)

    def test_correlation_id_helpers(self):
        cid = generate_correlation_id()
        assert len(cid) == 32
        set_correlation_id(cid)
        assert get_correlation_id() == cid

    def test_configure_installs_single_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_structured_logging("debug")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredJsonFormatter)
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
