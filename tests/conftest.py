"""
Test configuration and fixtures.
Settings are built explicitly (no .env). All remote platforms are mocked with
httpx.MockTransport or AsyncMock; nothing leaves the process.
"""
import json
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from shelfsync.config import Settings
from shelfsync.utils.webhook_signatures import compute_shopify_hmac

WEBHOOK_SECRET = "shpss_test_secret_0123456789"
STORE_DOMAIN = "test-store.myshopify.com"
APP_SERVER = "https://shelfsync.example.com"


def make_settings(**overrides) -> Settings:
    values = {
        "app_env": "test",
        "log_level": "WARNING",
        "shopify_store_domain": STORE_DOMAIN,
        "shopify_access_token": "shpat_test_token",
        "shopify_api_secret": WEBHOOK_SECRET,
        "shopify_app_server": APP_SERVER,
        "xero_client_id": "xero-client-id",
        "xero_client_secret": "xero-client-secret",
        "encryption_key": "",
        "sentry_dsn": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return compute_shopify_hmac(body, secret)


def json_response(data, status_code: int = 200, headers: dict | None = None) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(data).encode(), headers={
        "Content-Type": "application/json",
        **(headers or {}),
    })


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    from shelfsync.main import create_app
    with patch("shelfsync.main.configure_structured_logging"):
        return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient without the lifespan - no Shopify reconcile on startup."""
    return TestClient(app, raise_server_exceptions=False)
