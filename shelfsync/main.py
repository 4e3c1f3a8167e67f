"""
shelfsync - Shopify inventory webhook receiver with Xero onboarding.
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shelfsync import __version__
from shelfsync.api.router import api_router
from shelfsync.config import Settings, get_settings
from shelfsync.integrations.shopify import ShopifyAdminClient
from shelfsync.integrations.xero import XeroOAuthClient
from shelfsync.services.inventory_log import InventoryLog
from shelfsync.services.webhook_registration import reconcile_webhook
from shelfsync.services.xero_session import OAuthStateStore, XeroSessionStore
from shelfsync.utils.encryption import TokenCipher
from shelfsync.utils.logging import (
    configure_structured_logging,
    generate_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger("shelfsync")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Injects a correlation ID into every request context and response header."""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("X-Correlation-ID") or generate_correlation_id()
        set_correlation_id(cid)
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response


def build_shopify_client(settings: Settings) -> ShopifyAdminClient:
    return ShopifyAdminClient(
        store_domain=settings.shopify_store_domain,
        access_token=settings.shopify_access_token,
        api_version=settings.shopify_api_version,
        timeout=settings.shopify_timeout_seconds,
    )


def _init_sentry(settings: Settings) -> None:
    try:
        import sentry_sdk
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=0.1,
            environment=settings.app_env,
        )
        logger.info("Sentry initialized")
    except Exception as e:
        logger.warning("Sentry initialization failed: %s", str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: reconcile the Shopify webhook subscription exactly once.
    The server does not accept connections until this returns, so webhook
    delivery never races subscription confirmation.
    """
    settings: Settings = app.state.settings
    logger.info(
        "shelfsync starting up (env=%s, store=%s)",
        settings.app_env, settings.shopify_store_domain or "<unset>",
    )

    for name in settings.missing_values():
        logger.warning("%s not set - dependent calls will fail", name)

    if settings.sentry_dsn:
        _init_sentry(settings)

    app.state.webhook_registration = await reconcile_webhook(
        build_shopify_client(settings),
        topic=settings.shopify_webhook_topic,
        address=settings.inventory_webhook_address,
    )
    if not app.state.webhook_registration.registered:
        logger.warning(
            "Continuing without confirmed webhook registration: %s",
            app.state.webhook_registration.error,
        )

    yield

    logger.info("shelfsync shutdown complete (%d inventory updates in memory)", len(app.state.inventory_log))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Application factory."""
    settings = settings or get_settings()

    configure_structured_logging(settings.log_level)

    application = FastAPI(
        title="shelfsync",
        description="Shopify inventory webhook receiver with Xero onboarding",
        version=__version__,
        lifespan=lifespan,
    )

    # State owned by the app; only the webhook route mutates inventory_log
    application.state.settings = settings
    application.state.inventory_log = InventoryLog(settings.inventory_log_capacity)
    application.state.webhook_registration = None
    application.state.xero_client = XeroOAuthClient(
        client_id=settings.xero_client_id,
        client_secret=settings.xero_client_secret,
        redirect_uri=settings.xero_callback_url,
        timeout=settings.xero_timeout_seconds,
    )
    application.state.oauth_states = OAuthStateStore()
    application.state.xero_sessions = XeroSessionStore(TokenCipher(settings.encryption_key))

    application.add_middleware(CorrelationIdMiddleware)
    application.include_router(api_router)

    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.app_host, port=settings.app_port, log_config=None)
