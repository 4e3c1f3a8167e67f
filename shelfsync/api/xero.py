"""
Xero connect flow - authorize redirect and OAuth callback.

Tokens never reach the browser. The callback keeps them server-side and sets
an HttpOnly session cookie instead.
"""
import logging
from html import escape
from typing import Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from shelfsync.api.deps import (
    get_app_settings,
    get_oauth_states,
    get_xero_client,
    get_xero_sessions,
)
from shelfsync.config import Settings
from shelfsync.integrations.xero import XeroOAuthClient
from shelfsync.schemas.xero import XeroTokenSet
from shelfsync.services.xero_session import OAuthStateStore, XeroSessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/xero", tags=["xero"])

SESSION_COOKIE = "xero_session"
FAILURE_PAGE = "<h1>Xero connection failed</h1><p>Please try again.</p>"


@router.get("/redirect")
async def xero_redirect(
    xero: XeroOAuthClient = Depends(get_xero_client),
    states: OAuthStateStore = Depends(get_oauth_states),
):
    """Send the browser to Xero's consent screen."""
    state = states.issue()
    return RedirectResponse(xero.build_authorize_url(state), status_code=307)


@router.get("/callback", response_class=HTMLResponse)
async def xero_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    xero: XeroOAuthClient = Depends(get_xero_client),
    states: OAuthStateStore = Depends(get_oauth_states),
    sessions: XeroSessionStore = Depends(get_xero_sessions),
):
    """Exchange the authorization code, resolve the tenant, store the tokens."""
    if error:
        logger.warning("Xero authorization denied: %s", error, extra={"provider": "xero"})
        return HTMLResponse(FAILURE_PAGE, status_code=400)

    if not states.consume(state):
        logger.warning("Xero callback with unknown or expired state", extra={"provider": "xero"})
        return HTMLResponse("<h1>Invalid or expired request</h1>", status_code=400)

    if not code:
        return HTMLResponse("<h1>Missing authorization code</h1>", status_code=400)

    try:
        tokens = await xero.exchange_code(code)
        connections = await xero.get_connections(tokens.access_token)
    except httpx.HTTPStatusError as e:
        logger.error(
            "Xero OAuth exchange failed: HTTP %s %s",
            e.response.status_code, e.response.text,
            extra={"provider": "xero", "status_code": e.response.status_code},
        )
        return HTMLResponse(FAILURE_PAGE, status_code=502)
    except (httpx.HTTPError, ValidationError, ValueError) as e:
        logger.error("Xero OAuth exchange failed: %s", str(e), extra={"provider": "xero"})
        return HTMLResponse(FAILURE_PAGE, status_code=502)

    tenant = connections[0] if connections else None
    if tenant is None:
        logger.warning("Xero token issued with no connected tenant", extra={"provider": "xero"})

    session_id = sessions.save(XeroTokenSet(
        **tokens.model_dump(),
        tenant_id=tenant.tenantId if tenant else None,
        tenant_name=tenant.tenantName if tenant else None,
    ))

    name = (tenant.tenantName or tenant.tenantId) if tenant else "no organisation"
    response = HTMLResponse(f"<h1>Connected to Xero</h1><p>Organisation: {escape(name)}</p>")
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        httponly=True,
        secure=settings.app_env == "production",
        samesite="lax",
    )
    return response
