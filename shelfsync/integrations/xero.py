"""
Xero OAuth 2.0 integration - authorization code flow.

1. Redirect the browser to the authorize URL with a one-time state.
2. Exchange the returned code at the token endpoint (HTTP Basic client auth).
3. Look up the tenant the user connected via GET /connections.
"""
import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from shelfsync.schemas.xero import XeroConnection, XeroTokenResponse

logger = logging.getLogger(__name__)

XERO_AUTHORIZE_URL = "https://login.xero.com/identity/connect/authorize"
XERO_TOKEN_URL = "https://identity.xero.com/connect/token"
XERO_CONNECTIONS_URL = "https://api.xero.com/connections"
XERO_SCOPES = (
    "offline_access accounting.transactions accounting.contacts "
    "accounting.settings openid profile email"
)
TIMEOUT = 10.0


class XeroOAuthClient:
    """Xero identity + connections client."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._transport = transport

    def build_authorize_url(self, state: str) -> str:
        query = urlencode({
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": XERO_SCOPES,
            "state": state,
        })
        return f"{XERO_AUTHORIZE_URL}?{query}"

    async def exchange_code(self, code: str) -> XeroTokenResponse:
        """Trade an authorization code for an access/refresh token pair."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                XERO_TOKEN_URL,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.redirect_uri,
                },
                auth=(self.client_id, self.client_secret),
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            return XeroTokenResponse.model_validate(response.json())

    async def get_connections(self, access_token: str) -> list[XeroConnection]:
        """Tenants (organisations) the token is authorized for."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(
                XERO_CONNECTIONS_URL,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
            )
            response.raise_for_status()
            return [XeroConnection.model_validate(item) for item in response.json()]
