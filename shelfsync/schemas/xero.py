"""
Xero OAuth schemas.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class XeroTokenResponse(BaseModel):
    """Token endpoint response (authorization_code grant)."""
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    expires_in: int = 1800
    token_type: str = "Bearer"
    scope: Optional[str] = None


class XeroConnection(BaseModel):
    """One entry of GET /connections."""
    model_config = ConfigDict(extra="ignore")

    tenantId: str
    tenantName: Optional[str] = None
    tenantType: Optional[str] = None


class XeroTokenSet(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    expires_in: int = 1800
    token_type: str = "Bearer"
    scope: Optional[str] = None
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None
