"""
FastAPI dependencies - hand route handlers the state owned by the app.
"""
from fastapi import Request

from shelfsync.config import Settings
from shelfsync.integrations.xero import XeroOAuthClient
from shelfsync.services.inventory_log import InventoryLog
from shelfsync.services.xero_session import OAuthStateStore, XeroSessionStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_inventory_log(request: Request) -> InventoryLog:
    return request.app.state.inventory_log


def get_xero_client(request: Request) -> XeroOAuthClient:
    return request.app.state.xero_client


def get_oauth_states(request: Request) -> OAuthStateStore:
    return request.app.state.oauth_states


def get_xero_sessions(request: Request) -> XeroSessionStore:
    return request.app.state.xero_sessions
