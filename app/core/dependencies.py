"""
Core dependencies for route protection and service wiring
"""

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader, APIKeyQuery
from supabase import AsyncClient
from typing import Optional
import logging

from app.config import settings
from app.core.exceptions import UnauthorizedError
from app.database.group_store import GroupStore
from app.database.supabase_client import get_supabase
from app.modules.auth.service import AuthService

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)
api_key_query = APIKeyQuery(name="apiKey", auto_error=False)


def get_auth_service() -> AuthService:
    return AuthService(settings.api_key)


def require_api_key(
    header_key: Optional[str] = Security(api_key_header),
    query_key: Optional[str] = Security(api_key_query),
    auth_service: AuthService = Depends(get_auth_service)
) -> str:
    """Reject the request before any store access unless the shared secret matches"""
    presented_key = header_key or query_key
    if not auth_service.authenticate(presented_key):
        raise UnauthorizedError("Invalid or missing API key")
    return presented_key


def get_group_store(supabase: Optional[AsyncClient] = Depends(get_supabase)) -> GroupStore:
    return GroupStore(supabase)


def get_realtime_gateway(request: Request):
    """Gateway instance owned by the running app (see app.main)."""
    return request.app.state.realtime_gateway
