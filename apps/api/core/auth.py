"""Centralized authentication dependencies.

Provides user-scoped and service-role Supabase clients, resolves the calling
user, and enforces the role required for statement uploads.
"""

from typing import Any

import structlog
from fastapi import Depends, Header
from supabase import Client, create_client

from apps.api.core.config import settings
from apps.api.core.errors import AuthenticationError, ForbiddenError

logger = structlog.get_logger()


def _get_supabase_url() -> str:
    if not settings.SUPABASE_URL:
        raise RuntimeError("SUPABASE_URL is not configured")
    return settings.SUPABASE_URL


def _get_supabase_anon_key() -> str:
    if not settings.SUPABASE_ANON_KEY:
        raise RuntimeError("SUPABASE_ANON_KEY is not configured")
    return settings.SUPABASE_ANON_KEY


async def get_user_token(authorization: str = Header(default="")) -> str:
    """Extract Bearer token from Authorization header.

    Returns the raw JWT string.
    """
    if not authorization.startswith("Bearer "):
        raise AuthenticationError(
            "Missing or invalid Authorization header. Expected: Bearer <token>"
        )

    token = authorization[7:].strip()
    if not token:
        raise AuthenticationError("Missing bearer token")
    return token


async def get_user_client(token: str = Depends(get_user_token)) -> Client:
    """Provide a Supabase client authenticated with the user's JWT.

    RLS policies will be enforced for all queries.

    Note: We pass an empty string as the refresh token because the API is
    stateless: each request carries a fresh token from the browser and the
    backend never refreshes it.
    """
    client = create_client(_get_supabase_url(), _get_supabase_anon_key())
    client.auth.set_session(token, "")
    return client


def get_service_client() -> Client:
    """Provide a service-role Supabase client (bypasses RLS).

    Used by the command-line import tool.
    """
    if not settings.SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_KEY is not configured")
    return create_client(_get_supabase_url(), settings.SUPABASE_SERVICE_KEY)


async def get_current_user(client: Client = Depends(get_user_client)) -> Any:
    """Resolve the Supabase user behind the bearer token."""
    try:
        user_response = client.auth.get_user()
    except Exception as e:
        logger.warning("auth_get_user_failed", error=str(e))
        raise AuthenticationError("Invalid bearer token")

    if not user_response or not user_response.user:
        raise AuthenticationError("Invalid bearer token")
    return user_response.user


def get_user_role(client: Client, user_id: str) -> str | None:
    """Look up the application role stored in the users table."""
    result = (
        client.table("users")
        .select("role")
        .eq("id", user_id)
        .maybe_single()
        .execute()
    )
    data = getattr(result, "data", None) if result is not None else None
    if not data:
        return None
    return data.get("role")


async def require_upload_role(
    client: Client = Depends(get_user_client),
    user: Any = Depends(get_current_user),
) -> Any:
    """Allow only users holding the upload role (management by default)."""
    role = get_user_role(client, user.id)
    if role != settings.UPLOAD_ROLE:
        logger.info("upload_forbidden", user_id=user.id, role=role)
        raise ForbiddenError(
            f"Only {settings.UPLOAD_ROLE} can upload bank statements"
        )
    return user

