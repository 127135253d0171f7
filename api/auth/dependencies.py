"""
Auth dependencies for protected FastAPI routes.

Protected endpoints share one static bearer token from settings.
"""

from __future__ import annotations

import secrets

from fastapi import Depends, Header

from core.config import Settings, get_settings
from core.errors import AuthError

MISSING_HEADER_MESSAGE = "Missing or invalid authorization header. Use: Bearer <token>"
INVALID_TOKEN_MESSAGE = "Invalid authentication token"


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    scheme, _, token = raw.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise AuthError(MISSING_HEADER_MESSAGE)
    return token


async def require_internal_token(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    token = _extract_bearer_token(authorization)
    if not secrets.compare_digest(token.encode("utf-8"), settings.internal_api_token.encode("utf-8")):
        raise AuthError(INVALID_TOKEN_MESSAGE, code="FORBIDDEN", status_code=403)
