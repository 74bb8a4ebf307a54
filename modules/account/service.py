"""Resolve the signed-in user from an issued API key.

Sign-up and session management belong to the external auth provider; this
application only needs to know which user an already issued key belongs
to.  Browsers carry the key in a cookie, API clients in a header.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyCookie, APIKeyHeader

import db
from config import API_KEY_HEADER_NAME, SESSION_COOKIE_NAME

_api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)
_session_cookie = APIKeyCookie(name=SESSION_COOKIE_NAME, auto_error=False)


async def current_user(
    request: Request,
    api_key: str | None = Depends(_api_key_header),
    session_key: str | None = Depends(_session_cookie),
) -> Dict[str, Any] | None:
    user = None
    candidate = api_key or session_key
    if candidate:
        user = db.verify_api_key(candidate)
    request.state.user = user
    return user


async def require_user(user: Dict[str, Any] | None = Depends(current_user)) -> Dict[str, Any]:
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    return user
