"""Sign-in pages and the current-user endpoint."""

from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, Form, Request, status
from fastapi.responses import RedirectResponse

import db
from config import SESSION_COOKIE_NAME
from utils import render, safe_next_path
from .service import current_user, require_user

router = APIRouter(tags=["account"])

_SESSION_MAX_AGE = 30 * 24 * 3600


def signin_redirect(request: Request) -> RedirectResponse:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return RedirectResponse(f"/signin?next={quote(target, safe='')}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/signin", include_in_schema=False)
async def signin_page(request: Request, next: str | None = None, user=Depends(current_user)):
    if user:
        return RedirectResponse(safe_next_path(next), status_code=status.HTTP_303_SEE_OTHER)
    return render(request, "signin.html", next=safe_next_path(next), error=None)


@router.post("/signin", include_in_schema=False)
async def signin(request: Request, api_key: str = Form(""), next: str = Form("/studio")):
    user = db.verify_api_key(api_key.strip())
    if not user:
        return render(
            request,
            "signin.html",
            status_code=status.HTTP_401_UNAUTHORIZED,
            next=safe_next_path(next),
            error="That key is invalid or has been revoked.",
        )
    response = RedirectResponse(safe_next_path(next), status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        api_key.strip(),
        max_age=_SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
    )
    return response


@router.post("/signout", include_in_schema=False)
async def signout():
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


@router.get("/api/me", summary="Current user and credit balance")
async def me(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return {
        "user_id": user["user_id"],
        "email": user["email"],
        "name": user["name"],
        "role": user["role"],
        "credits": db.get_credit_balance(user["user_id"]),
    }


def register(app: FastAPI) -> None:
    app.include_router(router)
