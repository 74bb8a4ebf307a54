"""Operator API guarded by the admin key."""

from __future__ import annotations

import hmac
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, status
from pydantic import BaseModel, Field

import db
from config import ADMIN_API_KEY
from modules.credit.service import register_user
from modules.credit.settings import TYPE_ADMIN_GRANT

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


class CreateUserRequest(BaseModel):
    email: str = Field(..., description="Email address of the new user")
    name: str | None = Field(default=None)
    issue_api_key: bool = Field(default=True, description="Issue an API key right away")


class GrantCreditsRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Number of credits to add")
    description: str = Field(default="Manual credit grant")
    expire_days: int | None = Field(default=None, ge=1)


class RoleRequest(BaseModel):
    role: str = Field(..., pattern="^(user|admin)$")


def _operator_denied(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "ApiKey"},
    )


async def require_admin(
    admin_key: str | None = Header(default=None, alias="X-Admin-API-Key"),
) -> None:
    expected = (ADMIN_API_KEY or "").strip()
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Operator access is disabled: set ADMIN_API_KEY to enable /api/admin.",
        )
    if not admin_key:
        raise _operator_denied("Send the operator key in X-Admin-API-Key.")
    if not hmac.compare_digest(admin_key, expected):
        logger.warning("Rejected operator request with a wrong key")
        raise _operator_denied("Operator key not recognised.")


def _require_existing_user(user_id: int) -> Dict[str, Any]:
    user = db.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@admin_router.post("/users", summary="Create a user", status_code=status.HTTP_201_CREATED)
async def admin_create_user(payload: CreateUserRequest, _: None = Depends(require_admin)):
    try:
        user = register_user(payload.email, payload.name)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    result: Dict[str, Any] = {"user": user}
    if payload.issue_api_key:
        result["api_key"] = db.ensure_user_api_key(user["user_id"])
    logger.info("Operator created user", extra={"user_id": user["user_id"]})
    return result


@admin_router.get("/users", summary="List users")
async def admin_list_users(limit: int = 20, offset: int = 0, _: None = Depends(require_admin)):
    limit = max(1, min(limit, 100))
    return {"users": db.list_users(limit=limit, offset=max(0, offset))}


@admin_router.get("/users/{user_id}", summary="Inspect a user")
async def admin_get_user(user_id: int, _: None = Depends(require_admin)):
    user = _require_existing_user(user_id)
    return {
        "user": user,
        "transactions": db.list_credit_transactions(user_id),
        "purchases": db.list_purchases(user_id),
    }


@admin_router.post("/users/{user_id}/credits", summary="Grant credits to a user")
async def admin_grant_credits(
    user_id: int,
    payload: GrantCreditsRequest,
    _: None = Depends(require_admin),
):
    _require_existing_user(user_id)
    db.add_credits(
        user_id,
        payload.amount,
        TYPE_ADMIN_GRANT,
        description=payload.description,
        expire_days=payload.expire_days,
    )
    logger.info("Operator granted credits", extra={"user_id": user_id, "amount": payload.amount})
    return {"user_id": user_id, "credits": db.get_credit_balance(user_id)}


@admin_router.post("/users/{user_id}/role", summary="Change a user's role")
async def admin_set_role(user_id: int, payload: RoleRequest, _: None = Depends(require_admin)):
    try:
        db.set_user_role(user_id, payload.role)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"user_id": user_id, "role": payload.role}


@admin_router.get("/users/{user_id}/api-key", summary="Show a user's studio key")
async def admin_get_api_key(user_id: int, reveal: bool = False, _: None = Depends(require_admin)):
    info = db.get_user_api_key(user_id, reveal=reveal)
    if not info:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if reveal and info.get("api_key"):
        logger.info("Studio key revealed to operator", extra={"user_id": user_id})
    return info


def _key_action(user_id: int, action) -> Any:
    try:
        return action(user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@admin_router.post("/users/{user_id}/api-key/regenerate", summary="Replace a user's studio key")
async def admin_regenerate_api_key(user_id: int, _: None = Depends(require_admin)):
    api_key = _key_action(user_id, db.regenerate_user_api_key)
    logger.info("Studio key rotated", extra={"user_id": user_id})
    return {
        "user_id": user_id,
        "api_key": api_key,
        "message": "New studio key issued; the previous key no longer signs in.",
    }


@admin_router.post("/users/{user_id}/api-key/revoke", summary="Revoke a user's studio key")
async def admin_revoke_api_key(user_id: int, _: None = Depends(require_admin)):
    _key_action(user_id, db.revoke_user_api_key)
    logger.info("Studio key revoked", extra={"user_id": user_id})
    return {"user_id": user_id, "message": "Studio key revoked; the user is signed out everywhere."}


@admin_router.post("/users/{user_id}/api-key/issue", summary="Issue a studio key if the user has none")
async def admin_issue_api_key(user_id: int, _: None = Depends(require_admin)):
    api_key = _key_action(user_id, db.ensure_user_api_key)
    return {"user_id": user_id, "api_key": api_key, "message": "Studio key ready for sign-in."}


@admin_router.post("/credits/expire", summary="Expire overdue credit grants")
async def admin_expire_credits(_: None = Depends(require_admin)):
    return {"expired": db.expire_credits()}


def register(app: FastAPI) -> None:
    app.include_router(admin_router)
