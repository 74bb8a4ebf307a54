"""Credit balance, credit check and the payment webhook."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status

import db
from modules.account.service import require_user
from modules.studio.settings import DEFAULT_DURATION, DEFAULT_QUALITY
from .service import PaymentEventError, check_credits, fulfill_payment_event, verify_signature
from .settings import SIGNATURE_HEADER, TRANSACTION_HISTORY_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["credits"])


@router.get("/credits", summary="Credit balance and recent transactions")
def credits(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return {
        "credits": db.get_credit_balance(user["user_id"]),
        "transactions": db.list_credit_transactions(user["user_id"], TRANSACTION_HISTORY_LIMIT),
    }


@router.get("/credits/check", summary="Check whether a generation is affordable")
def credit_check(
    duration: int = DEFAULT_DURATION,
    quality: str = DEFAULT_QUALITY,
    audio: bool = False,
    user: Dict[str, Any] = Depends(require_user),
) -> Dict[str, Any]:
    return check_credits(user["user_id"], duration=duration, quality=quality, generate_audio=audio)


@router.post("/payments/webhook", summary="Payment provider webhook")
async def payment_webhook(request: Request) -> Dict[str, Any]:
    secret = os.getenv("PAYMENT_WEBHOOK_SECRET", "").strip()
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="PAYMENT_WEBHOOK_SECRET is not configured on the server.",
        )

    body = await request.body()
    if not verify_signature(body, request.headers.get(SIGNATURE_HEADER), secret):
        logger.warning("Rejected payment webhook with a bad signature")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    try:
        event = json.loads(body or b"{}")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Body is not valid JSON") from exc
    if not isinstance(event, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event must be a JSON object")

    try:
        result = fulfill_payment_event(event)
    except PaymentEventError as exc:
        logger.error("Payment event could not be fulfilled", extra={"event_id": event.get("id"), "error": str(exc)})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return {"received": True, **result}


def register(app: FastAPI) -> None:
    app.include_router(router)
