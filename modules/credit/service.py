"""Credit accounting around the payment provider.

The provider notifies us through a signed webhook; every paid event is
recorded in ``purchases`` by its payment id before credits are granted, so
a redelivered event never grants twice.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any, Dict

import db
from config import REGISTER_GIFT_CREDITS, REGISTER_GIFT_EXPIRE_DAYS
from modules.pricing.service import calculate_generation_cost, get_package, get_plan
from modules.pricing.settings import INTERVAL_MONTH
from .settings import (
    EVENT_CREDITS_PURCHASED,
    EVENT_SUBSCRIPTION_CREATED,
    EVENT_SUBSCRIPTION_RENEWED,
    SIGNATURE_PREFIX,
    TYPE_PURCHASE,
    TYPE_REGISTER_GIFT,
    TYPE_SUBSCRIPTION_RENEWAL,
)

logger = logging.getLogger(__name__)


class PaymentEventError(ValueError):
    """Raised when a payment event cannot be fulfilled."""


def register_user(
    email: str,
    name: str | None = None,
    *,
    gift_credits: int | None = None,
    gift_expire_days: int | None = None,
) -> Dict[str, Any]:
    """Create a user and grant the configured sign-up gift."""

    user = db.create_user(email, name)
    amount = REGISTER_GIFT_CREDITS if gift_credits is None else gift_credits
    expire_days = REGISTER_GIFT_EXPIRE_DAYS if gift_expire_days is None else gift_expire_days
    if amount > 0:
        db.add_credits(
            user["user_id"],
            amount,
            TYPE_REGISTER_GIFT,
            description="Welcome credits",
            expire_days=expire_days or None,
        )
        user = db.get_user(user["user_id"])
    return user


def check_credits(user_id: int, *, duration: int, quality: str, generate_audio: bool) -> Dict[str, Any]:
    required = calculate_generation_cost(duration=duration, quality=quality, generate_audio=generate_audio)
    balance = db.get_credit_balance(user_id)
    return {"credits": balance, "required": required, "sufficient": balance >= required}


def verify_signature(body: bytes, signature: str | None, secret: str) -> bool:
    if not secret or not signature:
        return False
    provided = signature.strip()
    if provided.startswith(SIGNATURE_PREFIX):
        provided = provided[len(SIGNATURE_PREFIX):]
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, provided)


def fulfill_payment_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Grant the credits a paid event entitles the user to."""

    event_type = str(event.get("type") or "").strip()
    data = event.get("data")
    if not isinstance(data, dict):
        raise PaymentEventError("Event data is missing")

    if event_type not in {EVENT_CREDITS_PURCHASED, EVENT_SUBSCRIPTION_CREATED, EVENT_SUBSCRIPTION_RENEWED}:
        logger.info("Ignoring payment event", extra={"event_type": event_type})
        return {"status": "ignored", "credits": 0}

    payment_id = str(data.get("payment_id") or event.get("id") or "").strip()
    if not payment_id:
        raise PaymentEventError("payment_id is required")

    try:
        user_id = int(data.get("user_id"))
    except (TypeError, ValueError):
        raise PaymentEventError("user_id is required") from None
    if db.get_user(user_id) is None:
        raise PaymentEventError(f"User {user_id} does not exist")

    if event_type == EVENT_CREDITS_PURCHASED:
        package = get_package(str(data.get("package_id") or ""))
        if package is None:
            raise PaymentEventError(f"Unknown credit package: {data.get('package_id')}")
        kind = "package"
        item_id = package["id"]
        credits = package["amount"]
        price = package["price"]
        transaction_type = TYPE_PURCHASE
        expire_days = None
        description = f"{package['name']} credit pack"
    else:
        plan = get_plan(str(data.get("plan_id") or ""))
        if plan is None:
            raise PaymentEventError(f"Unknown plan: {data.get('plan_id')}")
        interval = str(data.get("interval") or INTERVAL_MONTH)
        if interval not in plan["prices"]:
            raise PaymentEventError(f"Unknown billing interval: {interval}")
        kind = "subscription"
        item_id = plan["id"]
        credits = plan["credits"]["amount"]
        price = plan["prices"][interval]
        transaction_type = TYPE_SUBSCRIPTION_RENEWAL
        expire_days = plan["credits"].get("expire_days")
        description = f"{plan['name']} plan credits"

    if not db.fulfill_purchase(
        payment_id,
        user_id,
        kind,
        item_id,
        credits,
        transaction_type,
        amount_cents=price["amount"],
        currency=price["currency"],
        description=description,
        expire_days=expire_days,
    ):
        logger.info("Duplicate payment event", extra={"payment_id": payment_id})
        return {"status": "duplicate", "credits": 0}
    return {"status": "granted", "credits": credits}
