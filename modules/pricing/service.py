"""Pricing helpers shared by the studio, the pricing pages and fulfilment."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .settings import (
    AUDIO_ADDON_COST,
    BASE_CREDIT_COST,
    CREDIT_PACKAGES,
    CURRENCY_SYMBOLS,
    DEFAULT_DURATION,
    DEFAULT_QUALITY,
    DURATION_ADDON_COST,
    INTERVAL_MONTH,
    INTERVAL_YEAR,
    PACKAGE_ORDER,
    PLAN_ORDER,
    PREMIUM_QUALITY,
    PRICE_PLANS,
    RESOLUTION_ADDON_COST,
)


def calculate_generation_cost(
    duration: Optional[int] = None,
    quality: Optional[str] = None,
    generate_audio: bool = False,
) -> int:
    """Return the credit cost of one generation.

    Base cost plus a flat add-on for clips longer than five seconds, for
    1080p output and for generated audio.
    """

    duration = DEFAULT_DURATION if duration is None else duration
    quality = quality or DEFAULT_QUALITY

    cost = BASE_CREDIT_COST
    if duration > DEFAULT_DURATION:
        cost += DURATION_ADDON_COST
    if quality == PREMIUM_QUALITY:
        cost += RESOLUTION_ADDON_COST
    if generate_audio:
        cost += AUDIO_ADDON_COST
    return cost


def format_price(amount_cents: int, currency: str = "USD") -> str:
    symbol = CURRENCY_SYMBOLS.get((currency or "").upper())
    value = f"{amount_cents / 100:,.2f}"
    if symbol:
        return f"{symbol}{value}"
    return f"{value} {currency.upper()}"


def get_plan(plan_id: str) -> Optional[Dict[str, Any]]:
    return PRICE_PLANS.get((plan_id or "").strip().lower())


def get_package(package_id: str) -> Optional[Dict[str, Any]]:
    return CREDIT_PACKAGES.get((package_id or "").strip().lower())


def get_price_plans() -> List[Dict[str, Any]]:
    return [PRICE_PLANS[key] for key in PLAN_ORDER if key in PRICE_PLANS]


def get_credit_packages() -> List[Dict[str, Any]]:
    return [CREDIT_PACKAGES[key] for key in PACKAGE_ORDER if key in CREDIT_PACKAGES]


def monthly_equivalent(plan: Dict[str, Any], interval: str) -> int:
    """Price per month in cents for the given billing interval."""

    price = plan["prices"][interval]
    if interval == INTERVAL_YEAR:
        return round(price["amount"] / 12)
    return price["amount"]


def yearly_savings_percent(plan: Dict[str, Any]) -> int:
    monthly = plan["prices"].get(INTERVAL_MONTH)
    yearly = plan["prices"].get(INTERVAL_YEAR)
    if not monthly or not yearly or monthly["amount"] <= 0:
        return 0
    full_year = monthly["amount"] * 12
    return round((full_year - yearly["amount"]) * 100 / full_year)


def price_range(interval: str = INTERVAL_MONTH) -> tuple[int, int]:
    """Lowest and highest plan price (cents) for the structured-data offer."""

    amounts = [plan["prices"][interval]["amount"] for plan in get_price_plans()]
    return min(amounts), max(amounts)
