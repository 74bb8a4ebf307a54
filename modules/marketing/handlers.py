"""Public marketing pages."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, FastAPI, Request
from markupsafe import Markup

from config import SITE_NAME, SITE_URL
from modules.account.service import current_user
from modules.pricing.service import get_credit_packages, get_price_plans, yearly_savings_percent
from modules.pricing.settings import INTERVAL_MONTH, INTERVAL_YEAR
from utils import render
from . import texts
from .service import faq_schema, web_application_schema

router = APIRouter(include_in_schema=False)


def _json_ld(data) -> Markup:
    # "</" must not close the surrounding <script> tag.
    return Markup(json.dumps(data, ensure_ascii=False).replace("</", "<\\/"))


def _pricing_context(interval: str) -> dict:
    interval = interval if interval in (INTERVAL_MONTH, INTERVAL_YEAR) else INTERVAL_MONTH
    plans = get_price_plans()
    return {
        "interval": interval,
        "plans": plans,
        "packages": get_credit_packages(),
        "savings": max((yearly_savings_percent(plan) for plan in plans), default=0),
        "pricing_title": texts.PRICING_TITLE,
        "pricing_subtitle": texts.PRICING_SUBTITLE,
    }


@router.get("/")
def home(request: Request, interval: str = INTERVAL_MONTH, user=Depends(current_user)):
    return render(
        request,
        "home.html",
        hero=texts.HERO,
        showcase=texts.SHOWCASE_ITEMS,
        features=texts.FEATURES,
        how_to_use=texts.HOW_TO_USE,
        faqs=texts.FAQ_ITEMS,
        schemas=[
            _json_ld(web_application_schema(SITE_NAME, SITE_URL, texts.HERO["subtitle"])),
            _json_ld(faq_schema()),
        ],
        **_pricing_context(interval),
    )


@router.get("/pricing")
def pricing(request: Request, interval: str = INTERVAL_MONTH, user=Depends(current_user)):
    return render(
        request,
        "pricing.html",
        faqs=texts.FAQ_ITEMS,
        **_pricing_context(interval),
    )


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


def register(app: FastAPI) -> None:
    app.include_router(router)
