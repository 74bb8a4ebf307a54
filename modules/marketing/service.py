"""Structured data for the marketing pages."""

from __future__ import annotations

from typing import Any, Dict

from modules.pricing.service import get_price_plans, price_range
from modules.pricing.settings import DEFAULT_CURRENCY
from .texts import FAQ_ITEMS


def web_application_schema(site_name: str, site_url: str, description: str) -> Dict[str, Any]:
    low, high = price_range()
    return {
        "@context": "https://schema.org",
        "@type": "WebApplication",
        "name": site_name,
        "url": site_url,
        "description": description,
        "applicationCategory": "MultimediaApplication",
        "operatingSystem": "Web",
        "offers": {
            "@type": "AggregateOffer",
            "priceCurrency": DEFAULT_CURRENCY,
            "lowPrice": f"{low / 100:.2f}",
            "highPrice": f"{high / 100:.2f}",
            "offerCount": len(get_price_plans()),
        },
        "creator": {
            "@type": "Organization",
            "name": site_name,
            "url": site_url,
        },
    }


def faq_schema() -> Dict[str, Any]:
    return {
        "@context": "https://schema.org",
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": question,
                "acceptedAnswer": {"@type": "Answer", "text": answer},
            }
            for question, answer in FAQ_ITEMS
        ],
    }
