"""Pricing configuration: generation cost formula, plans and credit packs."""

# Generation cost (credits).  Base covers a 5s, 720p/480p clip without audio.
BASE_CREDIT_COST = 10
DURATION_ADDON_COST = 5
RESOLUTION_ADDON_COST = 5
AUDIO_ADDON_COST = 5

DEFAULT_DURATION = 5
DEFAULT_QUALITY = "720p"
PREMIUM_QUALITY = "1080p"

INTERVAL_MONTH = "month"
INTERVAL_YEAR = "year"

DEFAULT_CURRENCY = "USD"

# Subscription plans.  Amounts are in cents; the credit allotment is granted
# on every renewal and expires after ``expire_days``.
PRICE_PLANS = {
    "basic": {
        "id": "basic",
        "name": "Basic",
        "description": "For individuals trying out AI video.",
        "popular": False,
        "prices": {
            INTERVAL_MONTH: {"amount": 1990, "currency": DEFAULT_CURRENCY},
            INTERVAL_YEAR: {"amount": 11940, "currency": DEFAULT_CURRENCY},
        },
        "credits": {"amount": 800, "expire_days": 30},
        "features": [
            "800 credits every month",
            "Text-to-video and image-to-video",
            "Up to 1080p output",
            "Native audio generation",
            "Commercial usage rights",
        ],
        "limits": ["Standard queue priority"],
    },
    "standard": {
        "id": "standard",
        "name": "Standard",
        "description": "For creators publishing every week.",
        "popular": True,
        "prices": {
            INTERVAL_MONTH: {"amount": 3990, "currency": DEFAULT_CURRENCY},
            INTERVAL_YEAR: {"amount": 23940, "currency": DEFAULT_CURRENCY},
        },
        "credits": {"amount": 2000, "expire_days": 30},
        "features": [
            "2,000 credits every month",
            "Text-to-video and image-to-video",
            "First/last frame transitions",
            "Up to 1080p output",
            "Native audio generation",
            "Priority queue",
        ],
        "limits": [],
    },
    "pro": {
        "id": "pro",
        "name": "Pro",
        "description": "For studios and teams at volume.",
        "popular": False,
        "prices": {
            INTERVAL_MONTH: {"amount": 9990, "currency": DEFAULT_CURRENCY},
            INTERVAL_YEAR: {"amount": 59940, "currency": DEFAULT_CURRENCY},
        },
        "credits": {"amount": 6000, "expire_days": 30},
        "features": [
            "6,000 credits every month",
            "All generation modes",
            "Up to 12 reference files",
            "Up to 1080p output",
            "Native audio generation",
            "Highest queue priority",
            "Email support",
        ],
        "limits": [],
    },
}

PLAN_ORDER = ("basic", "standard", "pro")

# One-off credit packs.  Purchased credits do not expire.
CREDIT_PACKAGES = {
    "starter": {
        "id": "starter",
        "name": "Starter",
        "description": "Enough for a handful of short clips.",
        "popular": False,
        "amount": 1000,
        "price": {"amount": 2990, "currency": DEFAULT_CURRENCY},
    },
    "creator": {
        "id": "creator",
        "name": "Creator",
        "description": "The best value for regular creators.",
        "popular": True,
        "amount": 2000,
        "price": {"amount": 4990, "currency": DEFAULT_CURRENCY},
    },
    "professional": {
        "id": "professional",
        "name": "Professional",
        "description": "Bulk credits for production work.",
        "popular": False,
        "amount": 5000,
        "price": {"amount": 9990, "currency": DEFAULT_CURRENCY},
    },
}

PACKAGE_ORDER = ("starter", "creator", "professional")

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "CNY": "¥"}
