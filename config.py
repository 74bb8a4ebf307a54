import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from a .env file if present.
# We call load_dotenv twice: once with the default search behaviour (which
# respects the current working directory), and once explicitly pointing to a
# .env file that sits next to this config module.
load_dotenv()
load_dotenv(Path(__file__).resolve().parent / ".env")


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


SITE_NAME = (os.getenv("SITE_NAME") or "SeedanceAI").strip() or "SeedanceAI"
SITE_URL = (os.getenv("SITE_URL") or "http://localhost:8000").strip().rstrip("/")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = (os.getenv("LOG_LEVEL") or ("DEBUG" if DEBUG else "INFO")).strip().upper()

DB_DIR = os.getenv("DB_DIR", "data")

ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")
API_KEY_HEADER_NAME = (os.getenv("API_KEY_HEADER_NAME") or "X-API-Key").strip() or "X-API-Key"
API_KEY_ENCRYPTION_SECRET = os.getenv("API_KEY_ENCRYPTION_SECRET", "")
SESSION_COOKIE_NAME = (os.getenv("SESSION_COOKIE_NAME") or "sd_session").strip() or "sd_session"

REGISTER_GIFT_CREDITS = max(0, _parse_int(os.getenv("REGISTER_GIFT_CREDITS"), 0))
REGISTER_GIFT_EXPIRE_DAYS = max(0, _parse_int(os.getenv("REGISTER_GIFT_EXPIRE_DAYS"), 0))
