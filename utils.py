from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from config import SITE_NAME, SITE_URL
from modules.pricing.service import format_price, monthly_equivalent

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["price"] = format_price
templates.env.filters["credits"] = lambda value: f"{int(value or 0):,}"
templates.env.globals["monthly_equivalent"] = monthly_equivalent


def render(request: Request, name: str, status_code: int = 200, **context):
    """Render a page template with the site-wide context filled in."""

    context.setdefault("site_name", SITE_NAME)
    context.setdefault("site_url", SITE_URL)
    context.setdefault("user", getattr(request.state, "user", None))
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def safe_next_path(value: str | None, default: str = "/studio") -> str:
    """Only allow local redirect targets."""

    candidate = (value or "").strip()
    if not candidate.startswith("/") or candidate.startswith("//") or "\\" in candidate:
        return default
    return candidate


def parse_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off", ""}:
        return False
    return default


def parse_int(value, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default
