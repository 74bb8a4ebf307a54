"""Gallery helpers: generation filters and template shortcuts."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import db
from .settings import ALL_CATEGORIES, STATUS_FILTERS, TEMPLATES


def categories() -> List[str]:
    seen: List[str] = []
    for template in TEMPLATES:
        if template["category"] not in seen:
            seen.append(template["category"])
    return [ALL_CATEGORIES, *seen]


def filter_templates(category: str | None = None) -> List[Dict[str, Any]]:
    if not category or category == ALL_CATEGORIES:
        return list(TEMPLATES)
    return [template for template in TEMPLATES if template["category"] == category]


def get_template(template_id: str) -> Optional[Dict[str, Any]]:
    for template in TEMPLATES:
        if template["id"] == template_id:
            return template
    return None


def template_studio_url(template: Dict[str, Any]) -> str:
    """Studio URL prefilled with the template's prompt and settings."""

    settings = template["settings"]
    params = {
        "mode": template["mode"],
        "model": template["model"],
        "prompt": template["prompt"],
        "duration": str(settings["duration"]),
        "quality": settings["quality"],
        "aspectRatio": settings["aspect_ratio"],
        "audio": "true" if settings["generate_audio"] else "false",
    }
    return f"/studio?{urlencode(params)}"


def list_user_generations(user_id: int, status: str | None = "all") -> List[Dict[str, Any]]:
    status = (status or "all").lower()
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status}")
    return db.list_generations(user_id, None if status == "all" else status)
