"""Shared fixtures: every test runs against its own sqlite file."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import db


@pytest.fixture(autouse=True)
def temp_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the database at a fresh file under ``tmp_path``."""

    db_path = tmp_path / "app.db"
    monkeypatch.setattr(db, "DB_PATH", str(db_path))
    monkeypatch.setattr(db, "_FERNET_KEY_CACHE", None)
    db.init_db()
    return db_path


@pytest.fixture
def make_user() -> Callable[..., Tuple[Dict[str, Any], str]]:
    """Create a user with an API key and an optional starting balance."""

    counter = {"n": 0}

    def _make(credits: int = 0, email: str | None = None) -> Tuple[Dict[str, Any], str]:
        counter["n"] += 1
        user = db.create_user(email or f"user{counter['n']}@example.com", "Test User")
        if credits:
            db.add_credits(user["user_id"], credits, "admin_grant", description="Test credits")
        api_key = db.ensure_user_api_key(user["user_id"])
        return db.get_user(user["user_id"]), api_key

    return _make
