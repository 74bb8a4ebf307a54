"""Tests for the studio generation flow."""

from __future__ import annotations

import time
from typing import Any, Dict, List

import pytest

import db
from modules.evolink.service import EvolinkError
from modules.studio.service import (
    GenerationError,
    InsufficientCreditsError,
    refresh_generation,
    serialize_generation,
    start_generation,
)


class FakeService:
    """In-memory stand-in for ``EvolinkService``."""

    model = "seedance-2.0"

    def __init__(self, statuses: List[Dict[str, Any]] | None = None, submit_error: Exception | None = None) -> None:
        self.statuses = list(statuses or [])
        self.submit_error = submit_error
        self.submitted: List[Dict[str, Any]] = []
        self.status_calls = 0

    def submit_generation(self, prompt: str, **kwargs: Any) -> str:
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append({"prompt": prompt, **kwargs})
        return f"task-{len(self.submitted)}"

    def get_task_status(self, task_id: str) -> Dict[str, Any]:
        self.status_calls += 1
        status = {"id": task_id, "progress": 0, "video_url": None, "estimated_time": None, "error": None}
        status.update(self.statuses.pop(0))
        return status


def _start(user_id: int, service: FakeService, **overrides: Any) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "mode": "text-to-video",
        "duration": 5,
        "quality": "720p",
        "aspect_ratio": "16:9",
        "generate_audio": False,
    }
    params.update(overrides)
    prompt = params.pop("prompt", "A lighthouse in a storm")
    return start_generation(user_id, prompt, service=service, **params)


def test_start_generation_charges_and_stores(make_user) -> None:
    user, _ = make_user(credits=100)
    service = FakeService()

    generation = _start(user["user_id"], service, duration=10, quality="1080p", generate_audio=True)

    assert generation["status"] == "processing"
    assert generation["task_id"] == "task-1"
    assert generation["cost"] == 25
    assert generation["model"] == "seedance-2.0"
    assert db.get_credit_balance(user["user_id"]) == 75
    assert service.submitted[0]["generate_audio"] is True
    assert db.get_generation_by_task(user["user_id"], "task-1")["id"] == generation["id"]


def test_start_generation_passes_reference_images(make_user) -> None:
    user, _ = make_user(credits=100)
    service = FakeService()
    refs = [
        {"type": "face", "file_url": "https://files.example/a.png", "file_type": "image"},
        {"type": "audio", "file_url": "https://files.example/a.mp3", "file_type": "audio"},
        {"type": "style", "file_url": "  "},
    ]

    _start(user["user_id"], service, mode="image-to-video", refs=refs)

    assert service.submitted[0]["image_urls"] == ["https://files.example/a.png"]


def test_insufficient_credits_do_not_reach_evolink(make_user) -> None:
    user, _ = make_user(credits=5)
    service = FakeService()

    with pytest.raises(InsufficientCreditsError) as excinfo:
        _start(user["user_id"], service)

    assert excinfo.value.required == 10
    assert excinfo.value.balance == 5
    assert service.submitted == []


def test_submission_failure_refunds(make_user) -> None:
    user, _ = make_user(credits=50)
    service = FakeService(submit_error=EvolinkError("upstream down", status_code=503))

    with pytest.raises(EvolinkError):
        _start(user["user_id"], service)

    assert db.get_credit_balance(user["user_id"]) == 50
    assert db.list_credit_transactions(user["user_id"])[0]["type"] == "refund"
    assert db.list_generations(user["user_id"]) == []


def test_refunded_subscription_credits_still_expire(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    db.add_credits(user_id, 10, "subscription_renewal", expire_days=30)
    service = FakeService(submit_error=EvolinkError("upstream down", status_code=503))

    with pytest.raises(EvolinkError):
        _start(user_id, service)
    assert db.get_credit_balance(user_id) == 10

    db.expire_credits(now=int(time.time()) + 31 * 86_400)
    assert db.get_credit_balance(user_id) == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"prompt": "   "},
        {"prompt": "x" * 2001},
        {"duration": 7},
        {"quality": "4k"},
        {"aspect_ratio": "2:1"},
        {"mode": "video-to-video"},
        {"mode": "image-to-video"},
        {"mode": "first-last-frame", "refs": [{"type": "face", "file_url": "https://f/1.png"}]},
        {"refs": [{"type": "voice", "file_url": "https://f/1.png"}]},
        {"refs": [{"type": "face", "file_url": f"https://f/{i}.png"} for i in range(13)]},
    ],
)
def test_invalid_requests_are_rejected_without_charge(make_user, overrides) -> None:
    user, _ = make_user(credits=100)

    with pytest.raises(GenerationError):
        _start(user["user_id"], FakeService(), **overrides)

    assert db.get_credit_balance(user["user_id"]) == 100


def test_refresh_completed_generation(make_user) -> None:
    user, _ = make_user(credits=100)
    generation = _start(user["user_id"], FakeService())
    service = FakeService([{"status": "completed", "progress": 90, "video_url": "https://cdn.example/v.mp4"}])

    refreshed = refresh_generation(user["user_id"], generation["id"], service=service)

    assert refreshed["status"] == "completed"
    assert refreshed["progress"] == 100
    assert refreshed["video_url"] == "https://cdn.example/v.mp4"

    # Finished generations are served from the database.
    again = refresh_generation(user["user_id"], generation["id"], service=service)
    assert again["status"] == "completed"
    assert service.status_calls == 1


def test_refresh_keeps_queued_generation_processing(make_user) -> None:
    user, _ = make_user(credits=100)
    generation = _start(user["user_id"], FakeService())
    service = FakeService([{"status": "queued", "progress": 12, "estimated_time": 30}])

    refreshed = refresh_generation(user["user_id"], generation["id"], service=service)

    assert refreshed["status"] == "processing"
    assert refreshed["progress"] == 12
    assert serialize_generation(refreshed)["estimatedTime"] == 30


def test_failed_generation_is_refunded_once(make_user) -> None:
    user, _ = make_user(credits=100)
    generation = _start(user["user_id"], FakeService())
    assert db.get_credit_balance(user["user_id"]) == 90
    service = FakeService([{"status": "cancelled", "error": "Generation failed"}])

    refreshed = refresh_generation(user["user_id"], generation["id"], service=service)

    assert refreshed["status"] == "failed"
    assert refreshed["refunded"] is True
    assert refreshed["error"] == "Generation failed"
    assert db.get_credit_balance(user["user_id"]) == 100

    refresh_generation(user["user_id"], generation["id"], service=service)
    assert db.get_credit_balance(user["user_id"]) == 100


def test_failed_generation_refund_keeps_grant_expiry(make_user) -> None:
    user, _ = make_user()
    user_id = user["user_id"]
    db.add_credits(user_id, 10, "subscription_renewal", expire_days=30)
    generation = _start(user_id, FakeService())
    assert db.get_credit_balance(user_id) == 0

    refresh_generation(user_id, generation["id"], service=FakeService([{"status": "failed"}]))
    assert db.get_credit_balance(user_id) == 10

    db.expire_credits(now=int(time.time()) + 31 * 86_400)
    assert db.get_credit_balance(user_id) == 0


def test_refresh_unknown_generation(make_user) -> None:
    user, _ = make_user()

    assert refresh_generation(user["user_id"], "gen_missing", service=FakeService()) is None


def test_other_users_cannot_see_generation(make_user) -> None:
    owner, _ = make_user(credits=100)
    other, _ = make_user()
    generation = _start(owner["user_id"], FakeService())

    assert refresh_generation(other["user_id"], generation["id"], service=FakeService()) is None


def test_serialize_generation_uses_camel_case(make_user) -> None:
    user, _ = make_user(credits=100)
    generation = _start(user["user_id"], FakeService(), aspect_ratio="9:16", generate_audio=True)

    data = serialize_generation(generation)

    assert data["aspectRatio"] == "9:16"
    assert data["generateAudio"] is True
    assert data["videoUrl"] is None
    assert data["createdAt"].endswith("Z")
    assert "estimatedTime" not in data
