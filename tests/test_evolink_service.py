"""Tests for the Evolink service helpers."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
import requests

from modules.evolink.service import EvolinkError, EvolinkService


class DummyResponse:
    """Simple stand-in for ``requests.Response`` used in the tests."""

    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:  # noqa: D401 - mimics ``requests.Response``
        """Return the JSON payload."""

        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture(autouse=True)
def _evolink_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the service sees an Evolink token during the tests."""

    monkeypatch.setenv("EVOLINK_API_KEY", "test-token")
    monkeypatch.delenv("EVOLINK_API_BASE_URL", raising=False)
    monkeypatch.delenv("EVOLINK_VIDEO_MODEL", raising=False)


def test_missing_api_key_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EVOLINK_API_KEY", raising=False)
    monkeypatch.delenv("EVOLINK_API", raising=False)

    with pytest.raises(EvolinkError):
        EvolinkService()


def test_submit_generation_sends_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()
    calls: List[Dict[str, Any]] = []

    def fake_request(self: EvolinkService, method: str, path: str, **kwargs: Any) -> DummyResponse:  # noqa: ANN001
        calls.append({"method": method, "path": path, **kwargs})
        return DummyResponse({"id": "task-123", "status": "pending"})

    monkeypatch.setattr(EvolinkService, "_request", fake_request)

    task_id = service.submit_generation(
        "  a fox in the snow  ",
        mode="image-to-video",
        duration=10,
        quality="1080p",
        aspect_ratio="9:16",
        generate_audio=True,
        image_urls=["https://files.example/fox.png", ""],
    )

    assert task_id == "task-123"
    assert calls[0]["method"] == "POST" and calls[0]["path"] == "/v1/videos/generations"
    payload = calls[0]["json"]
    assert payload["prompt"] == "a fox in the snow"
    assert payload["model"] == "seedance-2.0"
    assert payload["duration"] == 10
    assert payload["generate_audio"] is True
    assert payload["image_urls"] == ["https://files.example/fox.png"]


def test_submit_generation_omits_empty_images(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService(model="seedance-lite")
    seen: Dict[str, Any] = {}

    def fake_request(self: EvolinkService, method: str, path: str, **kwargs: Any) -> DummyResponse:  # noqa: ANN001
        seen.update(kwargs["json"])
        return DummyResponse({"data": {"task": {"task_id": "nested-1"}}})

    monkeypatch.setattr(EvolinkService, "_request", fake_request)

    assert service.submit_generation("waves") == "nested-1"
    assert "image_urls" not in seen
    assert seen["model"] == "seedance-lite"


def test_submit_generation_requires_task_id(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()
    monkeypatch.setattr(EvolinkService, "_request", lambda self, method, path, **_: DummyResponse({"ok": True}))

    with pytest.raises(EvolinkError) as excinfo:
        service.submit_generation("waves")

    assert excinfo.value.status_code == 502


def test_task_status_completed_extracts_video(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()
    payload = {
        "id": "task-9",
        "status": "completed",
        "progress": "100",
        "results": [{"url": "https://cdn.example/video.mp4"}],
        "task_info": {"estimated_time": 42},
    }

    def fake_request(self: EvolinkService, method: str, path: str, **_: Any) -> DummyResponse:  # noqa: ANN001
        assert method == "GET" and path == "/v1/tasks/task-9"
        return DummyResponse(payload)

    monkeypatch.setattr(EvolinkService, "_request", fake_request)

    status = service.get_task_status("task-9")

    assert status == {
        "id": "task-9",
        "status": "completed",
        "progress": 100,
        "video_url": "https://cdn.example/video.mp4",
        "estimated_time": 42,
        "error": None,
    }


def test_task_status_failed_reports_error(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()
    payload = {"status": "failed", "progress": 30, "error": {"message": "content policy violation"}}
    monkeypatch.setattr(EvolinkService, "_request", lambda self, method, path, **_: DummyResponse(payload))

    status = service.get_task_status("task-1")

    assert status["status"] == "failed"
    assert status["error"] == "content policy violation"
    assert status["video_url"] is None


@pytest.mark.parametrize("vendor_status", ["cancelled", "canceled"])
def test_task_status_cancelled_reports_error(monkeypatch: pytest.MonkeyPatch, vendor_status: str) -> None:
    service = EvolinkService()
    payload = {"status": vendor_status, "failure_reason": "cancelled by operator"}
    monkeypatch.setattr(EvolinkService, "_request", lambda self, method, path, **_: DummyResponse(payload))

    status = service.get_task_status("task-1")

    assert status["status"] == vendor_status
    assert status["error"] == "cancelled by operator"


def test_wait_for_task_polls_until_complete(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()
    responses = iter(
        [
            {"status": "pending", "progress": 0},
            {"status": "processing", "progress": 60},
            {"status": "completed", "video_url": "https://cdn.example/out.mp4"},
        ]
    )
    sleeps: List[float] = []

    monkeypatch.setattr(EvolinkService, "_request", lambda self, method, path, **_: DummyResponse(next(responses)))
    monkeypatch.setattr("modules.evolink.service.time.sleep", sleeps.append)

    result = service.wait_for_task("task-2", poll_interval=0.5)

    assert result["video_url"] == "https://cdn.example/out.mp4"
    assert sleeps == [0.5, 0.5]


def test_wait_for_task_raises_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()
    monkeypatch.setattr(
        EvolinkService,
        "_request",
        lambda self, method, path, **_: DummyResponse({"status": "failed", "message": "GPU error"}),
    )
    monkeypatch.setattr("modules.evolink.service.time.sleep", lambda _: None)

    with pytest.raises(EvolinkError, match="GPU error"):
        service.wait_for_task("task-3")


def test_request_maps_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()

    def fake_session_request(method: str, url: str, **_: Any) -> DummyResponse:
        assert url == "https://api.evolink.ai/v1/tasks/t"
        return DummyResponse({"error": {"message": "invalid api key"}}, status_code=401)

    monkeypatch.setattr(service._session, "request", fake_session_request)

    with pytest.raises(EvolinkError) as excinfo:
        service.get_task_status("t")

    assert excinfo.value.status_code == 401
    assert str(excinfo.value) == "invalid api key"


def test_request_maps_network_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()

    def fake_session_request(method: str, url: str, **_: Any) -> DummyResponse:
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(service._session, "request", fake_session_request)

    with pytest.raises(EvolinkError) as excinfo:
        service.get_task_status("t")

    assert excinfo.value.status_code == 502


def test_upload_base64_returns_file_url(monkeypatch: pytest.MonkeyPatch) -> None:
    service = EvolinkService()

    def fake_request(self: EvolinkService, method: str, path: str, **kwargs: Any) -> DummyResponse:  # noqa: ANN001
        assert path == "/v1/files/upload/base64"
        assert kwargs["json"] == {"file": "data:image/png;base64,AAAA", "file_name": "ref.png"}
        return DummyResponse({"data": {"file_url": "https://files.example/ref.png"}})

    monkeypatch.setattr(EvolinkService, "_request", fake_request)

    result = service.upload_base64("data:image/png;base64,AAAA", "ref.png")

    assert result == {"url": "https://files.example/ref.png", "file_name": "ref.png"}
