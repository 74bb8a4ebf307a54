"""Evolink video generation service.

Thin wrapper around Evolink's asynchronous task API: ``submit_generation``
creates a video task, ``get_task_status`` reads its state once and
``wait_for_task`` polls it at a fixed interval.  ``upload_base64`` pushes a
reference image so it can be passed as an ``image_urls`` entry.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Iterable, Optional

import requests


logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"
FAILED_STATUSES = {STATUS_FAILED, "cancelled", "canceled"}


class EvolinkError(RuntimeError):
    """Raised when Evolink rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EvolinkService:
    """Client for the Evolink video generation API."""

    _DEFAULT_BASE_URL = "https://api.evolink.ai"
    _DEFAULT_MODEL = "seedance-2.0"
    _REQUEST_TIMEOUT = 30
    _GENERATION_TIMEOUT = 900
    _DEFAULT_POLL_INTERVAL = 5.0

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        token = api_key or os.getenv("EVOLINK_API_KEY") or os.getenv("EVOLINK_API")
        if not token:
            raise EvolinkError("Evolink API key not configured")

        self._token = token
        self._base_url = (
            base_url or os.getenv("EVOLINK_API_BASE_URL") or self._DEFAULT_BASE_URL
        ).strip().rstrip("/")
        self.model = (model or os.getenv("EVOLINK_VIDEO_MODEL") or self._DEFAULT_MODEL).strip()
        self._timeout = timeout or float(os.getenv("EVOLINK_REQUEST_TIMEOUT") or self._REQUEST_TIMEOUT)
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {self._token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": "seedance-studio/1.0",
            }
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def submit_generation(
        self,
        prompt: str,
        *,
        mode: str = "text-to-video",
        duration: int = 5,
        quality: str = "720p",
        aspect_ratio: str = "16:9",
        generate_audio: bool = False,
        image_urls: Iterable[str] | None = None,
        model: str | None = None,
    ) -> str:
        """Submit a new video generation task and return the task identifier."""

        cleaned = (prompt or "").strip()
        if not cleaned:
            raise EvolinkError("Prompt is required", status_code=400)

        payload: Dict[str, Any] = {
            "model": model or self.model,
            "prompt": cleaned,
            "mode": mode,
            "duration": int(duration),
            "quality": quality,
            "aspect_ratio": aspect_ratio,
            "generate_audio": bool(generate_audio),
        }
        images = [url for url in (image_urls or ()) if url]
        if images:
            payload["image_urls"] = images

        log_payload = dict(payload, prompt="<omitted>")
        log_payload.pop("image_urls", None)
        logger.debug(
            "Submitting video generation task",
            extra={"payload": log_payload, "image_count": len(images)},
        )

        response = self._request("POST", "/v1/videos/generations", json=payload)
        data = self._safe_json(response)

        task_id = self._extract_task_id(data)
        if not task_id:
            logger.error("No task ID in Evolink response", extra={"response": data})
            raise EvolinkError("Evolink did not return a task id", status_code=502)

        logger.info("Evolink video task created", extra={"task_id": task_id})
        return task_id

    def get_task_status(self, task_id: str) -> Dict[str, Any]:
        """Query a task once and return a normalised status payload."""

        if not task_id:
            raise EvolinkError("taskId is required", status_code=400)

        response = self._request("GET", f"/v1/tasks/{task_id}")
        data = self._safe_json(response)

        status = self._normalise_text(data.get("status")).lower() or STATUS_PENDING
        video_url = None
        if status in {STATUS_COMPLETED, STATUS_SUCCEEDED}:
            video_url = self._extract_video_url(data.get("results"))
            if not video_url:
                video_url = self._extract_video_url(data)

        task_info = data.get("task_info") if isinstance(data.get("task_info"), dict) else {}
        error = None
        if status in FAILED_STATUSES:
            error = self._normalise_text(self._extract_error(data, default="")) or "Generation failed"

        return {
            "id": data.get("id") or task_id,
            "status": status,
            "progress": self._coerce_progress(data.get("progress")),
            "video_url": video_url,
            "estimated_time": task_info.get("estimated_time"),
            "error": error,
        }

    def wait_for_task(
        self,
        task_id: str,
        *,
        poll_interval: float | None = None,
        timeout: float | None = None,
    ) -> Dict[str, Any]:
        """Poll the task until it completes and return the final status."""

        poll_delay = poll_interval or self._DEFAULT_POLL_INTERVAL
        deadline = time.time() + float(timeout or self._GENERATION_TIMEOUT)

        while time.time() < deadline:
            result = self.get_task_status(task_id)
            logger.debug("Task %s status: %s (%s%%)", task_id, result["status"], result["progress"])

            if result["status"] in {STATUS_COMPLETED, STATUS_SUCCEEDED}:
                if not result["video_url"]:
                    raise EvolinkError("Completed task has no video URL", status_code=502)
                return result

            if result["status"] in FAILED_STATUSES:
                raise EvolinkError(result["error"] or "Generation failed")

            time.sleep(poll_delay)

        raise EvolinkError("Timed out waiting for the video", status_code=504)

    def upload_base64(self, data_url: str, file_name: str) -> Dict[str, Any]:
        """Upload a ``data:`` URI and return the hosted file URL."""

        response = self._request(
            "POST",
            "/v1/files/upload/base64",
            json={"file": data_url, "file_name": file_name},
        )
        data = self._safe_json(response)
        payload = data.get("data") if isinstance(data.get("data"), dict) else data

        url = None
        for key in ("url", "file_url", "download_url"):
            url = self._normalise_text(payload.get(key))
            if url:
                break
        if not url:
            raise EvolinkError("Evolink upload returned no file URL", status_code=502)

        return {"url": url, "file_name": payload.get("file_name") or file_name}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        timeout: int | float | None = None,
    ) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                json=json,
                timeout=timeout or self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Evolink request failed", extra={"url": url, "error": str(exc)})
            raise EvolinkError(f"Could not reach Evolink: {exc}", status_code=502) from exc

        if response.status_code >= 400:
            payload = self._safe_json(response, default={})
            message = self._extract_error(payload, default="Evolink request failed")
            logger.error(
                "Evolink returned an error",
                extra={"url": url, "status": response.status_code, "error": message},
            )
            raise EvolinkError(message, status_code=response.status_code)

        return response

    @staticmethod
    def _safe_json(response: requests.Response, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            parsed = response.json()
        except ValueError:
            if default is not None:
                return default
            raise EvolinkError("Unparseable response from Evolink", status_code=502) from None

        if isinstance(parsed, dict):
            return parsed

        return {"data": parsed}

    @classmethod
    def _extract_error(cls, payload: Dict[str, Any], default: str) -> str:
        error = payload.get("error")
        if isinstance(error, dict):
            text = cls._normalise_text(error.get("message"))
            if text:
                return text
        elif error:
            text = cls._normalise_text(error)
            if text:
                return text

        primary = cls._find_first_value(
            payload,
            ("message", "detail", "error_message", "failure_reason", "reason", "msg"),
        )
        text = cls._normalise_text(primary)
        return text or default

    @staticmethod
    def _normalise_text(value: Any) -> str:
        if isinstance(value, str):
            return value.strip()
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_progress(value: Any) -> int:
        try:
            progress = int(float(value))
        except (TypeError, ValueError):
            return 0
        return max(0, min(100, progress))

    @classmethod
    def _extract_task_id(cls, payload: Dict[str, Any]) -> str | None:
        if not isinstance(payload, dict):
            return None

        for key in ("task_id", "id"):
            text = cls._normalise_text(payload.get(key))
            if text:
                return text

        for key in ("task", "data"):
            nested = payload.get(key)
            if isinstance(nested, dict):
                found = cls._extract_task_id(nested)
                if found:
                    return found

        return None

    @classmethod
    def _extract_video_url(cls, payload: Any) -> str | None:
        if isinstance(payload, dict):
            for key in ("url", "video_url", "video", "download_url", "output_url"):
                if key in payload:
                    candidate = cls._extract_video_url(payload[key])
                    if candidate:
                        return candidate

            for key in ("results", "outputs"):
                nested = payload.get(key)
                if isinstance(nested, list):
                    candidate = cls._extract_video_url(nested)
                    if candidate:
                        return candidate

        if isinstance(payload, (list, tuple)):
            for item in payload:
                candidate = cls._extract_video_url(item)
                if candidate:
                    return candidate

        if isinstance(payload, str):
            text = payload.strip()
            if text.startswith(("http://", "https://")):
                return text

        return None

    @classmethod
    def _find_first_value(
        cls,
        data: Any,
        keys: tuple[str, ...],
        _visited: Optional[set[int]] = None,
    ) -> Any | None:
        if _visited is None:
            _visited = set()

        obj_id = id(data)
        if obj_id in _visited:
            return None
        _visited.add(obj_id)

        if isinstance(data, dict):
            for key, value in data.items():
                if key in keys:
                    text = cls._normalise_text(value)
                    if text:
                        return value
                result = cls._find_first_value(value, keys, _visited)
                if result is not None:
                    return result

        elif isinstance(data, (list, tuple, set)):
            for item in data:
                result = cls._find_first_value(item, keys, _visited)
                if result is not None:
                    return result

        return None
