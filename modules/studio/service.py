"""Studio generation flow: validate, charge, submit and track."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional

import db
from modules.evolink.service import EvolinkError, EvolinkService
from modules.pricing.service import calculate_generation_cost
from .settings import (
    ASPECT_RATIOS,
    DURATIONS,
    MAX_PROMPT_LENGTH,
    MAX_REFERENCE_FILES,
    MODE_FIRST_LAST_FRAME,
    MODE_IMAGE_TO_VIDEO,
    MODES,
    QUALITIES,
    REF_TYPES,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PROCESSING,
    VENDOR_STATUS_MAP,
)

logger = logging.getLogger(__name__)


class GenerationError(ValueError):
    """Raised when a generation request is invalid."""


class InsufficientCreditsError(RuntimeError):
    """Raised when the user cannot pay for a generation."""

    def __init__(self, required: int, balance: int) -> None:
        super().__init__(f"Not enough credits: {required} required, {balance} available.")
        self.required = required
        self.balance = balance


def _image_urls(refs: List[Dict[str, Any]]) -> List[str]:
    return [ref["file_url"] for ref in refs if ref.get("file_type", "image") == "image"]


def validate_request(
    prompt: str,
    *,
    mode: str,
    duration: int,
    quality: str,
    aspect_ratio: str,
    refs: Optional[Iterable[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """Check a studio request and return the cleaned reference list."""

    cleaned = (prompt or "").strip()
    if not cleaned:
        raise GenerationError("Prompt is required")
    if len(cleaned) > MAX_PROMPT_LENGTH:
        raise GenerationError(f"Prompt must be at most {MAX_PROMPT_LENGTH} characters")
    if mode not in MODES:
        raise GenerationError(f"Unsupported mode: {mode}")
    if duration not in DURATIONS:
        raise GenerationError(f"Duration must be one of {', '.join(map(str, DURATIONS))} seconds")
    if quality not in QUALITIES:
        raise GenerationError(f"Unsupported quality: {quality}")
    if aspect_ratio not in ASPECT_RATIOS:
        raise GenerationError(f"Unsupported aspect ratio: {aspect_ratio}")

    cleaned_refs: List[Dict[str, Any]] = []
    for ref in refs or ():
        url = (ref.get("file_url") or "").strip()
        if not url:
            continue
        ref_type = ref.get("type") or "face"
        if ref_type not in REF_TYPES:
            raise GenerationError(f"Unsupported reference type: {ref_type}")
        cleaned_refs.append(
            {"type": ref_type, "file_url": url, "file_type": ref.get("file_type") or "image"}
        )

    if len(cleaned_refs) > MAX_REFERENCE_FILES:
        raise GenerationError(f"At most {MAX_REFERENCE_FILES} reference files are allowed")

    images = _image_urls(cleaned_refs)
    if mode == MODE_IMAGE_TO_VIDEO and not images:
        raise GenerationError("Image-to-video needs at least one reference image")
    if mode == MODE_FIRST_LAST_FRAME and len(images) != 2:
        raise GenerationError("First & last frame mode needs exactly two reference images")

    return cleaned_refs


def start_generation(
    user_id: int,
    prompt: str,
    *,
    mode: str,
    duration: int,
    quality: str,
    aspect_ratio: str,
    generate_audio: bool = False,
    refs: Optional[Iterable[Dict[str, Any]]] = None,
    service: EvolinkService | None = None,
) -> Dict[str, Any]:
    """Charge the user, submit the task to Evolink and store the generation."""

    cleaned_refs = validate_request(
        prompt,
        mode=mode,
        duration=duration,
        quality=quality,
        aspect_ratio=aspect_ratio,
        refs=refs,
    )
    prompt = prompt.strip()
    service = service or EvolinkService()

    cost = calculate_generation_cost(duration=duration, quality=quality, generate_audio=generate_audio)
    usage_id = db.consume_credits(user_id, cost, description=f"Video generation ({mode}, {duration}s, {quality})")
    if usage_id is None:
        raise InsufficientCreditsError(cost, db.get_credit_balance(user_id))

    try:
        task_id = service.submit_generation(
            prompt,
            mode=mode,
            duration=duration,
            quality=quality,
            aspect_ratio=aspect_ratio,
            generate_audio=generate_audio,
            image_urls=_image_urls(cleaned_refs),
        )
    except EvolinkError:
        db.refund_credits(user_id, usage_id, description="Refund: generation submission failed")
        logger.exception("Generation submission failed", extra={"user_id": user_id})
        raise

    generation = db.create_generation(
        user_id,
        task_id=task_id,
        prompt=prompt,
        mode=mode,
        model=service.model,
        duration=duration,
        quality=quality,
        aspect_ratio=aspect_ratio,
        generate_audio=generate_audio,
        cost=cost,
        usage_transaction_id=usage_id,
    )
    logger.info(
        "Generation submitted",
        extra={"user_id": user_id, "generation_id": generation["id"], "task_id": task_id, "cost": cost},
    )
    return generation


def refresh_generation(
    user_id: int,
    generation_id: str,
    *,
    service: EvolinkService | None = None,
) -> Optional[Dict[str, Any]]:
    """Query Evolink once for a processing generation and persist the result.

    Returns ``None`` for unknown ids.  Finished generations are returned as
    stored.  A generation that ends up failed is refunded exactly once.
    """

    generation = db.get_generation(user_id, generation_id)
    if generation is None or generation["status"] != STATUS_PROCESSING:
        return generation

    service = service or EvolinkService()
    task = service.get_task_status(generation["task_id"])
    status = VENDOR_STATUS_MAP.get(task["status"], STATUS_PROCESSING)

    db.update_generation(
        generation_id,
        status=status,
        progress=100 if status == STATUS_COMPLETED else task["progress"],
        video_url=task["video_url"],
        error=task["error"],
    )

    usage_id = generation["usage_transaction_id"]
    if status == STATUS_FAILED and usage_id and db.mark_generation_refunded(generation_id):
        db.refund_credits(user_id, usage_id, description=f"Refund: generation {generation_id} failed")
        logger.info("Refunded failed generation", extra={"user_id": user_id, "generation_id": generation_id})

    refreshed = db.get_generation(user_id, generation_id)
    refreshed["estimated_time"] = task.get("estimated_time")
    return refreshed


def serialize_generation(generation: Dict[str, Any]) -> Dict[str, Any]:
    created = datetime.datetime.fromtimestamp(generation["created_at"], tz=datetime.timezone.utc)
    data = {
        "id": generation["id"],
        "prompt": generation["prompt"],
        "status": generation["status"],
        "progress": generation["progress"],
        "videoUrl": generation.get("video_url"),
        "error": generation.get("error"),
        "createdAt": created.isoformat().replace("+00:00", "Z"),
        "model": generation["model"],
        "mode": generation["mode"],
        "duration": generation["duration"],
        "quality": generation["quality"],
        "aspectRatio": generation["aspect_ratio"],
        "generateAudio": generation["generate_audio"],
        "cost": generation["cost"],
    }
    if "estimated_time" in generation:
        data["estimatedTime"] = generation["estimated_time"]
    return data
