"""Studio page and the generation endpoints it calls."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from pydantic import BaseModel, Field

import db
from modules.account.handlers import signin_redirect
from modules.account.service import current_user, require_user
from modules.evolink.service import EvolinkError
from modules.pricing import settings as pricing_settings
from modules.pricing.service import calculate_generation_cost, get_credit_packages, get_price_plans
from utils import parse_bool, parse_int, render
from .service import (
    GenerationError,
    InsufficientCreditsError,
    refresh_generation,
    serialize_generation,
    start_generation,
)
from .settings import (
    ASPECT_RATIOS,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_DURATION,
    DEFAULT_MODE,
    DEFAULT_QUALITY,
    DURATIONS,
    MAX_REFERENCE_FILES,
    MODES,
    POLL_INTERVAL,
    QUALITIES,
    REF_TYPES,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["studio"])


class ReferenceFile(BaseModel):
    type: str = Field(default="face", description="Reference role: face, motion, structure, style or audio")
    file_url: str = Field(..., description="URL returned by /api/upload (or a data URI)")
    file_type: str = Field(default="image", description="image, video or audio")


class GenerationRequest(BaseModel):
    prompt: str = Field(..., description="Text prompt that describes the video")
    mode: str = Field(default=DEFAULT_MODE)
    duration: int = Field(default=DEFAULT_DURATION, description="Clip length in seconds")
    quality: str = Field(default=DEFAULT_QUALITY)
    aspect_ratio: str = Field(default=DEFAULT_ASPECT_RATIO)
    generate_audio: bool = Field(default=False)
    refs: List[ReferenceFile] = Field(default_factory=list)


def _evolink_exception(exc: EvolinkError) -> HTTPException:
    return HTTPException(status_code=exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _prefill(request: Request) -> Dict[str, Any]:
    query = request.query_params
    mode = query.get("mode") if query.get("mode") in MODES else DEFAULT_MODE
    duration = parse_int(query.get("duration"), DEFAULT_DURATION)
    quality = query.get("quality") if query.get("quality") in QUALITIES else DEFAULT_QUALITY
    aspect_ratio = query.get("aspectRatio") if query.get("aspectRatio") in ASPECT_RATIOS else DEFAULT_ASPECT_RATIO
    return {
        "mode": mode,
        "model": query.get("model") or "",
        "prompt": query.get("prompt") or "",
        "duration": duration if duration in DURATIONS else DEFAULT_DURATION,
        "quality": quality,
        "aspect_ratio": aspect_ratio,
        "generate_audio": parse_bool(query.get("audio")),
    }


@router.get("/studio", include_in_schema=False)
def studio_page(request: Request, user=Depends(current_user)):
    if not user:
        return signin_redirect(request)

    prefill = _prefill(request)
    generations = [serialize_generation(g) for g in db.list_generations(user["user_id"])]
    return render(
        request,
        "studio.html",
        prefill=prefill,
        modes=MODES,
        durations=DURATIONS,
        qualities=QUALITIES,
        aspect_ratios=ASPECT_RATIOS,
        ref_types=REF_TYPES,
        max_refs=MAX_REFERENCE_FILES,
        credits=db.get_credit_balance(user["user_id"]),
        cost=calculate_generation_cost(prefill["duration"], prefill["quality"], prefill["generate_audio"]),
        pricing={
            "base": pricing_settings.BASE_CREDIT_COST,
            "duration_addon": pricing_settings.DURATION_ADDON_COST,
            "resolution_addon": pricing_settings.RESOLUTION_ADDON_COST,
            "audio_addon": pricing_settings.AUDIO_ADDON_COST,
        },
        poll_interval_ms=int(POLL_INTERVAL * 1000),
        generations=generations,
        plans=get_price_plans(),
        packages=get_credit_packages(),
    )


@router.post("/api/generate", summary="Submit a video generation")
def generate(payload: GenerationRequest, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    try:
        generation = start_generation(
            user["user_id"],
            payload.prompt,
            mode=payload.mode,
            duration=payload.duration,
            quality=payload.quality,
            aspect_ratio=payload.aspect_ratio,
            generate_audio=payload.generate_audio,
            refs=[ref.model_dump() for ref in payload.refs],
        )
    except GenerationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except InsufficientCreditsError as exc:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(exc)) from exc
    except EvolinkError as exc:
        raise _evolink_exception(exc) from exc

    return {
        "id": generation["id"],
        "status": generation["status"],
        "taskId": generation["task_id"],
        "cost": generation["cost"],
        "creditsRemaining": db.get_credit_balance(user["user_id"]),
        "generation": serialize_generation(generation),
    }


@router.get("/api/generate/status", summary="Poll a generation")
def generation_status(
    generationId: str | None = None,
    taskId: str | None = None,
    user: Dict[str, Any] = Depends(require_user),
) -> Dict[str, Any]:
    if generationId:
        generation = db.get_generation(user["user_id"], generationId)
    elif taskId:
        generation = db.get_generation_by_task(user["user_id"], taskId)
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="generationId or taskId is required")

    if generation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Generation not found")

    try:
        refreshed = refresh_generation(user["user_id"], generation["id"])
    except EvolinkError as exc:
        raise _evolink_exception(exc) from exc

    data = serialize_generation(refreshed)
    data["taskId"] = refreshed["task_id"]
    return data


def register(app: FastAPI) -> None:
    app.include_router(router)
