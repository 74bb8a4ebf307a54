"""Gallery page and generation history endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

import db
from modules.account.handlers import signin_redirect
from modules.account.service import current_user, require_user
from modules.studio.service import serialize_generation
from utils import render
from .service import categories, filter_templates, get_template, list_user_generations, template_studio_url
from .settings import ALL_CATEGORIES, STATUS_FILTERS, VIEW_MODES

router = APIRouter(tags=["gallery"])


@router.get("/gallery", include_in_schema=False)
def gallery_page(
    request: Request,
    status_filter: str = Query(default="all", alias="status"),
    view: str = "grid",
    category: str = ALL_CATEGORIES,
    user=Depends(current_user),
):
    if not user:
        return signin_redirect(request)

    if status_filter not in STATUS_FILTERS:
        status_filter = "all"
    if view not in VIEW_MODES:
        view = "grid"

    total = len(db.list_generations(user["user_id"]))
    generations = [serialize_generation(g) for g in list_user_generations(user["user_id"], status_filter)]
    templates = [dict(t, use_url=f"/gallery/templates/{t['id']}/use") for t in filter_templates(category)]
    return render(
        request,
        "gallery.html",
        generations=generations,
        total=total,
        status_filter=status_filter,
        status_filters=STATUS_FILTERS,
        view=view,
        category=category,
        categories=categories(),
        templates=templates,
    )


@router.get("/gallery/templates/{template_id}/use", include_in_schema=False)
def use_template(template_id: str):
    template = get_template(template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return RedirectResponse(template_studio_url(template), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/api/generations", summary="List the user's generations")
def list_generations(status: str = "all", user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    try:
        generations = list_user_generations(user["user_id"], status)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"generations": [serialize_generation(g) for g in generations]}


@router.delete("/api/generations/{generation_id}", summary="Remove a generation from the gallery")
def delete_generation(generation_id: str, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    if not db.delete_generation(user["user_id"], generation_id):
        raise HTTPException(status_code=404, detail="Generation not found")
    return {"id": generation_id, "deleted": True}


def register(app: FastAPI) -> None:
    app.include_router(router)
