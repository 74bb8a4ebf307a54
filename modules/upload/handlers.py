"""Reference image upload endpoint."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, UploadFile, status

from modules.account.service import require_user
from modules.evolink.service import EvolinkError
from .service import UploadError, upload_reference
from .settings import MAX_FILE_SIZE

router = APIRouter(prefix="/api", tags=["studio"])


@router.post("/upload", summary="Upload a reference image")
def upload(
    file: UploadFile | None = File(default=None),
    user: Dict[str, Any] = Depends(require_user),
) -> Dict[str, str]:
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    # One byte past the limit is enough to reject the file.
    content = file.file.read(MAX_FILE_SIZE + 1)
    try:
        return upload_reference(content, file.content_type or "", file.filename or "upload")
    except UploadError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except EvolinkError as exc:
        raise HTTPException(
            status_code=exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc


def register(app: FastAPI) -> None:
    app.include_router(router)
