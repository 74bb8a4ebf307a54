"""FastAPI application factory for the SeedanceAI site."""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

import db
from config import SITE_NAME
from utils import STATIC_DIR

# ---- Site modules ----
from modules.account import handlers as account_handlers
from modules.admin import handlers as admin_handlers
from modules.credit import handlers as credit_handlers
from modules.gallery import handlers as gallery_handlers
from modules.marketing import handlers as marketing_handlers
from modules.studio import handlers as studio_handlers
from modules.upload import handlers as upload_handlers

logger = logging.getLogger(__name__)


def register_modules(app: FastAPI) -> None:
    marketing_handlers.register(app)
    account_handlers.register(app)
    studio_handlers.register(app)
    upload_handlers.register(app)
    gallery_handlers.register(app)
    credit_handlers.register(app)
    admin_handlers.register(app)


def create_app() -> FastAPI:
    db.init_db()

    app = FastAPI(
        title=f"{SITE_NAME} API",
        version="1.0.0",
        description=(
            "Marketing site and studio for AI video generation. API requests are "
            "authenticated with a per-user API key and spend the owner's credits."
        ),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    register_modules(app)
    logger.info("Application ready (database at %s)", db.DB_PATH)
    return app
