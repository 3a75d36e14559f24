from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from libvault.api.routes.entries import router as entries_router
from libvault.api.routes.health import router as health_router
from libvault.api.routes.libraries import router as libraries_router
from libvault.api.routes.users import router as users_router
from libvault.core.config import get_settings
from libvault.core.logging import configure_logging
from libvault.db.init_db import initialize_database


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    initialize_database()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(health_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(libraries_router, prefix="/api")
    app.include_router(entries_router, prefix="/api")
    return app
