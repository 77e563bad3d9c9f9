"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from .api.responses import register_exception_handlers
from .api.routes import (
    auth,
    cities,
    dashboard,
    distributors,
    district_products,
    districts,
    doctors,
    health,
    orders,
    patients,
    prescriptions,
    products,
    reports,
    teams,
    users,
)
from .config import settings
from .db import ensure_indexes

logger = logging.getLogger(__name__)

ROUTERS = (
    health,
    auth,
    users,
    districts,
    cities,
    distributors,
    teams,
    doctors,
    patients,
    prescriptions,
    orders,
    products,
    district_products,
    dashboard,
    reports,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        ensure_indexes()
    except PyMongoError as exc:
        logger.warning("Could not ensure MongoDB indexes at startup: %s", exc)
    yield


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.log_level)
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    register_exception_handlers(app)

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    for module in ROUTERS:
        app.include_router(module.router, prefix=settings.api_prefix)
    return app


app = create_app()
