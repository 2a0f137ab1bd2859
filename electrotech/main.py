"""Application factory: middleware, error handlers, routers and metrics."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from .core.config import settings
from .core.errors import register_exception_handlers
from .core.logging import configure_logging
from .db.init import initialize_database
from .middlewares import RequestIdMiddleware
from .routers import (
    auth,
    categories,
    clients,
    employees,
    payment_methods,
    products,
    purchases,
    reports,
    returns,
    sales,
    suppliers,
    users,
)

ROUTERS = (
    auth,
    users,
    categories,
    products,
    clients,
    suppliers,
    employees,
    payment_methods,
    sales,
    purchases,
    returns,
    reports,
)


def create_app(*, init_db: bool = True) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    app = FastAPI(title=settings.APP_NAME)

    app.add_middleware(RequestIdMiddleware)
    if settings.ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    register_exception_handlers(app)

    for module in ROUTERS:
        app.include_router(module.router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    Instrumentator().instrument(app).expose(app)

    if init_db:
        @app.on_event("startup")
        def _initialize_database() -> None:
            initialize_database()

    return app


app = create_app()
