from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from airboard.api.router import api_router
from airboard.core.config import Settings, load_settings
from airboard.core.logging import configure_logging
from airboard.db.store import create_history_store
from airboard.repositories.base import HistoryStore
from airboard.services.admin import PinAuthority
from airboard.services.boards import BoardFeed
from airboard.services.charts import ChartSink
from airboard.services.dashboard import Dashboard


def create_app(
    settings: Settings | None = None,
    *,
    store: HistoryStore | None = None,
    feed: BoardFeed | None = None,
    sink: ChartSink | None = None,
    pins: PinAuthority | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        dashboard = Dashboard(
            settings=settings,
            store=store if store is not None else create_history_store(settings),
            sink=sink,
            feed=feed,
            pins=pins,
        )
        app.state.dashboard = dashboard
        await dashboard.start()
        yield
        await dashboard.stop()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Airboard Dashboard API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "airboard", "status": "ok"}

    app.include_router(api_router)
    return app
