from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from prometheus_client import REGISTRY, CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator

from pairhub.api.me import router as me_router
from pairhub.auth.login import setup_github_login
from pairhub.core.config import Settings, settings
from pairhub.core.logging import configure_logging
from pairhub.db import close_client, ensure_indexes, get_database
from pairhub.middleware.rate_limit import RateLimitMiddleware
from pairhub.middleware.request_id import RequestIdMiddleware
from pairhub.middleware.security_headers import SecurityHeadersMiddleware
from pairhub.middleware.session_cookie import SessionCookieMiddleware
from pairhub.redis_client import close_redis
from pairhub.web.pages import router as pages_router

configure_logging(settings.log_level)

logger = structlog.get_logger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app(config: Settings = settings, registry: CollectorRegistry = REGISTRY) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.store_backend == "mongodb":
            await ensure_indexes(get_database())
        logger.info("pairhub_started", env=config.env, login_enabled=hasattr(app.state, "github_client"))
        yield
        close_client()
        close_redis()

    app = FastAPI(title="PairHub", lifespan=lifespan)

    # Starlette runs the LAST added middleware FIRST (outermost), so the
    # request id and security headers also cover rate-limited responses.
    app.add_middleware(SessionCookieMiddleware, cookie_name=config.session_cookie_name)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    Instrumentator(registry=registry).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    setup_github_login(app, config)
    app.include_router(me_router)
    app.include_router(pages_router)
    return app


app = create_app()
