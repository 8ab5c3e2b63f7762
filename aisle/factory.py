"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings
from .core.database import init_db, close_db, session_scope
from .core.redis import close_redis
from .api.errors import http_exception_handler, validation_exception_handler
from .api.router import router

logger = logging.getLogger(__name__)


async def _provision_dev_tenant():
    """With auth off every request runs as the dev tenant; make sure its row exists."""
    from .core.auth import DEV_TENANT_ID
    from .services.tenants import ensure_tenant

    async with session_scope() as session:
        await ensure_tenant(session, DEV_TENANT_ID, slug=DEV_TENANT_ID)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Aisle",
        description="AI wedding planner: conversational extraction into the wedding kernel",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors → {error, details} ────────────────────────────────
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting Aisle (env=%s)", settings.env)

        await init_db()

        from .orchestrator.registry import get_registry
        get_registry()

        from .core.flags import get_flags
        flags = get_flags()
        logger.info(
            "Flags: auth0=%s redis=%s llm=%s enforce_ai_limit=%s",
            flags.use_auth0, flags.use_redis, flags.llm_provider, flags.enforce_ai_limit,
        )

        if not flags.use_auth0:
            await _provision_dev_tenant()

        logger.info("Aisle is ready")

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        from .services.llm import close_client
        await close_client()
        await close_db()
        await close_redis()
        logger.info("Aisle shut down")

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
