"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.database import init_db, close_db, get_session_factory
from .api.router import router
from .orchestrator.orchestrator import TurnOrchestrator
from .services.store import RecordStore

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Gina",
        description="Mental wellness companion API",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins if origins != ["*"] else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-TTS-Voice-Used", "X-TTS-Fallback"],
    )

    # ── Store + orchestrator (one per app, injected into routes) ─
    app.state.store = RecordStore(get_session_factory())
    app.state.orchestrator = TurnOrchestrator(
        app.state.store, context_turns=settings.history_context_limit,
    )

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting Gina (env=%s)", settings.env)

        # Create database tables
        await init_db()

        # Log feature flag state
        flags = app.state.orchestrator.flags
        logger.info(
            "Flags: facts=%s summary=%s resources=%s tts=%s llm=%s",
            flags.use_fact_extraction, flags.use_running_summary,
            flags.use_resource_formatting, flags.use_tts, flags.llm_provider,
        )

        logger.info("Gina is ready")

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        from .services.llm import close_client

        pending = app.state.orchestrator.pending
        if pending:
            logger.info("Waiting for %d background task(s)", pending)
        await app.state.orchestrator.drain()
        await close_client()
        await close_db()
        logger.info("Gina shut down")

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
