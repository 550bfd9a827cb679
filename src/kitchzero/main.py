"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kitchzero import __version__
from kitchzero.config import settings
from kitchzero.db.engine import create_db_engine, create_session_factory
from kitchzero.events.webhook_emitter import drain_deliveries
from kitchzero.logging_config import configure_logging

# Configure logging at import time
configure_logging(log_level=settings.log_level, json_output=not settings.local_mode)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    # Auto-create tables for SQLite (local dev, no migrations)
    if "sqlite" in db_url:
        from kitchzero.db.base import Base
        import kitchzero.db.models  # noqa: F401 (register all ORM models)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite tables created (local mode)")

    app.state.db_engine = engine
    app.state.db_session_factory = create_session_factory(engine)

    logger.info("KitchZero API started (db=%s)", "sqlite" if "sqlite" in db_url else "postgresql")
    yield

    await drain_deliveries(timeout=settings.webhook_drain_timeout_seconds)
    await engine.dispose()
    logger.info("KitchZero API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="KitchZero API",
        version=__version__,
        description="Approval workflow for inventory adjustments and waste logging.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add middleware (order matters: last added = first executed)
    from kitchzero.api.middleware.auth import AuthMiddleware
    from kitchzero.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(AuthMiddleware)
    app.add_middleware(TraceIdMiddleware)

    from kitchzero.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from kitchzero.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
