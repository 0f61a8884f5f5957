"""
SalesTrackr: Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `api/`, `services/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from salestrackr.api.v1.api import api_router
from salestrackr.core.config import settings
from salestrackr.core.exceptions import register_exception_handlers
from salestrackr.core.rate_limit import limiter
from salestrackr.core.security import get_password_hash
from salestrackr.db.base import Base
from salestrackr.db.session import async_session_factory, engine
from salestrackr.middleware.request_log import RequestLogMiddleware

# Ensure all models are imported so metadata.create_all can see them
from salestrackr.models.auth_session import AuthSession  # noqa: F401
from salestrackr.models.client import Client  # noqa: F401
from salestrackr.models.field_reports import (  # noqa: F401
    Depot, MissedOrder, ProductComplaint, TrainingLog)
from salestrackr.models.user import ROLE_ADMIN, User
from salestrackr.models.visit import Visit  # noqa: F401
from salestrackr.services.sessions import SqlSessionStore

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    async with async_session_factory() as session:
        # Seed default admin user on first run
        result = await session.execute(
            select(User).where(User.email == settings.FIRST_ADMIN_EMAIL.lower())
        )
        if result.scalar_one_or_none() is None:
            admin = User(
                name=settings.FIRST_ADMIN_NAME,
                email=settings.FIRST_ADMIN_EMAIL.lower(),
                hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                role=ROLE_ADMIN,
            )
            session.add(admin)
            await session.commit()
            logger.info(
                "Default admin created: %s (password: <redacted>)",
                settings.FIRST_ADMIN_EMAIL,
            )

        purged = await SqlSessionStore(session).purge_expired()
        if purged:
            logger.info("Purged %d expired sessions", purged)

    logger.info("🚀 %s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Field-sales tracking: clients, visits and field reports",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLogMiddleware, prefix=settings.API_V1_PREFIX)

    # Rate limiting (login / register); 429s go through the handlers below
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
