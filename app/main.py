"""
Garage Management API: application factory and console entry point.

Builds the FastAPI app (middleware, error handlers, routers) and seeds the
bootstrap admin on startup.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from app.api.api import api_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.rate_limit import limiter
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import async_session_factory, engine
from app.middleware.sanitize import InputSanitizerMiddleware

# Ensure all models are imported so metadata.create_all can see them
from app.models import Customer, Feedback, Invoice, InvoiceItem, Service, Vehicle  # noqa: F401
from app.models.user import Role, User

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_first_admin() -> None:
    """Create the configured bootstrap admin if that username is free."""
    if not (settings.FIRST_ADMIN_USERNAME and settings.FIRST_ADMIN_PASSWORD):
        return
    async with async_session_factory() as session:
        result = await session.execute(
            select(User).where(User.username == settings.FIRST_ADMIN_USERNAME)
        )
        if result.scalar_one_or_none() is None:
            session.add(
                User(
                    username=settings.FIRST_ADMIN_USERNAME,
                    hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                    role=Role.ADMIN.value,
                )
            )
            await session.commit()
            logger.info(
                "Default admin created: %s (password: <redacted>)",
                settings.FIRST_ADMIN_USERNAME,
            )


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Garage tables ready on %s", engine.dialect.name)

    await seed_first_admin()

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    docs_enabled = settings.ENABLE_DOCS
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Customers, vehicles, services, invoices and feedback for a garage",
        version=settings.VERSION,
        openapi_url="/swagger.json" if docs_enabled else None,
        docs_url="/api-docs" if docs_enabled else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    if docs_enabled:
        logger.info("Swagger UI enabled at /api-docs")

    # Login rate limiting (slowapi looks the limiter up on app.state)
    application.state.limiter = limiter

    # Format-specifier screening on every request
    application.add_middleware(InputSanitizerMiddleware)

    # CORS (outermost, so rejected requests still carry CORS headers)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # Every error leaves as {"message": ...}
    register_exception_handlers(application)

    @application.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"message": "Welcome to the Garage Management API!"}

    # Mount API
    application.include_router(api_router, prefix=settings.API_PREFIX)

    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
