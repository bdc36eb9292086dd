"""FastAPI application entrypoint for The Suits World storefront API.

Every service router is mounted in-process under ``/api``.
"""

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from libs.common.config import get_settings
from libs.common.datetime_utils import isoformat_z, utc_now
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from libs.db.config import Database
from libs.db.session import get_async_db
from services.accounts_service.routers import users_router
from services.catalog_service.routers import products_router
from services.gateway_service.app.routers import debug_router
from services.media_service.routers import uploads_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    database = Database(settings=settings)
    await database.connect(create_tables=settings.DB_AUTO_CREATE)
    app.state.database = database
    logger.info("Storefront API started (%s)", settings.ENVIRONMENT)
    try:
        yield
    finally:
        await database.dispose()


async def health_check(db: AsyncSession = Depends(get_async_db)) -> dict:
    """Liveness plus a database round trip."""
    settings = get_settings()
    try:
        await db.execute(text("SELECT 1"))
        database_state = "connected"
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database")
        database_state = "disconnected"

    return {
        "success": True,
        "message": "The Suits World API is running",
        "timestamp": isoformat_z(utc_now()),
        "database": database_state,
        "environment": settings.ENVIRONMENT,
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Catalogue, accounts and image uploads for The Suits World.",
        lifespan=lifespan,
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_origin_regex=settings.CORS_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["system"])

    api = APIRouter(prefix="/api")
    api.add_api_route("/health", health_check, methods=["GET"], tags=["system"])
    api.include_router(products_router)
    api.include_router(users_router)
    api.include_router(uploads_router)
    if not settings.is_production:
        api.include_router(debug_router)
    app.include_router(api)

    return app


app = create_app()
