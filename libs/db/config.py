from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from libs.common.config import Settings, get_settings
from libs.common.logging import get_logger
from libs.db.base import Base

logger = get_logger(__name__)


class Database:
    """Owns the async engine and session factory for one application.

    Constructed explicitly, connected in the app lifespan and disposed on
    shutdown. Requests receive sessions through ``get_async_db``.
    """

    def __init__(self, url: Optional[str] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.url = url or self.settings.DATABASE_URL
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_connected(self) -> bool:
        return self.engine is not None

    def _engine_options(self) -> dict:
        if self.url.startswith("sqlite"):
            return {}
        return {
            "pool_pre_ping": True,  # Test connections before using
            "pool_size": self.settings.DB_POOL_SIZE,
            "max_overflow": self.settings.DB_MAX_OVERFLOW,
            "pool_timeout": self.settings.DB_POOL_TIMEOUT,
            "pool_recycle": self.settings.DB_POOL_RECYCLE,
        }

    async def connect(self, create_tables: bool = False) -> None:
        if self.engine is not None:
            return

        self.engine = create_async_engine(
            self.url,
            echo=False,
            future=True,
            **self._engine_options(),
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        if create_tables:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info(
            "Database engine created (%s)",
            self.engine.url.render_as_string(hide_password=True),
        )

    async def dispose(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        logger.info("Database engine disposed")

    def session(self) -> AsyncSession:
        if self.session_factory is None:
            raise RuntimeError("Database is not connected")
        return self.session_factory()

