from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from libs.db.config import Database


def get_database(request: Request) -> Database:
    """Return the Database handle attached to the running app."""
    return request.app.state.database


async def get_async_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
