from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.database import session_scope


class BaseRepository:
    """
    Repositories hold a session factory, not a session.

    Each operation runs in its own short transaction, so one repository can
    serve many concurrent coroutines (an AsyncSession cannot).
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        async with session_scope(self.session_factory) as session:
            yield session
