"""SQLAlchemy transaction manager: savepoint-scoped atomic blocks inside the request transaction."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession


class SqlAlchemyTransactionManager:
    """Wraps a block in SAVEPOINT; an exception rolls back only that block."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self.db.begin_nested():
            yield
