from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """Holds the ``AsyncSession`` a database-backed repository works in.

    Transaction boundaries stay with the caller: the admin service
    commits after each rule write and rolls back when a write fails.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def flush(self) -> None:
        await self._db.flush()

    async def commit(self) -> None:
        await self._db.commit()

    async def rollback(self) -> None:
        await self._db.rollback()
