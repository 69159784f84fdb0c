"""ScanningConflict persistence."""

from sqlalchemy import delete as sa_delete
from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from app.models import ScanningConflict


class ConflictRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def get(self, conflict_id: int) -> ScanningConflict | None:
        async with self._session_factory() as session:
            return await session.get(ScanningConflict, conflict_id)

    async def get_by_file_path(self, file_path: str) -> ScanningConflict | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ScanningConflict).where(ScanningConflict.file_path == file_path)
            )
            return result.scalar_one_or_none()

    async def list(self, resolved: bool | None = None) -> list[ScanningConflict]:
        async with self._session_factory() as session:
            statement = select(ScanningConflict).order_by(ScanningConflict.id)
            if resolved is not None:
                statement = statement.where(ScanningConflict.resolved == resolved)
            result = await session.execute(statement)
            return list(result.scalars().all())

    async def save(self, conflict: ScanningConflict) -> ScanningConflict:
        async with self._session_factory() as session:
            session.add(conflict)
            await session.commit()
            await session.refresh(conflict)
            return conflict

    async def delete(self, conflict_id: int) -> bool:
        async with self._session_factory() as session:
            conflict = await session.get(ScanningConflict, conflict_id)
            if conflict is None:
                return False
            await session.delete(conflict)
            await session.commit()
            return True

    async def delete_all(self, resolved_only: bool = False) -> int:
        """Delete conflicts in bulk and return how many rows went away."""
        async with self._session_factory() as session:
            statement = sa_delete(ScanningConflict)
            if resolved_only:
                statement = statement.where(ScanningConflict.resolved == True)  # noqa: E712
            result = await session.execute(statement)
            await session.commit()
            return result.rowcount or 0
