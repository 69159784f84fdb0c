"""MediaFolder persistence."""


from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from app.models import FolderType, MediaFolder
from app.models.timestamps import utc_now


class FolderRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def list(self, active_only: bool = False) -> list[MediaFolder]:
        async with self._session_factory() as session:
            statement = select(MediaFolder).order_by(MediaFolder.id)
            if active_only:
                statement = statement.where(MediaFolder.active == True)  # noqa: E712
            result = await session.execute(statement)
            return list(result.scalars().all())

    async def get(self, folder_id: int) -> MediaFolder | None:
        async with self._session_factory() as session:
            return await session.get(MediaFolder, folder_id)

    async def get_by_path(self, path: str) -> MediaFolder | None:
        async with self._session_factory() as session:
            result = await session.execute(select(MediaFolder).where(MediaFolder.path == path))
            return result.scalar_one_or_none()

    async def create(self, path: str, folder_type: FolderType) -> MediaFolder:
        async with self._session_factory() as session:
            folder = MediaFolder(path=path, type=folder_type)
            session.add(folder)
            await session.commit()
            await session.refresh(folder)
            return folder

    async def set_active(self, folder_id: int, active: bool) -> MediaFolder | None:
        async with self._session_factory() as session:
            folder = await session.get(MediaFolder, folder_id)
            if folder is None:
                return None
            folder.active = active
            folder.updated_at = utc_now()
            await session.commit()
            await session.refresh(folder)
            return folder

    async def delete(self, folder_id: int) -> bool:
        async with self._session_factory() as session:
            folder = await session.get(MediaFolder, folder_id)
            if folder is None:
                return False
            await session.delete(folder)
            await session.commit()
            return True

