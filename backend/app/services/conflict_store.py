"""Conflict store - files whose match needs a human decision.

A conflict is keyed by file path. Recording the same path again refreshes
its candidate list in place. Resolving a conflict performs the same catalog
write a single-hit scan would have done, and only then marks it resolved.
"""

import logging

from app.core.errors import ConflictNotFoundError, ConflictResolutionError
from app.core.parser import FilenameParser, ParsedEpisode
from app.matcher.models import Candidate
from app.models import MediaType, ScanningConflict
from app.models.timestamps import utc_now
from app.repositories import ConflictRepository
from app.services.catalog_sync import CatalogSync, UpsertResult
from app.services.event_broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)


class ConflictStore:
    def __init__(
        self,
        repository: ConflictRepository,
        catalog: CatalogSync,
        parser: FilenameParser | None = None,
        events: EventBroadcaster | None = None,
    ):
        self._repo = repository
        self._catalog = catalog
        self._parser = parser or FilenameParser()
        self._events = events

    async def record(
        self,
        file_name: str,
        file_path: str,
        media_type: MediaType,
        candidates: list[Candidate],
    ) -> ScanningConflict:
        """Insert a conflict for ``file_path`` or refresh the existing one."""
        conflict = await self._repo.get_by_file_path(file_path)
        if conflict is None:
            conflict = ScanningConflict(
                file_name=file_name, file_path=file_path, media_type=media_type
            )
        else:
            conflict.file_name = file_name
            conflict.media_type = media_type
            conflict.resolved = False
            conflict.selected_id = None
            conflict.updated_at = utc_now()
        conflict.set_possible_matches(candidates)

        conflict = await self._repo.save(conflict)
        logger.info(
            f"Recorded {media_type.value} conflict {conflict.id} for {file_name} "
            f"({len(candidates)} candidates)"
        )
        if self._events:
            await self._events.broadcast_conflict_recorded(conflict.id)
        return conflict

    async def resolved_selection(self, file_path: str) -> int | None:
        """TMDB id a human already picked for this file, if any."""
        conflict = await self._repo.get_by_file_path(file_path)
        if conflict is not None and conflict.resolved:
            return conflict.selected_id
        return None

    async def settle(self, file_path: str, selected_id: int) -> ScanningConflict | None:
        """Close an open conflict whose file now matches exactly one title.

        Returns the settled conflict, or None when the path had no open conflict.
        """
        conflict = await self._repo.get_by_file_path(file_path)
        if conflict is None or conflict.resolved:
            return None

        conflict.resolved = True
        conflict.selected_id = selected_id
        conflict.updated_at = utc_now()
        conflict = await self._repo.save(conflict)

        logger.info(
            f"Settled conflict {conflict.id} ({conflict.file_name}): "
            f"single match tmdb {selected_id}"
        )
        if self._events:
            await self._events.broadcast_conflict_resolved(conflict.id)
        return conflict

    async def get(self, conflict_id: int) -> ScanningConflict:
        conflict = await self._repo.get(conflict_id)
        if conflict is None:
            raise ConflictNotFoundError(conflict_id)
        return conflict

    async def list_unresolved(self) -> list[ScanningConflict]:
        return await self._repo.list(resolved=False)

    async def resolve(
        self, conflict_id: int, selected_id: int
    ) -> tuple[ScanningConflict, UpsertResult]:
        """Resolve a conflict with the TMDB id a human picked.

        Raises:
            ConflictNotFoundError: No conflict has this id; nothing is written.
            ConflictResolutionError: The stored path no longer parses.
            MetadataError: TMDB lookup failed; the conflict stays unresolved.
        """
        conflict = await self.get(conflict_id)

        parsed = self._parser.parse(conflict.file_path, conflict.media_type)
        if parsed is None:
            raise ConflictResolutionError(
                f"Cannot resolve conflict {conflict_id}: {conflict.file_name} "
                f"does not parse as a {conflict.media_type.value}"
            )

        if isinstance(parsed, ParsedEpisode):
            result = await self._catalog.ingest_episode(selected_id, parsed)
        else:
            result = await self._catalog.ingest_movie(selected_id, parsed)

        conflict.resolved = True
        conflict.selected_id = selected_id
        conflict.updated_at = utc_now()
        conflict = await self._repo.save(conflict)

        logger.info(f"Resolved conflict {conflict_id} ({conflict.file_name}) as tmdb {selected_id}")
        if self._events:
            await self._events.broadcast_conflict_resolved(conflict_id)
        return conflict, result

    async def delete(self, conflict_id: int) -> None:
        if not await self._repo.delete(conflict_id):
            raise ConflictNotFoundError(conflict_id)
        logger.info(f"Deleted conflict {conflict_id}")
        if self._events:
            await self._events.broadcast_conflicts_deleted(conflict_id)

    async def delete_all(self, resolved_only: bool = False) -> int:
        count = await self._repo.delete_all(resolved_only=resolved_only)
        logger.info(f"Deleted {count} {'resolved ' if resolved_only else ''}conflicts")
        if self._events:
            await self._events.broadcast_conflicts_deleted()
        return count
