"""Pipeline wiring - builds the scan and catalog components once per process."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import sessionmaker

from app.api.websocket import ConnectionManager
from app.core.parser import FilenameParser
from app.matcher import MetadataMatcher, MetadataProvider, TmdbClient
from app.matcher.tmdb_client import RateLimitedRequest
from app.repositories import CatalogRepository, ConflictRepository, FolderRepository
from app.services.catalog_sync import CatalogSync
from app.services.conflict_store import ConflictStore
from app.services.event_broadcaster import EventBroadcaster
from app.services.scan_scheduler import ScanScheduler
from app.services.scanner import ScanOrchestrator
from app.services.transcode_status import TranscodeStatusManager

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    folders: FolderRepository
    conflicts: ConflictStore
    catalog: CatalogSync
    scanner: ScanOrchestrator
    scheduler: ScanScheduler
    transcode: TranscodeStatusManager
    events: EventBroadcaster


def build_pipeline(
    session_factory: sessionmaker,
    ws_manager: ConnectionManager,
    provider: MetadataProvider | None = None,
    language: str = "en-US",
    rate_limit: int = 30,
) -> Pipeline:
    """Wire repositories, matcher and services around one session factory.

    Without an explicit ``provider`` a TmdbClient is used that reads its API
    key from the stored configuration on every request.
    """
    if provider is None:
        provider = TmdbClient(
            language=language,
            rate_limiter=RateLimitedRequest(rate_limit=max(1, rate_limit), period=1),
        )

    events = EventBroadcaster(ws_manager)
    parser = FilenameParser()
    matcher = MetadataMatcher(provider)

    folders = FolderRepository(session_factory)
    catalog_repo = CatalogRepository(session_factory)

    catalog = CatalogSync(catalog_repo, matcher=matcher, events=events)
    conflicts = ConflictStore(ConflictRepository(session_factory), catalog, parser, events)
    scanner = ScanOrchestrator(parser, matcher, conflicts, catalog, folders=folders, events=events)

    logger.debug("Pipeline built")
    return Pipeline(
        folders=folders,
        conflicts=conflicts,
        catalog=catalog,
        scanner=scanner,
        scheduler=ScanScheduler(scanner),
        transcode=TranscodeStatusManager(catalog_repo, events),
        events=events,
    )
