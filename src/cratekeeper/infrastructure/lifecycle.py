"""Application lifecycle: wiring, startup and shutdown.

Hey future me - this is the ONE place that knows every concrete class.
Services only see ports; lifespan() builds the object graph from Settings,
creates the schema, starts the scan worker and tears everything down again.

Usage:
    async with lifespan(get_settings()) as app:
        results = await app.scan_worker.trigger_scan_now()
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import make_url

from cratekeeper.application.cache import CacheRegistry
from cratekeeper.application.services import (
    AddArtistService,
    ArtistPathBuilder,
    ArtistService,
    DiskScanService,
    MediaInfoDecisionEngine,
    RootFolderService,
)
from cratekeeper.application.workers import LibraryScanWorker
from cratekeeper.config import Settings
from cratekeeper.domain.exceptions import ConfigurationError
from cratekeeper.domain.ports import IArtistInfoProvider
from cratekeeper.infrastructure.events import InMemoryEventPublisher
from cratekeeper.infrastructure.observability import configure_logging
from cratekeeper.infrastructure.persistence import (
    Database,
    SqlArtistRepository,
    SqlCatalogStore,
)

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Everything a running instance holds on to."""

    settings: Settings
    db: Database
    events: InMemoryEventPublisher
    caches: CacheRegistry
    root_folders: RootFolderService
    artist_service: ArtistService
    decision_engine: MediaInfoDecisionEngine
    scan_service: DiskScanService
    scan_worker: LibraryScanWorker
    add_artist_service: AddArtistService | None = None


def _validate_sqlite_path(settings: Settings) -> None:
    """Make sure the SQLite file's folder exists before the engine touches it."""
    url = make_url(settings.database.url)
    if not url.drivername.startswith("sqlite") or not url.database or url.database == ":memory:":
        return

    parent = Path(url.database).expanduser().resolve().parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot create database folder {parent}: {e}") from e


def build_application(
    settings: Settings, artist_info: IArtistInfoProvider | None = None
) -> Application:
    """Wire the object graph (no I/O besides creating the engine)."""
    if not settings.storage.root_folders:
        raise ConfigurationError("No root folders configured (CRATEKEEPER_STORAGE__ROOT_FOLDERS)")

    _validate_sqlite_path(settings)
    db = Database(settings)
    events = InMemoryEventPublisher()
    caches = CacheRegistry()
    path_builder = ArtistPathBuilder()

    artist_service = ArtistService(
        repository=SqlArtistRepository(db),
        events=events,
        cache_registry=caches,
        path_builder=path_builder,
        matching=settings.matching,
    )
    root_folders = RootFolderService.from_settings(settings)
    decision_engine = MediaInfoDecisionEngine()
    scan_service = DiskScanService(
        catalog=SqlCatalogStore(db),
        decision_engine=decision_engine,
        root_resolver=root_folders,
        events=events,
        artist_service=artist_service,
        settings=settings.scan,
    )

    return Application(
        settings=settings,
        db=db,
        events=events,
        caches=caches,
        root_folders=root_folders,
        artist_service=artist_service,
        decision_engine=decision_engine,
        scan_service=scan_service,
        scan_worker=LibraryScanWorker(scan_service, artist_service, settings.scan),
        add_artist_service=(
            AddArtistService(artist_service, artist_info, path_builder)
            if artist_info is not None
            else None
        ),
    )


@asynccontextmanager
async def lifespan(
    settings: Settings,
    artist_info: IArtistInfoProvider | None = None,
    start_worker: bool = True,
) -> AsyncGenerator[Application, None]:
    """Run an application instance for the duration of the context."""
    configure_logging(
        log_level=settings.observability.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.observability.app_name,
    )
    logger.info(f"Starting {settings.observability.app_name}")

    app = build_application(settings, artist_info)
    await app.db.create_tables()
    logger.info(f"Database initialized: {settings.database.url}")

    if start_worker:
        await app.scan_worker.start()

    try:
        yield app
    finally:
        await app.scan_worker.stop()
        app.scan_service.shutdown()
        app.decision_engine.shutdown()
        await app.db.close()
        logger.info("Shutdown complete")
