"""Periodic full-library disk scan."""

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from cratekeeper.application.services.artist_service import ArtistService
from cratekeeper.application.services.disk_scan_service import (
    ArtistScanResult,
    DiskScanService,
    ScanOutcome,
)
from cratekeeper.config import ScanSettings

logger = logging.getLogger(__name__)


class LibraryScanWorker:
    """Background worker that rescans every artist folder on an interval.

    Hey future me - stop() does two things: it sets the cancel event of the
    in-flight scan so it stops BETWEEN artist folders (never halfway through
    one), and it cancels the sleeping loop task. Every scan gets a FRESH event,
    so a manual trigger after stop() still scans. Manual triggers share the
    same lock as the loop, so two full scans never overlap.
    """

    def __init__(
        self,
        scan_service: DiskScanService,
        artist_service: ArtistService,
        settings: ScanSettings | None = None,
    ) -> None:
        self._scan_service = scan_service
        self._artist_service = artist_service
        self._settings = settings or ScanSettings()

        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._cancel_event: asyncio.Event | None = None
        self._scan_lock = asyncio.Lock()

        self._stats: dict[str, Any] = {
            "scans_completed": 0,
            "folders_scanned": 0,
            "folders_failed": 0,
            "files_added": 0,
            "files_updated": 0,
            "last_scan_at": None,
            "last_error": None,
        }

    async def start(self) -> None:
        """Start the scan loop."""
        if self._running:
            logger.warning("Library scan worker is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            f"Library scan worker started (interval {self._settings.interval_seconds}s, "
            f"run on startup: {self._settings.run_on_startup})"
        )

    async def stop(self) -> None:
        """Stop the scan loop and abort a running scan between folders."""
        self._running = False
        if self._cancel_event is not None:
            self._cancel_event.set()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("Library scan worker stopped")

    def get_status(self) -> dict[str, Any]:
        """Get worker status for monitoring."""
        return {
            "name": "Library Scan",
            "running": self._running,
            "scanning": self._scan_lock.locked(),
            "interval_seconds": self._settings.interval_seconds,
            "stats": dict(self._stats),
        }

    async def trigger_scan_now(
        self, artist_paths: Sequence[Path] | None = None
    ) -> list[ArtistScanResult]:
        """Scan now (all artist folders when artist_paths is None)."""
        return await self._run_scan(artist_paths)

    async def _run_loop(self) -> None:
        if not self._settings.run_on_startup:
            await asyncio.sleep(self._settings.interval_seconds)

        while self._running:
            try:
                await self._run_scan()
            except Exception as e:
                logger.error(f"Error in library scan loop: {e}", exc_info=True)
                self._stats["last_error"] = str(e)

            await asyncio.sleep(self._settings.interval_seconds)

    async def _run_scan(
        self, artist_paths: Sequence[Path] | None = None
    ) -> list[ArtistScanResult]:
        async with self._scan_lock:
            if artist_paths is None:
                artist_paths = sorted((await self._artist_service.all_artist_paths()).values())

            logger.info(f"Starting library scan of {len(artist_paths)} artist folders")
            self._cancel_event = asyncio.Event()
            try:
                results = await self._scan_service.scan(
                    artist_paths, cancel_event=self._cancel_event
                )
            finally:
                self._cancel_event = None

            self._stats["scans_completed"] += 1
            self._stats["folders_scanned"] += sum(
                1 for r in results if r.outcome == ScanOutcome.SCANNED
            )
            self._stats["folders_failed"] += sum(
                1 for r in results if r.outcome == ScanOutcome.FAILED
            )
            self._stats["files_added"] += sum(r.added for r in results)
            self._stats["files_updated"] += sum(r.updated for r in results)
            self._stats["last_scan_at"] = datetime.now(UTC).isoformat()
            return results
