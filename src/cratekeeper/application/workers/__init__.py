"""Worker system - background jobs."""

from cratekeeper.application.workers.library_scan_worker import LibraryScanWorker

__all__ = ["LibraryScanWorker"]
