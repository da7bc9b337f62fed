"""
Celery-side wrapper that runs one bounded-duration indexing window.

Same code path as `bullpump-indexer window` on the command line; the
dispatcher queues this on the **index** queue while holding the global
lock, so two windows never advance the ledger concurrently.
"""

from celery import shared_task
from app.sources.bullpump_pipeline.config.settings import WINDOW_SECONDS
from app.sources.bullpump_pipeline.ingestion.runner import run_window
from app.storage.db import init_db, WorkerSessionLocal
import logging
log = logging.getLogger(__name__)


@shared_task(
    name="run_indexer_window",
    queue="index",
    bind=True,
)
def run_indexer_window(self, *, duration_seconds: float = WINDOW_SECONDS, from_version: int | None = None) -> dict:
    log.info(f"🔄  Starting indexing window ({duration_seconds}s)")
    init_db()
    return run_window(duration_seconds, from_version=from_version, session_factory=WorkerSessionLocal)
