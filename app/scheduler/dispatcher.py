from celery import shared_task
from redis import Redis
from redlock import Redlock
from app.sources.bullpump_pipeline.config.settings import REDIS_URL, WINDOW_SECONDS
from app.sources.bullpump_pipeline.ingestion.schedule_ingest import run_indexer_window
import logging
log = logging.getLogger(__name__)

# ── global Redis lock (only ONE indexing window may run at a time) ───────────
LOCKER = Redlock([Redis.from_url(REDIS_URL)])

# window length + 10s
WINDOW_LOCK_MS = int((WINDOW_SECONDS + 10) * 1000)


@shared_task(name="dispatch_indexer", queue="dispatch", bind=True)
def dispatch_indexer(self):
    lock = LOCKER.lock("bullpump_index_lock", WINDOW_LOCK_MS)
    if not lock:
        log.info("🔒 Another indexing window is running; skipping.")
        return None

    try:
        log.info("🚀 Launching indexing window")
        result = run_indexer_window.apply_async(
            kwargs={"duration_seconds": WINDOW_SECONDS},
            queue="index",
        )
        # hold the lock until the window is done
        summary = result.get(timeout=WINDOW_SECONDS + 30, disable_sync_subtasks=False)
        log.info(f"✅ Window done: {summary}")
        return summary
    except Exception:
        log.exception("❌ Indexing window failed")
        return None
    finally:
        LOCKER.unlock(lock)
