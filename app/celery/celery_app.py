# celery_app.py  ─────────────────────────────────────────────────────────
from celery import Celery
from celery.schedules import schedule
from app.sources.bullpump_pipeline.config.settings import (
    CELERY_BROKER_URL, CELERY_RESULT_BACKEND, DISPATCH_EVERY_SECONDS, WINDOW_SECONDS,
)
from app.utils.logging_config import configure_logging

# ── 1.  App  ────────────────────────────────────────────────
celery_app = Celery(
    "bullpump_tasks",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# ── 2.  Serialization, RedBeat, queues ──────────────────────
celery_app.conf.update(
    task_serializer       ='json',
    result_serializer     ='json',
    accept_content        =['json'],
    timezone              ='UTC',
    enable_utc            =True,

    beat_scheduler        ="redbeat.RedBeatScheduler",
    redbeat_redis_url     =CELERY_BROKER_URL,

    task_routes = {
        "dispatch_indexer":   {"queue": "dispatch"},
        "run_indexer_window": {"queue": "index"},
    },
    # hard kill for an overrunning window
    task_time_limit       =int(WINDOW_SECONDS) + 20,
)

# ── 3.  Beat: one bounded indexing window per tick ──────────
celery_app.conf.beat_schedule = {
    "index-window": {
        "task": "dispatch_indexer",
        "schedule": schedule(run_every=DISPATCH_EVERY_SECONDS),
        "options": {"queue": "dispatch"},
    }
}

# ── 4.  Logging ────────────────────────────────────────────
celery_app.conf.worker_hijack_root_logger = False
configure_logging()

# ── 5.  Task modules ───────────────────────────────────────
import app.sources.bullpump_pipeline.ingestion.schedule_ingest  # noqa: E402,F401
import app.scheduler.dispatcher  # noqa: E402,F401
