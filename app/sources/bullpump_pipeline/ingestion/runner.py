from app.sources.aptos.client import get_aptos_client
from app.sources.bullpump_pipeline.config.settings import (
    APTOS_NODE_URL, BULLPUMP_CONTRACT, GRADUATION_THRESHOLD_OCTAS, BUY_FEE_BPS,
    WINDOW_SECONDS, WINDOW_SAFETY_MARGIN_SECONDS,
)
from app.sources.bullpump_pipeline.indexer.cursor import IngestionCursor
from app.sources.bullpump_pipeline.indexer.service import BullPumpIndexer
from app.sources.bullpump_pipeline.indexer.updater import AggregateStateUpdater
from app.storage.db import init_engine, init_db, SessionLocal
import logging

log = logging.getLogger(__name__)

# Shared by every window run in this process, so consecutive windows pick up
# where the previous one stopped.
WINDOW_CURSOR = IngestionCursor()


def build_indexer(session_factory=None, node_url: str = APTOS_NODE_URL, **kwargs) -> BullPumpIndexer:
    """Wire client + updater + indexer. Binds the default DB session factory if none given."""
    if session_factory is None:
        init_engine()
        session_factory = SessionLocal

    updater = AggregateStateUpdater(
        session_factory,
        graduation_threshold=GRADUATION_THRESHOLD_OCTAS,
        buy_fee_bps=BUY_FEE_BPS,
    )
    return BullPumpIndexer(
        get_aptos_client(node_url),
        updater,
        session_factory,
        contract=BULLPUMP_CONTRACT,
        **kwargs,
    )


def run_window(
    duration_seconds: float = WINDOW_SECONDS,
    from_version: int | None = None,
    session_factory=None,
    cursor: IngestionCursor | None = None,
    safety_margin_seconds: float = WINDOW_SAFETY_MARGIN_SECONDS,
) -> dict:
    """One bounded-duration indexing run (Celery / serverless entry point)."""
    if session_factory is None:
        init_db()
    indexer = build_indexer(session_factory, cursor=cursor if cursor is not None else WINDOW_CURSOR)
    log.info(f"[runner] Indexing window of {duration_seconds}s from {indexer.cursor}")
    return indexer.run_for(
        duration_seconds,
        from_version=from_version,
        safety_margin_seconds=safety_margin_seconds,
    )
