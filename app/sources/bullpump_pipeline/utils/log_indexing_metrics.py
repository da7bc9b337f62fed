from sqlalchemy.orm import Session
from app.storage.models.indexing_metrics import indexing_metrics_table
import logging


log = logging.getLogger(__name__)


def log_indexing_metrics(
    db: Session,
    mode: str,
    version_range: str,
    tx_count: int,
    tracked_tx_count: int,
    duration_seconds: float,
):
    insert_stmt = indexing_metrics_table.insert().values(
        mode=mode,
        version_range=version_range,
        tx_count=tx_count,
        tracked_tx_count=tracked_tx_count,
        duration_seconds=round(duration_seconds, 2),
    )
    db.execute(insert_stmt)
    log.info(f"[metrics] {mode} {version_range}: {tracked_tx_count}/{tx_count} tracked in {duration_seconds:.2f}s")
