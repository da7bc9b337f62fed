from sqlalchemy import Table, Column, Integer, Numeric, Text, String, TIMESTAMP, func
from app.storage.base import Base

indexing_metrics_table = Table(
    "indexing_metrics",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("timestamp", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("mode", String(16), nullable=False),        # window / backfill
    Column("version_range", Text),
    Column("tx_count", Integer, nullable=False),
    Column("tracked_tx_count", Integer, nullable=False),
    Column("duration_seconds", Numeric(10, 2))
)
