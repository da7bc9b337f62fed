"""Read-side queries over the materialized BullPump tables."""
from datetime import datetime, timedelta, timezone
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload
from app.storage.models.fa import FA
from app.storage.models.pool_stats import PoolStats
from app.storage.models.trade import Trade


def since_24h(now: datetime | None = None) -> datetime:
    return (now or datetime.now(timezone.utc)) - timedelta(hours=24)


def latest_trade_hash(db: Session) -> str | None:
    """Hash of the most recently settled trade; the restart anchor for the cursor."""
    row = (db.query(Trade.transaction_hash)
             .order_by(Trade.created_at.desc(), Trade.id.desc())
             .first())
    return row.transaction_hash if row else None


def list_tokens(db: Session, limit: int = 50, offset: int = 0):
    """Newest assets first, each with pool stats and lifetime trade count."""
    trade_counts = (
        select(Trade.fa_address, func.count(Trade.id).label("trade_count"))
        .group_by(Trade.fa_address)
        .subquery()
    )
    rows = (
        db.query(FA, func.coalesce(trade_counts.c.trade_count, 0))
          .options(joinedload(FA.pool_stats))
          .outerjoin(trade_counts, trade_counts.c.fa_address == FA.address)
          .order_by(FA.created_at.desc(), FA.address)
          .limit(limit)
          .offset(offset)
          .all()
    )
    total = db.query(func.count(FA.address)).scalar()
    return rows, total


def trending_tokens(db: Session, since: datetime, limit: int = 10):
    volume_24h = func.coalesce(func.sum(Trade.apt_amount), 0).label("volume_24h")
    trade_count_24h = func.count(Trade.id).label("trade_count_24h")
    return (
        db.query(
            FA.address, FA.name, FA.symbol, FA.creator,
            volume_24h, trade_count_24h,
            PoolStats.apt_reserves, PoolStats.total_volume, PoolStats.is_graduated,
        )
        .outerjoin(Trade, (Trade.fa_address == FA.address) & (Trade.created_at >= since))
        .outerjoin(PoolStats, PoolStats.fa_address == FA.address)
        .group_by(
            FA.address, FA.name, FA.symbol, FA.creator,
            PoolStats.apt_reserves, PoolStats.total_volume, PoolStats.is_graduated,
        )
        .order_by(volume_24h.desc(), FA.address)
        .limit(limit)
        .all()
    )


def token_detail(db: Session, address: str, since: datetime, recent: int = 50):
    """(fa, recent_trades, volume_24h, trade_count_24h) or None."""
    fa = (db.query(FA)
            .options(joinedload(FA.pool_stats))
            .filter(FA.address == address)
            .first())
    if fa is None:
        return None

    trades = (db.query(Trade)
                .filter(Trade.fa_address == address)
                .order_by(Trade.created_at.desc(), Trade.id.desc())
                .limit(recent)
                .all())
    volume, count = (
        db.query(func.coalesce(func.sum(Trade.apt_amount), 0), func.count(Trade.id))
          .filter(Trade.fa_address == address, Trade.created_at >= since)
          .one()
    )
    return fa, trades, volume, count


def recent_trades(db: Session, limit: int = 50, offset: int = 0, fa_address: str | None = None):
    query = db.query(Trade).options(joinedload(Trade.fa))
    count_query = db.query(func.count(Trade.id))
    if fa_address is not None:
        query = query.filter(Trade.fa_address == fa_address)
        count_query = count_query.filter(Trade.fa_address == fa_address)

    trades = (query.order_by(Trade.created_at.desc(), Trade.id.desc())
                   .limit(limit)
                   .offset(offset)
                   .all())
    return trades, count_query.scalar()
