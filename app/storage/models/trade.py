from sqlalchemy import (
    Column, Integer, String, Numeric,
    TIMESTAMP as TIMESTAMPTZ, Index
)
from sqlalchemy.orm import relationship
from app.storage.base import Base

TRADE_BUY  = "BUY"
TRADE_SELL = "SELL"
TRADE_MINT = "MINT"
TRADE_BURN = "BURN"


class Trade(Base):
    """Append-only settlement ledger. One row per transaction hash.

    Sells carry negated apt/token amounts so a signed SUM over a window is
    net flow; burns carry zero apt_amount and zero price.
    """
    __tablename__ = "trade"

    id               = Column(Integer, primary_key=True, autoincrement=True)
    # ─── identity (dedup key) ────────────────────────────────────────────
    transaction_hash = Column(String(66), nullable=False, unique=True)
    # no FK: trades on assets created before the indexer's first version are kept
    fa_address       = Column(String(66), nullable=False)
    user_address     = Column(String(66), nullable=False)
    # ─── amounts ────────────────────────────────────────────────────────
    apt_amount       = Column(Numeric(38, 0),  nullable=False)   # octas, signed
    token_amount     = Column(Numeric(38, 0),  nullable=False)   # smallest FA unit, signed
    price_per_token  = Column(Numeric(38, 18), nullable=False)   # octas per smallest unit
    trade_type       = Column(String(8),       nullable=False)   # BUY / SELL / MINT / BURN
    created_at       = Column(TIMESTAMPTZ(timezone=True), nullable=False)

    fa = relationship("FA", primaryjoin="foreign(Trade.fa_address) == FA.address", back_populates="trades")

    __table_args__ = (
        Index("ix_trade_fa_created", "fa_address", "created_at"),
        Index("ix_trade_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Trade {self.trade_type} {self.transaction_hash} {self.fa_address}>"
