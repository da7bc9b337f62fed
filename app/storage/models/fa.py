# models/fa.py
from sqlalchemy import Column, Integer, String, Text, Numeric, TIMESTAMP as TIMESTAMPTZ, func
from sqlalchemy.orm import relationship
from app.storage.base import Base


class FA(Base):
    """Fungible asset issued by the BullPump token factory. Immutable once written."""
    __tablename__ = "fa"

    address           = Column(String(66),  primary_key=True)          # 0x + 64 hex, lower-case
    name              = Column(Text,        nullable=False)
    symbol            = Column(String(64),  nullable=False)
    creator           = Column(String(66),  nullable=False)
    decimals          = Column(Integer,     nullable=False)
    max_supply        = Column(Numeric(38, 0), nullable=True)          # NULL → unlimited
    icon_uri          = Column(Text,        nullable=False, default="")
    project_uri       = Column(Text,        nullable=False, default="")
    mint_fee_per_unit = Column(Numeric(38, 0), nullable=False, default=0)
    created_at        = Column(TIMESTAMPTZ(timezone=True), nullable=False, server_default=func.now())

    pool_stats = relationship("PoolStats", back_populates="fa", uselist=False)
    trades     = relationship("Trade", primaryjoin="FA.address == foreign(Trade.fa_address)",
                               back_populates="fa", lazy="dynamic")

    def __repr__(self) -> str:
        return f"<FA {self.symbol} {self.address}>"
