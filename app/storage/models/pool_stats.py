from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey, TIMESTAMP as TIMESTAMPTZ, func
from sqlalchemy.orm import relationship
from app.storage.base import Base


class PoolStats(Base):
    __tablename__ = "pool_stats"

    fa_address   = Column(String(66), ForeignKey("fa.address"), primary_key=True)
    apt_reserves = Column(Numeric(38, 0), nullable=False, default=0)   # octas, only ever grows
    total_volume = Column(Numeric(38, 0), nullable=False, default=0)   # octas
    trade_count  = Column(Integer,        nullable=False, default=0)
    is_graduated = Column(Boolean,        nullable=False, default=False)  # one-way
    updated_at   = Column(TIMESTAMPTZ(timezone=True), nullable=False,
                          server_default=func.now(), onupdate=func.now())

    fa = relationship("FA", back_populates="pool_stats")

    def __repr__(self) -> str:
        return (f"<PoolStats {self.fa_address} reserves={self.apt_reserves} "
                f"trades={self.trade_count} graduated={self.is_graduated}>")
