from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.storage.db import get_db
from app.storage.queries import recent_trades
from app.api.serializers import ok, fail, pagination, trade_dict
import logging

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/recent")
def get_recent_trades(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    try:
        trades, total = recent_trades(db, limit=limit, offset=offset)
        return ok({
            "trades": [trade_dict(t) for t in trades],
            "pagination": pagination(total, limit, offset),
        })
    except Exception:
        log.exception("Error fetching recent trades")
        return fail("Failed to fetch recent trades")


@router.get("/{fa_address}")
def get_trades_for_token(
    fa_address: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    try:
        trades, total = recent_trades(db, limit=limit, offset=offset, fa_address=fa_address.lower())
        return ok({
            "trades": [trade_dict(t) for t in trades],
            "pagination": pagination(total, limit, offset),
        })
    except Exception:
        log.exception("Error fetching trades for token")
        return fail("Failed to fetch trades for token")
