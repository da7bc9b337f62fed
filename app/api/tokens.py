from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.storage.db import get_db
from app.storage.queries import list_tokens, trending_tokens, token_detail, since_24h
from app.api.serializers import ok, fail, pagination, fa_dict, trade_dict, trending_dict, plain
import logging

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_tokens(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """All issued assets, newest first."""
    try:
        rows, total = list_tokens(db, limit=limit, offset=offset)
        tokens = [{**fa_dict(fa), "_count": {"trades": count}} for fa, count in rows]
        return ok({"tokens": tokens, "pagination": pagination(total, limit, offset)})
    except Exception:
        log.exception("Error fetching tokens")
        return fail("Failed to fetch tokens")


@router.get("/trending")
def get_trending(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Top assets by 24h settlement volume."""
    try:
        rows = trending_tokens(db, since=since_24h(), limit=limit)
        return ok([trending_dict(row) for row in rows])
    except Exception:
        log.exception("Error fetching trending tokens")
        return fail("Failed to fetch trending tokens")


@router.get("/{address}")
def get_token(address: str, db: Session = Depends(get_db)):
    try:
        detail = token_detail(db, address.lower(), since=since_24h())
        if detail is None:
            return fail("Token not found", status_code=404)

        fa, trades, volume_24h, trade_count_24h = detail
        return ok({
            **fa_dict(fa),
            "trades": [trade_dict(t, with_fa=False) for t in trades],
            "volume_24h": plain(volume_24h),
            "trade_count_24h": trade_count_24h,
        })
    except Exception:
        log.exception("Error fetching token details")
        return fail("Failed to fetch token details")
