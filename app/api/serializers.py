from datetime import datetime
from decimal import Decimal
from fastapi.responses import JSONResponse


def plain(value):
    # amounts leave as strings, never floats
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def ok(data, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": True, "data": data})


def fail(error: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def pagination(total: int, limit: int, offset: int) -> dict:
    return {"total": total, "limit": limit, "offset": offset, "hasMore": offset + limit < total}


def pool_stats_dict(stats) -> dict | None:
    if stats is None:
        return None
    return {
        "apt_reserves": plain(stats.apt_reserves),
        "total_volume": plain(stats.total_volume),
        "trade_count": stats.trade_count,
        "is_graduated": bool(stats.is_graduated),
        "updated_at": plain(stats.updated_at),
    }


def fa_dict(fa) -> dict:
    return {
        "address": fa.address,
        "name": fa.name,
        "symbol": fa.symbol,
        "creator": fa.creator,
        "decimals": fa.decimals,
        "max_supply": plain(fa.max_supply),
        "icon_uri": fa.icon_uri,
        "project_uri": fa.project_uri,
        "mint_fee_per_unit": plain(fa.mint_fee_per_unit),
        "created_at": plain(fa.created_at),
        "pool_stats": pool_stats_dict(fa.pool_stats),
    }


def trade_dict(trade, with_fa: bool = True) -> dict:
    out = {
        "id": trade.id,
        "transaction_hash": trade.transaction_hash,
        "fa_address": trade.fa_address,
        "user_address": trade.user_address,
        "apt_amount": plain(trade.apt_amount),
        "token_amount": plain(trade.token_amount),
        "price_per_token": plain(trade.price_per_token),
        "trade_type": trade.trade_type,
        "created_at": plain(trade.created_at),
    }
    if with_fa:
        out["fa"] = {"name": trade.fa.name, "symbol": trade.fa.symbol} if trade.fa else None
    return out


def trending_dict(row) -> dict:
    return {
        "address": row.address,
        "name": row.name,
        "symbol": row.symbol,
        "creator": row.creator,
        "volume_24h": plain(row.volume_24h),
        "trade_count_24h": row.trade_count_24h,
        "apt_reserves": plain(row.apt_reserves),
        "total_volume": plain(row.total_volume),
        "is_graduated": bool(row.is_graduated) if row.is_graduated is not None else None,
    }
