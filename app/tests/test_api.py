import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.storage.db import get_db
from app.sources.bullpump_pipeline.indexer.decoder import decode_event
from app.tests.fixtures import (
    make_tx, now_micros, create_fa_event, purchase_event, sold_event,
)

DAY_MICROS = 24 * 3600 * 1_000_000


def _seed(updater, raw_event, **tx_kwargs):
    updater.apply(make_tx(events=[raw_event], **tx_kwargs), decode_event(raw_event))


@pytest.fixture
def client(session_factory, updater):
    _seed(updater, create_fa_event(fa="0xaa", name="Foo", symbol="FOO"), timestamp=now_micros() - 10_000_000)
    _seed(updater, create_fa_event(fa="0xbb", name="Bar", symbol="BAR"))
    _seed(updater, purchase_event(fa="0xaa", apt="1000000", fee="10000"), timestamp=now_micros() - 2 * DAY_MICROS)
    _seed(updater, purchase_event(fa="0xaa", apt="300000", fee="3000"))
    _seed(updater, purchase_event(fa="0xbb", apt="200000", fee="2000"))
    _seed(updater, sold_event(fa="0xbb", apt="50000", tokens="100", fee="500"))

    def override_get_db():
        with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: lifespan (real database + indexer) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "OK"
    assert "timestamp" in body


def test_list_tokens_newest_first_with_counts(client):
    resp = client.get("/api/tokens", params={"limit": 1})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True

    (token,) = body["data"]["tokens"]
    assert token["address"] == "0xbb"
    assert token["_count"] == {"trades": 2}
    assert token["pool_stats"]["apt_reserves"] == "198000"
    assert body["data"]["pagination"] == {"total": 2, "limit": 1, "offset": 0, "hasMore": True}


def test_trending_orders_by_24h_volume(client):
    body = client.get("/api/tokens/trending").json()
    assert body["success"] is True

    rows = body["data"]
    assert [r["address"] for r in rows] == ["0xaa", "0xbb"]
    assert rows[0]["volume_24h"] == "300000"
    assert rows[0]["trade_count_24h"] == 1
    # sells are stored negative, so 24h volume is net flow
    assert rows[1]["volume_24h"] == "150000"
    assert rows[1]["trade_count_24h"] == 2


def test_token_detail(client):
    body = client.get("/api/tokens/0xAA").json()
    data = body["data"]

    assert data["name"] == "Foo"
    assert data["symbol"] == "FOO"
    assert len(data["trades"]) == 2
    assert data["volume_24h"] == "300000"
    assert data["trade_count_24h"] == 1
    assert data["pool_stats"]["trade_count"] == 2
    assert data["pool_stats"]["apt_reserves"] == "1287000"


def test_token_detail_not_found(client):
    resp = client.get("/api/tokens/0xdead")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Token not found"}


def test_recent_trades_paginate(client):
    body = client.get("/api/trades/recent", params={"limit": 3, "offset": 0}).json()
    trades = body["data"]["trades"]

    assert len(trades) == 3
    assert body["data"]["pagination"]["total"] == 4
    assert body["data"]["pagination"]["hasMore"] is True
    assert trades[0]["trade_type"] == "SELL"
    assert trades[0]["apt_amount"] == "-50000"
    assert trades[0]["fa"] == {"name": "Bar", "symbol": "BAR"}

    last = client.get("/api/trades/recent", params={"limit": 3, "offset": 3}).json()
    assert len(last["data"]["trades"]) == 1
    assert last["data"]["pagination"]["hasMore"] is False


def test_trades_for_token(client):
    body = client.get("/api/trades/0xbb").json()
    trades = body["data"]["trades"]
    assert {t["trade_type"] for t in trades} == {"BUY", "SELL"}
    assert all(t["fa_address"] == "0xbb" for t in trades)


def test_bad_query_parameters_are_rejected(client):
    assert client.get("/api/trades/recent", params={"limit": 0}).status_code == 422


def test_24h_window_boundary_is_the_same_everywhere(session_factory, updater):
    from datetime import datetime, timezone
    from app.storage.queries import trending_tokens, token_detail

    micros = now_micros()
    _seed(updater, create_fa_event(fa="0xcc", name="Edge", symbol="EDG"))
    _seed(updater, purchase_event(fa="0xcc", apt="5000", fee="50"), timestamp=micros)
    since = datetime.fromtimestamp(micros / 1_000_000, tz=timezone.utc)

    with session_factory() as db:
        (row,) = trending_tokens(db, since=since)
        _, _, volume, count = token_detail(db, "0xcc", since=since)

    assert (row.volume_24h, row.trade_count_24h) == (5000, 1)
    assert (volume, count) == (5000, 1)
