from dotenv import load_dotenv
from decimal import Decimal
import pathlib
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.storage.base import Base
import app.storage.models.fa  # noqa: F401
import app.storage.models.pool_stats  # noqa: F401
import app.storage.models.trade  # noqa: F401
import app.storage.models.indexing_metrics  # noqa: F401
from app.sources.bullpump_pipeline.indexer.updater import AggregateStateUpdater

# Automatically load .env from project root
load_dotenv(dotenv_path=pathlib.Path(__file__).parent.parent.parent / ".env")

TEST_THRESHOLD = Decimal(1_500_000)


@pytest.fixture
def engine():
    # in-memory SQLite shared across threads (ticker thread + test thread)
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng, "connect")
    def _enforce_foreign_keys(dbapi_conn, _record):
        # match PostgreSQL: SQLite ignores FKs unless asked
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def updater(session_factory):
    return AggregateStateUpdater(session_factory, graduation_threshold=TEST_THRESHOLD, buy_fee_bps=100)
