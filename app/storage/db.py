from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import NullPool
from app.sources.bullpump_pipeline.config.settings import require_database_url
from app.storage.base import Base
import logging

log = logging.getLogger(__name__)

# Bound lazily by init_engine() so importing this module never needs a live DB.
WorkerSessionLocal = scoped_session(
    sessionmaker(
        autoflush=False,
        expire_on_commit=False,
    )
)
SessionLocal = scoped_session(
    sessionmaker(
        autoflush=False,
        expire_on_commit=False,
    )
)

_engines = {}


def init_engine(database_url: str | None = None):
    """Create the API / worker engines and bind both session factories.

    Raises ConfigError when no DATABASE_URL is configured.
    """
    if "api" in _engines:
        return _engines["api"]

    url = database_url or require_database_url()
    worker_engine = create_engine(
        url,
        pool_pre_ping=True,
        poolclass=NullPool,
    )
    engine = create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )
    WorkerSessionLocal.configure(bind=worker_engine)
    SessionLocal.configure(bind=engine)
    _engines["api"] = engine
    _engines["worker"] = worker_engine
    return engine


def init_db(engine=None) -> None:
    # model modules must be imported so their tables land on Base.metadata
    import app.storage.models.fa  # noqa: F401
    import app.storage.models.pool_stats  # noqa: F401
    import app.storage.models.trade  # noqa: F401
    import app.storage.models.indexing_metrics  # noqa: F401

    engine = engine or init_engine()
    Base.metadata.create_all(bind=engine)
    log.info("✅ Tables ready.")


def check_db_connection(engine=None) -> bool:
    engine = engine or init_engine()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        log.info("✅ Database connected.")
        return True
    except Exception as e:
        log.error(f"❌ DB connection failed: {e}")
        return False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
