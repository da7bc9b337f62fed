# app/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool
from app.api import api
from app.storage.db import init_engine, init_db, check_db_connection, SessionLocal
from app.sources.bullpump_pipeline.config.settings import INDEXER_ENABLED
from app.sources.bullpump_pipeline.ingestion.runner import build_indexer
from app.utils.logging_config import configure_logging
import logging

configure_logging()
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # missing DATABASE_URL raises ConfigError here and aborts startup
    engine = init_engine()
    check_db_connection(engine)
    init_db(engine)

    indexer = None
    if INDEXER_ENABLED:
        indexer = build_indexer(SessionLocal)
        await run_in_threadpool(indexer.start)
        log.info("✅ Indexer service started")
    app.state.indexer = indexer
    try:
        yield
    finally:
        if indexer is not None:
            log.info("🛑 Shutting down gracefully...")
            indexer.stop(timeout=10)


app = FastAPI(lifespan=lifespan)

app.include_router(api.health_router)
app.include_router(api.router, prefix="/api")
