from datetime import datetime, timezone
from fastapi import APIRouter
from app.api import tokens, trades


router = APIRouter()
router.include_router(tokens.router, prefix="/tokens")
router.include_router(trades.router, prefix="/trades")


@router.get("/")
def read_root():
    return {"message": "BullPump indexer API"}


health_router = APIRouter()


@health_router.get("/health")
def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
