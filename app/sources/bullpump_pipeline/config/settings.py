import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


class ConfigError(RuntimeError):
    """Raised at startup when a required connection parameter is missing."""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL")

APTOS_NODE_URL = os.getenv("APTOS_NODE_URL", "https://fullnode.testnet.aptoslabs.com/v1")
BULLPUMP_CONTRACT = os.getenv(
    "BULLPUMP_CONTRACT",
    "0x4660906d4ed4062029a19e989e51c814aa5b0711ef0ba0433b5f7487cb03b257",
).lower()

POLLING_INTERVAL_MS = int(os.getenv("POLLING_INTERVAL_MS", "3000"))   # public node rate limit
INDEXER_BATCH_SIZE  = int(os.getenv("INDEXER_BATCH_SIZE", "200"))
HEAD_LOOKBACK       = int(os.getenv("HEAD_LOOKBACK", "50"))            # versions behind head on a cold start
BACKFILL_BATCH_SIZE = int(os.getenv("BACKFILL_BATCH_SIZE", "100"))

# 21 500 APT in octas
GRADUATION_THRESHOLD_OCTAS = Decimal(os.getenv("GRADUATION_THRESHOLD_OCTAS", "2150000000000"))
BUY_FEE_BPS = int(os.getenv("BUY_FEE_BPS", "100"))                    # 1 %

# bounded-duration (serverless / celery) runs
WINDOW_SECONDS               = float(os.getenv("WINDOW_SECONDS", "55"))
WINDOW_SAFETY_MARGIN_SECONDS = float(os.getenv("WINDOW_SAFETY_MARGIN_SECONDS", "5"))

INDEXER_ENABLED = _env_bool("INDEXER_ENABLED", True)

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)
DISPATCH_EVERY_SECONDS = float(os.getenv("DISPATCH_EVERY_SECONDS", "60"))


def require_database_url() -> str:
    if not DATABASE_URL:
        raise ConfigError("DATABASE_URL is not set")
    return DATABASE_URL
