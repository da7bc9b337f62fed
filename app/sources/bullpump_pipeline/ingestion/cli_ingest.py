import signal
from typing import Optional
import threading
from pprint import pformat
import typer
from app.sources.bullpump_pipeline.config.settings import (
    ConfigError, WINDOW_SECONDS, BACKFILL_BATCH_SIZE,
)
from app.sources.bullpump_pipeline.ingestion.runner import build_indexer, run_window
from app.storage.db import init_db
from app.utils.logging_config import configure_logging
import logging

log = logging.getLogger(__name__)

app = typer.Typer(help="BullPump ledger indexer")


def _init_or_exit() -> None:
    try:
        init_db()
    except ConfigError as e:
        log.error(f"❌ {e}")
        raise typer.Exit(code=1)


@app.callback()
def main_callback():
    configure_logging()


@app.command("run")
def run(
    from_version: Optional[int] = typer.Option(None, help="Explicit starting ledger version"),
):
    """
    Continuous mode: poll the ledger until SIGINT / SIGTERM.
    """
    _init_or_exit()
    indexer = build_indexer()
    done = threading.Event()

    def _shutdown(signum, frame):
        log.info("🛑 Shutting down gracefully...")
        indexer.stop()
        done.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    indexer.start(from_version=from_version)
    log.info("✅ Indexer service started")
    done.wait()


@app.command("window")
def window(
    duration: float = typer.Option(WINDOW_SECONDS, help="Wall-clock budget in seconds"),
    from_version: Optional[int] = typer.Option(None, help="Explicit starting ledger version"),
):
    """
    Bounded-duration mode (serverless / cron).
    """
    _init_or_exit()
    summary = run_window(duration, from_version=from_version)
    typer.echo(pformat(summary))


@app.command("backfill")
def backfill(
    start: int = typer.Option(..., help="First ledger version (inclusive)"),
    end: int = typer.Option(..., help="Last ledger version (exclusive)"),
    batch_size: int = typer.Option(BACKFILL_BATCH_SIZE, help="Transactions per request"),
):
    """
    Replay an explicit version range. Does not touch the live cursor.
    """
    if end <= start:
        raise typer.BadParameter("--end must be greater than --start")
    _init_or_exit()
    found = build_indexer().search_historical(start, end, batch_size=batch_size)
    typer.echo(f"Found {found} BullPump transactions in [{start}, {end})")


@app.command("search-recent")
def search_recent(
    span: int = typer.Option(5000, help="How many versions behind head to scan"),
):
    """
    Backfill the last `span` versions before the current head.
    """
    _init_or_exit()
    indexer = build_indexer()
    head = indexer.client.get_ledger_version()
    start = max(0, head - span)
    log.info(f"📊 Current ledger version: {head}")
    found = indexer.search_historical(start, head)
    if found == 0:
        typer.echo("💡 No BullPump transactions found in recent history.")
    else:
        typer.echo(f"Found {found} BullPump transactions in [{start}, {head})")


@app.command("inspect-tx")
def inspect_tx(tx_hash: str = typer.Argument(..., help="0x-prefixed transaction hash")):
    """
    Show how the indexer would classify and decode one transaction. Read-only.
    """
    _init_or_exit()
    typer.echo(pformat(build_indexer().inspect_transaction(tx_hash)))


def main():
    app()


if __name__ == "__main__":
    main()
