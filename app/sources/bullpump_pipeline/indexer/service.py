"""
BullPump polling indexer.

Owns the ingestion cursor and drives every cycle:

    ledger → classify → decode → apply → advance cursor

Two ways to run it:

* ``start()`` – continuous mode; one cycle now, then one per
  ``polling_interval`` on a background ticker until ``stop()``.
* ``run_for()`` – bounded-duration mode for time-limited workers (Celery
  window task, serverless); tight loop until the wall-clock deadline
  minus a safety margin.

``search_historical()`` replays a closed version range without touching
the live cursor.
"""
from enum import Enum
import threading
import time
import logging

from app.storage.queries import latest_trade_hash
from app.sources.bullpump_pipeline.config.settings import (
    BULLPUMP_CONTRACT, INDEXER_BATCH_SIZE, POLLING_INTERVAL_MS, HEAD_LOOKBACK,
    BACKFILL_BATCH_SIZE,
)
from app.sources.bullpump_pipeline.indexer.classifier import (
    is_tracked_transaction, is_buy_tokens_call, entry_function,
)
from app.sources.bullpump_pipeline.indexer.cursor import IngestionCursor
from app.sources.bullpump_pipeline.indexer.decoder import decode_events
from app.sources.bullpump_pipeline.indexer.events import Unrecognized
from app.sources.bullpump_pipeline.indexer.ticker import Ticker
from app.sources.bullpump_pipeline.utils.log_indexing_metrics import log_indexing_metrics

log = logging.getLogger(__name__)


class IndexerState(str, Enum):
    STOPPED = "stopped"
    BOOTSTRAPPING = "bootstrapping"
    RUNNING = "running"


class BullPumpIndexer:
    def __init__(
        self,
        client,
        updater,
        session_factory,
        contract: str = BULLPUMP_CONTRACT,
        cursor: IngestionCursor | None = None,
        batch_size: int = INDEXER_BATCH_SIZE,
        polling_interval: float = POLLING_INTERVAL_MS / 1000,
        head_lookback: int = HEAD_LOOKBACK,
    ):
        self.client = client
        self.updater = updater
        self.session_factory = session_factory
        self.contract = contract.lower()
        self.cursor = cursor if cursor is not None else IngestionCursor()
        self.batch_size = batch_size
        self.polling_interval = polling_interval
        self.head_lookback = head_lookback

        self.state = IndexerState.STOPPED
        self._stop_event = threading.Event()
        self._ticker: Ticker | None = None

        log.info("🌐 Indexer configuration:")
        log.info(f"   Contract: {self.contract}")
        log.info(f"   Polling interval: {self.polling_interval}s  Batch size: {self.batch_size}")

    @property
    def is_running(self) -> bool:
        return self.state is not IndexerState.STOPPED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, from_version: int | None = None) -> bool:
        if self.is_running:
            log.warning("⚠️  Indexer is already running")
            return False

        log.info("🚀 Starting BullPump indexer...")
        self._stop_event = threading.Event()
        self.bootstrap(from_version)
        self.state = IndexerState.RUNNING

        self.index_new_transactions()
        self._ticker = Ticker(self.polling_interval, self.index_new_transactions,
                              stop_event=self._stop_event, name="bullpump-indexer")
        self._ticker.start()
        return True

    def stop(self, timeout: float | None = None) -> None:
        if not self.is_running:
            return
        log.info("🛑 Stopping indexer...")
        self.state = IndexerState.STOPPED
        self._stop_event.set()
        if self._ticker is not None:
            self._ticker.cancel(timeout)
            self._ticker = None

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def bootstrap(self, from_version: int | None = None) -> int:
        """Resolve the starting cursor: explicit → current position → newest trade → near head.

        Only an explicit `from_version` moves a cursor that is already set;
        a cold cursor is derived from the store or the ledger head.
        """
        self.state = IndexerState.BOOTSTRAPPING
        if from_version is not None:
            self.cursor.reset(from_version)
            log.info(f"📍 Starting from specified version: {from_version}")
            return self.cursor.version

        if self.cursor.is_set:
            log.info(f"📍 Resuming from version: {self.cursor.version}")
            return self.cursor.version

        version = self._version_of_latest_trade()
        if version is None:
            version = self._near_head()
        self.cursor.reset(version)
        log.info(f"📍 Starting from version: {self.cursor.version}")
        return self.cursor.version

    def _version_of_latest_trade(self) -> int | None:
        try:
            with self.session_factory() as db:
                tx_hash = latest_trade_hash(db)
            if tx_hash is None:
                return None
            txn = self.client.get_transaction_by_hash(tx_hash)
            if "version" in txn:
                return int(txn["version"])
            log.warning(f"⚠️  Latest trade {tx_hash} has no ledger version yet")
        except Exception as e:
            log.error(f"⚠️  Could not resolve version of latest trade: {e}")
        return None

    def _near_head(self) -> int:
        try:
            head = self.client.get_ledger_version()
        except Exception as e:
            log.error(f"⚠️  Could not read ledger head, starting from 0: {e}")
            return 0
        version = max(0, head - self.head_lookback)
        log.info(f"📍 No previous trades found, starting from recent history: {version}")
        return version

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------
    def index_new_transactions(self) -> tuple[int, int]:
        """One polling cycle. Returns (processed, tracked)."""
        start = self.cursor.next_version
        try:
            transactions = self.client.get_transactions(start, self.batch_size)
        except Exception as e:
            log.error(f"❌ Error fetching transactions from {start}: {e}")
            return 0, 0

        processed = tracked = 0
        for tx in transactions:
            if self.stop_requested:
                log.info(f"🛑 Stop requested, leaving cycle at v{self.cursor.version}")
                break
            if self.process_transaction(tx):
                tracked += 1
            self.cursor.advance(int(tx["version"]))
            processed += 1

        if processed:
            if tracked:
                log.info(f"🎯 Found {tracked} BullPump tx in {processed} transactions (v{self.cursor.version})")
            else:
                log.info(f"⚡ Processed {processed} tx (v{self.cursor.version})")
        return processed, tracked

    def process_transaction(self, tx: dict) -> bool:
        """Classify, decode and apply one transaction. True when it was ours."""
        try:
            if not is_tracked_transaction(tx, self.contract):
                return False

            log.info(f"🎯 Found BullPump transaction: {tx.get('hash')} "
                     f"fn={entry_function(tx)} events={len(tx.get('events') or [])}")

            for event in decode_events(tx):
                if isinstance(event, Unrecognized):
                    continue
                self.updater.apply(tx, event)

            if is_buy_tokens_call(tx, self.contract):
                self.updater.apply_buy_tokens_call(tx)
            return True
        except Exception:
            log.exception(f"❌ Error processing transaction {tx.get('hash')}")
            return False

    def run_for(
        self,
        duration_seconds: float,
        from_version: int | None = None,
        safety_margin_seconds: float = 5,
        idle_sleep: float = 1.0,
    ) -> dict:
        """Bounded-duration mode: index until the deadline, leave margin for shutdown."""
        if self.is_running:
            log.warning("⚠️  Indexer is already running")
            return {"status": "already_running"}

        started = time.monotonic()
        deadline = started + duration_seconds - safety_margin_seconds
        self._stop_event = threading.Event()
        self.bootstrap(from_version)
        self.state = IndexerState.RUNNING
        first_version = self.cursor.version

        processed = tracked = cycles = 0
        try:
            while time.monotonic() < deadline and not self.stop_requested:
                n, t = self.index_new_transactions()
                processed += n
                tracked += t
                cycles += 1
                if n == 0:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    self._stop_event.wait(min(idle_sleep, remaining))
        finally:
            self.state = IndexerState.STOPPED

        duration = time.monotonic() - started
        summary = {
            "status": "completed",
            "from_version": first_version,
            "to_version": self.cursor.version,
            "cycles": cycles,
            "processed": processed,
            "tracked": tracked,
            "duration_seconds": round(duration, 2),
        }
        log.info(f"[run_for] {summary}")
        self._record_metrics("window", first_version, self.cursor.version, processed, tracked, duration)
        return summary

    def search_historical(
        self,
        start_version: int,
        end_version: int,
        batch_size: int = BACKFILL_BATCH_SIZE,
        pause: float = 0.1,
    ) -> int:
        """Replay [start_version, end_version) without moving the live cursor."""
        log.info(f"🔍 Searching historical transactions from {start_version} to {end_version}...")
        started = time.monotonic()
        current = start_version
        processed = total_tracked = 0

        while current < end_version:
            limit = min(batch_size, end_version - current)
            try:
                transactions = self.client.get_transactions(current, limit)
            except Exception as e:
                log.error(f"❌ Error searching version {current}: {e}")
                current += batch_size
                continue

            if not transactions:
                current += limit
                continue

            tracked_in_batch = 0
            next_version = current + limit
            for tx in transactions:
                version = int(tx["version"])
                if version >= end_version:
                    next_version = end_version
                    break
                if self.process_transaction(tx):
                    tracked_in_batch += 1
                processed += 1
                next_version = version + 1
            current = max(next_version, current + 1)

            if tracked_in_batch:
                total_tracked += tracked_in_batch
                log.info(f"🎯 Found {tracked_in_batch} BullPump transactions in batch (version {current - 1})")
            if pause:
                time.sleep(pause)

        log.info(f"📊 Historical search complete. Found {total_tracked} BullPump transactions total.")
        self._record_metrics("backfill", start_version, end_version, processed, total_tracked,
                             time.monotonic() - started)
        return total_tracked

    def inspect_transaction(self, tx_hash: str) -> dict:
        """Classify and decode one transaction without writing anything."""
        tx = self.client.get_transaction_by_hash(tx_hash)
        return {
            "hash": tx.get("hash"),
            "version": tx.get("version"),
            "function": entry_function(tx),
            "tracked": is_tracked_transaction(tx, self.contract),
            "buy_tokens_call": is_buy_tokens_call(tx, self.contract),
            "events": [
                {"type": evt.get("type") if isinstance(evt, dict) else None, "decoded": decoded}
                for evt, decoded in zip(tx.get("events") or [], decode_events(tx))
            ],
        }

    def _record_metrics(self, mode, first_version, last_version, processed, tracked, duration):
        try:
            with self.session_factory() as db:
                log_indexing_metrics(
                    db,
                    mode=mode,
                    version_range=f"{first_version}-{last_version}",
                    tx_count=processed,
                    tracked_tx_count=tracked,
                    duration_seconds=duration,
                )
                db.commit()
        except Exception as e:
            log.error(f"❌ Could not record {mode} metrics: {e}")
