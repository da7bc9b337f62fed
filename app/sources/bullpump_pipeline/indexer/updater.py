"""
Aggregate state updater.

Applies decoded BullPump events to the three derived tables:

* ``fa``          – one row per issued asset, written once
* ``trade``       – append-only settlement ledger, unique per tx hash
* ``pool_stats``  – running reserves / volume / trade count + graduation flag

Every write is idempotent on its natural key (asset address, tx hash), so
re-fetching a transaction after a restart converges to the same state.
Store errors are logged and the event's effect is dropped; replaying the
ledger range is the recovery path.
"""
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.storage.models.fa import FA
from app.storage.models.pool_stats import PoolStats
from app.storage.models.trade import Trade, TRADE_BUY, TRADE_SELL, TRADE_MINT, TRADE_BURN
from app.utils.constants import BPS_DENOMINATOR, MICROS_PER_SECOND, OCTAS_PER_APT
from app.sources.bullpump_pipeline.config.settings import GRADUATION_THRESHOLD_OCTAS, BUY_FEE_BPS
from app.sources.bullpump_pipeline.indexer.decoder import (
    to_decimal, extract_fa_address, normalize_address, infer_token_amount, DecodeError,
)
from app.sources.bullpump_pipeline.indexer.events import (
    FACreated, FAMinted, FABurned, TokensPurchased, TokensSold,
    PoolGraduated, DexTelemetry, Unrecognized,
)

log = logging.getLogger(__name__)


class ApplyResult(str, Enum):
    CREATED   = "created"
    UPDATED   = "updated"
    DUPLICATE = "duplicate"
    SKIPPED   = "skipped"
    LOGGED    = "logged"
    FAILED    = "failed"


def ledger_time(tx: dict) -> datetime:
    """Aptos timestamps are microseconds since epoch."""
    micros = int(tx.get("timestamp") or 0)
    return datetime.fromtimestamp(micros / MICROS_PER_SECOND, tz=timezone.utc)


def calculate_price_per_token(apt_amount: Decimal, token_amount: Decimal) -> Decimal:
    if token_amount == 0:
        return Decimal(0)
    return Decimal(apt_amount) / Decimal(token_amount)


def split_fee(gross: Decimal, fee_bps: int) -> tuple[Decimal, Decimal]:
    """(fee, net) with the fee floored to whole octas."""
    fee = (gross * fee_bps) // BPS_DENOMINATOR
    return fee, gross - fee


class AggregateStateUpdater:
    def __init__(
        self,
        session_factory,
        graduation_threshold: Decimal = GRADUATION_THRESHOLD_OCTAS,
        buy_fee_bps: int = BUY_FEE_BPS,
    ):
        self.session_factory = session_factory
        self.graduation_threshold = Decimal(graduation_threshold)
        self.buy_fee_bps = buy_fee_bps

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def apply(self, tx: dict, event) -> ApplyResult:
        try:
            match event:
                case FACreated():
                    return self._create_fa(tx, event)
                case FAMinted():
                    return self._record_trade(
                        tx, event.fa_address, event.recipient,
                        apt_amount=event.total_mint_fee,
                        token_amount=event.amount,
                        trade_type=TRADE_MINT,
                    )
                case FABurned():
                    return self._record_trade(
                        tx, event.fa_address, event.burner,
                        apt_amount=Decimal(0),
                        token_amount=event.amount,
                        trade_type=TRADE_BURN,
                    )
                case TokensPurchased():
                    net = event.apt_amount - event.fee_amount
                    return self._record_trade(
                        tx, event.fa_address, event.buyer,
                        apt_amount=event.apt_amount,
                        token_amount=event.token_amount,
                        trade_type=TRADE_BUY,
                        reserve_delta=net,
                        volume_delta=net,
                    )
                case TokensSold():
                    # reserves never decrease; a sell adds abs(net) to volume and counts as a trade
                    net = event.apt_amount - event.fee_amount
                    return self._record_trade(
                        tx, event.fa_address, event.seller,
                        apt_amount=event.apt_amount,
                        token_amount=event.token_amount,
                        trade_type=TRADE_SELL,
                        reserve_delta=Decimal(0),
                        volume_delta=abs(net),
                    )
                case PoolGraduated():
                    return self._mark_graduated(event.fa_address)
                case DexTelemetry():
                    log.info(f"📡 {event.kind} in {tx.get('hash')}: {event.data}")
                    return ApplyResult.LOGGED
                case Unrecognized():
                    return ApplyResult.SKIPPED
                case _:
                    log.warning(f"⚠️  No handler for {type(event).__name__}")
                    return ApplyResult.SKIPPED
        except SQLAlchemyError as e:
            log.error(f"❌ Store error applying {type(event).__name__} from {tx.get('hash')}: {e}")
            return ApplyResult.FAILED

    def apply_buy_tokens_call(self, tx: dict) -> ApplyResult:
        """Direct `bonding_curve_pool::buy_tokens(fa_obj_addr, apt_amount, ...)` path."""
        args = (tx.get("payload") or {}).get("arguments") or []
        if len(args) < 2:
            log.warning(f"⚠️  buy_tokens transaction {tx.get('hash')} missing arguments")
            return ApplyResult.SKIPPED

        try:
            fa_address = extract_fa_address(args[0])
            gross = to_decimal(args[1])
        except DecodeError as e:
            log.error(f"❌ Bad buy_tokens arguments in {tx.get('hash')}: {e}")
            return ApplyResult.SKIPPED

        fee, net = split_fee(gross, self.buy_fee_bps)
        token_amount = infer_token_amount(tx)
        try:
            result = self._record_trade(
                tx, fa_address, tx.get("sender", ""),
                apt_amount=gross,
                token_amount=token_amount,
                trade_type=TRADE_BUY,
                reserve_delta=net,
                volume_delta=net,
            )
        except SQLAlchemyError as e:
            log.error(f"❌ Store error on buy_tokens {tx.get('hash')}: {e}")
            return ApplyResult.FAILED

        if result is ApplyResult.CREATED:
            log.info(f"💰 Processed buy: {token_amount} tokens for {gross} octas "
                     f"(fee {fee}) by {tx.get('sender')}")
        return result

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------
    def _create_fa(self, tx: dict, event: FACreated) -> ApplyResult:
        with self.session_factory() as db:
            if db.get(FA, event.fa_address) is not None:
                log.info(f"⚠️  FA already exists: {event.name} ({event.symbol})")
                return ApplyResult.DUPLICATE

            created_at = ledger_time(tx)
            db.add(FA(
                address=event.fa_address,
                name=event.name,
                symbol=event.symbol,
                creator=event.creator,
                decimals=event.decimals,
                max_supply=event.max_supply,
                icon_uri=event.icon_uri,
                project_uri=event.project_uri,
                mint_fee_per_unit=event.mint_fee_per_unit,
                created_at=created_at,
            ))
            db.add(PoolStats(
                fa_address=event.fa_address,
                apt_reserves=Decimal(0),
                total_volume=Decimal(0),
                trade_count=0,
                is_graduated=False,
                updated_at=created_at,
            ))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                log.info(f"⚠️  FA {event.fa_address} inserted concurrently, skipping")
                return ApplyResult.DUPLICATE

        log.info(f"🪙 Created new FA: {event.name} ({event.symbol}) at {event.fa_address}")
        log.info(f"   Max Supply: {event.max_supply or 'unlimited'}  Decimals: {event.decimals}")
        return ApplyResult.CREATED

    def _record_trade(
        self,
        tx: dict,
        fa_address: str,
        user_address: str,
        apt_amount: Decimal,
        token_amount: Decimal,
        trade_type: str,
        reserve_delta: Decimal | None = None,
        volume_delta: Decimal | None = None,
    ) -> ApplyResult:
        """Insert one trade row keyed by tx hash; bump pool stats only if it was new."""
        tx_hash = tx["hash"]
        price = calculate_price_per_token(apt_amount, token_amount)
        if trade_type == TRADE_SELL:
            apt_amount, token_amount = -apt_amount, -token_amount

        with self.session_factory() as db:
            if db.query(Trade.id).filter_by(transaction_hash=tx_hash).first() is not None:
                log.debug(f"Trade {tx_hash} already recorded")
                return ApplyResult.DUPLICATE

            now = ledger_time(tx)
            db.add(Trade(
                transaction_hash=tx_hash,
                fa_address=fa_address,
                user_address=normalize_address(user_address),
                apt_amount=apt_amount,
                token_amount=token_amount,
                price_per_token=price,
                trade_type=trade_type,
                created_at=now,
            ))
            try:
                db.flush()
            except IntegrityError as e:
                db.rollback()
                if db.query(Trade.id).filter_by(transaction_hash=tx_hash).first() is not None:
                    return ApplyResult.DUPLICATE
                log.error(f"❌ Could not record {trade_type} {tx_hash} for {fa_address}: {e.orig}")
                return ApplyResult.FAILED

            if volume_delta is not None:
                self._bump_pool(db, fa_address, reserve_delta or Decimal(0), volume_delta, now)
            db.commit()

        log.info(f"📝 {trade_type} {fa_address}: {token_amount} tokens / {apt_amount} octas ({tx_hash})")
        return ApplyResult.CREATED

    def _bump_pool(self, db, fa_address: str, reserve_delta: Decimal, volume_delta: Decimal, now: datetime) -> None:
        stats = db.get(PoolStats, fa_address)
        if stats is None:
            log.warning(f"⚠️  Pool stats not found for FA: {fa_address}")
            return

        was_graduated = bool(stats.is_graduated)
        new_reserves = Decimal(stats.apt_reserves) + reserve_delta
        # one-way: a graduated pool stays graduated whatever the counter says
        is_graduated = was_graduated or new_reserves >= self.graduation_threshold

        db.execute(
            update(PoolStats)
            .where(PoolStats.fa_address == fa_address)
            .values(
                apt_reserves=new_reserves,
                total_volume=PoolStats.total_volume + volume_delta,
                trade_count=PoolStats.trade_count + 1,
                is_graduated=is_graduated,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )

        if is_graduated and not was_graduated:
            log.info(f"🎓 Pool graduated! FA: {fa_address} reserves={new_reserves / OCTAS_PER_APT} APT")

    def _mark_graduated(self, fa_address: str) -> ApplyResult:
        with self.session_factory() as db:
            stats = db.get(PoolStats, fa_address)
            if stats is None:
                log.warning(f"⚠️  Graduation for unknown FA: {fa_address}")
                return ApplyResult.SKIPPED
            if stats.is_graduated:
                return ApplyResult.DUPLICATE

            db.execute(
                update(PoolStats)
                .where(PoolStats.fa_address == fa_address)
                .values(is_graduated=True, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            db.commit()

        log.info(f"🎓 Pool graduated (explicit event)! FA: {fa_address}")
        return ApplyResult.UPDATED
