# decoder.py
# --------------------------------------------------------------
# Decode BullPump Move events → typed domain events.
# Pure functions: no DB, no network.
# --------------------------------------------------------------
from decimal import Decimal, InvalidOperation
from typing import List, Optional
import logging

from app.utils.constants import EVENT_FRAGMENTS, TOKEN_TRANSFER_FRAGMENTS
from app.sources.bullpump_pipeline.indexer.events import (
    DomainEvent, FACreated, FAMinted, FABurned, TokensPurchased,
    TokensSold, PoolGraduated, DexTelemetry, Unrecognized,
)

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    pass


def to_decimal(value) -> Decimal:
    """u64/u128 fields arrive as decimal strings; never go through float."""
    if isinstance(value, bool) or isinstance(value, float):
        raise DecodeError(f"Refusing non-integer numeric value: {value!r}")
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, TypeError) as exc:
        raise DecodeError(f"Not a decimal string: {value!r}") from exc
    if not parsed.is_finite():
        raise DecodeError(f"Not a finite amount: {value!r}")
    return parsed


def normalize_address(addr: str) -> str:
    return str(addr).strip().lower()


def extract_fa_address(fa_obj) -> str:
    """`Object<Metadata>` shows up either as a bare address or as `{"inner": addr}`."""
    if isinstance(fa_obj, str):
        return normalize_address(fa_obj)
    if isinstance(fa_obj, dict) and "inner" in fa_obj:
        return normalize_address(fa_obj["inner"])
    raise DecodeError(f"Unrecognized FA object reference: {fa_obj!r}")


def extract_max_supply(max_supply) -> Optional[Decimal]:
    """`Option<u128>` shows up as a bare string or as `{"vec": []}` / `{"vec": ["n"]}`."""
    if max_supply is None or max_supply == "":
        return None
    if isinstance(max_supply, dict):
        vec = max_supply.get("vec") or []
        if not vec or vec[0] in (None, ""):
            return None
        return to_decimal(vec[0])
    return to_decimal(max_supply)


def _fa_ref(data: dict) -> str:
    if "fa_obj_addr" in data:
        return extract_fa_address(data["fa_obj_addr"])
    return extract_fa_address(data["fa_obj"])


def match_kind(type_tag: str) -> Optional[str]:
    for fragment, kind in EVENT_FRAGMENTS.items():
        if fragment in type_tag:
            return kind
    return None


def _build(kind: str, type_tag: str, data: dict) -> DomainEvent:
    match kind:
        case "fa_created":
            return FACreated(
                fa_address=extract_fa_address(data["fa_obj"]),
                creator=normalize_address(data["creator_addr"]),
                name=data["name"],
                symbol=data["symbol"],
                decimals=int(data["decimals"]),
                max_supply=extract_max_supply(data.get("max_supply")),
                icon_uri=data.get("icon_uri", ""),
                project_uri=data.get("project_uri", ""),
                mint_fee_per_unit=to_decimal(data.get("mint_fee_per_smallest_unit_of_fa", "0")),
            )
        case "fa_minted":
            return FAMinted(
                fa_address=extract_fa_address(data["fa_obj"]),
                recipient=normalize_address(data["recipient_addr"]),
                amount=to_decimal(data["amount"]),
                total_mint_fee=to_decimal(data.get("total_mint_fee", "0")),
            )
        case "fa_burned":
            return FABurned(
                fa_address=extract_fa_address(data["fa_obj"]),
                burner=normalize_address(data["burner_addr"]),
                amount=to_decimal(data["amount"]),
            )
        case "tokens_purchased":
            return TokensPurchased(
                fa_address=_fa_ref(data),
                buyer=normalize_address(data["buyer"]),
                apt_amount=to_decimal(data["apt_amount"]),
                token_amount=to_decimal(data["token_amount"]),
                fee_amount=to_decimal(data.get("fee_amount", "0")),
            )
        case "tokens_sold":
            return TokensSold(
                fa_address=_fa_ref(data),
                seller=normalize_address(data["seller"]),
                apt_amount=to_decimal(data["apt_amount"]),
                token_amount=to_decimal(data["token_amount"]),
                fee_amount=to_decimal(data.get("fee_amount", "0")),
            )
        case "pool_graduated":
            reserves = data.get("apt_reserves")
            return PoolGraduated(
                fa_address=_fa_ref(data),
                apt_reserves=to_decimal(reserves) if reserves is not None else None,
            )
        case _:
            return DexTelemetry(kind=kind, type_tag=type_tag, data=dict(data))


def decode_event(event: dict) -> DomainEvent:
    """Map one emitted event to a typed domain event.

    Never raises: unknown type tags and malformed payloads come back as
    `Unrecognized` so sibling events keep flowing.
    """
    if not isinstance(event, dict):
        logger.error(f"❌ Event entry is not an object: {event!r}")
        return Unrecognized(type_tag="", reason="event is not an object")

    type_tag = event.get("type") or ""
    kind = match_kind(type_tag)
    if kind is None:
        return Unrecognized(type_tag=type_tag, reason="unknown type tag")

    data = event.get("data")
    if not isinstance(data, dict):
        logger.error(f"❌ {type_tag}: payload is not an object ({data!r})")
        return Unrecognized(type_tag=type_tag, reason="payload is not an object")

    try:
        return _build(kind, type_tag, data)
    except (KeyError, TypeError, ValueError) as exc:
        logger.error(f"❌ Failed to decode {type_tag}: {exc!r}")
        return Unrecognized(type_tag=type_tag, reason=f"malformed payload: {exc!r}")


def decode_events(tx: dict) -> List[DomainEvent]:
    """Decode every emitted event of a transaction, in emission order."""
    return [decode_event(evt) for evt in tx.get("events") or []]


def infer_token_amount(tx: dict) -> Decimal:
    """Best guess at tokens out for a direct `buy_tokens` call.

    First positive `amount` in a Transfer/Deposit-shaped event, else 0.
    """
    for evt in tx.get("events") or []:
        if not isinstance(evt, dict):
            continue
        type_tag = evt.get("type") or ""
        if not any(fragment in type_tag for fragment in TOKEN_TRANSFER_FRAGMENTS):
            continue
        data = evt.get("data")
        amount = data.get("amount") if isinstance(data, dict) else None
        if amount is None:
            continue
        try:
            value = to_decimal(amount)
        except DecodeError:
            continue
        if value > 0:
            return value
    return Decimal(0)
