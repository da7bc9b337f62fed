from typing import NamedTuple, Optional, Union
from decimal import Decimal


class FACreated(NamedTuple):
    fa_address: str
    creator: str
    name: str
    symbol: str
    decimals: int
    max_supply: Optional[Decimal]
    icon_uri: str
    project_uri: str
    mint_fee_per_unit: Decimal


class FAMinted(NamedTuple):
    fa_address: str
    recipient: str
    amount: Decimal
    total_mint_fee: Decimal


class FABurned(NamedTuple):
    fa_address: str
    burner: str
    amount: Decimal


class TokensPurchased(NamedTuple):
    fa_address: str
    buyer: str
    apt_amount: Decimal      # gross, octas
    token_amount: Decimal
    fee_amount: Decimal


class TokensSold(NamedTuple):
    fa_address: str
    seller: str
    apt_amount: Decimal
    token_amount: Decimal
    fee_amount: Decimal


class PoolGraduated(NamedTuple):
    fa_address: str
    apt_reserves: Optional[Decimal]


class DexTelemetry(NamedTuple):
    """Pool created / liquidity added / liquidity removed / fee collected / swapped."""
    kind: str
    type_tag: str
    data: dict


class Unrecognized(NamedTuple):
    type_tag: str
    reason: str


DomainEvent = Union[
    FACreated, FAMinted, FABurned, TokensPurchased, TokensSold,
    PoolGraduated, DexTelemetry, Unrecognized,
]
