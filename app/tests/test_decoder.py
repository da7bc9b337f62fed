from decimal import Decimal
import pytest

from app.sources.bullpump_pipeline.indexer.decoder import (
    decode_event, decode_events, to_decimal, extract_fa_address, extract_max_supply,
    infer_token_amount, DecodeError,
)
from app.sources.bullpump_pipeline.indexer.events import (
    FACreated, FAMinted, FABurned, TokensPurchased, TokensSold, PoolGraduated,
    DexTelemetry, Unrecognized,
)
from app.tests.fixtures import (
    CONTRACT, make_tx, event, create_fa_event, purchase_event, sold_event,
    graduated_event, mint_event, burn_event, deposit_event,
)


def test_create_event_unwraps_inner_object_and_empty_option():
    decoded = decode_event(create_fa_event(fa="0xAA", wrap=True))

    assert isinstance(decoded, FACreated)
    assert decoded.fa_address == "0xaa"
    assert decoded.name == "Foo"
    assert decoded.symbol == "FOO"
    assert decoded.decimals == 6
    assert decoded.max_supply is None
    assert decoded.creator == "0xc0ffee"
    assert decoded.mint_fee_per_unit == Decimal(1)


def test_create_event_accepts_bare_address_and_present_option():
    decoded = decode_event(create_fa_event(fa="0xbb", wrap=False, max_supply={"vec": ["1000000000"]}))
    assert decoded.fa_address == "0xbb"
    assert decoded.max_supply == Decimal(1_000_000_000)


@pytest.mark.parametrize("raw,expected", [
    (None, None),
    ("", None),
    ({"vec": []}, None),
    ({"vec": ["42"]}, Decimal(42)),
    ("77", Decimal(77)),
])
def test_extract_max_supply_shapes(raw, expected):
    assert extract_max_supply(raw) == expected


def test_extract_fa_address_rejects_unknown_shape():
    with pytest.raises(DecodeError):
        extract_fa_address({"addr": "0x1"})


def test_amounts_keep_full_u128_precision():
    big = "340282366920938463463374607431768211455"
    decoded = decode_event(purchase_event(apt=big, tokens=big, fee="1"))

    assert isinstance(decoded, TokensPurchased)
    assert decoded.apt_amount == Decimal(big)
    assert str(decoded.apt_amount) == big


def test_to_decimal_refuses_floats_and_garbage():
    with pytest.raises(DecodeError):
        to_decimal(1.5)
    with pytest.raises(DecodeError):
        to_decimal("twelve")
    with pytest.raises(DecodeError):
        to_decimal("NaN")
    assert to_decimal(" 12 ") == Decimal(12)


def test_trade_events_decode():
    buy = decode_event(purchase_event(fa="0xAA", buyer="0xB0B"))
    sell = decode_event(sold_event())

    assert buy == TokensPurchased("0xaa", "0xb0b", Decimal(1_000_000), Decimal(500), Decimal(10_000))
    assert isinstance(sell, TokensSold)
    assert sell.seller == "0xb0b"
    assert sell.apt_amount == Decimal(400_000)


def test_mint_burn_and_graduation_decode():
    assert decode_event(mint_event()) == FAMinted("0xaa", "0xb0b", Decimal(1000), Decimal(3000))
    assert decode_event(burn_event()) == FABurned("0xaa", "0xb0b", Decimal(250))
    assert decode_event(graduated_event()) == PoolGraduated("0xaa", None)


@pytest.mark.parametrize("name,kind", [
    ("PoolCreated", "dex_pool_created"),
    ("LiquidityAdded", "liquidity_added"),
    ("LiquidityRemoved", "liquidity_removed"),
    ("FeeCollected", "fee_collected"),
    ("Swapped", "swapped"),
])
def test_dex_events_are_telemetry(name, kind):
    decoded = decode_event(event(name, {"pool": "0x9"}, module="dex"))
    assert isinstance(decoded, DexTelemetry)
    assert decoded.kind == kind
    assert decoded.data == {"pool": "0x9"}


def test_unknown_type_is_unrecognized():
    decoded = decode_event({"type": "0x1::coin::CoinDeposit", "data": {}})
    assert isinstance(decoded, Unrecognized)
    assert decoded.reason == "unknown type tag"


def test_malformed_payload_does_not_raise():
    bad = create_fa_event()
    del bad["data"]["name"]

    decoded = decode_event(bad)

    assert isinstance(decoded, Unrecognized)
    assert decoded.reason.startswith("malformed payload")
    assert isinstance(decode_event({"type": f"{CONTRACT}::token_factory::CreateFAEvent", "data": "x"}),
                      Unrecognized)


def test_decode_events_keeps_order_and_siblings():
    bad = purchase_event()
    bad["data"]["apt_amount"] = "not-a-number"
    tx = make_tx(events=[create_fa_event(), bad, purchase_event()])

    decoded = decode_events(tx)

    assert [type(d) for d in decoded] == [FACreated, Unrecognized, TokensPurchased]


def test_infer_token_amount():
    tx = make_tx(events=[
        {"type": "0x1::fungible_asset::Withdraw", "data": {"amount": "9"}},
        {"type": "0x1::fungible_asset::Deposit", "data": {"amount": "0"}},
        deposit_event("500"),
    ])
    assert infer_token_amount(tx) == Decimal(500)
    assert infer_token_amount(make_tx(events=[])) == Decimal(0)


@pytest.mark.parametrize("entry", ["garbage", None, 42, ["list"]])
def test_non_object_event_entry_is_unrecognized(entry):
    decoded = decode_event(entry)
    assert isinstance(decoded, Unrecognized)
    assert decoded.reason == "event is not an object"


def test_non_object_entry_does_not_hide_siblings():
    tx = make_tx(events=["garbage", create_fa_event(), None, deposit_event("7")])

    decoded = decode_events(tx)

    assert [type(d) for d in decoded] == [Unrecognized, FACreated, Unrecognized, Unrecognized]
    assert infer_token_amount(tx) == Decimal(7)
