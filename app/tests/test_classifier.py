import pytest

from app.sources.bullpump_pipeline.indexer.classifier import (
    is_tracked_transaction, is_buy_tokens_call, entry_function, tracked_modules,
)
from app.tests.fixtures import CONTRACT, OTHER, make_tx, event, purchase_event


@pytest.mark.parametrize("function", [
    f"{CONTRACT}::token_factory::create_fa",
    f"{CONTRACT}::bonding_curve_pool::buy_tokens",
    f"{CONTRACT}::graduation_handler::graduate",
    f"{CONTRACT}::router::swap_exact_in",
])
def test_entry_function_in_tracked_module(function):
    assert is_tracked_transaction(make_tx(function=function), CONTRACT)


def test_unrelated_transaction_is_not_tracked():
    tx = make_tx(function=f"{OTHER}::coin::transfer",
                 events=[{"type": "0x1::coin::WithdrawEvent", "data": {}}])
    assert not is_tracked_transaction(tx, CONTRACT)


def test_untracked_module_of_same_contract_is_not_tracked():
    assert not is_tracked_transaction(make_tx(function=f"{CONTRACT}::admin::set_fee"), CONTRACT)


def test_event_from_contract_is_enough():
    tx = make_tx(function=f"{OTHER}::aggregator::route", events=[purchase_event()])
    assert is_tracked_transaction(tx, CONTRACT)


def test_contract_match_is_case_insensitive():
    tx = make_tx(events=[event("TokensSold", {}, contract=CONTRACT.upper().replace("0X", "0x"))])
    assert is_tracked_transaction(tx, CONTRACT.upper())


def test_transaction_without_payload():
    tx = make_tx()
    assert entry_function(tx) is None
    assert not is_tracked_transaction(tx, CONTRACT)


def test_buy_tokens_call_detection():
    assert is_buy_tokens_call(make_tx(function=f"{CONTRACT}::bonding_curve_pool::buy_tokens"), CONTRACT)
    assert not is_buy_tokens_call(make_tx(function=f"{CONTRACT}::bonding_curve_pool::sell_tokens"), CONTRACT)
    assert not is_buy_tokens_call(make_tx(function=f"{OTHER}::bonding_curve_pool::buy_tokens"), CONTRACT)


def test_tracked_modules_are_qualified():
    assert f"{CONTRACT}::router::" in tracked_modules(CONTRACT)
