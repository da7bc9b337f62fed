"""Builders for Aptos-shaped transaction dicts."""
import itertools
import time

CONTRACT = "0x4660906d4ed4062029a19e989e51c814aa5b0711ef0ba0433b5f7487cb03b257"
OTHER = "0x1"

_versions = itertools.count(1000)


def now_micros() -> int:
    return int(time.time() * 1_000_000)


def make_tx(version=None, tx_hash=None, function=None, arguments=None, events=None,
            sender="0xb0b", timestamp=None):
    version = next(_versions) if version is None else version
    tx = {
        "version": str(version),
        "hash": tx_hash or f"0x{version:064x}",
        "sender": sender,
        "timestamp": str(timestamp if timestamp is not None else now_micros()),
        "events": events or [],
    }
    if function is not None:
        tx["payload"] = {
            "type": "entry_function_payload",
            "function": function,
            "arguments": arguments or [],
        }
    return tx


def event(name: str, data: dict, module: str = "token_factory", contract: str = CONTRACT) -> dict:
    return {"type": f"{contract}::{module}::{name}", "data": data}


def create_fa_event(fa="0xaa", name="Foo", symbol="FOO", decimals=6, max_supply=None, wrap=True):
    return event("CreateFAEvent", {
        "creator_addr": "0xc0ffee",
        "fa_obj": {"inner": fa} if wrap else fa,
        "max_supply": max_supply if max_supply is not None else {"vec": []},
        "name": name,
        "symbol": symbol,
        "decimals": decimals,
        "icon_uri": "https://example.com/foo.png",
        "project_uri": "https://example.com",
        "mint_fee_per_smallest_unit_of_fa": "1",
    })


def purchase_event(fa="0xaa", apt="1000000", tokens="500", fee="10000", buyer="0xb0b"):
    return event("TokensPurchased", {
        "buyer": buyer,
        "fa_obj_addr": fa,
        "apt_amount": apt,
        "token_amount": tokens,
        "fee_amount": fee,
    }, module="bonding_curve_pool")


def sold_event(fa="0xaa", apt="400000", tokens="200", fee="4000", seller="0xb0b"):
    return event("TokensSold", {
        "seller": seller,
        "fa_obj_addr": fa,
        "apt_amount": apt,
        "token_amount": tokens,
        "fee_amount": fee,
    }, module="bonding_curve_pool")


def graduated_event(fa="0xaa"):
    return event("PoolGraduated", {"fa_obj_addr": fa}, module="graduation_handler")


def mint_event(fa="0xaa", amount="1000", fee="3000", recipient="0xb0b"):
    return event("MintFAEvent", {
        "fa_obj": fa, "amount": amount, "recipient_addr": recipient, "total_mint_fee": fee,
    })


def burn_event(fa="0xaa", amount="250", burner="0xb0b"):
    return event("BurnFAEvent", {"fa_obj": fa, "amount": amount, "burner_addr": burner})


def deposit_event(amount="500"):
    return {"type": "0x1::fungible_asset::Deposit", "data": {"store": "0x5", "amount": amount}}


class FakeLedger:
    """In-memory stand-in for AptosClient."""

    def __init__(self, transactions=(), head=None):
        self.transactions = sorted(transactions, key=lambda tx: int(tx["version"]))
        self.head = head
        self.fail_next = 0
        self.calls = []

    def add(self, *txs):
        self.transactions = sorted([*self.transactions, *txs], key=lambda tx: int(tx["version"]))

    def get_ledger_version(self):
        if self.head is not None:
            return self.head
        return int(self.transactions[-1]["version"]) if self.transactions else 0

    def get_transactions(self, start, limit):
        self.calls.append((start, limit))
        if self.fail_next:
            self.fail_next -= 1
            raise ConnectionError("node unavailable")
        return [tx for tx in self.transactions if int(tx["version"]) >= start][:limit]

    def get_transaction_by_hash(self, tx_hash):
        for tx in self.transactions:
            if tx["hash"] == tx_hash:
                return tx
        raise LookupError(tx_hash)
