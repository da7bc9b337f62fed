from app.utils.constants import TRACKED_MODULES, BUY_TOKENS_FUNCTION


def tracked_modules(contract: str) -> tuple[str, ...]:
    contract = contract.lower()
    return tuple(f"{contract}::{module}::" for module in TRACKED_MODULES)


def entry_function(tx: dict) -> str | None:
    payload = tx.get("payload") or {}
    return payload.get("function")


def is_tracked_transaction(tx: dict, contract: str) -> bool:
    """True when the tx calls into one of our modules or emits one of our events.

    Plain prefix / substring matching, no type tag parsing.
    """
    contract = contract.lower()
    function_name = (entry_function(tx) or "").lower()
    if function_name.startswith(tracked_modules(contract)):
        return True

    for event in tx.get("events") or []:
        if isinstance(event, dict) and contract in (event.get("type") or "").lower():
            return True

    return False


def is_buy_tokens_call(tx: dict, contract: str) -> bool:
    return (entry_function(tx) or "").lower() == f"{contract.lower()}::{BUY_TOKENS_FUNCTION}"
