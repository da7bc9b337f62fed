import requests
import backoff
import logging
from typing import Dict, List

logger = logging.getLogger(__name__)

# Cache of clients per node URL
_aptos_clients: Dict[str, "AptosClient"] = {}


class AptosClient:
    """Thin wrapper over the Aptos fullnode REST API (`/v1`).

    Transactions come back as the node's JSON dicts: `version` and
    `timestamp` (microseconds) are decimal strings, `payload` holds
    `function` / `arguments` for entry-function calls, `events` is a list
    of `{"type": ..., "data": {...}}`.
    """

    def __init__(self, node_url: str, timeout: float = 10):
        self.node_url = node_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    @backoff.on_exception(backoff.expo, requests.RequestException, max_tries=3)
    def _get(self, path: str, params: dict | None = None):
        resp = self.session.get(f"{self.node_url}{path}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def get_ledger_version(self) -> int:
        """Current head of the ledger."""
        info = self._get("/")
        return int(info["ledger_version"])

    def get_transactions(self, start: int, limit: int) -> List[dict]:
        """Ordered transactions from version `start`, at most `limit` of them.

        Pending / version-less records are dropped.
        """
        txs = self._get("/transactions", params={"start": start, "limit": limit})
        return [tx for tx in txs if "version" in tx]

    def get_transaction_by_hash(self, tx_hash: str) -> dict:
        return self._get(f"/transactions/by_hash/{tx_hash}")


def get_aptos_client(node_url: str) -> AptosClient:
    """Returns a cached or newly created client for a given node URL."""
    if node_url not in _aptos_clients:
        logger.info(f"Connecting to Aptos node: {node_url}")
        _aptos_clients[node_url] = AptosClient(node_url)
    return _aptos_clients[node_url]
