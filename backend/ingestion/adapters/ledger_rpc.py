"""Ledger lookup over Ethereum JSON-RPC.

Resolves a creation transaction to the deployed address (from the receipt)
and the creation bytecode (the transaction input).
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from ingestion.core.adapter import TxInfo
from ingestion.core.errors import ConfigError, ConsistencyError
from ingestion.core.network_client import NetworkClient


logger = logging.getLogger("vci.ingestion.ledger")


def _strip_hex_prefix(value: str) -> str:
    value = (value or "").strip().lower()
    return value[2:] if value.startswith("0x") else value


class JsonRpcLedger:
    """LedgerLookup for a single network served by one JSON-RPC endpoint."""

    def __init__(self, client: NetworkClient, rpc_url: str, network: str) -> None:
        self._client = client
        self._rpc_url = rpc_url
        self._network = network
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        body = await self._client.post_json(self._rpc_url, payload)
        if not isinstance(body, dict):
            raise ConsistencyError(f"{method}: unexpected JSON-RPC response shape")
        if body.get("error"):
            raise ConsistencyError(f"{method} failed: {body['error']}")
        return body.get("result")

    async def get_tx_info(self, network: str, txid: str) -> TxInfo:
        if network != self._network:
            raise ConfigError(f"No ledger endpoint configured for network '{network}'")

        tx = await self._call("eth_getTransactionByHash", [txid])
        receipt = await self._call("eth_getTransactionReceipt", [txid])
        if not tx or not receipt:
            raise ConsistencyError(f"Transaction {txid} not found on {network}")

        address = (receipt.get("contractAddress") or "").lower()
        if not address:
            raise ConsistencyError(f"Transaction {txid} did not create a contract")

        logger.debug(f"Resolved {txid} -> {address}")
        return TxInfo(address=address, bin=_strip_hex_prefix(tx.get("input", "")))
