from __future__ import annotations

"""Blockchair adapter (source B): contract creation calls per address.

Scope:
- Query `calls?q=recipient(<address>),type(create)` through the NetworkClient,
  keyed "blockchair" (independent of the etherscan slot).
- Parse `{"data": [{"transaction_hash": ...}, ...]}` into transaction hashes.
"""

import json
import logging
from typing import Optional

from ingestion.core.adapter import CreationTransactionExtractor
from ingestion.core.errors import ConsistencyError
from ingestion.core.network_client import NetworkClient
from ingestion.core.settings import DEFAULT_BLOCKCHAIR_BASE_URL, DEFAULT_MIN_INTERVAL_MS


logger = logging.getLogger("vci.ingestion.blockchair")

SOURCE_KEY = "blockchair"


class BlockchairJsonExtractor(CreationTransactionExtractor):
    def extract_creation_txids(self, document: str) -> list[str]:
        try:
            payload = json.loads(document)
        except ValueError as e:
            raise ConsistencyError("Creation calls response is not valid JSON") from e

        rows = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise ConsistencyError("Creation calls response has no 'data' list")

        txids: list[str] = []
        for row in rows:
            txid = row.get("transaction_hash") if isinstance(row, dict) else None
            if not txid:
                raise ConsistencyError("Creation call row without transaction_hash")
            txids.append(str(txid).lower())
        return txids


class BlockchairAdapter:
    """CreationSource backed by the Blockchair Ethereum API."""

    source_key = SOURCE_KEY

    def __init__(
        self,
        client: NetworkClient,
        base_url: str = DEFAULT_BLOCKCHAIR_BASE_URL,
        min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
        extractor: Optional[CreationTransactionExtractor] = None,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._min_interval_ms = min_interval_ms
        self._extractor = extractor or BlockchairJsonExtractor()

    async def fetch_creation_txids(self, address: str) -> list[str]:
        url = f"{self._base_url}/ethereum/calls?q=recipient({address}),type(create)"
        text = await self._client.fetch_text(url, self.source_key, self._min_interval_ms)
        return self._extractor.extract_creation_txids(text)
