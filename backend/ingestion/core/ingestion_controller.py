"""
Ingestion Controller for the contract crawl.

This module is the single authority between discovery and the store:
1. Store lookup (dedup by network + address)
2. ContractReconciler (cross-source record)
3. Store save (exactly once per newly seen address)

In update mode, reaching an already stored contract means everything older
is stored too, so the controller answers STOP instead of skipping.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from ingestion.core.compiler_versions import CompilerVersionIndex
from ingestion.core.contract_record import ContractRecord
from ingestion.core.reconciler import ContractReconciler

logger = logging.getLogger(__name__)


class IngestionOutcome(str, Enum):
    """Result of ingesting one address. Failures are raised, not returned."""
    ADDED = "added"
    ALREADY_EXISTS = "already_exists"
    STOP = "stop"  # update mode reached stored data; end the run successfully


class ContractStore(Protocol):
    async def exists_by_address_network(self, address: str, network: str) -> bool: ...

    async def save(self, record: ContractRecord) -> bool: ...


class IngestionController:
    """
    Orchestration layer: dedup, reconcile, persist.
    """

    def __init__(self, store: ContractStore, reconciler: ContractReconciler):
        self.store = store
        self.reconciler = reconciler

    @property
    def network(self) -> str:
        return self.reconciler.network

    async def ingest(
        self, address: str, index: CompilerVersionIndex, update: bool = False
    ) -> IngestionOutcome:
        """
        Ingest one address.

        Returns:
            ADDED when a new record was saved, ALREADY_EXISTS when it was stored
            before (non-update mode), STOP when update mode reached stored data.

        Raises:
            ContractIngestionError: reconciliation failed; the run must abort.
        """
        address = address.lower()

        if await self.store.exists_by_address_network(address, self.network):
            return self._on_exists(address, update)

        record = await self.reconciler.reconcile(address, index)

        added = await self.store.save(record)
        if not added:
            return self._on_exists(address, update)

        logger.info(f"Added {address}")
        return IngestionOutcome.ADDED

    def _on_exists(self, address: str, update: bool) -> IngestionOutcome:
        if update:
            logger.info(f"Existing contract reached: {address}")
            return IngestionOutcome.STOP
        logger.info(f"Already exists: {address}")
        return IngestionOutcome.ALREADY_EXISTS
