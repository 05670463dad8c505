"""Pipeline context for one ingestion run.

Execution Flow:
    open_pipeline(settings)
    ├── RateLimiter (one per run, shared by every source)
    ├── NetworkClient
    ├── Sources: EtherscanAdapter (A), BlockchairAdapter (B), JsonRpcLedger
    ├── ContractReconciler + overrides
    ├── ContractRepository (store)
    ├── IngestionController
    └── CompilerVersionIndex (loaded once from the solc build list)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

import httpx
from sqlalchemy.orm import Session, sessionmaker

from app.core.db import get_session_factory
from app.repositories.contract_repo import ContractRepository
from ingestion.adapters.blockchair_adapter import BlockchairAdapter
from ingestion.adapters.etherscan_adapter import EtherscanAdapter
from ingestion.adapters.ledger_rpc import JsonRpcLedger
from ingestion.core.adapter import ContractPage
from ingestion.core.compiler_versions import CompilerVersionIndex
from ingestion.core.crawler import PageCrawler
from ingestion.core.ingestion_controller import ContractStore, IngestionController, IngestionOutcome
from ingestion.core.network_client import NetworkClient
from ingestion.core.overrides import load_overrides_yaml
from ingestion.core.rate_limiter import RateLimiter
from ingestion.core.reconciler import ContractReconciler
from ingestion.core.settings import IngestionSettings


logger = logging.getLogger(__name__)


async def load_compiler_index(client: NetworkClient, url: str) -> CompilerVersionIndex:
    """Fetch the solc build list (unthrottled) and build the index."""
    text = await client.fetch_text(url)
    return CompilerVersionIndex.from_manifest(text)


@dataclass(frozen=True, slots=True)
class IngestionPipeline:
    settings: IngestionSettings
    rate_limiter: RateLimiter
    client: NetworkClient
    etherscan: EtherscanAdapter
    controller: IngestionController
    index: CompilerVersionIndex

    def crawler(
        self,
        update: bool = False,
        on_page: Optional[Callable[[ContractPage], None]] = None,
        on_outcome: Optional[Callable[[str, IngestionOutcome], None]] = None,
    ) -> PageCrawler:
        return PageCrawler(
            self.etherscan, self.controller, self.index, update=update, on_page=on_page, on_outcome=on_outcome
        )


@asynccontextmanager
async def open_pipeline(
    settings: IngestionSettings,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    store: Optional[ContractStore] = None,
    session_factory: Optional[sessionmaker[Session]] = None,
) -> AsyncIterator[IngestionPipeline]:
    """Build every run component; the HTTP client is closed on exit."""
    rate_limiter = RateLimiter()
    client = NetworkClient(rate_limiter, http_client, timeout_seconds=settings.http_timeout_seconds)
    try:
        overrides = load_overrides_yaml(settings.overrides_path)

        etherscan = EtherscanAdapter(client, settings.etherscan_base_url, settings.etherscan_min_interval_ms)
        blockchair = BlockchairAdapter(client, settings.blockchair_base_url, settings.blockchair_min_interval_ms)
        ledger = JsonRpcLedger(client, settings.ledger_rpc_url, settings.network)

        reconciler = ContractReconciler(
            etherscan,
            blockchair,
            ledger,
            network=settings.network,
            compiler_aliases=overrides.compiler_aliases,
            constructor_overrides=overrides.constructor_arguments,
        )
        if store is None:
            store = ContractRepository(session_factory or get_session_factory())
        controller = IngestionController(store, reconciler)

        index = await load_compiler_index(client, settings.solc_list_url)

        yield IngestionPipeline(
            settings=settings,
            rate_limiter=rate_limiter,
            client=client,
            etherscan=etherscan,
            controller=controller,
            index=index,
        )
    finally:
        await client.close()
