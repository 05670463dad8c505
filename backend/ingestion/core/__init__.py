"""Ingestion core primitives for the verified contract crawl.

- RateLimiter: per-source spacing of outbound calls
- CompilerVersionIndex: solc build fingerprint -> version
- ContractReconciler: detail site + ledger index + ledger -> ContractRecord
- IngestionController: dedup, reconcile, persist once
- PageCrawler: ordered page / address discovery with early stop
"""

from ingestion.core.compiler_versions import CompilerVersionIndex
from ingestion.core.contract_record import ContractInfo, ContractRecord
from ingestion.core.crawler import CrawlResult, PageCrawler, parse_page_range
from ingestion.core.errors import (
    ConfigError,
    ConsistencyError,
    ContractIngestionError,
    FormatError,
    NetworkStatusError,
    NetworkTransportError,
    PageRangeError,
    ResolutionError,
)
from ingestion.core.ingestion_controller import IngestionController, IngestionOutcome
from ingestion.core.rate_limiter import RateLimiter
from ingestion.core.reconciler import ContractReconciler

__all__ = [
    "CompilerVersionIndex",
    "ContractInfo",
    "ContractRecord",
    "CrawlResult",
    "PageCrawler",
    "parse_page_range",
    "ConfigError",
    "ConsistencyError",
    "ContractIngestionError",
    "FormatError",
    "NetworkStatusError",
    "NetworkTransportError",
    "PageRangeError",
    "ResolutionError",
    "IngestionController",
    "IngestionOutcome",
    "RateLimiter",
    "ContractReconciler",
]
