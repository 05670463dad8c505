from __future__ import annotations

"""Source adapter contracts for the contract crawl.

Non-negotiable rules:
- Only adapters know the markup / JSON layout of a source.
- Extractors are pure: document text in, typed values out.
- Adapters raise typed ingestion errors; they never swallow failures.
"""

import abc
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True, slots=True)
class ContractDetail:
    """What the detail site states about one verified contract.

    `constructor_arguments` is the raw value found at the constructor
    arguments position, or None when the page shows none. It is validated by
    the reconciler, not here.
    """

    name: str
    compiler: str
    optimization_enabled: bool
    optimization_runs: int
    source: str
    abi: str
    constructor_arguments: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ContractPage:
    """One listing page: addresses in page order plus the footer page count."""

    page: int
    addresses: list[str]
    total_pages: int


@dataclass(frozen=True, slots=True)
class TxInfo:
    """Creation transaction as resolved by the ledger."""

    address: str
    bin: str


class ContractDetailExtractor(abc.ABC):
    """Turns a contract detail document into a ContractDetail."""

    @abc.abstractmethod
    def extract_detail(self, document: str) -> ContractDetail:
        """Extract the contract detail.

        MUST raise FormatError when required structure is missing.
        """


class ContractListExtractor(abc.ABC):
    """Turns a listing document into a ContractPage."""

    @abc.abstractmethod
    def extract_page(self, page: int, document: str) -> ContractPage:
        """Extract ordered addresses (duplicates preserved) and the total page count.

        MUST raise FormatError when the page count footer is missing.
        """


class CreationTransactionExtractor(abc.ABC):
    """Turns a ledger-index response into creation transaction hashes."""

    @abc.abstractmethod
    def extract_creation_txids(self, document: str) -> list[str]:
        """Return every creation transaction hash listed, in response order."""


class DetailSource(Protocol):
    async def fetch_detail(self, address: str) -> ContractDetail: ...


class ListingSource(Protocol):
    async def fetch_page(self, page: int) -> ContractPage: ...


class CreationSource(Protocol):
    async def fetch_creation_txids(self, address: str) -> list[str]: ...


class LedgerLookup(Protocol):
    async def get_tx_info(self, network: str, txid: str) -> TxInfo: ...
