from __future__ import annotations

"""Controlled ingestion errors for the contract crawl.

Trust & governance intent:
- Every error here is fatal for the run: nothing is retried or downgraded.
- Callers distinguish consistency failures from format failures by type.
- The job entry point logs the error and exits with a nonzero status.
"""


class ContractIngestionError(RuntimeError):
    """Base error for contract ingestion; propagates to the job entry point."""


class ConfigError(ContractIngestionError):
    """Raised when environment values or the overrides file are invalid."""


class NetworkStatusError(ContractIngestionError):
    """Raised when a source answers with a status other than 200."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Unexpected HTTP status {status_code} for {url}")
        self.url = url
        self.status_code = status_code


class NetworkTransportError(ContractIngestionError):
    """Raised when a request cannot complete (connect, read, timeout) after retries."""


class ConsistencyError(ContractIngestionError):
    """Raised when the two sources (or the ledger) disagree about a contract."""


class FormatError(ContractIngestionError):
    """Raised when a source document has a malformed field (e.g. constructor arguments)."""


class ResolutionError(ContractIngestionError):
    """Raised when the compiler version of a contract cannot be resolved."""


class PageRangeError(ContractIngestionError):
    """Raised for a malformed `--pages` range argument."""
