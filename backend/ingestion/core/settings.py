"""Runtime settings for the contract crawl.

All environment parsing happens here; the rest of the pipeline receives a
frozen IngestionSettings value.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from app.core.env import load_env_if_present
from ingestion.core.errors import ConfigError
from ingestion.core.overrides import DEFAULT_OVERRIDES_PATH


DEFAULT_NETWORK = "foundation"
DEFAULT_ETHERSCAN_BASE_URL = "https://etherscan.io"
DEFAULT_BLOCKCHAIR_BASE_URL = "https://api.blockchair.com"
DEFAULT_LEDGER_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_SOLC_LIST_URL = "https://raw.githubusercontent.com/ethereum/solc-bin/gh-pages/bin/list.txt"
DEFAULT_MIN_INTERVAL_MS = 1000
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class IngestionSettings:
    network: str = DEFAULT_NETWORK
    etherscan_base_url: str = DEFAULT_ETHERSCAN_BASE_URL
    blockchair_base_url: str = DEFAULT_BLOCKCHAIR_BASE_URL
    ledger_rpc_url: str = DEFAULT_LEDGER_RPC_URL
    solc_list_url: str = DEFAULT_SOLC_LIST_URL
    etherscan_min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS
    blockchair_min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    overrides_path: Path = DEFAULT_OVERRIDES_PATH

    @classmethod
    def from_env(cls) -> "IngestionSettings":
        load_env_if_present()
        return cls(
            network=os.environ.get("VCI_NETWORK", DEFAULT_NETWORK),
            etherscan_base_url=os.environ.get("VCI_ETHERSCAN_BASE_URL", DEFAULT_ETHERSCAN_BASE_URL).rstrip("/"),
            blockchair_base_url=os.environ.get("VCI_BLOCKCHAIR_BASE_URL", DEFAULT_BLOCKCHAIR_BASE_URL).rstrip("/"),
            ledger_rpc_url=os.environ.get("VCI_LEDGER_RPC_URL", DEFAULT_LEDGER_RPC_URL),
            solc_list_url=os.environ.get("VCI_SOLC_LIST_URL", DEFAULT_SOLC_LIST_URL),
            etherscan_min_interval_ms=_env_int("VCI_ETHERSCAN_MIN_INTERVAL_MS", DEFAULT_MIN_INTERVAL_MS),
            blockchair_min_interval_ms=_env_int("VCI_BLOCKCHAIR_MIN_INTERVAL_MS", DEFAULT_MIN_INTERVAL_MS),
            http_timeout_seconds=_env_float("VCI_HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS),
            overrides_path=Path(os.environ.get("VCI_OVERRIDES_YAML") or DEFAULT_OVERRIDES_PATH),
        )


def _env_int(name: str, default: int) -> int:
    v = os.environ.get(name)
    if v is None or not v.strip():
        return default
    try:
        n = int(v)
    except ValueError as e:
        raise ConfigError(f"Invalid {name}; must be integer.") from e
    if n < 0:
        raise ConfigError(f"{name} must be >= 0.")
    return n


def _env_float(name: str, default: float) -> float:
    v = os.environ.get(name)
    if v is None or not v.strip():
        return default
    try:
        n = float(v)
    except ValueError as e:
        raise ConfigError(f"Invalid {name}; must be a number.") from e
    if n <= 0:
        raise ConfigError(f"{name} must be > 0.")
    return n
