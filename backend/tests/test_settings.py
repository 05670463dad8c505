from __future__ import annotations

from pathlib import Path

import pytest

from ingestion.core.errors import ConfigError
from ingestion.core.settings import DEFAULT_MIN_INTERVAL_MS, IngestionSettings


_VARS = [
    "VCI_NETWORK",
    "VCI_ETHERSCAN_BASE_URL",
    "VCI_BLOCKCHAIR_BASE_URL",
    "VCI_LEDGER_RPC_URL",
    "VCI_SOLC_LIST_URL",
    "VCI_ETHERSCAN_MIN_INTERVAL_MS",
    "VCI_BLOCKCHAIR_MIN_INTERVAL_MS",
    "VCI_HTTP_TIMEOUT_SECONDS",
    "VCI_OVERRIDES_YAML",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for name in _VARS:
        # setenv first so values written by the env file loader are undone too.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # Point at an empty env file so a developer's .env does not leak in.
    empty = tmp_path / "empty.env"
    empty.write_text("", encoding="utf-8")
    monkeypatch.setenv("VCI_ENV_FILE", str(empty))


def test_defaults():
    settings = IngestionSettings.from_env()
    assert settings.network == "foundation"
    assert settings.etherscan_min_interval_ms == DEFAULT_MIN_INTERVAL_MS
    assert settings.blockchair_min_interval_ms == DEFAULT_MIN_INTERVAL_MS
    assert settings.http_timeout_seconds == 30.0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("VCI_NETWORK", "classic")
    monkeypatch.setenv("VCI_ETHERSCAN_BASE_URL", "https://etherscan.test/")
    monkeypatch.setenv("VCI_ETHERSCAN_MIN_INTERVAL_MS", "0")
    monkeypatch.setenv("VCI_HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("VCI_OVERRIDES_YAML", str(tmp_path / "o.yaml"))

    settings = IngestionSettings.from_env()

    assert settings.network == "classic"
    assert settings.etherscan_base_url == "https://etherscan.test"
    assert settings.etherscan_min_interval_ms == 0
    assert settings.http_timeout_seconds == 2.5
    assert settings.overrides_path == tmp_path / "o.yaml"


def test_env_file_values_are_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    env_file = tmp_path / "run.env"
    env_file.write_text("# crawl\nexport VCI_NETWORK='ropsten'\nVCI_BLOCKCHAIR_MIN_INTERVAL_MS=250\n", encoding="utf-8")
    monkeypatch.setenv("VCI_ENV_FILE", str(env_file))

    settings = IngestionSettings.from_env()

    assert settings.network == "ropsten"
    assert settings.blockchair_min_interval_ms == 250


@pytest.mark.parametrize(
    "name,value",
    [
        ("VCI_ETHERSCAN_MIN_INTERVAL_MS", "fast"),
        ("VCI_BLOCKCHAIR_MIN_INTERVAL_MS", "-1"),
        ("VCI_HTTP_TIMEOUT_SECONDS", "0"),
        ("VCI_HTTP_TIMEOUT_SECONDS", "soon"),
    ],
)
def test_invalid_values_raise_config_error(monkeypatch: pytest.MonkeyPatch, name: str, value: str):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigError):
        IngestionSettings.from_env()
