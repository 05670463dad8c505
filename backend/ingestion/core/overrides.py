from __future__ import annotations

"""Static reconciliation overrides (YAML).

Trust & governance intent:
- Known explorer gaps are fixed in config, not in code.
- compiler_aliases: fingerprint reported by the explorer -> fingerprint in the solc build list.
- constructor_arguments: address -> constructor argument hex the explorer page does not show.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import yaml

from ingestion.core.errors import ConfigError


DEFAULT_OVERRIDES_PATH = Path(__file__).resolve().parents[1] / "config" / "overrides.yaml"

_HEX_RE = re.compile(r"^[0-9a-f]*$")


@dataclass(frozen=True, slots=True)
class ReconciliationOverrides:
    compiler_aliases: Mapping[str, str] = field(default_factory=dict)
    constructor_arguments: Mapping[str, str] = field(default_factory=dict)


def _mapping_section(raw: dict, name: str) -> dict:
    section = raw.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Invalid overrides file: '{name}' must be a mapping.")
    return section


def load_overrides_yaml(path: Path = DEFAULT_OVERRIDES_PATH) -> ReconciliationOverrides:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError("Invalid overrides file: expected a top-level mapping.")

    aliases = {
        str(k).strip().lower(): str(v).strip().lower()
        for k, v in _mapping_section(raw, "compiler_aliases").items()
    }

    constructor_arguments: dict[str, str] = {}
    for address, value in _mapping_section(raw, "constructor_arguments").items():
        hex_value = str(value).strip().lower()
        if hex_value.startswith("0x"):
            hex_value = hex_value[2:]
        if not _HEX_RE.match(hex_value) or len(hex_value) % 2 != 0:
            raise ConfigError(f"Invalid constructor arguments override for {address}")
        constructor_arguments[str(address).strip().lower()] = hex_value

    return ReconciliationOverrides(compiler_aliases=aliases, constructor_arguments=constructor_arguments)
