"""Canonical contract record produced by reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class ContractInfo:
    name: str
    entrypoint: str
    compiler_version: str
    optimise: bool
    network: str
    txid: str
    address: str  # lowercase, canonical key within the network
    constructor_arguments: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "entrypoint": self.entrypoint,
            "compiler": self.compiler_version,
            "optimise": self.optimise,
            "network": self.network,
            "txid": self.txid,
            "address": self.address,
            "constructor": self.constructor_arguments,
        }


@dataclass(frozen=True, slots=True)
class ContractRecord:
    """Immutable record persisted once per (network, address)."""

    sources: Mapping[str, str]
    abi: str
    bin: str
    info: ContractInfo = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))

    @property
    def address(self) -> str:
        return self.info.address

    @property
    def network(self) -> str:
        return self.info.network

    def to_payload(self) -> dict[str, Any]:
        """Persisted record shape: sources, abi, bin and info."""
        return {
            "sources": dict(self.sources),
            "abi": self.abi,
            "bin": self.bin,
            "info": self.info.to_payload(),
        }
