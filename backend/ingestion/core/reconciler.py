"""
Contract reconciler.

For one address, combines:
1. The detail site (name, compiler, optimization, source, ABI, constructor args)
2. The ledger index (the single creation transaction of the address)
3. The ledger itself (creation bytecode and the address it created)

into one canonical ContractRecord. Any disagreement between the sources is
fatal; nothing here is retried.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Mapping, Optional

from ingestion.core.adapter import (
    ContractDetail,
    CreationSource,
    DetailSource,
    LedgerLookup,
    TxInfo,
)
from ingestion.core.compiler_versions import CompilerVersionIndex, compiler_fingerprint
from ingestion.core.contract_record import ContractInfo, ContractRecord
from ingestion.core.errors import ConsistencyError, FormatError, ResolutionError

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^[0-9a-f]+$")


def validate_constructor_arguments(address: str, raw: Optional[str]) -> str:
    """Return the constructor argument hex, or "" when the page shows none.

    Present values must be lowercase hex of even length.
    """
    if not raw:
        return ""
    if not _HEX_RE.match(raw) or len(raw) % 2 != 0:
        raise FormatError(f"Constructor arguments are not valid hex for {address}")
    return raw


class ContractReconciler:
    """Cross-checks the detail site against the ledger index and the ledger."""

    def __init__(
        self,
        detail_source: DetailSource,
        creation_source: CreationSource,
        ledger: LedgerLookup,
        *,
        network: str,
        compiler_aliases: Optional[Mapping[str, str]] = None,
        constructor_overrides: Optional[Mapping[str, str]] = None,
    ):
        self.detail_source = detail_source
        self.creation_source = creation_source
        self.ledger = ledger
        self.network = network
        self.compiler_aliases = compiler_aliases or {}
        self.constructor_overrides = constructor_overrides or {}

    async def reconcile(self, address: str, index: CompilerVersionIndex) -> ContractRecord:
        """
        Build the canonical record for `address`.

        Raises:
            NetworkStatusError: a source answered with a non-200 status.
            ConsistencyError: wrong creation row count or ledger address mismatch.
            FormatError: malformed constructor arguments.
            ResolutionError: compiler version not in the index (nor aliases).
        """
        address = address.lower()

        # Both sources in flight together; both must finish before we go on.
        detail_task = asyncio.ensure_future(self.detail_source.fetch_detail(address))
        creation_task = asyncio.ensure_future(self._resolve_creation(address))
        try:
            detail, (txid, tx_info) = await asyncio.gather(detail_task, creation_task)
        except BaseException:
            # A failed lookup must not leave the other one running past this call.
            for task in (detail_task, creation_task):
                task.cancel()
            await asyncio.gather(detail_task, creation_task, return_exceptions=True)
            raise
        logger.info(f"Loaded address {address}")

        constructor_arguments = validate_constructor_arguments(address, detail.constructor_arguments)
        constructor_arguments = constructor_arguments or self.constructor_overrides.get(address, "")

        compiler_version = self._resolve_compiler(address, detail, index)
        entrypoint = f"{detail.name}.sol"

        return ContractRecord(
            sources={entrypoint: detail.source},
            abi=detail.abi,
            bin=tx_info.bin,
            info=ContractInfo(
                name=detail.name,
                entrypoint=entrypoint,
                compiler_version=compiler_version,
                # Zero runs counts as "not optimised" even when the flag says Yes.
                optimise=bool(detail.optimization_enabled and detail.optimization_runs),
                network=self.network,
                txid=txid,
                address=address,
                constructor_arguments=constructor_arguments,
            ),
        )

    async def _resolve_creation(self, address: str) -> tuple[str, TxInfo]:
        txids = await self.creation_source.fetch_creation_txids(address)
        if len(txids) != 1:
            raise ConsistencyError(
                f"Expected exactly 1 creation transaction for {address}, received: {len(txids)}"
            )

        txid = txids[0]
        tx_info = await self.ledger.get_tx_info(self.network, txid)
        if tx_info.address.lower() != address:
            raise ConsistencyError(
                f"Creation transaction {txid} created {tx_info.address}, expected {address}"
            )
        return txid, tx_info

    def _resolve_compiler(self, address: str, detail: ContractDetail, index: CompilerVersionIndex) -> str:
        fingerprint = compiler_fingerprint(detail.compiler)
        version = index.resolve(fingerprint, self.compiler_aliases) if fingerprint else None
        if not version:
            raise ResolutionError(
                f"Compiler version should be defined for {address} (compiler '{detail.compiler}')"
            )
        return version
