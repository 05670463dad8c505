from __future__ import annotations

import asyncio

import pytest

from conftest import FakeCreationSource, FakeDetailSource, FakeLedger, InMemoryContractStore, make_detail
from ingestion.core.adapter import TxInfo
from ingestion.core.compiler_versions import CompilerVersionIndex
from ingestion.core.errors import ConsistencyError
from ingestion.core.ingestion_controller import IngestionController, IngestionOutcome
from ingestion.core.reconciler import ContractReconciler


ADDRESS = "0x" + "ab" * 20
TXID = "0x" + "11" * 32


def _controller(store: InMemoryContractStore, ledger_address: str = ADDRESS):
    detail_source = FakeDetailSource({ADDRESS: make_detail()})
    reconciler = ContractReconciler(
        detail_source,
        FakeCreationSource({ADDRESS: [TXID]}),
        FakeLedger({TXID: TxInfo(address=ledger_address, bin="60")}),
        network="foundation",
    )
    return IngestionController(store, reconciler), detail_source


def test_ingest_is_idempotent(index: CompilerVersionIndex):
    store = InMemoryContractStore()
    controller, detail_source = _controller(store)

    first = asyncio.run(controller.ingest(ADDRESS, index))
    second = asyncio.run(controller.ingest(ADDRESS.upper().replace("0X", "0x"), index))

    assert first is IngestionOutcome.ADDED
    assert second is IngestionOutcome.ALREADY_EXISTS
    assert len(store.saved) == 1
    # The second call never reached the sources.
    assert detail_source.calls == [ADDRESS]


def test_update_mode_stops_at_stored_contract(index: CompilerVersionIndex):
    store = InMemoryContractStore(existing={("foundation", ADDRESS)})
    controller, detail_source = _controller(store)

    outcome = asyncio.run(controller.ingest(ADDRESS, index, update=True))

    assert outcome is IngestionOutcome.STOP
    assert store.saved == []
    assert detail_source.calls == []


def test_existing_contract_on_other_network_is_ingested(index: CompilerVersionIndex):
    store = InMemoryContractStore(existing={("other", ADDRESS)})
    controller, _ = _controller(store)

    assert asyncio.run(controller.ingest(ADDRESS, index)) is IngestionOutcome.ADDED


@pytest.mark.parametrize(
    "update,expected",
    [(False, IngestionOutcome.ALREADY_EXISTS), (True, IngestionOutcome.STOP)],
)
def test_lost_insert_race_counts_as_existing(index: CompilerVersionIndex, update, expected):
    store = InMemoryContractStore(save_result=False)
    controller, _ = _controller(store)

    assert asyncio.run(controller.ingest(ADDRESS, index, update=update)) is expected
    assert len(store.saved) == 1


def test_reconciliation_failure_propagates_without_save(index: CompilerVersionIndex):
    store = InMemoryContractStore()
    controller, _ = _controller(store, ledger_address="0x" + "cd" * 20)

    with pytest.raises(ConsistencyError):
        asyncio.run(controller.ingest(ADDRESS, index))
    assert store.saved == []


def test_network_comes_from_reconciler():
    controller, _ = _controller(InMemoryContractStore())
    assert controller.network == "foundation"
