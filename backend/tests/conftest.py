from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Generator, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/` is importable as top-level `app` / `ingestion` for tests.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.core.base import Base  # noqa: E402
from app.core.db import make_session_factory  # noqa: E402
import app.models as _models  # noqa: F401,E402
from ingestion.core.adapter import ContractDetail, ContractPage, TxInfo  # noqa: E402
from ingestion.core.compiler_versions import CompilerVersionIndex  # noqa: E402
from ingestion.core.contract_record import ContractRecord  # noqa: E402


MANIFEST = "\n".join(
    [
        "soljson-v0.4.24+commit.e67f0147.js",
        "soljson-v0.4.11+commit.68ef5810.js",
        "soljson-v0.4.25-nightly.2018.6.3+commit.ef8fb63b.js",
        "# not an artifact",
        "",
    ]
)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return make_session_factory(engine)


@pytest.fixture()
def index() -> CompilerVersionIndex:
    return CompilerVersionIndex.from_manifest(MANIFEST)


class InMemoryContractStore:
    """Store double recording every call."""

    def __init__(self, existing: Optional[set[tuple[str, str]]] = None, save_result: Optional[bool] = None):
        self.keys: set[tuple[str, str]] = set(existing or ())
        self.saved: list[ContractRecord] = []
        self.exists_calls: list[str] = []
        self._save_result = save_result

    async def exists_by_address_network(self, address: str, network: str) -> bool:
        self.exists_calls.append(address)
        return (network, address) in self.keys

    async def save(self, record: ContractRecord) -> bool:
        self.saved.append(record)
        if self._save_result is not None:
            return self._save_result
        key = (record.network, record.address)
        if key in self.keys:
            return False
        self.keys.add(key)
        return True


class FakeDetailSource:
    def __init__(self, details: dict[str, ContractDetail]):
        self.details = details
        self.calls: list[str] = []

    async def fetch_detail(self, address: str) -> ContractDetail:
        self.calls.append(address)
        await asyncio.sleep(0)
        return self.details[address]


class FakeCreationSource:
    def __init__(self, txids: dict[str, list[str]]):
        self.txids = txids
        self.calls: list[str] = []

    async def fetch_creation_txids(self, address: str) -> list[str]:
        self.calls.append(address)
        await asyncio.sleep(0)
        return list(self.txids.get(address, []))


class FakeLedger:
    def __init__(self, txs: dict[str, TxInfo]):
        self.txs = txs

    async def get_tx_info(self, network: str, txid: str) -> TxInfo:
        return self.txs[txid]


class FakeListingSource:
    def __init__(self, pages: dict[int, ContractPage]):
        self.pages = pages
        self.fetched: list[int] = []

    async def fetch_page(self, page: int) -> ContractPage:
        self.fetched.append(page)
        return self.pages[page]


def make_detail(
    name: str = "MetaCoin",
    compiler: str = "v0.4.24+commit.e67f0147",
    optimization_enabled: bool = True,
    optimization_runs: int = 200,
    constructor_arguments: Optional[str] = None,
) -> ContractDetail:
    return ContractDetail(
        name=name,
        compiler=compiler,
        optimization_enabled=optimization_enabled,
        optimization_runs=optimization_runs,
        source=f"pragma solidity ^0.4.24;\ncontract {name} {{}}",
        abi='[{"type":"constructor","inputs":[]}]',
        constructor_arguments=constructor_arguments,
    )


def detail_html(
    name: str = "MetaCoin",
    compiler: str = "v0.4.24+commit.e67f0147",
    optimization: str = "Yes",
    runs: str = "200",
    constructor_pre: Optional[str] = "00000000000000000000000000000000000000000000000000000000000000aa"
    "<br><br>-----Decoded View---------------<br>",
) -> str:
    constructor = f"<pre>{constructor_pre}</pre>" if constructor_pre is not None else ""
    return f"""
<html><body>
<div id="ContentPlaceHolder1_contractCodeDiv">
  <table>
    <tr><td>Contract Name:</td><td>
      {name}
    </td></tr>
    <tr><td>Compiler Version:</td><td>{compiler}</td></tr>
  </table>
  <table>
    <tr><td>Optimization Enabled:</td><td>{optimization}</td></tr>
    <tr><td>Runs (Optimizer):</td><td>{runs}</td></tr>
  </table>
</div>
<div id="dividcode">
  <pre id="editor">pragma solidity ^0.4.24;
contract {name} {{}}</pre>
  <pre id="js-copytextarea2">[{{"type":"constructor","inputs":[]}}]</pre>
  <pre class="wordwrap">6060604052</pre>
  {constructor}
</div>
</body></html>
"""


def listing_html(addresses: list[str], page: int, total: Optional[int]) -> str:
    rows = "".join(
        f'<tr><td><a href="/address/{a}#code">{a}</a></td><td>Token</td><td>v0.4.24</td></tr>'
        for a in addresses
    )
    footer = f"<span>Page {page} of {total}</span>" if total is not None else ""
    return f"""
<html><body>
<table class="table">
  <thead><tr><th>Address</th><th>Contract Name</th><th>Compiler</th></tr></thead>
  <tbody>{rows}</tbody>
</table>
{footer}
</body></html>
"""
