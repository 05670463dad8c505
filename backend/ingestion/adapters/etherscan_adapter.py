from __future__ import annotations

"""Etherscan adapter (source A): verified contract listing and detail pages.

Scope:
- Fetch listing pages and contract detail pages through the run's NetworkClient,
  keyed "etherscan" so all etherscan calls share one rate-limit slot.
- Parse HTML with BeautifulSoup into ContractPage / ContractDetail.

Non-goals (explicit):
- No validation of constructor arguments or compiler versions (reconciler's job).
"""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

from ingestion.core.adapter import (
    ContractDetail,
    ContractDetailExtractor,
    ContractListExtractor,
    ContractPage,
)
from ingestion.core.errors import FormatError
from ingestion.core.network_client import NetworkClient
from ingestion.core.settings import DEFAULT_ETHERSCAN_BASE_URL, DEFAULT_MIN_INTERVAL_MS


logger = logging.getLogger("vci.ingestion.etherscan")

SOURCE_KEY = "etherscan"

_PAGE_COUNT_RE = re.compile(r"Page \d+ of (\d+)")
_CONSTRUCTOR_ARGS_RE = re.compile(r"^([0-9a-f]+)<")


def _cell_text(table: Tag, index: int) -> str:
    cells = table.find_all("td")
    if len(cells) <= index:
        return ""
    return cells[index].get_text().strip()


def _parse_runs(text: str) -> int:
    match = re.match(r"^\d+", text)
    return int(match.group(0)) if match else 0


class EtherscanHtmlExtractor(ContractDetailExtractor, ContractListExtractor):
    """Markup knowledge for etherscan.io pages."""

    def extract_detail(self, document: str) -> ContractDetail:
        soup = BeautifulSoup(document, "html.parser")
        tables = soup.select("div#ContentPlaceHolder1_contractCodeDiv table")
        code = soup.select_one("div#dividcode")
        if len(tables) < 2 or code is None:
            raise FormatError("Contract detail page has no verified source section")

        editor = code.select_one("pre#editor")
        abi = code.select_one("pre#js-copytextarea2")

        return ContractDetail(
            name=_cell_text(tables[0], 1),
            compiler=_cell_text(tables[0], 3),
            optimization_enabled=_cell_text(tables[1], 1) == "Yes",
            optimization_runs=_parse_runs(_cell_text(tables[1], 3)),
            source=editor.get_text().strip() if editor else "",
            abi=abi.get_text().strip() if abi else "",
            constructor_arguments=self._constructor_arguments(code),
        )

    def _constructor_arguments(self, code: Tag) -> Optional[str]:
        # 4th <pre> in the code block; hex first, then the decoded view markup.
        blocks = code.find_all("pre")
        if len(blocks) < 4:
            return None
        html = blocks[3].decode_contents()
        if not html:
            return None
        match = _CONSTRUCTOR_ARGS_RE.match(html)
        # Anything else is handed back raw so the reconciler rejects it.
        return match.group(1) if match else html

    def extract_page(self, page: int, document: str) -> ContractPage:
        soup = BeautifulSoup(document, "html.parser")

        addresses: list[str] = []
        for row in soup.select("tbody:nth-child(2) tr"):
            link = row.find("a")
            if link is None:
                continue
            address = link.get_text().strip().lower()
            if address:
                addresses.append(address)

        match = _PAGE_COUNT_RE.search(soup.get_text())
        if not match:
            raise FormatError(f"Listing page {page} has no 'Page X of Y' footer")

        return ContractPage(page=page, addresses=addresses, total_pages=int(match.group(1)))


class EtherscanAdapter:
    """DetailSource and ListingSource backed by etherscan.io."""

    source_key = SOURCE_KEY

    def __init__(
        self,
        client: NetworkClient,
        base_url: str = DEFAULT_ETHERSCAN_BASE_URL,
        min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
        extractor: Optional[EtherscanHtmlExtractor] = None,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._min_interval_ms = min_interval_ms
        self._extractor = extractor or EtherscanHtmlExtractor()

    async def fetch_detail(self, address: str) -> ContractDetail:
        html = await self._client.fetch_text(
            f"{self._base_url}/address/{address}", self.source_key, self._min_interval_ms
        )
        return self._extractor.extract_detail(html)

    async def fetch_page(self, page: int) -> ContractPage:
        html = await self._client.fetch_text(
            f"{self._base_url}/contractsVerified/{page}", self.source_key, self._min_interval_ms
        )
        return self._extractor.extract_page(page, html)
