"""Page crawler over the verified contracts listing.

Pages are visited strictly in increasing order and addresses strictly in page
order, one at a time. The upper bound is either a page number or "latest",
in which case the page count printed on each visited page is the bound.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional, Union

from ingestion.core.adapter import ContractPage, ListingSource
from ingestion.core.compiler_versions import CompilerVersionIndex
from ingestion.core.errors import PageRangeError
from ingestion.core.ingestion_controller import IngestionController, IngestionOutcome

logger = logging.getLogger(__name__)

LATEST = "latest"
UpperBound = Union[int, Literal["latest"]]

_PAGE_RANGE_RE = re.compile(r"^(\d+)\.\.(\d+|latest)$")


def parse_page_range(value: str) -> tuple[int, UpperBound]:
    """Parse `<down>..<up>` or `<down>..latest`."""
    match = _PAGE_RANGE_RE.match((value or "").strip())
    if not match:
        raise PageRangeError(f"Invalid pages {value}")

    down = int(match.group(1))
    if match.group(2) == LATEST:
        return down, LATEST

    up = int(match.group(2))
    if down > up:
        raise PageRangeError(f"Invalid pages {value}")
    return down, up


@dataclass(slots=True)
class CrawlResult:
    pages_visited: list[int] = field(default_factory=list)
    outcomes: dict[IngestionOutcome, int] = field(default_factory=dict)
    stopped: bool = False

    def record(self, outcome: IngestionOutcome) -> None:
        self.outcomes[outcome] = self.outcomes.get(outcome, 0) + 1


class PageCrawler:
    """Drives address discovery page by page into the IngestionController."""

    def __init__(
        self,
        listing: ListingSource,
        controller: IngestionController,
        index: CompilerVersionIndex,
        update: bool = False,
        on_page: Optional[Callable[[ContractPage], None]] = None,
        on_outcome: Optional[Callable[[str, IngestionOutcome], None]] = None,
    ):
        self.listing = listing
        self.controller = controller
        self.index = index
        self.update = update
        self._on_page = on_page
        self._on_outcome = on_outcome

    async def crawl_page(self, page: int, result: Optional[CrawlResult] = None) -> tuple[ContractPage, CrawlResult]:
        """Visit one page; stops at the first STOP outcome."""
        result = result if result is not None else CrawlResult()

        contract_page = await self.listing.fetch_page(page)
        result.pages_visited.append(page)
        logger.info(f"Loaded page {page} ({len(contract_page.addresses)} addresses, {contract_page.total_pages} total)")
        if self._on_page is not None:
            self._on_page(contract_page)

        for address in contract_page.addresses:
            outcome = await self.controller.ingest(address, self.index, update=self.update)
            result.record(outcome)
            if self._on_outcome is not None:
                self._on_outcome(address, outcome)
            if outcome is IngestionOutcome.STOP:
                result.stopped = True
                break

        return contract_page, result

    async def crawl(self, down: int, up: UpperBound) -> CrawlResult:
        """Visit pages `down..up` (inclusive); "latest" follows each page's footer."""
        result = CrawlResult()
        page = down
        while True:
            contract_page, _ = await self.crawl_page(page, result)
            if result.stopped:
                logger.info(f"Crawl stopped on page {page}")
                break

            bound = contract_page.total_pages if up == LATEST else up
            if page >= bound:
                break
            page += 1
        return result
