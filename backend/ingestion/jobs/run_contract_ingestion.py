from __future__ import annotations

"""Contract ingestion entry point: discover -> reconcile -> store.

STRICT:
- Inserts verified contracts only; never updates stored rows.
- Any reconciliation failure aborts the run with exit status 1.
- In --update mode, reaching a stored contract ends the run with status 0.

Run:
  python ingestion/jobs/run_contract_ingestion.py --pages 1..latest --update
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

# Ensure `backend/` is on sys.path so `import app...` works when run from repo root.
BASE_DIR = Path(__file__).resolve().parents[2]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from ingestion.core.adapter import ContractPage  # noqa: E402
from ingestion.core.crawler import CrawlResult, parse_page_range  # noqa: E402
from ingestion.core.errors import ContractIngestionError  # noqa: E402
from ingestion.core.ingestion_controller import IngestionOutcome  # noqa: E402
from ingestion.core.pipeline import open_pipeline  # noqa: E402
from ingestion.core.settings import IngestionSettings  # noqa: E402


UTC = timezone.utc
VERSION = "0.1.0"
logger = logging.getLogger("vci.ingestion")
logger.setLevel(logging.INFO)

# Ensure logs are visible when run from cron / console.
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def _log(event: dict) -> None:
    # Structured logs only; never log contract sources.
    logger.info(json.dumps(event, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run_contract_ingestion",
        description="Ingest verified contracts from etherscan + blockchair into the contract store.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--address", help="Address for addition")
    parser.add_argument("--page", type=int, help="Page with verified contracts at etherscan")
    parser.add_argument("--pages", help="Page range <down>..<up> or <down>..latest")
    parser.add_argument(
        "--update",
        action="store_true",
        help="Fetch from etherscan while contracts do not exist; stop at the first stored one",
    )
    return parser


def _log_page(page: ContractPage) -> None:
    _log(
        {
            "event": "ingestion_page",
            "page": page.page,
            "address_count": len(page.addresses),
            "total_pages": page.total_pages,
        }
    )


def _log_outcome(address: str, outcome: IngestionOutcome) -> None:
    _log({"event": "ingestion_address", "address": address, "outcome": outcome.value})


def _summary(result: CrawlResult) -> dict:
    return {
        "pages_visited": len(result.pages_visited),
        "added_count": result.outcomes.get(IngestionOutcome.ADDED, 0),
        "existing_count": result.outcomes.get(IngestionOutcome.ALREADY_EXISTS, 0),
        "stopped": result.stopped,
    }


async def run(args: argparse.Namespace, settings: IngestionSettings, **pipeline_kwargs) -> int:
    # Validate the range before any network traffic.
    page_range = parse_page_range(args.pages) if args.pages else None

    async with open_pipeline(settings, **pipeline_kwargs) as pipeline:
        if args.address:
            outcome = await pipeline.controller.ingest(args.address, pipeline.index, update=args.update)
            _log_outcome(args.address.lower(), outcome)
            if outcome is IngestionOutcome.STOP:
                return 0

        crawler = pipeline.crawler(update=args.update, on_page=_log_page, on_outcome=_log_outcome)

        if args.page:
            _, result = await crawler.crawl_page(args.page)
            _log({"event": "ingestion_page_summary", "page": args.page, **_summary(result)})
            if result.stopped:
                return 0

        if page_range is not None:
            down, up = page_range
            result = await crawler.crawl(down, up)
            _log({"event": "ingestion_pages_summary", "down": down, "up": up, **_summary(result)})

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    started_at = datetime.now(tz=UTC).isoformat()

    try:
        settings = IngestionSettings.from_env()
        status = asyncio.run(run(args, settings))
    except ContractIngestionError as e:
        _log(
            {
                "event": "ingestion_failed",
                "started_at": started_at,
                "error_type": type(e).__name__,
                "message": str(e),
            }
        )
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unhandled error in contract ingestion")
        return 1

    _log({"event": "ingestion_run_finished", "started_at": started_at, "status": status})
    return status


if __name__ == "__main__":
    raise SystemExit(main())
