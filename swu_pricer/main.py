"""
SWU Price Sync — Application Entrypoint

Configures structlog, prices one expansion and writes the configured output
(price report or Square catalog batch).

Run via:
    python -m swu_pricer.main
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from swu_pricer import __version__
from swu_pricer.config import OutputMode, settings
from swu_pricer.engine.anomalies import AnomalyLog
from swu_pricer.engine.catalog_batch import build_catalog_batch
from swu_pricer.engine.report import build_price_report
from swu_pricer.models import PricedCard
from swu_pricer.pipeline.catalog import CardCatalogClient
from swu_pricer.pipeline.pricing import CardPricer
from swu_pricer.pipeline.tcgplayer import TCGPlayerClient
from swu_pricer.utils.forex import ExchangeRateConverter
from swu_pricer.utils.writer import write_json


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def build_output(
    priced: list[PricedCard],
    mode: OutputMode,
    anomalies: AnomalyLog,
) -> Any:
    if mode is OutputMode.CATALOG_BATCH:
        return build_catalog_batch(priced, anomalies)
    return build_price_report(priced)


async def run(
    set_id: int | None = None,
    mode: OutputMode | None = None,
    output_path: str | Path | None = None,
) -> AnomalyLog:
    """
    One full pricing run: list, price, build, write.

    Hard failures (catalog or search HTTP errors, an unavailable exchange
    rate, a failed price fallback) propagate. Soft failures are returned in
    the AnomalyLog.
    """
    logger = structlog.get_logger(__name__)

    set_id = set_id if set_id is not None else settings.SET_ID
    mode = mode or settings.OUTPUT_MODE
    output_path = output_path or settings.OUTPUT_PATH

    anomalies = AnomalyLog()
    converter = ExchangeRateConverter()

    async with CardCatalogClient() as catalog:
        cards = await catalog.list_cards(set_id)

    async with TCGPlayerClient(anomalies=anomalies) as tcgplayer:
        pricer = CardPricer(tcgplayer, converter)
        priced = await pricer.price_catalog(cards)

    write_json(output_path, build_output(priced, mode, anomalies))

    logger.info(
        "run_complete",
        set_id=set_id,
        mode=mode.value,
        output_path=str(output_path),
        cards=len(cards),
        exchange_rate=str(converter.cached_rate),
        anomalies=anomalies.summary(),
    )
    return anomalies


async def main() -> None:
    _configure_logging(log_level="INFO")
    logger = structlog.get_logger(__name__)

    logger.info(
        "swu_price_sync_startup",
        version=__version__,
        set_id=settings.SET_ID,
        set_name=settings.SET_NAME,
        mode=settings.OUTPUT_MODE.value,
        currency=settings.TARGET_CURRENCY,
    )

    try:
        await run()
    except Exception as e:
        logger.error(
            "swu_price_sync_fatal_error",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    asyncio.run(main())
