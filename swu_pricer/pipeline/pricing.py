"""
SWU Price Sync — Card Pricing Pipeline

Per card: wait card_number x REQUEST_DELAY_MS_PER_CARD, resolve the TCGplayer
product, fetch its prices, convert both to the target currency. Every card is
priced whatever its rarity; the price report filters rarities afterwards, the
catalog batch needs them all.

All cards are priced concurrently with asyncio.gather. The delay only offsets
each card's first request to keep TCGplayer from rejecting a burst; it does
not serialize the fan-out. Results come back in catalog order. If one card
fails, the cards still in flight are cancelled before the error propagates.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import structlog

from swu_pricer.config import settings
from swu_pricer.models import CardRecord, PricedCard, PricePoint
from swu_pricer.pipeline.tcgplayer import TCGPlayerClient
from swu_pricer.utils.forex import ExchangeRateConverter

logger = structlog.get_logger(__name__)


class CardPricer:
    """
    Prices catalog cards against TCGplayer.

    Usage:
        async with TCGPlayerClient(anomalies=anomalies) as tcgplayer:
            pricer = CardPricer(tcgplayer, ExchangeRateConverter())
            priced = await pricer.price_catalog(cards)
    """

    def __init__(
        self,
        tcgplayer: TCGPlayerClient,
        converter: ExchangeRateConverter,
        delay_ms_per_card: int | None = None,
    ):
        self.tcgplayer = tcgplayer
        self.converter = converter
        self._delay_ms_per_card = (
            delay_ms_per_card if delay_ms_per_card is not None else settings.REQUEST_DELAY_MS_PER_CARD
        )

    async def _convert(self, price: PricePoint) -> PricePoint:
        return PricePoint(
            normal=await self.converter.to_target_currency(price.normal),
            foil=await self.converter.to_target_currency(price.foil),
        )

    async def price_card(self, card: CardRecord) -> PricedCard:
        """Resolve and price a single card. No marketplace match means zero prices."""
        await asyncio.sleep(card.card_number * self._delay_ms_per_card / 1000)

        price_usd = PricePoint()
        product_id = await self.tcgplayer.resolve_product(card.card_name, card.is_hyperspace)
        if product_id is not None:
            price_usd = await self.tcgplayer.fetch_price(product_id)

        priced = PricedCard(
            card=card,
            product_id=product_id,
            price_usd=price_usd,
            price_target=await self._convert(price_usd),
        )

        logger.debug(
            "card_priced",
            card_number=card.card_number,
            card_name=card.card_name,
            is_hyperspace=card.is_hyperspace,
            product_id=product_id,
            normal_usd=str(price_usd.normal),
            foil_usd=str(price_usd.foil),
        )
        return priced

    async def price_catalog(self, cards: list[CardRecord]) -> list[PricedCard]:
        """Price every card concurrently; output order matches input order."""
        logger.info("pricing_started", total_cards=len(cards))

        tasks = [asyncio.ensure_future(self.price_card(card)) for card in cards]
        try:
            priced = await asyncio.gather(*tasks)
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error("pricing_aborted", total_cards=len(cards), cancelled=len(pending))
            raise

        logger.info(
            "pricing_complete",
            total_cards=len(priced),
            matched=sum(1 for p in priced if p.product_id is not None),
            total_normal_usd=str(sum((p.price_usd.normal for p in priced), Decimal("0"))),
        )
        return list(priced)
