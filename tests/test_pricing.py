"""
Tests for the card pricing pipeline (swu_pricer/pipeline/pricing.py).

TCGplayer and the exchange rate are mocked over HTTP with respx; the
per-card delay is patched out except where the delay itself is under test.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from swu_pricer.engine.anomalies import AnomalyKind, AnomalyLog
from swu_pricer.errors import ExchangeRateUnavailableError
from swu_pricer.pipeline.pricing import CardPricer
from swu_pricer.pipeline.tcgplayer import TCGPlayerClient
from swu_pricer.utils.forex import ExchangeRateConverter

SEARCH_URL = "https://data.tcgplayer.com/autocomplete"
RATE_URL = "https://open.er-api.com/v6/latest/USD"
PRICE_POINTS_PATTERN = r"https://mpapi\.tcgplayer\.com/v2/product/(?P<product_id>\d+)/pricepoints"

PRODUCTS = {
    "Cad Bane - Impatient Scoundrel": 100,
    "Cad Bane - Impatient Scoundrel (Hyperspace)": 101,
    "Moff Gideon - Formidable Commander": 200,
    "Bounty Hunter Crew": 300,
}
PRICES = {
    100: [{"printingType": "Normal", "marketPrice": 10.00}, {"printingType": "Foil", "marketPrice": 20.00}],
    101: [{"printingType": "Normal", "marketPrice": 30.00}, {"printingType": "Foil", "marketPrice": 60.00}],
    200: [{"printingType": "Normal", "marketPrice": 1.00}],
    300: [{"printingType": "Normal", "marketPrice": 2.00}, {"printingType": "Foil", "marketPrice": 5.00}],
}


def _price_points(request: httpx.Request, product_id: str) -> httpx.Response:
    return httpx.Response(200, json=PRICES[int(product_id)])


@pytest.fixture
def search_handler(search_product_payload):
    def _search(request: httpx.Request) -> httpx.Response:
        q = request.url.params["q"]
        if q not in PRODUCTS:
            return httpx.Response(200, json={"products": []})
        return httpx.Response(200, json={"products": [search_product_payload(PRODUCTS[q], q)]})

    return _search


@pytest.fixture
def mock_apis(search_handler):
    def _mock(mock: respx.MockRouter, rate: float = 1.5) -> dict[str, respx.Route]:
        return {
            "search": mock.get(SEARCH_URL).mock(side_effect=search_handler),
            "prices": mock.get(url__regex=PRICE_POINTS_PATTERN).mock(side_effect=_price_points),
            "rate": mock.get(RATE_URL).mock(
                return_value=httpx.Response(200, json={"rates": {"AUD": rate}})
            ),
        }

    return _mock


class _StalledTCGPlayer:
    """Stand-in client: one card fails at search, the others wait forever."""

    def __init__(self, failing_name: str):
        self.failing_name = failing_name
        self.cancelled: list[str] = []
        self._never = asyncio.Event()

    async def resolve_product(self, card_name: str, is_hyperspace: bool) -> int | None:
        if card_name == self.failing_name:
            raise httpx.ConnectError("search unavailable")
        try:
            await self._never.wait()
        except asyncio.CancelledError:
            self.cancelled.append(card_name)
            raise
        return None


@pytest.mark.asyncio
async def test_price_catalog_preserves_catalog_order(make_card, mock_apis) -> None:
    cards = [
        make_card(card_number=3, card_name="Moff Gideon - Formidable Commander", rarity="Legendary"),
        make_card(card_number=1, card_name="Cad Bane - Impatient Scoundrel"),
        make_card(card_number=250, card_name="Cad Bane - Impatient Scoundrel", is_hyperspace=True),
    ]
    anomalies = AnomalyLog()

    with respx.mock as mock, patch("swu_pricer.pipeline.pricing.asyncio.sleep", new=AsyncMock()):
        routes = mock_apis(mock)
        async with TCGPlayerClient(anomalies=anomalies, name_corrections={}) as tcgplayer:
            pricer = CardPricer(tcgplayer, ExchangeRateConverter(currency="AUD"))
            priced = await pricer.price_catalog(cards)

    assert [p.card.card_number for p in priced] == [3, 1, 250]
    assert [p.product_id for p in priced] == [200, 100, 101]

    gideon, cad, cad_hs = priced
    assert cad.price_usd.normal == Decimal("10.0")
    assert cad.price_target.normal == Decimal("16.50")   # 10 x 1.5 x 1.1
    assert cad.price_target.foil == Decimal("33.00")     # 20 x 1.5 x 1.1
    assert cad_hs.price_target.normal == Decimal("49.50")
    assert gideon.price_usd.foil == Decimal("0")
    assert gideon.price_target.normal == Decimal("1.50")  # 1.65 floored

    assert routes["rate"].call_count == 1
    assert routes["search"].call_count == 3
    assert len(anomalies.of_kind(AnomalyKind.PRICE_MISSING_FOIL)) == 1


@pytest.mark.asyncio
async def test_every_rarity_is_priced(make_card, mock_apis) -> None:
    card = make_card(card_number=5, card_name="Bounty Hunter Crew", rarity="Common")

    with respx.mock as mock, patch("swu_pricer.pipeline.pricing.asyncio.sleep", new=AsyncMock()):
        routes = mock_apis(mock)
        async with TCGPlayerClient(name_corrections={}) as tcgplayer:
            pricer = CardPricer(tcgplayer, ExchangeRateConverter(currency="AUD"))
            priced = await pricer.price_card(card)

    assert priced.product_id == 300
    assert priced.price_usd.normal == Decimal("2.0")
    assert priced.price_target.normal == Decimal("3.00")  # 3.30 floored
    assert priced.price_target.foil == Decimal("8.00")    # 8.25 floored
    assert routes["search"].call_count == 1


@pytest.mark.asyncio
async def test_unmatched_card_gets_zero_price(make_card, mock_apis) -> None:
    card = make_card(card_number=2, card_name="Not On TCGplayer")
    anomalies = AnomalyLog()

    with respx.mock(assert_all_called=False) as mock, patch(
        "swu_pricer.pipeline.pricing.asyncio.sleep", new=AsyncMock()
    ):
        routes = mock_apis(mock)
        async with TCGPlayerClient(anomalies=anomalies, name_corrections={}) as tcgplayer:
            pricer = CardPricer(tcgplayer, ExchangeRateConverter(currency="AUD"))
            priced = await pricer.price_card(card)

    assert priced.product_id is None
    assert priced.price_target.normal == Decimal("0.00")
    assert routes["prices"].call_count == 0
    assert len(anomalies.of_kind(AnomalyKind.PRODUCT_NOT_FOUND)) == 1


@pytest.mark.asyncio
async def test_delay_is_proportional_to_card_number(make_card, mock_apis) -> None:
    card = make_card(card_number=42, card_name="Cad Bane - Impatient Scoundrel")
    sleep = AsyncMock()

    with respx.mock as mock, patch("swu_pricer.pipeline.pricing.asyncio.sleep", new=sleep):
        mock_apis(mock)
        async with TCGPlayerClient(name_corrections={}) as tcgplayer:
            pricer = CardPricer(tcgplayer, ExchangeRateConverter(currency="AUD"), delay_ms_per_card=10)
            await pricer.price_card(card)

    sleep.assert_awaited_once_with(0.42)


@pytest.mark.asyncio
async def test_exchange_rate_failure_is_fatal(make_card, search_handler) -> None:
    card = make_card(card_number=1, card_name="Cad Bane - Impatient Scoundrel")

    with respx.mock as mock, patch("swu_pricer.pipeline.pricing.asyncio.sleep", new=AsyncMock()):
        mock.get(SEARCH_URL).mock(side_effect=search_handler)
        mock.get(url__regex=PRICE_POINTS_PATTERN).mock(side_effect=_price_points)
        mock.get(RATE_URL).mock(return_value=httpx.Response(502))

        async with TCGPlayerClient(name_corrections={}) as tcgplayer:
            pricer = CardPricer(tcgplayer, ExchangeRateConverter(currency="AUD"))
            with pytest.raises(ExchangeRateUnavailableError):
                await pricer.price_catalog([card])


@pytest.mark.asyncio
async def test_failed_card_cancels_cards_still_in_flight(make_card) -> None:
    cards = [
        make_card(card_number=1, card_name="Cad Bane - Impatient Scoundrel"),
        make_card(card_number=2, card_name="Broken Card"),
        make_card(card_number=3, card_name="Moff Gideon - Formidable Commander"),
    ]
    tcgplayer = _StalledTCGPlayer(failing_name="Broken Card")

    with patch("swu_pricer.pipeline.pricing.asyncio.sleep", new=AsyncMock()):
        pricer = CardPricer(tcgplayer, ExchangeRateConverter(currency="AUD"))
        with pytest.raises(httpx.ConnectError):
            await pricer.price_catalog(cards)

    assert sorted(tcgplayer.cancelled) == [
        "Cad Bane - Impatient Scoundrel",
        "Moff Gideon - Formidable Commander",
    ]
