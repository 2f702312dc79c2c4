"""
SWU Price Sync — TCGplayer Marketplace Client

Resolves a TCGplayer product id for a card variant and reads its market
prices. Three public (unauthenticated) TCGplayer hosts are involved:

- data.tcgplayer.com/autocomplete         product search
- mpapi.tcgplayer.com/v2/product/{id}/pricepoints
                                          Normal + Foil market prices
- mp-search-api.tcgplayer.com/v1/product/{id}/details
                                          single market price, used only
                                          when the price-points call fails

Soft failures are recorded on the AnomalyLog and never raised. There is no
retry beyond the single details fallback.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter

from swu_pricer.config import settings
from swu_pricer.engine.anomalies import AnomalyKind, AnomalyLog
from swu_pricer.engine.matching import build_search_phrase, select_product
from swu_pricer.errors import PricingError, PriceUnavailableError
from swu_pricer.models import (
    PricePoint,
    PricePointEntry,
    ProductDetails,
    SearchProduct,
    SearchResponse,
)

logger = structlog.get_logger(__name__)

NORMAL_PRINTING = "Normal"
FOIL_PRINTING = "Foil"

_price_points_adapter = TypeAdapter(list[PricePointEntry])


class TCGPlayerClient:
    """
    Async client for TCGplayer product search and pricing.

    Usage:
        async with TCGPlayerClient(anomalies=anomalies) as client:
            product_id = await client.resolve_product("Cad Bane - Impatient Scoundrel", False)
            price = await client.fetch_price(product_id)
    """

    def __init__(
        self,
        anomalies: AnomalyLog | None = None,
        search_url: str | None = None,
        price_points_url: str | None = None,
        details_url: str | None = None,
        name_corrections: dict[str, str] | None = None,
    ):
        self.anomalies = anomalies if anomalies is not None else AnomalyLog()
        self._search_url = search_url or settings.TCGPLAYER_SEARCH_URL
        self._price_points_url = price_points_url or settings.TCGPLAYER_PRICE_POINTS_URL
        self._details_url = details_url or settings.TCGPLAYER_DETAILS_URL
        self._name_corrections = (
            name_corrections if name_corrections is not None else settings.NAME_CORRECTIONS
        )
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> TCGPlayerClient:
        self._client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET and decode JSON. Errors are logged and propagate."""
        assert self._client is not None, "Client not initialized. Use 'async with'."

        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("tcgplayer_http_error", status_code=e.response.status_code, url=url)
            raise
        except httpx.RequestError as e:
            logger.error("tcgplayer_request_error", error=str(e), url=url)
            raise

    # -----------------------------------------------------------------------
    # Product search
    # -----------------------------------------------------------------------

    async def search_products(self, search_phrase: str) -> list[SearchProduct]:
        """Run one autocomplete search. Each call gets a fresh session id."""
        data = await self._get_json(
            f"{self._search_url}/autocomplete",
            params={
                "q": search_phrase,
                "session-id": str(uuid.uuid4()),
                "product-line-affinity": settings.PRODUCT_LINE_NAME,
                "algorithm": settings.SEARCH_ALGORITHM,
            },
        )
        return SearchResponse.model_validate(data).products

    async def resolve_product(self, card_name: str, is_hyperspace: bool) -> int | None:
        """
        Resolve the TCGplayer product id for a card variant.

        Args:
            card_name: Catalog name, "Title - Subtitle".
            is_hyperspace: Look up the hyperspace printing instead of the base one.

        Returns:
            Product id, or None when the search returned no candidates.
        """
        search_phrase = build_search_phrase(card_name, is_hyperspace, self._name_corrections)
        products = await self.search_products(search_phrase)

        product = select_product(
            products,
            search_phrase,
            product_line_name=settings.PRODUCT_LINE_NAME,
            set_name=settings.SET_NAME,
        )
        if product is None:
            self.anomalies.record(
                AnomalyKind.PRODUCT_NOT_FOUND,
                f"No TCGplayer product found for: {search_phrase}",
                search_phrase=search_phrase,
                card_name=card_name,
                is_hyperspace=is_hyperspace,
            )
            return None

        logger.debug(
            "tcgplayer_product_resolved",
            search_phrase=search_phrase,
            product_id=product.product_id,
            product_name=product.product_name,
        )
        return product.product_id

    # -----------------------------------------------------------------------
    # Prices
    # -----------------------------------------------------------------------

    async def fetch_price_points(self, product_id: int) -> PricePoint:
        """
        Normal and foil market prices from the price-points endpoint.

        A missing Foil entry is a soft failure (foil = 0). A missing Normal
        entry raises PriceUnavailableError.
        """
        data = await self._get_json(f"{self._price_points_url}/product/{product_id}/pricepoints")
        entries = _price_points_adapter.validate_python(data)
        by_printing = {entry.printingType: entry.marketPrice for entry in entries}

        normal = by_printing.get(NORMAL_PRINTING)
        if normal is None:
            self.anomalies.record(
                AnomalyKind.PRICE_MISSING_NORMAL,
                f"No Normal market price for product {product_id}",
                product_id=product_id,
                printings=sorted(by_printing),
            )
            raise PriceUnavailableError(product_id, "pricepoints")

        foil = by_printing.get(FOIL_PRINTING)
        if foil is None:
            self.anomalies.record(
                AnomalyKind.PRICE_MISSING_FOIL,
                f"No Foil market price for product {product_id}",
                product_id=product_id,
            )
            foil = Decimal("0")

        return PricePoint(normal=normal, foil=foil)

    async def fetch_price_details(self, product_id: int) -> PricePoint:
        """Market price from the product details endpoint. Foil is always 0."""
        data = await self._get_json(f"{self._details_url}/product/{product_id}/details")
        details = ProductDetails.model_validate(data)

        if details.marketPrice is None:
            self.anomalies.record(
                AnomalyKind.PRICE_MISSING_NORMAL,
                f"No market price in details for product {product_id}",
                product_id=product_id,
            )
            return PricePoint()

        return PricePoint(normal=details.marketPrice, foil=Decimal("0"))

    async def fetch_price(self, product_id: int) -> PricePoint:
        """
        Price for a product: price points first, product details on any failure.

        Errors from the details call propagate.
        """
        try:
            return await self.fetch_price_points(product_id)
        except (httpx.HTTPError, ValueError, PricingError) as e:
            self.anomalies.record(
                AnomalyKind.PRICE_FALLBACK_USED,
                f"Price points failed for product {product_id}, using details",
                product_id=product_id,
                error=str(e),
                error_type=type(e).__name__,
            )

        return await self.fetch_price_details(product_id)
