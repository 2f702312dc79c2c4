"""
SWU Price Sync — Star Wars: Unlimited Card Catalog Client

Lists every card printing of an expansion from the official admin API
(a Strapi backend). The whole set is materialized before pricing starts.

Base URL: https://admin.starwarsunlimited.com/api
Pagination: pagination[page] + pagination[pageSize] (fixed at 50), until the
server-reported pageCount is reached.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field

from swu_pricer.config import settings
from swu_pricer.models import CardRecord

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Pydantic Response Models
# ---------------------------------------------------------------------------


class NamedAttributes(BaseModel):
    name: str = ""


class NamedData(BaseModel):
    attributes: NamedAttributes = Field(default_factory=NamedAttributes)


class Relation(BaseModel):
    """Strapi relation wrapper: {"data": {"attributes": {"name": ...}}}."""
    data: NamedData | None = None

    @property
    def name(self) -> str:
        return self.data.attributes.name if self.data else ""


class CardAttributes(BaseModel):
    title: str
    subtitle: str | None = None
    cardNumber: int
    hyperspace: bool = False
    showcase: bool = False
    rarity: Relation = Field(default_factory=Relation)
    type: Relation = Field(default_factory=Relation)


class CatalogCard(BaseModel):
    id: int | None = None
    attributes: CardAttributes

    def to_record(self) -> CardRecord:
        attrs = self.attributes
        card_name = attrs.title
        if attrs.subtitle:
            card_name = f"{attrs.title} - {attrs.subtitle}"
        return CardRecord(
            card_number=attrs.cardNumber,
            card_name=card_name,
            card_type=attrs.type.name,
            is_hyperspace=attrs.hyperspace,
            is_showcase=attrs.showcase,
            rarity=attrs.rarity.name,
        )


class Pagination(BaseModel):
    page: int = 1
    pageSize: int = 0
    pageCount: int = 0
    total: int = 0


class Meta(BaseModel):
    pagination: Pagination = Field(default_factory=Pagination)


class CardListResponse(BaseModel):
    """Paginated response from the /cards listing endpoint."""
    data: list[CatalogCard] = Field(default_factory=list)
    meta: Meta = Field(default_factory=Meta)


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


class CardCatalogClient:
    """
    Async client for the Star Wars: Unlimited card catalog.

    Usage:
        async with CardCatalogClient() as client:
            cards = await client.list_cards(8)
    """

    def __init__(
        self,
        base_url: str | None = None,
        page_size: int | None = None,
        rarity_ids: list[int] | None = None,
    ):
        self._base_url = base_url or settings.CATALOG_API_URL
        self._page_size = page_size or settings.CATALOG_PAGE_SIZE
        self._rarity_ids = rarity_ids if rarity_ids is not None else settings.CATALOG_RARITY_IDS
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> CardCatalogClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def _request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a GET request. Errors propagate; there is no retry."""
        assert self._client is not None, "Client not initialized. Use 'async with'."

        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "catalog_http_error",
                status_code=e.response.status_code,
                path=path,
            )
            raise
        except httpx.RequestError as e:
            logger.error("catalog_request_error", error=str(e), path=path)
            raise

    def _list_params(self, set_id: int, page: int) -> dict[str, Any]:
        params: dict[str, Any] = {
            "filters[$and][1][expansion][id][$in][0]": set_id,
            "pagination[page]": page,
            "pagination[pageSize]": self._page_size,
        }
        for i, rarity_id in enumerate(self._rarity_ids):
            params[f"filters[$and][2][rarity][id][$in][{i}]"] = rarity_id
        return params

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def list_cards(self, set_id: int) -> list[CardRecord]:
        """
        Fetch every card printing in an expansion, page by page.

        Args:
            set_id: Catalog expansion id (e.g., 8 for Shadows of the Galaxy).

        Returns:
            All CardRecords in catalog order.
        """
        logger.info("catalog_list_cards", set_id=set_id)

        cards: list[CardRecord] = []
        page = 1

        while True:
            data = await self._request("/cards", params=self._list_params(set_id, page))
            response = CardListResponse.model_validate(data)
            cards.extend(card.to_record() for card in response.data)

            page_count = response.meta.pagination.pageCount
            logger.debug(
                "catalog_list_cards_page",
                set_id=set_id,
                page=page,
                page_count=page_count,
                fetched_so_far=len(cards),
            )

            if page >= page_count:
                break
            page += 1

        logger.info("catalog_list_cards_complete", set_id=set_id, total_cards=len(cards))
        return cards
