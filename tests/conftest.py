"""
SWU Price Sync — Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- Card / priced-card factories
- Mock API payloads for the catalog and TCGplayer endpoints
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable

import pytest

from swu_pricer.models import CardRecord, PricedCard, PricePoint


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_card() -> Callable[..., CardRecord]:
    def _make(
        card_number: int = 1,
        card_name: str = "Cad Bane - Impatient Scoundrel",
        rarity: str = "Rare",
        is_hyperspace: bool = False,
        card_type: str = "Unit",
    ) -> CardRecord:
        return CardRecord(
            card_number=card_number,
            card_name=card_name,
            card_type=card_type,
            is_hyperspace=is_hyperspace,
            is_showcase=False,
            rarity=rarity,
        )

    return _make


@pytest.fixture
def make_priced(make_card: Callable[..., CardRecord]) -> Callable[..., PricedCard]:
    def _make(
        card_name: str = "Cad Bane - Impatient Scoundrel",
        is_hyperspace: bool = False,
        normal_usd: str = "0",
        foil_usd: str = "0",
        normal_target: str = "0",
        foil_target: str = "0",
        rarity: str = "Rare",
        card_number: int = 1,
        product_id: int | None = 1000,
    ) -> PricedCard:
        return PricedCard(
            card=make_card(
                card_number=card_number,
                card_name=card_name,
                rarity=rarity,
                is_hyperspace=is_hyperspace,
            ),
            product_id=product_id,
            price_usd=PricePoint(normal=Decimal(normal_usd), foil=Decimal(foil_usd)),
            price_target=PricePoint(normal=Decimal(normal_target), foil=Decimal(foil_target)),
        )

    return _make


# ---------------------------------------------------------------------------
# Mock API payloads
# ---------------------------------------------------------------------------


def _catalog_card(
    card_number: int,
    title: str,
    subtitle: str | None = None,
    hyperspace: bool = False,
    rarity: str = "Rare",
    card_type: str = "Unit",
) -> dict[str, Any]:
    return {
        "id": card_number,
        "attributes": {
            "title": title,
            "subtitle": subtitle,
            "cardNumber": card_number,
            "hyperspace": hyperspace,
            "showcase": False,
            "rarity": {"data": {"id": 3, "attributes": {"name": rarity}}},
            "type": {"data": {"id": 1, "attributes": {"name": card_type}}},
        },
    }


def _catalog_page(cards: list[dict[str, Any]], page: int, page_count: int) -> dict[str, Any]:
    return {
        "data": cards,
        "meta": {
            "pagination": {
                "page": page,
                "pageSize": 50,
                "pageCount": page_count,
                "total": len(cards) * page_count,
            }
        },
    }


def _search_product(
    product_id: int,
    name: str,
    score: float = 1.0,
    line: str = "Star Wars: Unlimited",
    set_name: str = "Shadows of the Galaxy",
) -> dict[str, Any]:
    return {
        "product-id": product_id,
        "product-name": name,
        "product-line-name": line,
        "set-name": set_name,
        "score": score,
    }


@pytest.fixture
def catalog_card_payload() -> Callable[..., dict[str, Any]]:
    """A single card as returned by the Strapi /cards listing."""
    return _catalog_card


@pytest.fixture
def catalog_page_payload() -> Callable[..., dict[str, Any]]:
    """One page of the Strapi /cards listing with its pagination meta."""
    return _catalog_page


@pytest.fixture
def search_product_payload() -> Callable[..., dict[str, Any]]:
    """One candidate from the TCGplayer autocomplete search."""
    return _search_product
