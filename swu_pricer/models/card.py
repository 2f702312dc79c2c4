"""
SWU Price Sync — Card & Price Models

CardRecord is one printing from the card catalog. A (card_name,
is_hyperspace) pair identifies a variant within a set.

All money values use Decimal, never float.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class CardRecord(BaseModel):
    """A single card printing as listed by the catalog API."""

    card_number: int = Field(..., gt=0, description="Collector number within the set")
    card_name: str = Field(..., description="Title, plus ' - subtitle' when the card has one")
    card_type: str = Field(default="", description="Unit, Leader, Event, ...")
    is_hyperspace: bool = Field(default=False, description="Alternate-art hyperspace printing")
    is_showcase: bool = Field(default=False)
    rarity: str = Field(default="", description="Common, Uncommon, Rare, Legendary, Special")


class PricePoint(BaseModel):
    """Normal and foil market price. A foil of 0 means no foil listing was found."""

    normal: Decimal = Decimal("0")
    foil: Decimal = Decimal("0")


class PricedCard(BaseModel):
    """A card with its resolved marketplace product and both price sets."""

    card: CardRecord
    product_id: int | None = None
    price_usd: PricePoint = Field(default_factory=PricePoint)
    price_target: PricePoint = Field(default_factory=PricePoint)
