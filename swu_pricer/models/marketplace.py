"""
SWU Price Sync — TCGplayer Response Models

TCGplayer's search API uses kebab-case keys; the price APIs use camelCase.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _parse_decimal(v: Any) -> Decimal | None:
    if v is None or v == "":
        return None
    try:
        return Decimal(str(v))
    except (InvalidOperation, ValueError):
        return None


class SearchProduct(BaseModel):
    """One candidate from the autocomplete search endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="product-id")
    product_name: str = Field(default="", alias="product-name")
    product_line_name: str = Field(default="", alias="product-line-name")
    set_name: str = Field(default="", alias="set-name")
    score: float = 0.0


class SearchResponse(BaseModel):
    products: list[SearchProduct] = Field(default_factory=list)


class PricePointEntry(BaseModel):
    """One printing of a product from the price-points endpoint."""

    printingType: str
    marketPrice: Decimal | None = None

    @field_validator("marketPrice", mode="before")
    @classmethod
    def parse_decimal(cls, v: Any) -> Decimal | None:
        """Safely convert price values to Decimal. Never use float for money."""
        return _parse_decimal(v)


class ProductDetails(BaseModel):
    """Subset of the product details endpoint used as the price fallback."""

    productId: int | None = None
    productName: str | None = None
    marketPrice: Decimal | None = None

    @field_validator("marketPrice", mode="before")
    @classmethod
    def parse_decimal(cls, v: Any) -> Decimal | None:
        return _parse_decimal(v)
