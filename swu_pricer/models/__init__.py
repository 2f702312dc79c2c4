"""
Models package — export the card, price and marketplace models.
"""

from swu_pricer.models.card import CardRecord, PricedCard, PricePoint
from swu_pricer.models.marketplace import (
    PricePointEntry,
    ProductDetails,
    SearchProduct,
    SearchResponse,
)

__all__ = [
    "CardRecord",
    "PricePoint",
    "PricePointEntry",
    "PricedCard",
    "ProductDetails",
    "SearchProduct",
    "SearchResponse",
]
