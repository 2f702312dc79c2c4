"""
SWU Price Sync — Price Report

Flat list of priced Rare and Legendary cards, most valuable (USD) first.

Every money column is a string with exactly two decimals, USD included:
marketplace prices are rounded half-up to the cent rather than emitted as
raw floats, so a 6.155 market price is reported as "6.16".
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from swu_pricer.config import settings
from swu_pricer.models import PricedCard

_CENTS = Decimal("0.01")


def _money(value: Decimal) -> str:
    return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def price_report_row(priced: PricedCard, currency: str) -> dict[str, Any]:
    """One report row. Target-currency keys are suffixed with e.g. 'Aud'."""
    suffix = currency.capitalize()
    card = priced.card
    return {
        "cardNumber": card.card_number,
        "cardName": card.card_name,
        "cardType": card.card_type,
        "isHyperspace": card.is_hyperspace,
        "isShowcase": card.is_showcase,
        "rarity": card.rarity,
        "tcgPlayerId": priced.product_id if priced.product_id is not None else "",
        "marketPriceUsd": _money(priced.price_usd.normal),
        "marketPriceFoilUsd": _money(priced.price_usd.foil),
        f"marketPrice{suffix}": _money(priced.price_target.normal),
        f"marketPriceFoil{suffix}": _money(priced.price_target.foil),
    }


def build_price_report(
    priced_cards: list[PricedCard],
    rarities: list[str] | None = None,
    currency: str | None = None,
) -> list[dict[str, Any]]:
    """
    Filter to the priced rarities and sort by USD normal price, descending.

    Args:
        priced_cards: Output of the pricing pipeline, in catalog order.
        rarities: Rarities to keep (default settings.PRICED_RARITIES).
        currency: Target currency code for the converted columns.

    Returns:
        JSON-ready report rows.
    """
    if rarities is None:
        rarities = settings.PRICED_RARITIES
    if currency is None:
        currency = settings.TARGET_CURRENCY

    kept = [p for p in priced_cards if p.card.rarity in rarities]
    kept.sort(key=lambda p: p.price_usd.normal, reverse=True)
    return [price_report_row(p, currency) for p in kept]
