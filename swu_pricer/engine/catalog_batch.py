"""
SWU Price Sync — Square Catalog Batch

Builds the body for Square's POST /v2/catalog/batch-upsert. Each base card
becomes one ITEM with up to four ITEM_VARIATIONs:

    regular-nonfoil, regular-foil, hyperspace-nonfoil, hyperspace-foil

Hyperspace printings are not items of their own; they are folded into the
base card with the same (case-insensitive) name. A USD foil price of 0 means no
foil listing was found, so the non-foil price of the same printing is used.

Square accepts at most 1000 objects per batch. Items and their variations
each count as one object, and an item is never split across batches.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any

import structlog

from swu_pricer.config import settings
from swu_pricer.engine.anomalies import AnomalyKind, AnomalyLog
from swu_pricer.models import PricedCard

logger = structlog.get_logger(__name__)

_MINOR_UNITS = Decimal("100")


def generate_product_id(card_name: str) -> str:
    """
    Square client-side object id for a card name.

    Lowercased, punctuation other than hyphens dropped, spaces replaced by
    hyphens, prefixed with '#'. Runs of hyphens are kept as-is:

        >>> generate_product_id("Bazine Netal - Spy for the First Order")
        '#bazine-netal---spy-for-the-first-order'
    """
    kept = "".join(ch for ch in card_name.lower() if ch.isalnum() or ch in " -")
    return "#" + kept.replace(" ", "-")


def to_minor_units(amount: Decimal) -> int:
    return int((amount * _MINOR_UNITS).to_integral_value())


def _variation(
    item_id: str,
    suffix: str,
    name: str,
    amount: Decimal,
    currency: str,
) -> dict[str, Any]:
    return {
        "type": "ITEM_VARIATION",
        "id": f"{item_id}-{suffix}",
        "present_at_all_locations": True,
        "item_variation_data": {
            "item_id": item_id,
            "name": name,
            "pricing_type": "FIXED_PRICING",
            "price_money": {
                "amount": to_minor_units(amount),
                "currency": currency,
            },
        },
    }


def _printing_variations(
    item_id: str,
    printing: str,
    label: str,
    priced: PricedCard,
    currency: str,
) -> list[dict[str, Any]]:
    price = priced.price_target
    # No foil listing in USD, not a foil price that floored to 0
    foil = price.foil if priced.price_usd.foil > 0 else price.normal
    return [
        _variation(item_id, f"{printing}-nonfoil", label, price.normal, currency),
        _variation(item_id, f"{printing}-foil", f"{label} Foil", foil, currency),
    ]


def build_catalog_item(
    base: PricedCard,
    hyperspace: PricedCard | None,
    category_id: str,
    currency: str,
) -> dict[str, Any]:
    """One ITEM object with its variations, priced in target-currency minor units."""
    item_id = generate_product_id(base.card.card_name)

    variations = _printing_variations(item_id, "regular", "Regular", base, currency)
    if hyperspace is not None:
        variations += _printing_variations(
            item_id, "hyperspace", "Hyperspace", hyperspace, currency
        )

    return {
        "type": "ITEM",
        "id": item_id,
        "present_at_all_locations": True,
        "item_data": {
            "name": base.card.card_name,
            "category_id": category_id,
            "variations": variations,
        },
    }


def _object_count(item: dict[str, Any]) -> int:
    return 1 + len(item["item_data"]["variations"])


def split_batches(items: list[dict[str, Any]], max_objects: int) -> list[dict[str, Any]]:
    """Group items into batches of at most max_objects objects each."""
    batches: list[dict[str, Any]] = []
    current: list[dict[str, Any]] = []
    current_count = 0

    for item in items:
        count = _object_count(item)
        if current and current_count + count > max_objects:
            batches.append({"objects": current})
            current, current_count = [], 0
        current.append(item)
        current_count += count

    if current:
        batches.append({"objects": current})
    return batches


def build_catalog_batch(
    priced_cards: list[PricedCard],
    anomalies: AnomalyLog,
    category_id: str | None = None,
    currency: str | None = None,
    max_objects: int | None = None,
) -> dict[str, Any]:
    """
    Square batch-upsert body for a priced set.

    Args:
        priced_cards: Output of the pricing pipeline, in catalog order.
        anomalies: Run anomaly log; base cards with no hyperspace sibling are
            recorded here and keep only their regular variations. A later
            base card with an item id already used is recorded and skipped.
        category_id: Square category for every item (default settings).
        currency: Currency code of the target prices (default settings).
        max_objects: Object limit per batch (default settings).

    Returns:
        {"idempotency_key": ..., "batches": [{"objects": [...]}, ...]}
    """
    category_id = category_id or settings.CATALOG_CATEGORY_ID
    currency = (currency or settings.TARGET_CURRENCY).upper()
    max_objects = max_objects or settings.CATALOG_BATCH_MAX_OBJECTS

    hyperspace_by_name: dict[str, PricedCard] = {}
    for priced in priced_cards:
        if priced.card.is_hyperspace:
            hyperspace_by_name.setdefault(priced.card.card_name.lower(), priced)

    items: list[dict[str, Any]] = []
    seen_ids: set[str] = set()
    for priced in priced_cards:
        if priced.card.is_hyperspace:
            continue

        item_id = generate_product_id(priced.card.card_name)
        if item_id in seen_ids:
            # Square rejects a batch that repeats an object id
            anomalies.record(
                AnomalyKind.DUPLICATE_ITEM,
                f"Skipping second printing with the same item id: {priced.card.card_name}",
                item_id=item_id,
                card_number=priced.card.card_number,
            )
            continue
        seen_ids.add(item_id)

        hyperspace = hyperspace_by_name.get(priced.card.card_name.lower())
        if hyperspace is None:
            anomalies.record(
                AnomalyKind.HYPERSPACE_MISSING,
                f"No hyperspace variant found for: {priced.card.card_name}",
                card_name=priced.card.card_name,
                card_number=priced.card.card_number,
            )

        items.append(build_catalog_item(priced, hyperspace, category_id, currency))

    batches = split_batches(items, max_objects)
    logger.info(
        "catalog_batch_built",
        items=len(items),
        batches=len(batches),
        category_id=category_id,
    )
    return {
        "idempotency_key": str(uuid.uuid4()),
        "batches": batches,
    }
