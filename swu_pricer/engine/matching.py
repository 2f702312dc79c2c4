"""
SWU Price Sync — Marketplace Product Matching

TCGplayer's fuzzy ranking is unreliable for names with punctuation
("Bo-Katan Kryze - Princess in Exile", "Q'ira", ...), so candidates are
matched in two tiers:

1. Exact name match after stripping everything except letters, digits and
   spaces, AND same product line AND same expansion.
2. Otherwise the candidate with the highest search score, with no
   name/line/set validation. Best effort: some match beats no price.

An empty candidate list resolves to None.
"""

from __future__ import annotations

import structlog

from swu_pricer.models import SearchProduct

logger = structlog.get_logger(__name__)

HYPERSPACE_SUFFIX = " (Hyperspace)"


def normalize_name(name: str) -> str:
    """Drop every character that is not alphanumeric or a space. Case is kept."""
    return "".join(ch for ch in name if ch.isalnum() or ch == " ")


def build_search_phrase(
    card_name: str,
    is_hyperspace: bool,
    corrections: dict[str, str] | None = None,
) -> str:
    """
    Marketplace search phrase for a card variant.

    Hyperspace printings are listed as "<name> (Hyperspace)". Known catalog
    typos are replaced through the corrections table afterwards, so an entry
    can target a single variant.
    """
    phrase = f"{card_name}{HYPERSPACE_SUFFIX if is_hyperspace else ''}"
    if corrections and phrase in corrections:
        corrected = corrections[phrase]
        logger.debug("search_phrase_corrected", original=phrase, corrected=corrected)
        return corrected
    return phrase


def select_product(
    products: list[SearchProduct],
    target_name: str,
    product_line_name: str,
    set_name: str,
) -> SearchProduct | None:
    """
    Pick the best candidate for target_name.

    Args:
        products: Candidates in the order the search API returned them.
        target_name: The search phrase (including any hyperspace suffix).
        product_line_name: Required product line for an exact match.
        set_name: Required expansion name for an exact match.

    Returns:
        The exact match, else the highest-scoring candidate, else None.
    """
    if not products:
        return None

    target = normalize_name(target_name)
    for product in products:
        if (
            normalize_name(product.product_name) == target
            and product.product_line_name == product_line_name
            and product.set_name == set_name
        ):
            return product

    best = max(products, key=lambda p: p.score)
    logger.info(
        "product_match_score_fallback",
        target_name=target_name,
        chosen_product_id=best.product_id,
        chosen_product_name=best.product_name,
        score=best.score,
        candidates=len(products),
    )
    return best
