"""
SWU Price Sync — Configuration & Constants

Every endpoint, set identifier, pricing constant and output option lives
here. No hardcoded values in pipeline logic.

Usage:
    from swu_pricer.config import settings
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OutputMode(str, Enum):
    """Which artifact a run produces."""
    PRICE_REPORT = "price_report"
    CATALOG_BATCH = "catalog_batch"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for SWU Price Sync.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # -----------------------------------------------------------------------
    # Card catalog (Star Wars: Unlimited admin API)
    # -----------------------------------------------------------------------
    CATALOG_API_URL: str = "https://admin.starwarsunlimited.com/api"
    CATALOG_PAGE_SIZE: int = 50
    SET_ID: int = 8
    SET_NAME: str = "Shadows of the Galaxy"
    # Rarity ids passed to the listing filter. Empty means every rarity.
    CATALOG_RARITY_IDS: list[int] = []

    # -----------------------------------------------------------------------
    # Marketplace (TCGplayer)
    # -----------------------------------------------------------------------
    TCGPLAYER_SEARCH_URL: str = "https://data.tcgplayer.com"
    TCGPLAYER_PRICE_POINTS_URL: str = "https://mpapi.tcgplayer.com/v2"
    TCGPLAYER_DETAILS_URL: str = "https://mp-search-api.tcgplayer.com/v1"
    PRODUCT_LINE_NAME: str = "Star Wars: Unlimited"
    SEARCH_ALGORITHM: str = "product_line_affinity"

    # Search phrase -> corrected search phrase, for names TCGplayer lists
    # differently from the card catalog.
    NAME_CORRECTIONS: dict[str, str] = {
        "Bossk - Hunting His Prey (Hyperspace)": "Bossk - Hunting his Prey (Hyperspace)",
    }

    # Rarities kept in the price report
    PRICED_RARITIES: list[str] = ["Rare", "Legendary"]

    # Per-card offset before the product search: card_number x this (ms)
    REQUEST_DELAY_MS_PER_CARD: int = 10
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # -----------------------------------------------------------------------
    # Forex
    # -----------------------------------------------------------------------
    EXCHANGE_RATE_API_URL: str = "https://open.er-api.com/v6/latest/USD"
    TARGET_CURRENCY: str = "AUD"
    PRICE_MARKUP: Decimal = Decimal("1.1")

    # -----------------------------------------------------------------------
    # Output
    # -----------------------------------------------------------------------
    OUTPUT_MODE: OutputMode = OutputMode.PRICE_REPORT
    OUTPUT_PATH: str = "./card-list.json"

    # Square catalog import
    CATALOG_CATEGORY_ID: str = "SWU_SHD_SINGLES"
    CATALOG_BATCH_MAX_OBJECTS: int = 1000


# Singleton instance
settings = Settings()
