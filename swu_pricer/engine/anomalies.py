"""
SWU Price Sync — Anomaly Log

Soft failures (no marketplace match, a missing foil listing, a card with no
hyperspace sibling...) never stop a run. Each one is logged as a warning and
kept as a typed Anomaly so the run can finish with a summary of what went
wrong.
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)


class AnomalyKind(str, Enum):
    PRODUCT_NOT_FOUND = "product_not_found"
    PRICE_MISSING_NORMAL = "price_missing_normal"
    PRICE_MISSING_FOIL = "price_missing_foil"
    PRICE_FALLBACK_USED = "price_fallback_used"
    HYPERSPACE_MISSING = "hyperspace_missing"
    DUPLICATE_ITEM = "duplicate_item"


class Anomaly(BaseModel):
    """One soft failure observed during a run."""

    kind: AnomalyKind
    message: str
    context: dict[str, Any] = Field(default_factory=dict)


class AnomalyLog:
    """
    Collects anomalies for a single run.

    Usage:
        anomalies = AnomalyLog()
        anomalies.record(AnomalyKind.PRODUCT_NOT_FOUND, "No match", search_phrase=q)
        anomalies.summary()  # {"product_not_found": 1}
    """

    def __init__(self) -> None:
        self._items: list[Anomaly] = []

    def record(self, kind: AnomalyKind, message: str, **context: Any) -> Anomaly:
        anomaly = Anomaly(kind=kind, message=message, context=context)
        self._items.append(anomaly)
        logger.warning(kind.value, message=message, **context)
        return anomaly

    @property
    def items(self) -> list[Anomaly]:
        return list(self._items)

    def of_kind(self, kind: AnomalyKind) -> list[Anomaly]:
        return [a for a in self._items if a.kind == kind]

    def summary(self) -> dict[str, int]:
        """Count of anomalies per kind, for the end-of-run log line."""
        return dict(Counter(a.kind.value for a in self._items))

    def __len__(self) -> int:
        return len(self._items)
