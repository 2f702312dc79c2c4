"""
SWU Price Sync — Output Writer

Whole-file, synchronous JSON write. The target file is overwritten.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_json(path: str | Path, data: Any) -> Path:
    """Serialize data as JSON to path, replacing any existing file."""
    path = Path(path)
    path.write_text(json.dumps(data, default=_default), encoding="utf-8")
    logger.info("output_written", path=str(path), bytes=path.stat().st_size)
    return path
