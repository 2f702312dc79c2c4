"""
SWU Price Sync — Currency Conversion

USD market prices are converted to the shop currency with a fixed 10% markup
and then rounded DOWN to the nearest half unit (e.g. A$12.37 -> A$12.00,
A$12.80 -> A$12.50). The floor-to-half step is the shop's pricing policy,
not a precision artifact, and happens before formatting to 2 decimals.

All money values use Decimal, never float.

The USD rate table is fetched once per run by ExchangeRateConverter and
reused for every conversion. There is no fallback rate: a failed fetch stops
the run rather than pricing the catalog with a made-up number.
"""

from __future__ import annotations

import asyncio
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

import httpx
import structlog

from swu_pricer.config import settings
from swu_pricer.errors import ExchangeRateUnavailableError

logger = structlog.get_logger(__name__)

_HALF_UNITS = Decimal("2")
_CENTS = Decimal("0.01")


def convert_usd_to_target(
    amount_usd: Decimal,
    rate: Decimal,
    markup: Decimal | None = None,
) -> Decimal:
    """
    Convert a USD price to the target currency with markup and half-unit floor.

    target = floor(amount_usd x rate x markup x 2) / 2, to 2 decimal places.

    Args:
        amount_usd: Price in USD.
        rate: USD -> target spot rate (e.g., 1.5 means 1 USD = 1.5 AUD).
        markup: Multiplier applied after conversion (default settings.PRICE_MARKUP).

    Returns:
        Target-currency price, always a multiple of 0.50.

    Examples:
        >>> convert_usd_to_target(Decimal("100"), Decimal("1.5"))
        Decimal('165.00')  # floor(100 x 1.5 x 1.1 x 2) / 2 = floor(330) / 2
    """
    if markup is None:
        markup = settings.PRICE_MARKUP

    if amount_usd < Decimal("0"):
        raise ValueError(f"amount_usd must be non-negative, got {amount_usd}")

    if rate <= Decimal("0"):
        raise ValueError(f"rate must be positive, got {rate}")

    half_units = (amount_usd * rate * markup * _HALF_UNITS).to_integral_value(
        rounding=ROUND_FLOOR
    )
    result = (half_units / _HALF_UNITS).quantize(_CENTS)

    logger.debug(
        "forex_usd_to_target",
        amount_usd=str(amount_usd),
        rate=str(rate),
        markup=str(markup),
        result=str(result),
    )
    return result


class ExchangeRateConverter:
    """
    Owns the USD -> target exchange rate for one run.

    The first get_exchange_rate() call fetches the rate table; every later
    call reuses the cached value. Concurrent first callers wait on a single
    in-flight fetch instead of each issuing their own request.

    Usage:
        converter = ExchangeRateConverter()
        aud = await converter.to_target_currency(Decimal("12.34"))
    """

    def __init__(
        self,
        currency: str | None = None,
        markup: Decimal | None = None,
        api_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.currency = (currency or settings.TARGET_CURRENCY).upper()
        self.markup = markup if markup is not None else settings.PRICE_MARKUP
        self._api_url = api_url or settings.EXCHANGE_RATE_API_URL
        self._client = client
        self._rate: Decimal | None = None
        self._lock = asyncio.Lock()

    @property
    def cached_rate(self) -> Decimal | None:
        return self._rate

    async def get_exchange_rate(self) -> Decimal:
        """
        Return the USD -> target rate, fetching it on first use.

        Raises:
            ExchangeRateUnavailableError: The rate API failed or had no rate
                for the target currency. The cache stays empty.
        """
        if self._rate is not None:
            return self._rate

        async with self._lock:
            # Another task may have filled the cache while we waited
            if self._rate is not None:
                return self._rate

            self._rate = await self._fetch_rate()
            return self._rate

    async def to_target_currency(self, amount_usd: Decimal) -> Decimal:
        rate = await self.get_exchange_rate()
        return convert_usd_to_target(amount_usd, rate, self.markup)

    async def _fetch_rate(self) -> Decimal:
        try:
            if self._client is not None:
                response = await self._client.get(self._api_url)
                response.raise_for_status()
                data = response.json()
            else:
                async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                    response = await client.get(self._api_url)
                    response.raise_for_status()
                    data = response.json()

            raw_rate = data["rates"][self.currency]
            rate = Decimal(str(raw_rate))
            if rate <= Decimal("0"):
                raise ValueError(f"non-positive rate {raw_rate}")

        except (httpx.HTTPError, KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.error(
                "forex_rate_fetch_failed",
                currency=self.currency,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ExchangeRateUnavailableError(self.currency, str(e)) from e

        logger.info("forex_rate_fetched", currency=self.currency, rate=str(rate))
        return rate
