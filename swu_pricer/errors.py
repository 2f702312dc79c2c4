"""
SWU Price Sync — Hard failures

Anything raised from here halts the run. Soft failures go through the
anomaly log instead (see swu_pricer.engine.anomalies).
"""

from __future__ import annotations


class PricingError(Exception):
    """Base class for failures that stop a pricing run."""


class PriceUnavailableError(PricingError):
    """A price source answered but carried no usable normal-print price."""

    def __init__(self, product_id: int, source: str):
        self.product_id = product_id
        self.source = source
        super().__init__(f"No normal price for product {product_id} from {source}")


class ExchangeRateUnavailableError(PricingError):
    """The exchange rate could not be fetched, so no conversion is possible."""

    def __init__(self, currency: str, reason: str):
        self.currency = currency
        self.reason = reason
        super().__init__(f"USD->{currency} exchange rate unavailable: {reason}")
