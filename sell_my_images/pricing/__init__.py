"""Upscale pricing."""

from .calculator import (
    COST_PER_CREDIT_USD,
    DEFAULT_MARKUP_PERCENTAGE,
    MINIMUM_PAYMENT_USD,
    CostCalculator,
)
from .models import ImageInfo, PriceQuote, PricingError

__all__ = [
    "CostCalculator",
    "ImageInfo",
    "PriceQuote",
    "PricingError",
    "COST_PER_CREDIT_USD",
    "DEFAULT_MARKUP_PERCENTAGE",
    "MINIMUM_PAYMENT_USD",
]
