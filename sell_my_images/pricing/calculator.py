"""Customer pricing for upscale jobs.

The upscaling provider bills one credit per started 4 megapixels of output;
the site adds a configurable markup and never charges below the payment
processor's minimum.
"""

import math
from typing import Dict, Optional

from sell_my_images.config.options import (
    MARKUP_PERCENTAGE,
    DictOptionsStore,
    OptionsStore,
    get_float_option,
)
from sell_my_images.domain.models import Resolution
from sell_my_images.logging import get_logger

from .models import ImageInfo, PriceQuote, PricingError

logger = get_logger(__name__, component="pricing")

COST_PER_CREDIT_USD = 0.04
MEGAPIXELS_PER_CREDIT = 4
DEFAULT_MARKUP_PERCENTAGE = 500.0
MINIMUM_PAYMENT_USD = 0.50


class CostCalculator:
    """Computes PriceQuotes from image dimensions and the markup option.

    Args:
        options: Options store supplying ``smi_markup_percentage``
    """

    def __init__(self, options: Optional[OptionsStore] = None):
        self.options = options or DictOptionsStore()

    @property
    def markup_percentage(self) -> float:
        return get_float_option(self.options, MARKUP_PERCENTAGE, DEFAULT_MARKUP_PERCENTAGE)

    def quote(self, image: ImageInfo, resolution) -> PriceQuote:
        """Price ``image`` at ``resolution``.

        Raises:
            PricingError: If the resolution is not offered
        """
        try:
            resolution = Resolution(resolution)
        except ValueError as e:
            raise PricingError(f"Unsupported resolution: {resolution!r}") from e

        factor = resolution.upscale_factor
        output_width = image.width * factor
        output_height = image.height * factor
        output_megapixels = (output_width * output_height) / 1_000_000

        credits = math.ceil(output_megapixels / MEGAPIXELS_PER_CREDIT)
        markup = self.markup_percentage
        cost = credits * COST_PER_CREDIT_USD
        price = max(round(cost * (1 + markup / 100), 2), MINIMUM_PAYMENT_USD)

        return PriceQuote(
            resolution=resolution,
            credits=credits,
            cost_usd=round(cost, 2),
            customer_price=price,
            markup_percentage=markup,
            output_megapixels=round(output_megapixels, 2),
            output_width=output_width,
            output_height=output_height,
        )

    def quote_all(self, image: ImageInfo) -> Dict[Resolution, PriceQuote]:
        """Quotes for every offered resolution."""
        quotes = {resolution: self.quote(image, resolution) for resolution in Resolution}
        logger.debug(
            f"Priced {image.label} at {len(quotes)} resolutions",
            extra={"event": "pricing.quoted", "width": image.width, "height": image.height},
        )
        return quotes
