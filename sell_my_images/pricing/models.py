"""Pricing data models."""

from dataclasses import dataclass

from sell_my_images.domain.models import Resolution


class PricingError(ValueError):
    """Image dimensions or resolution cannot be priced."""

    pass


@dataclass(frozen=True)
class ImageInfo:
    """Pixel dimensions of the source image."""

    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise PricingError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )

    @property
    def label(self) -> str:
        return f"{self.width} × {self.height} px"


@dataclass(frozen=True)
class PriceQuote:
    """Cost breakdown for upscaling one image to one resolution.

    Attributes:
        resolution: Upscale tier
        credits: Upscaling credits consumed
        cost_usd: Provider cost to the site
        customer_price: Price charged to the customer (USD)
        markup_percentage: Markup applied on top of cost
        output_megapixels: Size of the upscaled image in megapixels
        output_width: Upscaled width in pixels
        output_height: Upscaled height in pixels
    """

    resolution: Resolution
    credits: int
    cost_usd: float
    customer_price: float
    markup_percentage: float
    output_megapixels: float
    output_width: int
    output_height: int

    @property
    def price_label(self) -> str:
        return f"${self.customer_price:.2f}"

    @property
    def output_label(self) -> str:
        return f"{self.output_width} × {self.output_height} px"
