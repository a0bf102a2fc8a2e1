"""Upload/checkout flow behind the uploader block and purchase modal."""

from .api_client import SiteApiClient, parse_pricing
from .controller import CheckoutController, CheckoutGateway, PricingProvider, QuotePricing
from .exceptions import (
    CheckoutError,
    FlowStateError,
    SiteAPIError,
    SiteAPIHTTPError,
    SiteAPIResponseError,
    SiteAPITimeoutError,
    UpstreamError,
    ValidationError,
)
from .models import (
    FlowError,
    FlowSnapshot,
    FlowState,
    RequestKind,
    RequestTicket,
    UploadedImage,
)
from .state_machine import CheckoutFlow

__all__ = [
    "CheckoutFlow",
    "CheckoutController",
    "CheckoutGateway",
    "PricingProvider",
    "QuotePricing",
    "SiteApiClient",
    "parse_pricing",
    "FlowState",
    "FlowError",
    "FlowSnapshot",
    "RequestKind",
    "RequestTicket",
    "UploadedImage",
    "CheckoutError",
    "ValidationError",
    "UpstreamError",
    "FlowStateError",
    "SiteAPIError",
    "SiteAPIHTTPError",
    "SiteAPITimeoutError",
    "SiteAPIResponseError",
]
