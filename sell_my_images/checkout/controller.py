"""Drives a CheckoutFlow against the upload, pricing and checkout collaborators."""

from typing import Optional, Protocol

from sell_my_images.domain.models import Resolution
from sell_my_images.logging import get_logger
from sell_my_images.logging.context import log_context
from sell_my_images.pricing import CostCalculator, PriceQuote, PricingError

from .exceptions import SiteAPIResponseError, UpstreamError, ValidationError
from .models import FlowSnapshot, RequestTicket, UploadedImage
from .state_machine import CheckoutFlow

logger = get_logger(__name__, component="checkout")


class CheckoutGateway(Protocol):
    """Site endpoints behind the uploader (see SiteApiClient)."""

    def upload_image(self, filename: str, content: bytes, content_type: str) -> UploadedImage:
        ...

    def create_checkout(self, upload_id: str, resolution: str, email: Optional[str] = None) -> str:
        ...


class PricingProvider(Protocol):
    def quote(self, upload: UploadedImage, resolution: Resolution) -> PriceQuote:
        ...


class QuotePricing:
    """Uses the quotes returned with the upload, falling back to local calculation.

    Args:
        calculator: CostCalculator for resolutions the upload did not price
    """

    def __init__(self, calculator: Optional[CostCalculator] = None):
        self.calculator = calculator or CostCalculator()

    def quote(self, upload: UploadedImage, resolution: Resolution) -> PriceQuote:
        quote = upload.quotes.get(resolution)
        if quote is not None:
            return quote
        return self.calculator.quote(upload.image, resolution)


class CheckoutController:
    """Synchronous driver for one flow.

    Each method performs the collaborator call for the ticket the flow issues
    and feeds the outcome back, then returns a snapshot for rendering.
    Customer-correctable errors end up in the snapshot, not as exceptions.

    Args:
        gateway: Upload and checkout endpoints
        flow: Flow to drive (a new one by default)
        pricing: Price lookup (QuotePricing by default)
    """

    def __init__(
        self,
        gateway: CheckoutGateway,
        flow: Optional[CheckoutFlow] = None,
        pricing: Optional[PricingProvider] = None,
    ):
        self.gateway = gateway
        self.flow = flow or CheckoutFlow()
        self.pricing = pricing or QuotePricing()

    def open(self) -> FlowSnapshot:
        self.flow.open()
        return self.flow.snapshot()

    def close(self) -> FlowSnapshot:
        self.flow.close()
        return self.flow.snapshot()

    def remove_image(self) -> FlowSnapshot:
        self.flow.remove_image()
        return self.flow.snapshot()

    def upload(self, filename: str, content: bytes, content_type: str) -> FlowSnapshot:
        with log_context(session_id=self.flow.session_id):
            try:
                ticket = self.flow.begin_upload(filename, content_type, len(content))
            except ValidationError as e:
                logger.info(f"File rejected: {e}", extra={"event": "checkout.upload.rejected"})
                return self.flow.snapshot()

            try:
                upload = self.gateway.upload_image(filename, content, content_type)
            except UpstreamError as e:
                logger.warning(f"Upload failed: {e}", extra={"event": "checkout.upload.failed"})
                self.flow.fail_upload(ticket, _customer_message(e))
                return self.flow.snapshot()

            price_ticket = self.flow.complete_upload(ticket, upload)
            if price_ticket is not None:
                self._lookup_price(price_ticket)
            return self.flow.snapshot()

    def select_resolution(self, resolution) -> FlowSnapshot:
        with log_context(session_id=self.flow.session_id):
            try:
                ticket = self.flow.select_resolution(resolution)
            except ValidationError as e:
                logger.info(f"Resolution rejected: {e}", extra={"event": "checkout.resolution.rejected"})
                return self.flow.snapshot()
            self._lookup_price(ticket)
            return self.flow.snapshot()

    def set_email(self, email: Optional[str]) -> FlowSnapshot:
        try:
            self.flow.set_email(email)
        except ValidationError as e:
            logger.debug(f"Email rejected: {e}", extra={"event": "checkout.email.rejected"})
        return self.flow.snapshot()

    def checkout(self) -> FlowSnapshot:
        with log_context(session_id=self.flow.session_id):
            ticket = self.flow.submit()
            upload = self.flow.upload
            try:
                checkout_url = self.gateway.create_checkout(
                    upload.upload_id,
                    self.flow.resolution.value,
                    self.flow.email or None,
                )
            except UpstreamError as e:
                self.flow.fail_checkout(ticket, _customer_message(e))
                return self.flow.snapshot()

            self.flow.complete_checkout(ticket, checkout_url)
            return self.flow.snapshot()

    def retry(self) -> FlowSnapshot:
        ticket = self.flow.retry()
        if ticket is not None:
            self._lookup_price(ticket)
        return self.flow.snapshot()

    def _lookup_price(self, ticket: RequestTicket) -> None:
        try:
            quote = self.pricing.quote(self.flow.upload, ticket.resolution)
        except (PricingError, UpstreamError) as e:
            logger.warning(
                f"Price lookup failed for {ticket.resolution.value}: {e}",
                extra={"event": "checkout.price.failed", "resolution": ticket.resolution.value},
            )
            self.flow.fail_price(ticket)
            return

        self.flow.receive_price(ticket, quote)


def _customer_message(error: UpstreamError) -> Optional[str]:
    """Server-supplied messages are shown as-is; transport errors get the generic text."""
    if isinstance(error, SiteAPIResponseError) and str(error):
        return str(error)
    return None
