"""Upload/checkout state machine for one uploader block or purchase modal.

The flow never performs I/O. Actions that need a collaborator (upload,
price lookup, checkout) return a RequestTicket; the caller performs the
request and reports the outcome with the same ticket. Outcomes for tickets
that are no longer pending (superseded, or issued before a close or reset)
are ignored.

    Idle -> Uploaded -> ResolutionChosen -> EmailEntered -> CheckoutReady
         -> Submitting -> Success | Error
"""

import itertools
from typing import Collection, Dict, Optional

from sell_my_images.config.models import UploaderConfig
from sell_my_images.domain.models import Resolution
from sell_my_images.i18n import Translator, default_translator
from sell_my_images.logging import get_logger
from sell_my_images.notifications.smtp_client import normalize_recipient
from sell_my_images.pricing.models import PriceQuote
from sell_my_images.ui import markup

from .exceptions import FlowStateError, ValidationError
from .models import (
    FlowError,
    FlowSnapshot,
    FlowState,
    RequestKind,
    RequestTicket,
    UploadedImage,
)

logger = get_logger(__name__, component="checkout")


class CheckoutFlow:
    """State of one purchase interaction.

    Args:
        uploader_config: Accepted MIME types and default size limit
        max_file_size_mb: Per-block size limit; overrides the config default
        translator: Used for every customer-facing message
    """

    def __init__(
        self,
        uploader_config: Optional[UploaderConfig] = None,
        max_file_size_mb: Optional[int] = None,
        translator: Optional[Translator] = None,
    ):
        config = uploader_config or UploaderConfig()
        self.accepted_types: Collection[str] = tuple(config.accepted_types)
        self.max_file_size_mb = max_file_size_mb or config.max_file_size_mb
        self.translator = translator or default_translator()

        self._session_ids = itertools.count(1)
        self._request_ids = itertools.count(1)
        self.session_id = 0
        self.is_open = False
        self._reset()

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    def _reset(self) -> None:
        self.state = FlowState.IDLE
        self.upload: Optional[UploadedImage] = None
        self.resolution = Resolution.default()
        self.email = ""
        self.email_valid = False
        self.price: Optional[PriceQuote] = None
        self.error: Optional[FlowError] = None
        self.loading_text: Optional[str] = None
        self.checkout_url: Optional[str] = None
        self._pending: Dict[RequestKind, RequestTicket] = {}

    def _settle(self) -> None:
        """Derive the settled state from the current selections."""
        if self.upload is None:
            self.state = FlowState.IDLE
        elif self.email_valid and self.price is not None:
            self.state = FlowState.CHECKOUT_READY
        elif self.email_valid:
            self.state = FlowState.EMAIL_ENTERED
        elif self.price is not None:
            self.state = FlowState.RESOLUTION_CHOSEN
        else:
            self.state = FlowState.UPLOADED

    def _issue(self, kind: RequestKind, resolution: Optional[Resolution] = None) -> RequestTicket:
        ticket = RequestTicket(
            session_id=self.session_id,
            request_id=next(self._request_ids),
            kind=kind,
            resolution=resolution,
        )
        self._pending[kind] = ticket
        return ticket

    def _accept(self, ticket: RequestTicket) -> bool:
        """Consume ``ticket`` if it is the live pending request of its kind."""
        current = self._pending.get(ticket.kind)
        if not self.is_open or ticket.session_id != self.session_id or current != ticket:
            logger.debug(
                f"Ignoring stale {ticket.kind.value} response",
                extra={
                    "event": "checkout.response.stale",
                    "session_id": ticket.session_id,
                    "request_id": ticket.request_id,
                },
            )
            return False
        del self._pending[ticket.kind]
        return True

    def _require_open(self, action: str) -> None:
        if not self.is_open:
            raise FlowStateError(action, "closed")

    def _require_selection(self, action: str) -> None:
        self._require_open(action)
        if self.upload is None or self.state in (FlowState.SUBMITTING, FlowState.SUCCESS):
            raise FlowStateError(action, self.state.value)

    def _t(self, text: str) -> str:
        return self.translator.translate(text)

    # Lifecycle

    def open(self) -> None:
        """Start a fresh session at Idle."""
        self._reset()
        self.session_id = next(self._session_ids)
        self.is_open = True
        logger.debug("Checkout flow opened", extra={"event": "checkout.opened", "session_id": self.session_id})

    def close(self) -> None:
        """Discard all selections; responses still in flight become stale."""
        self._reset()
        self.is_open = False
        logger.debug("Checkout flow closed", extra={"event": "checkout.closed", "session_id": self.session_id})

    def remove_image(self) -> None:
        """Drop the uploaded image and every selection, back to Idle."""
        self._require_open("remove the image")
        self._reset()

    # Upload

    def begin_upload(self, filename: str, content_type: str, size: int) -> RequestTicket:
        """Validate a chosen file and issue the upload request.

        Raises:
            ValidationError: Wrong type, empty or oversized file; the flow stays Idle
            FlowStateError: Flow closed or an image is already uploaded
        """
        self._require_open("upload an image")
        if self.state != FlowState.IDLE:
            raise FlowStateError("upload an image", self.state.value)

        if content_type not in self.accepted_types:
            self._reject_file(self._t("Please upload a JPEG, PNG, or WebP image."))
        if size <= 0:
            self._reject_file(self._t("The selected file is empty."))
        if size > self.max_file_size_bytes:
            self._reject_file(
                self._t("File size exceeds %(size)dMB limit.") % {"size": self.max_file_size_mb}
            )

        self.error = None
        self.loading_text = self._t("Uploading...")
        logger.info(
            f"Uploading {filename}",
            extra={"event": "checkout.upload.started", "content_type": content_type, "size": size},
        )
        return self._issue(RequestKind.UPLOAD)

    def _reject_file(self, message: str) -> None:
        self.error = FlowError(kind="validation", message=message, stage="file")
        raise ValidationError(message, field="file")

    def complete_upload(self, ticket: RequestTicket, upload: UploadedImage) -> Optional[RequestTicket]:
        """Apply a successful upload.

        Returns:
            Price-lookup ticket for the default resolution, or None if stale
        """
        if not self._accept(ticket):
            return None

        self.upload = upload
        self.resolution = Resolution.default()
        self.loading_text = None
        self.price = None
        self._settle()
        return self._issue(RequestKind.PRICE, self.resolution)

    def fail_upload(self, ticket: RequestTicket, message: Optional[str] = None) -> bool:
        """Record an upload failure and return to Idle."""
        if not self._accept(ticket):
            return False

        self._reset()
        self.error = FlowError(
            kind="upstream",
            message=message or self._t("Upload failed. Please try again."),
            stage="upload",
        )
        return True

    # Pricing

    def select_resolution(self, resolution) -> RequestTicket:
        """Switch resolution; the displayed price is cleared until the lookup returns.

        Raises:
            ValidationError: Unknown resolution
            FlowStateError: No image, or checkout already submitted
        """
        self._require_selection("choose a resolution")
        try:
            resolution = Resolution(resolution)
        except ValueError as e:
            raise ValidationError(
                self._t("Please choose a valid resolution."), field="resolution"
            ) from e

        self.resolution = resolution
        self.price = None
        if self.error is not None and self.error.stage in ("pricing", "checkout"):
            self.error = None
        self._settle()
        return self._issue(RequestKind.PRICE, resolution)

    def receive_price(self, ticket: RequestTicket, quote: PriceQuote) -> bool:
        if ticket.resolution != self.resolution or not self._accept(ticket):
            return False

        self.price = quote
        self._settle()
        return True

    def fail_price(self, ticket: RequestTicket, message: Optional[str] = None) -> bool:
        """Record a pricing failure; selections are kept and ``retry`` re-issues the lookup."""
        if not self._accept(ticket):
            return False

        self.price = None
        self.error = FlowError(
            kind="upstream",
            message=message or self._t("Could not calculate the price. Please try again."),
            stage="pricing",
        )
        self._settle()
        return True

    # Email

    def set_email(self, email: Optional[str]) -> bool:
        """Store the customer's email address.

        Editing the address after a failed checkout dismisses that error and
        returns the flow to its settled state.

        Returns:
            True when the address is syntactically valid

        Raises:
            ValidationError: Non-empty address that is not a valid email
        """
        self._require_selection("enter an email address")

        self.email = (email or "").strip()
        self.email_valid = normalize_recipient(self.email) is not None
        if self.error is not None and self.error.stage in ("email", "checkout"):
            self.error = None
        self._settle()

        if self.email and not self.email_valid:
            message = self._t("Please enter a valid email address.")
            self.error = FlowError(kind="validation", message=message, stage="email")
            raise ValidationError(message, field="email")
        return self.email_valid

    # Checkout

    @property
    def can_checkout(self) -> bool:
        return self.is_open and self.state == FlowState.CHECKOUT_READY

    def submit(self) -> RequestTicket:
        """Start checkout. Only allowed from CheckoutReady."""
        if not self.can_checkout:
            raise FlowStateError("check out", self.state.value if self.is_open else "closed")

        self.state = FlowState.SUBMITTING
        self.error = None
        self.loading_text = self._t("Creating checkout...")
        return self._issue(RequestKind.CHECKOUT, self.resolution)

    def complete_checkout(self, ticket: RequestTicket, checkout_url: str) -> bool:
        if not self._accept(ticket):
            return False

        self.state = FlowState.SUCCESS
        self.loading_text = None
        self.checkout_url = checkout_url
        logger.info("Checkout created", extra={"event": "checkout.created", "resolution": self.resolution.value})
        return True

    def fail_checkout(self, ticket: RequestTicket, message: Optional[str] = None) -> bool:
        if not self._accept(ticket):
            return False

        self.state = FlowState.ERROR
        self.loading_text = None
        self.error = FlowError(
            kind="upstream",
            message=message or self._t("Checkout failed. Please try again."),
            stage="checkout",
        )
        logger.warning(
            f"Checkout failed: {self.error.message}",
            extra={"event": "checkout.failed", "resolution": self.resolution.value},
        )
        return True

    def retry(self) -> Optional[RequestTicket]:
        """Recover from a retryable upstream error.

        After a checkout failure the flow returns to its settled state with the
        email and resolution intact. After a pricing failure the lookup is
        re-issued and its ticket returned.

        Raises:
            FlowStateError: Nothing to retry
        """
        self._require_open("retry")
        if self.error is None or not self.error.retryable:
            raise FlowStateError("retry", self.state.value)

        stage = self.error.stage
        self.error = None
        self._settle()
        if stage == "pricing":
            return self._issue(RequestKind.PRICE, self.resolution)
        return None

    # Rendering

    def checkout_label(self) -> str:
        if self.price is None:
            return self._t("Proceed to Checkout")
        return self._t("Checkout - %(price)s") % {"price": self.price.price_label}

    def visible_elements(self) -> frozenset:
        """Element ids to show for the current state."""
        if not self.is_open:
            return frozenset()

        visible = set()
        if self.upload is None:
            visible.add(markup.UPLOAD_ZONE)
        else:
            visible.update(
                (markup.PREVIEW_ZONE, markup.RESOLUTION_PICKER, markup.EMAIL_SECTION, markup.CHECKOUT_SECTION)
            )
        if self.loading_text:
            visible.add(markup.LOADING)
        if self.error is not None:
            visible.add(markup.ERROR)
        return frozenset(visible)

    def snapshot(self) -> FlowSnapshot:
        return FlowSnapshot(
            state=self.state,
            is_open=self.is_open,
            resolution=self.resolution,
            email=self.email,
            image=self.upload.image if self.upload else None,
            price=self.price,
            error=self.error,
            loading_text=self.loading_text,
            checkout_enabled=self.can_checkout,
            checkout_label=self.checkout_label(),
            checkout_url=self.checkout_url,
            visible=self.visible_elements(),
        )
