"""Data models for the upload/checkout flow."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from sell_my_images.domain.models import Resolution
from sell_my_images.pricing.models import ImageInfo, PriceQuote


class FlowState(str, Enum):
    """States of one purchase interaction."""

    IDLE = "idle"
    UPLOADED = "uploaded"
    RESOLUTION_CHOSEN = "resolution_chosen"
    EMAIL_ENTERED = "email_entered"
    CHECKOUT_READY = "checkout_ready"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class RequestKind(str, Enum):
    """Kinds of collaborator request the flow waits on."""

    UPLOAD = "upload"
    PRICE = "price"
    CHECKOUT = "checkout"


@dataclass(frozen=True)
class RequestTicket:
    """Identifies one outstanding collaborator request.

    A response is applied only while its ticket is still the pending ticket of
    the same session; anything else is a stale response and is dropped.
    """

    session_id: int
    request_id: int
    kind: RequestKind
    resolution: Optional[Resolution] = None


@dataclass(frozen=True)
class UploadedImage:
    """An image accepted by the site's upload endpoint.

    Attributes:
        upload_id: Server-side id used when creating the checkout
        image: Source dimensions
        quotes: Prices returned alongside the upload, keyed by resolution
    """

    upload_id: str
    image: ImageInfo
    quotes: Dict[Resolution, PriceQuote] = field(default_factory=dict)


@dataclass(frozen=True)
class FlowError:
    """Error currently shown in the error panel.

    Attributes:
        kind: "validation" or "upstream"
        message: Customer-facing text
        stage: Where it happened ("file", "email", "upload", "pricing", "checkout")
    """

    kind: str
    message: str
    stage: str

    @property
    def retryable(self) -> bool:
        return self.kind == "upstream" and self.stage in ("pricing", "checkout")


@dataclass(frozen=True)
class FlowSnapshot:
    """Read-only view of the flow for rendering.

    ``visible`` holds the element ids (see ``sell_my_images.ui.markup``) that
    should be shown.
    """

    state: FlowState
    is_open: bool
    resolution: Resolution
    email: str
    image: Optional[ImageInfo]
    price: Optional[PriceQuote]
    error: Optional[FlowError]
    loading_text: Optional[str]
    checkout_enabled: bool
    checkout_label: str
    checkout_url: Optional[str]
    visible: FrozenSet[str]
