"""Exceptions raised by the upload/checkout flow and the site API client."""

from typing import Optional


class CheckoutError(Exception):
    """Base exception for the purchase flow.

    Every error in this package is recoverable at the interaction level: the
    flow records it for the error panel and the customer can correct or retry.
    """

    pass


class ValidationError(CheckoutError):
    """Customer input was rejected (bad email, wrong file type, oversized file)."""

    def __init__(self, message: str, field: str) -> None:
        """Initialize with the offending input.

        Args:
            message: Customer-facing message for the error panel
            field: Input that failed validation ("file" or "email")
        """
        super().__init__(message)
        self.field = field


class UpstreamError(CheckoutError):
    """A collaborator (upload, pricing or checkout) failed."""

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage


class FlowStateError(CheckoutError):
    """An action is not allowed in the flow's current state."""

    def __init__(self, action: str, state: str) -> None:
        super().__init__(f"Cannot {action} while the checkout flow is {state}")
        self.action = action
        self.state = state


class SiteAPIError(UpstreamError):
    """Base exception for site REST API failures."""

    pass


class SiteAPIHTTPError(SiteAPIError):
    """The site API answered with a 4xx/5xx status or the connection failed."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        """Initialize HTTP error with status code and URL.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (0 when no response was received)
            url: URL that failed
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class SiteAPITimeoutError(SiteAPIError):
    """The site API did not answer within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class SiteAPIResponseError(SiteAPIError):
    """The response was not JSON, reported ``success: false``, or lacked fields."""

    pass
