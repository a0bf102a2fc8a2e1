"""Client for the site's upload and checkout REST endpoints.

Endpoints live under ``{site_url}{api.base_path}``:

- ``POST upload-image`` (multipart ``image``) ->
  ``{success, upload_id, image_info: {width, height}, pricing: {res: {...}}}``
- ``POST create-checkout-upload`` (JSON ``upload_id``, ``resolution``, ``email``)
  -> ``{success, checkout_url}``
"""

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from sell_my_images.config.models import ApiConfig
from sell_my_images.domain.models import Resolution
from sell_my_images.logging import get_logger
from sell_my_images.pricing.models import ImageInfo, PriceQuote, PricingError

from .exceptions import (
    SiteAPIHTTPError,
    SiteAPIResponseError,
    SiteAPITimeoutError,
)
from .models import UploadedImage

logger = get_logger(__name__, component="api")


class SiteApiClient:
    """HTTP client implementing the CheckoutGateway protocol.

    Args:
        site_url: Public base URL of the site
        api_config: Base path, timeout and user agent
        session: requests.Session to use (a new one by default)
    """

    def __init__(
        self,
        site_url: str,
        api_config: Optional[ApiConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        config = api_config or ApiConfig()
        self.base_url = site_url.rstrip("/") + config.base_path
        self.timeout = config.http_request_timeout

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": config.user_agent})

    def endpoint(self, name: str) -> str:
        return f"{self.base_url}/{name}"

    def upload_image(self, filename: str, content: bytes, content_type: str) -> UploadedImage:
        """Upload an image and return its id, dimensions and quotes.

        Raises:
            SiteAPIError: Transport failure or ``success: false``
        """
        data = self._post(
            self.endpoint("upload-image"),
            files={"image": (filename, content, content_type)},
        )
        self._require_success(data, "Upload failed. Please try again.")

        upload_id = data.get("upload_id")
        if not upload_id:
            raise SiteAPIResponseError("Upload response is missing upload_id")

        info = data.get("image_info") or {}
        try:
            image = ImageInfo(width=int(info["width"]), height=int(info["height"]))
        except (KeyError, TypeError, ValueError, PricingError) as e:
            raise SiteAPIResponseError(f"Upload response has invalid image_info: {e}") from e

        return UploadedImage(
            upload_id=str(upload_id),
            image=image,
            quotes=parse_pricing(data.get("pricing") or {}),
        )

    def create_checkout(self, upload_id: str, resolution: str, email: Optional[str] = None) -> str:
        """Create a payment session for an uploaded image.

        Returns:
            URL of the hosted checkout page
        """
        body: Dict[str, Any] = {"upload_id": upload_id, "resolution": resolution}
        if email:
            body["email"] = email

        data = self._post(self.endpoint("create-checkout-upload"), json_data=body)
        self._require_success(data, "Checkout failed. Please try again.")

        checkout_url = data.get("checkout_url")
        if not checkout_url:
            raise SiteAPIResponseError("Checkout failed. Please try again.")
        return str(checkout_url)

    @staticmethod
    def _require_success(data: Mapping[str, Any], fallback: str) -> None:
        if not data.get("success"):
            raise SiteAPIResponseError(str(data.get("message") or fallback))

    def _post(
        self,
        url: str,
        json_data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """POST and decode a JSON object.

        Raises:
            SiteAPIHTTPError: 4xx/5xx status or connection failure
            SiteAPITimeoutError: No answer within the timeout
            SiteAPIResponseError: Body is not a JSON object
        """
        logger.debug(
            f"HTTP POST request to {url}",
            extra={"event": "api.request", "url": url, "timeout": self.timeout},
        )
        try:
            response = self._session.post(url, json=json_data, files=files, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={"event": "api.retryable_error", "error_type": "Timeout", "url": url},
            )
            raise SiteAPITimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Request to {url} failed: {e}",
                extra={"event": "api.error", "error_type": type(e).__name__, "url": url},
            )
            raise SiteAPIHTTPError(f"Request to {url} failed: {e}", status_code=0, url=url) from e

        try:
            data = response.json()
        except ValueError as e:
            data = None
            if response.status_code < 400:
                logger.error(
                    f"Failed to parse JSON response from {url}",
                    extra={"event": "api.error", "error_type": "JSONDecodeError", "url": url},
                )
                raise SiteAPIResponseError(f"Failed to parse JSON response from {url}: {e}") from e

        if response.status_code >= 400:
            # WordPress REST errors carry a customer-facing message
            if isinstance(data, dict) and data.get("message"):
                raise SiteAPIResponseError(str(data["message"]))

            is_retryable = response.status_code >= 500
            logger.log(
                logging.WARNING if is_retryable else logging.ERROR,
                f"HTTP {response.status_code} error from {url}",
                extra={"event": "api.error", "status_code": response.status_code, "url": url},
            )
            raise SiteAPIHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        if not isinstance(data, dict):
            raise SiteAPIResponseError(f"Expected a JSON object from {url}")
        return data


def parse_pricing(pricing: Mapping[str, Any]) -> Dict[Resolution, PriceQuote]:
    """Convert the ``pricing`` object of an upload response into PriceQuotes.

    Accepts both the short form (``price``, ``output_width``, ``output_height``)
    and the detailed calculator form (``customer_price``, ``credits``,
    ``output_dimensions``...). Unknown resolutions are skipped.
    """
    quotes: Dict[Resolution, PriceQuote] = {}
    for key, entry in pricing.items():
        try:
            resolution = Resolution(key)
        except ValueError:
            logger.debug(f"Skipping price for unsupported resolution {key!r}")
            continue
        if not isinstance(entry, Mapping):
            raise SiteAPIResponseError(f"Invalid pricing entry for {key}")

        dimensions = entry.get("output_dimensions") or {}
        try:
            width = int(entry.get("output_width", dimensions.get("width", 0)))
            height = int(entry.get("output_height", dimensions.get("height", 0)))
            price = float(entry.get("customer_price", entry.get("price")))
            quotes[resolution] = PriceQuote(
                resolution=resolution,
                credits=int(entry.get("credits", 0)),
                cost_usd=float(entry.get("cost_usd", 0.0)),
                customer_price=price,
                markup_percentage=float(entry.get("markup_percentage", 0.0)),
                output_megapixels=float(
                    entry.get("output_megapixels", round(width * height / 1_000_000, 2))
                ),
                output_width=width,
                output_height=height,
            )
        except (TypeError, ValueError) as e:
            raise SiteAPIResponseError(f"Invalid pricing entry for {key}: {e}") from e
    return quotes
