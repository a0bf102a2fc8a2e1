"""Unit tests for CheckoutController with a fake site gateway."""

import pytest

from sell_my_images.checkout import (
    CheckoutController,
    FlowState,
    FlowStateError,
    QuotePricing,
    SiteAPIHTTPError,
    SiteAPIResponseError,
    UploadedImage,
)
from sell_my_images.config.options import DictOptionsStore
from sell_my_images.domain.models import Resolution
from sell_my_images.pricing import CostCalculator, ImageInfo, PricingError
from sell_my_images.ui import markup

JPEG = b"\xff\xd8" + b"\x00" * 1024


class FakeGateway:
    """Records calls and answers from canned results."""

    def __init__(self, upload=None, checkout_url="https://checkout.example.com/pay/cs_1"):
        self.upload = upload or UploadedImage(upload_id="upl-1", image=ImageInfo(2000, 2000))
        self.checkout_url = checkout_url
        self.upload_error = None
        self.checkout_error = None
        self.uploads = []
        self.checkouts = []

    def upload_image(self, filename, content, content_type):
        self.uploads.append((filename, len(content), content_type))
        if self.upload_error:
            raise self.upload_error
        return self.upload

    def create_checkout(self, upload_id, resolution, email=None):
        self.checkouts.append((upload_id, resolution, email))
        if self.checkout_error:
            raise self.checkout_error
        return self.checkout_url


class FlakyPricing:
    """Fails the first ``failures`` lookups."""

    def __init__(self, failures=1):
        self.failures = failures
        self.inner = QuotePricing(CostCalculator(DictOptionsStore({"smi_markup_percentage": "200"})))

    def quote(self, upload, resolution):
        if self.failures:
            self.failures -= 1
            raise PricingError("pricing backend unavailable")
        return self.inner.quote(upload, resolution)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def controller(gateway):
    controller = CheckoutController(
        gateway,
        pricing=QuotePricing(CostCalculator(DictOptionsStore({"smi_markup_percentage": "200"}))),
    )
    controller.open()
    return controller


class TestHappyPath:
    def test_full_purchase(self, controller, gateway):
        snapshot = controller.upload("harbor.jpg", JPEG, "image/jpeg")
        assert snapshot.state == FlowState.RESOLUTION_CHOSEN
        assert snapshot.price.customer_price == 1.92
        assert snapshot.checkout_label == "Checkout - $1.92"

        snapshot = controller.set_email("customer@example.org")
        assert snapshot.state == FlowState.CHECKOUT_READY
        assert snapshot.checkout_enabled

        snapshot = controller.checkout()
        assert snapshot.state == FlowState.SUCCESS
        assert snapshot.checkout_url == "https://checkout.example.com/pay/cs_1"
        assert gateway.checkouts == [("upl-1", "4x", "customer@example.org")]

    def test_switching_resolution_reprices(self, controller):
        controller.upload("harbor.jpg", JPEG, "image/jpeg")

        snapshot = controller.select_resolution("8x")

        assert snapshot.resolution == Resolution.X8
        assert snapshot.price.resolution == Resolution.X8
        assert snapshot.price.customer_price == 7.68

    def test_upload_quotes_take_precedence(self, gateway):
        calculator = CostCalculator(DictOptionsStore({"smi_markup_percentage": "200"}))
        image = ImageInfo(2000, 2000)
        server_quote = calculator.quote(image, Resolution.X4)
        gateway.upload = UploadedImage("upl-2", image, {Resolution.X4: server_quote})
        controller = CheckoutController(gateway)
        controller.open()

        snapshot = controller.upload("harbor.jpg", JPEG, "image/jpeg")

        assert snapshot.price is server_quote


class TestErrors:
    def test_rejected_file_never_reaches_gateway(self, controller, gateway):
        snapshot = controller.upload("notes.gif", b"GIF89a", "image/gif")

        assert gateway.uploads == []
        assert snapshot.state == FlowState.IDLE
        assert snapshot.error.kind == "validation"
        assert markup.ERROR in snapshot.visible

    def test_upload_failure_shows_server_message(self, controller, gateway):
        gateway.upload_error = SiteAPIResponseError("Image is too small to upscale.")

        snapshot = controller.upload("harbor.jpg", JPEG, "image/jpeg")

        assert snapshot.state == FlowState.IDLE
        assert snapshot.error.message == "Image is too small to upscale."

    def test_upload_transport_failure_shows_generic_message(self, controller, gateway):
        gateway.upload_error = SiteAPIHTTPError("HTTP 502: Bad Gateway", status_code=502, url="u")

        snapshot = controller.upload("harbor.jpg", JPEG, "image/jpeg")

        assert snapshot.error.message == "Upload failed. Please try again."

    def test_invalid_email_recorded_in_snapshot(self, controller):
        controller.upload("harbor.jpg", JPEG, "image/jpeg")

        snapshot = controller.set_email("nope")

        assert snapshot.error.stage == "email"
        assert not snapshot.checkout_enabled

    def test_checkout_failure_and_retry(self, controller, gateway):
        controller.upload("harbor.jpg", JPEG, "image/jpeg")
        controller.set_email("customer@example.org")
        gateway.checkout_error = SiteAPIHTTPError("timeout", status_code=0, url="u")

        snapshot = controller.checkout()
        assert snapshot.state == FlowState.ERROR
        assert snapshot.error.message == "Checkout failed. Please try again."
        assert snapshot.error.retryable

        gateway.checkout_error = None
        snapshot = controller.retry()
        assert snapshot.state == FlowState.CHECKOUT_READY
        assert snapshot.email == "customer@example.org"

        snapshot = controller.checkout()
        assert snapshot.state == FlowState.SUCCESS
        assert len(gateway.checkouts) == 2

    def test_pricing_failure_and_retry(self, gateway):
        controller = CheckoutController(gateway, pricing=FlakyPricing(failures=1))
        controller.open()

        snapshot = controller.upload("harbor.jpg", JPEG, "image/jpeg")
        assert snapshot.state == FlowState.UPLOADED
        assert snapshot.error.stage == "pricing"

        snapshot = controller.retry()
        assert snapshot.error is None
        assert snapshot.state == FlowState.RESOLUTION_CHOSEN

    def test_checkout_before_ready_raises(self, controller):
        controller.upload("harbor.jpg", JPEG, "image/jpeg")

        with pytest.raises(FlowStateError):
            controller.checkout()


class TestLifecycle:
    def test_close_and_reopen(self, controller):
        controller.upload("harbor.jpg", JPEG, "image/jpeg")
        controller.set_email("customer@example.org")

        closed = controller.close()
        assert not closed.is_open
        assert closed.visible == frozenset()

        reopened = controller.open()
        assert reopened.state == FlowState.IDLE
        assert reopened.email == ""
        assert reopened.image is None

    def test_remove_image(self, controller):
        controller.upload("harbor.jpg", JPEG, "image/jpeg")

        snapshot = controller.remove_image()

        assert snapshot.state == FlowState.IDLE
        assert snapshot.visible == frozenset({markup.UPLOAD_ZONE})
