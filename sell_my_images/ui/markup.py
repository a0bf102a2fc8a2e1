"""Element identifiers shared by the rendered markup and the checkout flow.

Front-end scripts bind to these ids, so they are part of the public contract
and must stay stable.
"""

UPLOADER_CLASS = "smi-image-uploader"

UPLOAD_ZONE = "smi-upload-zone"
DROPZONE = "smi-dropzone"
BROWSE_BUTTON = "smi-browse-button"
FILE_INPUT = "smi-file-input"
PREVIEW_ZONE = "smi-preview-zone"
PREVIEW_IMAGE = "smi-preview-image"
REMOVE_IMAGE = "smi-remove-image"
IMAGE_DIMENSIONS = "smi-image-dimensions"
RESOLUTION_PICKER = "smi-resolution-picker"
RESOLUTION_RADIO_NAME = "smi-resolution"
EMAIL_SECTION = "smi-email-section"
EMAIL_INPUT = "smi-email-input"
CHECKOUT_SECTION = "smi-checkout-section"
CHECKOUT_BUTTON = "smi-checkout-button"
LOADING = "smi-loading"
LOADING_TEXT = "smi-loading-text"
ERROR = "smi-error"
ERROR_TEXT = "smi-error-text"

MODAL = "smi-modal"
MODAL_EMAIL_INPUT = "smi-email"
MODAL_RESOLUTION_RADIO_NAME = "resolution"


def output_id(resolution: str) -> str:
    """Id of the element showing the output size for ``resolution``."""
    return f"smi-output-{resolution}"


def price_id(resolution: str) -> str:
    """Id of the element showing the price for ``resolution``."""
    return f"smi-price-{resolution}"
