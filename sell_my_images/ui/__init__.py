"""Uploader block and purchase modal rendering."""

from . import markup
from .attributes import DEFAULT_MAX_FILE_SIZE_MB, DEFAULT_TITLE, BlockAttributes
from .renderer import UIRenderError, UploaderRenderer

__all__ = [
    "markup",
    "BlockAttributes",
    "UploaderRenderer",
    "UIRenderError",
    "DEFAULT_TITLE",
    "DEFAULT_MAX_FILE_SIZE_MB",
]
