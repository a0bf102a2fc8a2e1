"""Translation, escaping and template environment helpers."""

from .jinja import build_environment
from .translation import (
    TEXT_DOMAIN,
    GettextTranslator,
    Translator,
    default_translator,
)

__all__ = [
    "TEXT_DOMAIN",
    "Translator",
    "GettextTranslator",
    "default_translator",
    "build_environment",
]
