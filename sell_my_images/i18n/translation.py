"""Translation and escaping layer.

Every user-visible string goes through a ``Translator``. Components receive
one at construction time so tests can substitute a fake without patching
module globals.
"""

import gettext
import re
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence, Union
from urllib.parse import quote, urlsplit

from markupsafe import Markup, escape

TEXT_DOMAIN = "sell-my-images"

ALLOWED_URL_SCHEMES = ("http", "https", "mailto")

# Characters left untouched when re-encoding a URL
_URL_SAFE_CHARS = "/:?#[]@!$&'()*+,;=%-._~"
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class Translator(Protocol):
    """Translation plus output-context-aware escaping."""

    def translate(self, text: str, domain: str = TEXT_DOMAIN) -> str:
        ...

    def escape_html(self, text: str) -> Markup:
        ...

    def escape_attr(self, text: str) -> Markup:
        ...

    def escape_url(self, url: str) -> str:
        ...


class GettextTranslator:
    """Translator backed by gettext catalogs.

    Missing catalogs fall back to the source strings, so the default instance
    works without any ``.mo`` files installed.

    Args:
        localedir: Directory holding ``<lang>/LC_MESSAGES/<domain>.mo``
        languages: Preferred languages, most preferred first
    """

    def __init__(
        self,
        localedir: Optional[Union[str, Path]] = None,
        languages: Optional[Sequence[str]] = None,
    ):
        self.localedir = str(localedir) if localedir else None
        self.languages = list(languages) if languages else None
        self._catalogs: Dict[str, gettext.NullTranslations] = {}
        self._lock = threading.Lock()

    def _catalog(self, domain: str) -> gettext.NullTranslations:
        catalog = self._catalogs.get(domain)
        if catalog is None:
            with self._lock:
                catalog = self._catalogs.get(domain)
                if catalog is None:
                    catalog = gettext.translation(
                        domain,
                        localedir=self.localedir,
                        languages=self.languages,
                        fallback=True,
                    )
                    self._catalogs[domain] = catalog
        return catalog

    def translate(self, text: str, domain: str = TEXT_DOMAIN) -> str:
        return self._catalog(domain).gettext(text)

    def escape_html(self, text: str) -> Markup:
        return escape("" if text is None else text)

    def escape_attr(self, text: str) -> Markup:
        # markupsafe escapes both quote styles, so the result is attribute-safe
        return escape("" if text is None else text)

    def escape_url(self, url: str) -> str:
        """Clean a URL for output.

        Returns an empty string for URLs with a scheme outside
        ALLOWED_URL_SCHEMES (``javascript:`` and friends). Relative URLs are kept.
        """
        if not url:
            return ""

        cleaned = _CONTROL_CHARS.sub("", str(url)).strip()
        if not cleaned:
            return ""

        scheme = urlsplit(cleaned).scheme.lower()
        if scheme and scheme not in ALLOWED_URL_SCHEMES:
            return ""

        return quote(cleaned, safe=_URL_SAFE_CHARS)


_default_translator: Optional[GettextTranslator] = None


def default_translator() -> GettextTranslator:
    """Shared fallback translator (source-language strings, no catalogs)."""
    global _default_translator
    if _default_translator is None:
        _default_translator = GettextTranslator()
    return _default_translator
