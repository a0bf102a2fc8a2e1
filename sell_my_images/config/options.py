"""Site options store.

The plugin reads a handful of operator settings (terms URL, download expiry,
markup) by key. Callers receive an ``OptionsStore`` explicitly instead of
reaching for global state; ``DictOptionsStore`` backs it with the ``options``
section of the YAML config.
"""

from typing import Any, Dict, Mapping, Optional, Protocol

TERMS_CONDITIONS_URL = "smi_terms_conditions_url"
DOWNLOAD_EXPIRY_HOURS = "smi_download_expiry_hours"
MARKUP_PERCENTAGE = "smi_markup_percentage"

DEFAULT_OPTIONS: Dict[str, str] = {
    TERMS_CONDITIONS_URL: "",
    DOWNLOAD_EXPIRY_HOURS: "24",
    MARKUP_PERCENTAGE: "500",
}


class OptionsStore(Protocol):
    """Read access to site options."""

    def get_option(self, key: str, default: Any = None) -> Any:
        ...


class DictOptionsStore:
    """OptionsStore over a plain mapping, falling back to DEFAULT_OPTIONS.

    An explicit ``default`` argument wins over the built-in defaults, the same
    way a caller-supplied default behaves in the site's own options API.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        self._options = dict(options or {})

    def get_option(self, key: str, default: Any = None) -> Any:
        if key in self._options:
            return self._options[key]
        if default is not None:
            return default
        return DEFAULT_OPTIONS.get(key)


def get_int_option(store: OptionsStore, key: str, default: int) -> int:
    """Read an option as an integer, using ``default`` when unset or malformed."""
    try:
        return int(str(store.get_option(key)).strip())
    except (TypeError, ValueError):
        return default


def get_float_option(store: OptionsStore, key: str, default: float) -> float:
    """Read an option as a float, using ``default`` when unset or malformed."""
    try:
        return float(str(store.get_option(key)).strip())
    except (TypeError, ValueError):
        return default
