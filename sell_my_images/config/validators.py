"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List

from .options import DEFAULT_OPTIONS, TERMS_CONDITIONS_URL


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect a raw configuration mapping for likely mistakes.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    options = config_dict.get("options") or {}
    if isinstance(options, dict):
        unknown = sorted(key for key in options if key not in DEFAULT_OPTIONS)
        if unknown:
            warning_messages.append(
                f"Unknown options will be ignored: {', '.join(unknown)}"
            )

        terms_url = options.get(TERMS_CONDITIONS_URL)
        if isinstance(terms_url, str) and terms_url.startswith("http://"):
            warning_messages.append(
                f"Terms & Conditions URL is not served over HTTPS: {terms_url}"
            )

        markup = options.get("smi_markup_percentage")
        try:
            if markup is not None and float(markup) < 0:
                warning_messages.append(
                    f"Negative smi_markup_percentage ({markup}) prices images below cost"
                )
        except (TypeError, ValueError):
            # Reported as a hard error by AppConfig
            pass

    uploader = config_dict.get("uploader") or {}
    if isinstance(uploader, dict):
        max_size = uploader.get("max_file_size_mb")
        if isinstance(max_size, int) and max_size > 50:
            warning_messages.append(
                f"Large max_file_size_mb ({max_size}) may exceed the server upload limit"
            )

    site = config_dict.get("site") or {}
    if isinstance(site, dict) and not site.get("admin_email"):
        warning_messages.append(
            "site.admin_email is not set; admin copies of download emails are disabled"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit each message through the warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
