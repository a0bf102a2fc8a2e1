"""Token-bearing download links and their expiry."""

import re
import secrets
import string
from datetime import datetime, timedelta
from typing import Optional

from sell_my_images.config.options import DOWNLOAD_EXPIRY_HOURS, OptionsStore, get_int_option
from sell_my_images.utils.timestamps import ensure_utc, utc_now

DOWNLOAD_TOKEN_LENGTH = 64
DEFAULT_DOWNLOAD_EXPIRY_HOURS = 24
DEFAULT_API_BASE_PATH = "/wp-json/smi/v1"

_TOKEN_ALPHABET = string.ascii_letters + string.digits
_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9]{%d}$" % DOWNLOAD_TOKEN_LENGTH)


class InvalidTokenError(ValueError):
    """Download token does not have the expected format."""

    pass


def generate_download_token() -> str:
    """Generate a 64-character alphanumeric token from a CSPRNG."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(DOWNLOAD_TOKEN_LENGTH))


def is_valid_token(token: Optional[str]) -> bool:
    return bool(token) and _TOKEN_PATTERN.match(token) is not None


def build_download_url(site_url: str, token: str, base_path: str = DEFAULT_API_BASE_PATH) -> str:
    """Public URL serving the upscaled file for ``token``.

    Raises:
        InvalidTokenError: If the token is malformed
    """
    if not is_valid_token(token):
        raise InvalidTokenError("Download token must be 64 alphanumeric characters")
    return f"{site_url.rstrip('/')}/{base_path.strip('/')}/download/{token}"


def download_expiry_hours(options: OptionsStore) -> int:
    """Configured link lifetime in hours; invalid or non-positive values use the default."""
    hours = get_int_option(options, DOWNLOAD_EXPIRY_HOURS, DEFAULT_DOWNLOAD_EXPIRY_HOURS)
    return hours if hours > 0 else DEFAULT_DOWNLOAD_EXPIRY_HOURS


def compute_expiry(options: OptionsStore, now: Optional[datetime] = None) -> datetime:
    """When a link issued at ``now`` stops working (UTC)."""
    issued_at = ensure_utc(now) if now is not None else utc_now()
    return issued_at + timedelta(hours=download_expiry_hours(options))


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True once ``expires_at`` has passed. Links without an expiry never expire."""
    if expires_at is None:
        return False
    current = ensure_utc(now) if now is not None else utc_now()
    return ensure_utc(expires_at) < current
