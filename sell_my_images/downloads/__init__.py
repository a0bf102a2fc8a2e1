"""Download link generation, validation and expiry."""

from .links import (
    DOWNLOAD_TOKEN_LENGTH,
    InvalidTokenError,
    build_download_url,
    compute_expiry,
    download_expiry_hours,
    generate_download_token,
    is_expired,
    is_valid_token,
)

__all__ = [
    "DOWNLOAD_TOKEN_LENGTH",
    "InvalidTokenError",
    "build_download_url",
    "compute_expiry",
    "download_expiry_hours",
    "generate_download_token",
    "is_expired",
    "is_valid_token",
]
