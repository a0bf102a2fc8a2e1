"""SMTP credentials and per-deployment overrides read from the environment.

``.env`` is loaded by the CLI before this runs, so values may come from either
the process environment or that file.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EnvironmentConfig:
    """Mail transport settings and deployment overrides."""

    smtp_host: str
    smtp_port: int
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    log_level: Optional[str] = None
    environment: str = "local"

    @property
    def has_credentials(self) -> bool:
        return bool(self.smtp_user and self.smtp_pass)


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else None


def _parse_port(raw: Optional[str], errors: List[str]) -> Optional[int]:
    if raw is None:
        errors.append("SMTP_PORT is not set")
        return None
    try:
        port = int(raw)
    except ValueError:
        errors.append(f"SMTP_PORT must be an integer, got {raw!r}")
        return None
    if not 1 <= port <= 65535:
        errors.append(f"SMTP_PORT {port} is outside the range 1-65535")
        return None
    return port


def load_environment_config() -> EnvironmentConfig:
    """
    Read mail settings from the environment.

    Variables:
    - SMTP_HOST, SMTP_PORT: required by ``send-email``
    - SMTP_USER, SMTP_PASS: optional, but only as a pair
    - LOG_LEVEL: overrides the configured log level
    - ENVIRONMENT: label stamped on log records (default: local)

    Raises:
        ConfigurationError: Listing every problem found
    """
    errors: List[str] = []

    smtp_host = _env("SMTP_HOST")
    if smtp_host is None:
        errors.append("SMTP_HOST is not set")
    smtp_port = _parse_port(_env("SMTP_PORT"), errors)

    smtp_user = _env("SMTP_USER")
    smtp_pass = _env("SMTP_PASS")
    if bool(smtp_user) != bool(smtp_pass):
        missing = "SMTP_PASS" if smtp_user else "SMTP_USER"
        errors.append(f"SMTP_USER and SMTP_PASS must be set together ({missing} is missing)")

    log_level = _env("LOG_LEVEL")
    if log_level is not None:
        log_level = log_level.upper()
        if log_level not in VALID_LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}, got {log_level!r}")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in the SMTP settings",
                "Unset SMTP_USER and SMTP_PASS for servers without authentication",
            ],
        )

    return EnvironmentConfig(
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_pass=smtp_pass,
        log_level=log_level,
        environment=_env("ENVIRONMENT") or "local",
    )
