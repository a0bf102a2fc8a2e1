"""Configuration management for Sell My Images."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    ApiConfig,
    AppConfig,
    EmailConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    SiteConfig,
    UploaderConfig,
)
from .options import DEFAULT_OPTIONS, DictOptionsStore, OptionsStore

__all__ = [
    # Loaders
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Models
    "AppConfig",
    "SiteConfig",
    "UploaderConfig",
    "EmailConfig",
    "LoggingConfig",
    "ApiConfig",
    "EnvironmentConfig",
    "LogLevel",
    "LogFormat",
    # Options
    "OptionsStore",
    "DictOptionsStore",
    "DEFAULT_OPTIONS",
    # Exceptions
    "ConfigurationError",
]
