"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

ACCEPTED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp"]


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SiteConfig(BaseModel):
    """Identity of the site selling the images."""

    name: str = Field(..., min_length=1, description="Display name used in emails")
    url: str = Field(..., min_length=1, description="Public base URL of the site")
    admin_email: Optional[EmailStr] = Field(
        None, description="Operator address; receives copies and is used as sender"
    )
    sender_name: Optional[str] = Field(
        None, description="Display name on outgoing mail (defaults to site name)"
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Site name cannot be empty or whitespace-only")
        return stripped

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop any trailing slash."""
        stripped = v.strip().rstrip("/")
        if not stripped.startswith(("http://", "https://")):
            raise ValueError(f"Site url must start with http:// or https://, got: {v}")
        return stripped

    @property
    def from_name(self) -> str:
        return self.sender_name or self.name


class UploaderConfig(BaseModel):
    """Client-side upload limits shared by the uploader block and checkout flow."""

    max_file_size_mb: int = Field(10, ge=1, le=100, description="Maximum upload size in MB")
    accepted_types: List[str] = Field(
        default_factory=lambda: list(ACCEPTED_IMAGE_TYPES),
        description="MIME types accepted by the file input",
    )

    @field_validator("accepted_types")
    @classmethod
    def normalize_types(cls, v: List[str]) -> List[str]:
        normalized = [t.strip().lower() for t in v if t and t.strip()]
        if not normalized:
            raise ValueError("accepted_types must list at least one MIME type")
        return normalized

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


class EmailConfig(BaseModel):
    """Download email delivery settings."""

    use_tls: bool = Field(True, description="Use TLS/STARTTLS for secure connection")
    max_retries: int = Field(
        3, ge=0, le=10, description="Number of retry attempts for failed email sends"
    )
    retry_backoff_multiplier: float = Field(
        2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier for retries"
    )
    retry_initial_delay: int = Field(
        5, ge=1, le=60, description="Initial retry delay in seconds"
    )
    send_admin_copy: bool = Field(
        True, description="Send a 'Copy:' of every download email to the site admin"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class ApiConfig(BaseModel):
    """Settings for talking to the site's REST API."""

    base_path: str = Field("/wp-json/smi/v1", description="REST namespace path")
    http_request_timeout: int = Field(
        30, ge=5, le=300, description="Request timeout in seconds"
    )
    user_agent: str = Field("SellMyImages/1.0", min_length=1)

    @field_validator("base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        return "/" + v.strip().strip("/")


class AppConfig(BaseModel):
    """Root configuration object."""

    site: SiteConfig = Field(..., description="Site identity")
    options: Dict[str, str] = Field(
        default_factory=dict, description="Site options (smi_* keys)"
    )
    uploader: UploaderConfig = Field(default_factory=UploaderConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @field_validator("options", mode="before")
    @classmethod
    def stringify_options(cls, v):
        """Options are stored as strings, like the site's options table."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("options must be a mapping of option name to value")
        return {str(key): "" if value is None else str(value) for key, value in v.items()}

    @model_validator(mode="after")
    def validate_options(self):
        expiry = self.options.get("smi_download_expiry_hours")
        if expiry is not None:
            try:
                hours = int(expiry)
            except ValueError:
                raise ValueError(
                    f"smi_download_expiry_hours must be an integer, got: {expiry!r}"
                )
            if hours < 1:
                raise ValueError("smi_download_expiry_hours must be at least 1")

        markup = self.options.get("smi_markup_percentage")
        if markup is not None:
            try:
                float(markup)
            except ValueError:
                raise ValueError(
                    f"smi_markup_percentage must be a number, got: {markup!r}"
                )

        return self
