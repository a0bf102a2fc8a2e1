"""Core domain models: resolutions, upscale jobs and notification contexts.

Models validate at construction so a malformed job is rejected at the
boundary instead of surfacing later as a blank field in an email.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol

from pydantic import BaseModel, Field, field_validator


class Resolution(str, Enum):
    """Upscale tier offered to the customer."""

    X4 = "4x"
    X8 = "8x"

    @property
    def upscale_factor(self) -> int:
        return _UPSCALE_FACTORS[self]

    @classmethod
    def default(cls) -> "Resolution":
        return cls.X4


_UPSCALE_FACTORS = {Resolution.X4: 4, Resolution.X8: 8}


class JobStatus(str, Enum):
    """Lifecycle of an upscale job in the job store."""

    AWAITING_PAYMENT = "awaiting_payment"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    ABANDONED = "abandoned"


class Job(BaseModel):
    """A completed (or in-flight) image upscale request.

    Only ``resolution`` and ``image_url`` are needed to compose the download
    email; the remaining fields are carried for the delivery service.
    """

    resolution: Resolution = Field(..., description="Upscale tier (4x or 8x)")
    image_url: str = Field(..., description="Location of the source image")
    job_id: Optional[str] = Field(None, description="Job identifier in the job store")
    email: Optional[str] = Field(None, description="Customer email address")
    status: JobStatus = Field(JobStatus.COMPLETED, description="Job lifecycle status")
    download_token: Optional[str] = Field(None, description="Token embedded in the download URL")
    download_expires_at: Optional[datetime] = Field(
        None, description="When the download link stops working (UTC)"
    )

    model_config = {"frozen": True}

    @field_validator("image_url")
    @classmethod
    def strip_image_url(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("image_url cannot be empty or whitespace-only")
        return stripped

    @field_validator("email", "job_id", "download_token")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @field_validator("download_expires_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return None
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def is_completed(self) -> bool:
        return self.status == JobStatus.COMPLETED


class NotificationContext(BaseModel):
    """Everything the composer needs to write a download email.

    ``terms_conditions_url`` is None when no terms section should be rendered;
    empty strings are normalised to None.
    """

    job: Job
    download_url: str = Field(..., min_length=1)
    expiry_date: str = Field(..., min_length=1)
    site_name: str = Field(..., min_length=1)
    terms_conditions_url: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("download_url", "expiry_date", "site_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("terms_conditions_url")
    @classmethod
    def blank_terms_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @property
    def has_terms(self) -> bool:
        return self.terms_conditions_url is not None


class JobStore(Protocol):
    """Source of job records. Storage lives outside this package."""

    def get_job(self, job_id: str) -> Optional[Job]:
        ...
