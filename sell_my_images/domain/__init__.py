"""Domain models for upscale jobs and notifications."""

from .models import Job, JobStatus, JobStore, NotificationContext, Resolution

__all__ = ["Job", "JobStatus", "JobStore", "NotificationContext", "Resolution"]
