"""Assembly and validation of NotificationContext objects.

Required fields are checked explicitly, in a fixed order, so callers get a
MissingFieldError naming the first absent key instead of a generic
validation report or an email with blank interpolations.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from sell_my_images.config.options import TERMS_CONDITIONS_URL, OptionsStore
from sell_my_images.domain.models import Job, NotificationContext
from sell_my_images.utils.timestamps import format_expiry_date

from .models import InvalidFieldError, MissingFieldError

JOB_FIELDS = ("resolution", "image_url")
REQUIRED_FIELDS = ("resolution", "image_url", "download_url", "expiry_date", "site_name")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _raise_invalid(error: ValidationError) -> None:
    first = error.errors()[0]
    field = str(first["loc"][-1]) if first["loc"] else "<context>"
    raise InvalidFieldError(field, first["msg"]) from error


def load_notification_context(
    data: Union[NotificationContext, Mapping[str, Any]],
) -> NotificationContext:
    """Validate a mapping into a NotificationContext.

    Accepts either flat keys (``resolution``, ``image_url``, ``download_url``,
    ``expiry_date``, ``site_name``, ``terms_conditions_url``) or a ``job`` entry
    holding a Job or a mapping with the job fields.

    Raises:
        MissingFieldError: If a required field is absent or empty
        InvalidFieldError: If a field is present but invalid (e.g. resolution "2x")
    """
    if isinstance(data, NotificationContext):
        return data

    job_source = data.get("job")
    if isinstance(job_source, Job):
        job_values = {"resolution": job_source.resolution, "image_url": job_source.image_url}
    elif isinstance(job_source, Mapping):
        job_values = {field: job_source.get(field) for field in JOB_FIELDS}
    else:
        job_values = {field: data.get(field) for field in JOB_FIELDS}

    values = {**job_values, **{key: data.get(key) for key in REQUIRED_FIELDS[2:]}}
    for field in REQUIRED_FIELDS:
        if _is_blank(values[field]):
            raise MissingFieldError(field)

    try:
        job = job_source if isinstance(job_source, Job) else Job(**job_values)
        return NotificationContext(
            job=job,
            download_url=values["download_url"],
            expiry_date=values["expiry_date"],
            site_name=values["site_name"],
            terms_conditions_url=data.get("terms_conditions_url") or None,
        )
    except ValidationError as e:
        _raise_invalid(e)


def build_notification_context(
    job: Job,
    download_url: Optional[str],
    expiry_date: Union[str, datetime, None],
    site_name: Optional[str],
    terms_conditions_url: Optional[str] = None,
) -> NotificationContext:
    """Build a context for ``job`` from already-derived values.

    ``expiry_date`` may be given pre-formatted or as a datetime, which is
    formatted with format_expiry_date().

    Raises:
        MissingFieldError: If a required value is absent or empty
    """
    if isinstance(expiry_date, datetime):
        expiry_date = format_expiry_date(expiry_date)

    return load_notification_context(
        {
            "job": job,
            "download_url": download_url,
            "expiry_date": expiry_date,
            "site_name": site_name,
            "terms_conditions_url": terms_conditions_url,
        }
    )


def terms_url_from_options(options: OptionsStore) -> Optional[str]:
    """The configured terms & conditions URL, or None when not configured."""
    value = options.get_option(TERMS_CONDITIONS_URL, "")
    if _is_blank(value):
        return None
    return str(value).strip()
