"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from sell_my_images.domain.models import Job, JobStatus, NotificationContext, Resolution


class TestResolution:
    def test_values(self):
        assert [r.value for r in Resolution] == ["4x", "8x"]

    def test_upscale_factor(self):
        assert Resolution.X4.upscale_factor == 4
        assert Resolution("8x").upscale_factor == 8

    def test_default_is_4x(self):
        assert Resolution.default() is Resolution.X4

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            Resolution("2x")


class TestJob:
    """Tests for Job model."""

    def test_minimal_job(self):
        job = Job(resolution="4x", image_url="https://acme.test/a.jpg")

        assert job.resolution is Resolution.X4
        assert job.status is JobStatus.COMPLETED
        assert job.is_completed
        assert job.email is None

    def test_image_url_is_required(self):
        with pytest.raises(ValidationError):
            Job(resolution="4x", image_url="   ")

    def test_invalid_resolution(self):
        with pytest.raises(ValidationError):
            Job(resolution="16x", image_url="https://acme.test/a.jpg")

    def test_blank_optional_strings_become_none(self):
        job = Job(
            resolution="8x",
            image_url="https://acme.test/a.jpg",
            email="  ",
            job_id="",
            download_token=" ",
        )

        assert job.email is None
        assert job.job_id is None
        assert job.download_token is None

    def test_expiry_normalised_to_utc(self):
        plus_one = timezone(timedelta(hours=1))
        job = Job(
            resolution="4x",
            image_url="https://acme.test/a.jpg",
            download_expires_at=datetime(2025, 1, 5, 16, 0, tzinfo=plus_one),
        )

        assert job.download_expires_at == datetime(2025, 1, 5, 15, 0, tzinfo=timezone.utc)
        assert job.download_expires_at.tzinfo == timezone.utc

    def test_naive_expiry_treated_as_utc(self):
        job = Job(
            resolution="4x",
            image_url="https://acme.test/a.jpg",
            download_expires_at=datetime(2025, 1, 5, 15, 0),
        )

        assert job.download_expires_at.tzinfo == timezone.utc

    def test_job_is_frozen(self):
        job = Job(resolution="4x", image_url="https://acme.test/a.jpg")

        with pytest.raises(ValidationError):
            job.image_url = "https://acme.test/b.jpg"

    def test_not_completed(self):
        job = Job(resolution="4x", image_url="https://acme.test/a.jpg", status="processing")

        assert not job.is_completed


class TestNotificationContext:
    @pytest.fixture
    def job(self):
        return Job(resolution="4x", image_url="https://acme.test/a.jpg")

    def test_valid_context(self, job):
        context = NotificationContext(
            job=job,
            download_url=" https://acme.test/dl/t ",
            expiry_date="Jan 5, 2025 at 3:00 PM",
            site_name="Acme",
        )

        assert context.download_url == "https://acme.test/dl/t"
        assert context.terms_conditions_url is None
        assert not context.has_terms

    @pytest.mark.parametrize("field", ["download_url", "expiry_date", "site_name"])
    def test_blank_required_field(self, job, field):
        values = {
            "job": job,
            "download_url": "https://acme.test/dl/t",
            "expiry_date": "soon",
            "site_name": "Acme",
        }
        values[field] = "   "

        with pytest.raises(ValidationError):
            NotificationContext(**values)

    def test_terms_url(self, job):
        context = NotificationContext(
            job=job,
            download_url="https://acme.test/dl/t",
            expiry_date="soon",
            site_name="Acme",
            terms_conditions_url="https://acme.test/terms",
        )

        assert context.has_terms
