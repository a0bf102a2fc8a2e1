"""Download notification delivery.

Orchestrates the "your image is ready" email for a completed job:
context assembly, composition, MIME message construction and SMTP
delivery with retry/backoff, plus a copy for the site administrator.
"""

import logging
import time
from email.message import EmailMessage
from typing import Callable, Optional, Tuple

from sell_my_images.config.environment import EnvironmentConfig
from sell_my_images.config.models import AppConfig
from sell_my_images.config.options import DictOptionsStore, OptionsStore
from sell_my_images.domain.models import Job, NotificationContext
from sell_my_images.downloads.links import InvalidTokenError, build_download_url
from sell_my_images.logging import get_logger
from sell_my_images.logging.context import log_context

from .composer import NotificationComposer
from .models import (
    InvalidFieldError,
    NotificationResult,
    NotificationTemplateError,
    SMTPDeliveryError,
)
from .payloads import build_notification_context, terms_url_from_options
from .smtp_client import SMTPClient, build_sender_address, normalize_recipient

logger = get_logger(__name__, component="notification")

MAX_RETRY_DELAY_SECONDS = 60.0
ADMIN_COPY_PREFIX = "Copy: "


class DownloadNotificationService:
    """Sends download-ready emails for completed upscale jobs.

    Args:
        composer: Notification composer (creates default if None)
        smtp_client: SMTP transport (creates default if None)
        logger_instance: Logger (uses module logger if None)
        sleep: Delay function used between retries
    """

    def __init__(
        self,
        composer: Optional[NotificationComposer] = None,
        smtp_client: Optional[SMTPClient] = None,
        logger_instance: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.composer = composer or NotificationComposer()
        self.smtp_client = smtp_client or SMTPClient()
        self.logger = logger_instance or logger
        self.sleep = sleep

    def build_context(
        self,
        job: Job,
        app_config: AppConfig,
        options: Optional[OptionsStore] = None,
    ) -> NotificationContext:
        """Derive the notification context for ``job``.

        Raises:
            MissingFieldError: If the job has no download token or expiry
            InvalidFieldError: If the download token is malformed
        """
        options = options or DictOptionsStore(app_config.options)

        download_url = None
        if job.download_token:
            try:
                download_url = build_download_url(
                    app_config.site.url, job.download_token, app_config.api.base_path
                )
            except InvalidTokenError as e:
                raise InvalidFieldError("download_token", str(e)) from e

        return build_notification_context(
            job,
            download_url=download_url,
            expiry_date=job.download_expires_at,
            site_name=app_config.site.name,
            terms_conditions_url=terms_url_from_options(options),
        )

    def send_download_notification(
        self,
        job: Job,
        app_config: AppConfig,
        env_config: EnvironmentConfig,
        options: Optional[OptionsStore] = None,
    ) -> NotificationResult:
        """Email the download link to the customer and a copy to the admin.

        The customer copy is only sent when the job carries a valid address.

        Returns:
            NotificationResult describing the customer delivery

        Raises:
            MissingFieldError: If the job lacks data the email requires
        """
        with log_context(job_id=job.job_id):
            if not job.is_completed:
                self.logger.info(
                    f"Skipping download email for job {job.job_id} - status {job.status.value}",
                    extra={"event": "notification.skip", "reason": "job_not_completed"},
                )
                return NotificationResult(
                    job_id=job.job_id,
                    status="skipped",
                    error=f"Job status is {job.status.value}, not completed",
                )

            context = self.build_context(job, app_config, options)

            try:
                composed = self.composer.compose(context)
                html_body = self.composer.compose_html(context)
            except NotificationTemplateError as e:
                self.logger.error(f"Template rendering failed: {e}")
                return NotificationResult(job_id=job.job_id, status="failed", error=str(e))

            site = app_config.site
            sender = build_sender_address(site)
            admin_email = normalize_recipient(str(site.admin_email)) if site.admin_email else None
            customer_email = normalize_recipient(job.email)

            result = NotificationResult(job_id=job.job_id, status="skipped")

            if customer_email:
                message = build_email_message(
                    composed.subject, composed.message, html_body, customer_email, sender, admin_email
                )
                attempts, error = self._send_with_retry(message, env_config, app_config)
                result.attempts = attempts
                result.customer_notified = error is None
                result.status = "sent" if error is None else "failed"
                result.error = error
                if error is None:
                    self.logger.info(
                        f"Download email sent for job {job.job_id} (attempts: {attempts})",
                        extra={"event": "notification.send.success", "attempt": attempts},
                    )
            else:
                result.error = "No valid customer email address"
                self.logger.warning(
                    f"Job {job.job_id} has no valid customer email; customer copy skipped",
                    extra={"event": "notification.skip", "reason": "no_customer_email"},
                )

            if app_config.email.send_admin_copy and admin_email and admin_email != customer_email:
                admin_message = build_email_message(
                    ADMIN_COPY_PREFIX + composed.subject,
                    composed.message,
                    html_body,
                    admin_email,
                    sender,
                    admin_email,
                )
                _, admin_error = self._send_with_retry(admin_message, env_config, app_config)
                result.admin_notified = admin_error is None
                if admin_error:
                    self.logger.warning(
                        f"Admin copy for job {job.job_id} failed: {admin_error}",
                        extra={"event": "notification.admin_copy.failure"},
                    )

            return result

    def _send_with_retry(
        self,
        message: EmailMessage,
        env_config: EnvironmentConfig,
        app_config: AppConfig,
    ) -> Tuple[int, Optional[str]]:
        """Send with exponential backoff.

        Returns:
            (attempts made, last error message or None on success)
        """
        email_config = app_config.email
        max_attempts = email_config.max_retries + 1
        last_error = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = min(
                    email_config.retry_initial_delay
                    * (email_config.retry_backoff_multiplier ** (attempt - 2)),
                    MAX_RETRY_DELAY_SECONDS,
                )
                self.logger.warning(
                    f"Retrying delivery to {message['To']} (attempt {attempt}/{max_attempts}) after {delay:.1f}s",
                    extra={"event": "notification.send.attempt", "attempt": attempt},
                )
                self.sleep(delay)

            try:
                self.smtp_client.send(message, env_config, email_config.use_tls)
                return attempt, None
            except SMTPDeliveryError as e:
                last_error = str(e)
                self.logger.warning(
                    f"SMTP delivery failed (attempt {attempt}/{max_attempts}): {e}",
                    extra={
                        "event": "notification.send.failure",
                        "attempt": attempt,
                        "retry_remaining": attempt < max_attempts,
                    },
                )

        self.logger.error(
            f"SMTP delivery to {message['To']} failed after {max_attempts} attempts: {last_error}",
            extra={"event": "notification.send.exhausted", "attempts": max_attempts},
        )
        return max_attempts, last_error


def build_email_message(
    subject: str,
    text_body: str,
    html_body: Optional[str],
    recipient: str,
    sender: str,
    reply_to: Optional[str] = None,
) -> EmailMessage:
    """Build a multipart/alternative message (plain text first, then HTML)."""
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = recipient
    if reply_to:
        message["Reply-To"] = reply_to

    message.set_content(text_body)
    if html_body:
        message.add_alternative(html_body, subtype="html")

    return message
