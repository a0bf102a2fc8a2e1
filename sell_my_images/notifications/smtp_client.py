"""SMTP transport for download emails.

Thin wrapper around smtplib handling implicit TLS vs STARTTLS, optional
authentication and connection cleanup. Connection factories are injectable
for tests.
"""

import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable, Optional

from email_validator import EmailNotValidError, validate_email

from sell_my_images.config.environment import EnvironmentConfig
from sell_my_images.config.models import SiteConfig
from sell_my_images.logging import get_logger

from .models import SMTPDeliveryError

logger = get_logger(__name__, component="smtp")

IMPLICIT_TLS_PORT = 465


class SMTPClient:
    """Sends EmailMessage objects through the configured SMTP server."""

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(
        self,
        message: EmailMessage,
        env_config: EnvironmentConfig,
        use_tls: bool = True,
    ) -> None:
        """Deliver ``message``.

        Port 465 uses implicit TLS; any other port connects in plain text and
        upgrades with STARTTLS when ``use_tls`` is set.

        Raises:
            SMTPDeliveryError: If connecting, authenticating or sending fails
        """
        smtp = None
        try:
            if env_config.smtp_port == IMPLICIT_TLS_PORT:
                logger.debug(
                    f"Connecting to {env_config.smtp_host}:{env_config.smtp_port} with implicit TLS"
                )
                smtp = self.smtp_ssl_factory(
                    env_config.smtp_host,
                    env_config.smtp_port,
                    context=ssl.create_default_context(),
                )
            else:
                logger.debug(f"Connecting to {env_config.smtp_host}:{env_config.smtp_port}")
                smtp = self.smtp_factory(env_config.smtp_host, env_config.smtp_port)
                if use_tls:
                    smtp.starttls(context=ssl.create_default_context())

            if env_config.has_credentials:
                smtp.login(env_config.smtp_user, env_config.smtp_pass)

            smtp.send_message(message)
            logger.debug(f"Message sent to {message['To']}")

        except smtplib.SMTPException as e:
            raise SMTPDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise SMTPDeliveryError(f"Network error during SMTP connection: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def normalize_recipient(address: Optional[str]) -> Optional[str]:
    """Validate a single recipient address.

    Returns:
        Normalized address, or None when the address is empty or invalid
    """
    if not address or not address.strip():
        return None
    try:
        return validate_email(address.strip(), check_deliverability=False).normalized
    except EmailNotValidError:
        return None


def build_sender_address(site: SiteConfig) -> str:
    """Build the From header, e.g. ``Acme <admin@acme.test>``.

    Falls back to ``noreply@<site host>`` when no admin address is configured.
    """
    if site.admin_email:
        sender_email = str(site.admin_email)
    else:
        host = site.url.split("://", 1)[-1].split("/", 1)[0].split(":", 1)[0]
        sender_email = f"noreply@{host}"

    return formataddr((site.from_name, sender_email))
