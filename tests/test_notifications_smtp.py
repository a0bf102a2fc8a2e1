"""Unit tests for SMTP client wrapper.

Tests the SMTPClient for:
- Connection handling (SMTP and SMTP_SSL)
- STARTTLS negotiation
- Authentication (with and without credentials)
- Error wrapping and connection cleanup
- Recipient normalisation
- Sender address building
"""

import smtplib
from email.message import EmailMessage
from unittest.mock import MagicMock

import pytest

from sell_my_images.config.environment import EnvironmentConfig
from sell_my_images.config.models import SiteConfig
from sell_my_images.notifications.models import SMTPDeliveryError
from sell_my_images.notifications.smtp_client import (
    SMTPClient,
    build_sender_address,
    normalize_recipient,
)


@pytest.fixture
def env_config_with_auth():
    return EnvironmentConfig(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="user@example.com",
        smtp_pass="secret123",
    )


@pytest.fixture
def env_config_without_auth():
    return EnvironmentConfig(smtp_host="smtp.example.com", smtp_port=25)


@pytest.fixture
def env_config_implicit_tls():
    return EnvironmentConfig(
        smtp_host="smtp.gmail.com",
        smtp_port=465,
        smtp_user="user@gmail.com",
        smtp_pass="apppassword",
    )


@pytest.fixture
def sample_message():
    msg = EmailMessage()
    msg["Subject"] = "Your high-resolution image is ready - Acme"
    msg["From"] = "Acme <owner@example.com>"
    msg["To"] = "customer@example.com"
    msg.set_content("Hi there!")
    return msg


@pytest.fixture
def smtp_conn():
    return MagicMock()


@pytest.fixture
def client(smtp_conn):
    return SMTPClient(
        smtp_factory=MagicMock(return_value=smtp_conn),
        smtp_ssl_factory=MagicMock(return_value=smtp_conn),
    )


def test_defaults_to_smtplib():
    client = SMTPClient()

    assert client.smtp_factory is smtplib.SMTP
    assert client.smtp_ssl_factory is smtplib.SMTP_SSL


def test_send_with_starttls_and_auth(client, smtp_conn, env_config_with_auth, sample_message):
    client.send(sample_message, env_config_with_auth, use_tls=True)

    client.smtp_factory.assert_called_once_with("smtp.example.com", 587)
    client.smtp_ssl_factory.assert_not_called()
    smtp_conn.starttls.assert_called_once()
    smtp_conn.login.assert_called_once_with("user@example.com", "secret123")
    smtp_conn.send_message.assert_called_once_with(sample_message)
    smtp_conn.quit.assert_called_once()


def test_send_without_tls_or_auth(client, smtp_conn, env_config_without_auth, sample_message):
    client.send(sample_message, env_config_without_auth, use_tls=False)

    smtp_conn.starttls.assert_not_called()
    smtp_conn.login.assert_not_called()
    smtp_conn.send_message.assert_called_once_with(sample_message)


def test_send_implicit_tls(client, smtp_conn, env_config_implicit_tls, sample_message):
    client.send(sample_message, env_config_implicit_tls)

    client.smtp_ssl_factory.assert_called_once()
    args, kwargs = client.smtp_ssl_factory.call_args
    assert args == ("smtp.gmail.com", 465)
    assert "context" in kwargs
    client.smtp_factory.assert_not_called()
    smtp_conn.starttls.assert_not_called()
    smtp_conn.login.assert_called_once_with("user@gmail.com", "apppassword")


def test_smtp_exception_is_wrapped(client, smtp_conn, env_config_with_auth, sample_message):
    smtp_conn.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

    with pytest.raises(SMTPDeliveryError, match="SMTP error"):
        client.send(sample_message, env_config_with_auth)

    smtp_conn.quit.assert_called_once()


def test_auth_failure_is_wrapped(client, smtp_conn, env_config_with_auth, sample_message):
    smtp_conn.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

    with pytest.raises(SMTPDeliveryError):
        client.send(sample_message, env_config_with_auth)


def test_connection_error_is_wrapped(env_config_with_auth, sample_message):
    client = SMTPClient(smtp_factory=MagicMock(side_effect=ConnectionRefusedError("refused")))

    with pytest.raises(SMTPDeliveryError, match="Network error"):
        client.send(sample_message, env_config_with_auth)


def test_quit_failure_does_not_mask_success(client, smtp_conn, env_config_with_auth, sample_message):
    smtp_conn.quit.side_effect = smtplib.SMTPServerDisconnected("gone")

    client.send(sample_message, env_config_with_auth)

    smtp_conn.send_message.assert_called_once()


@pytest.mark.parametrize(
    "address,expected",
    [
        ("customer@example.com", "customer@example.com"),
        ("  customer@example.com ", "customer@example.com"),
        ("not-an-email", None),
        ("", None),
        (None, None),
        ("   ", None),
    ],
)
def test_normalize_recipient(address, expected):
    assert normalize_recipient(address) == expected


def test_build_sender_address_uses_admin_email():
    site = SiteConfig(name="Acme", url="https://acme.test", admin_email="owner@example.com")

    assert build_sender_address(site) == "Acme <owner@example.com>"


def test_build_sender_address_uses_sender_name():
    site = SiteConfig(
        name="Acme",
        url="https://acme.test",
        admin_email="owner@example.com",
        sender_name="Acme Downloads",
    )

    assert build_sender_address(site) == "Acme Downloads <owner@example.com>"


def test_build_sender_address_falls_back_to_noreply():
    site = SiteConfig(name="Acme", url="https://shop.acme.test:8443/store")

    assert build_sender_address(site) == "Acme <noreply@shop.acme.test>"
