"""Tests for SmtpNotifier."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from classpulse.domain.interfaces import DeliveryStatus
from classpulse.infrastructure.smtp_notifier import SmtpNotifier


@pytest.fixture
def notifier():
    return SmtpNotifier(host="smtp.example.com", user="mailer", password="secret", sender="reports@example.com")


@pytest.fixture
def mock_smtp():
    with patch("classpulse.infrastructure.smtp_notifier.smtplib.SMTP") as smtp_class:
        server = MagicMock()
        smtp_class.return_value.__enter__.return_value = server
        yield smtp_class, server


@pytest.mark.asyncio
async def test_skips_when_not_configured(mock_smtp):
    smtp_class, _ = mock_smtp
    notifier = SmtpNotifier(host=None, user=None, password=None)

    status = await notifier.deliver("teacher@example.com", "Daily Class Report", "[]")

    assert status == DeliveryStatus.SKIPPED
    smtp_class.assert_not_called()


@pytest.mark.asyncio
async def test_sends_message(notifier, mock_smtp):
    smtp_class, server = mock_smtp

    status = await notifier.deliver("teacher@example.com", "Daily Class Report", "[]")

    assert status == DeliveryStatus.OK
    smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=30.0)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "secret")
    msg = server.send_message.call_args.args[0]
    assert msg["To"] == "teacher@example.com"
    assert msg["From"] == "reports@example.com"
    assert msg["Subject"] == "Daily Class Report"


@pytest.mark.asyncio
async def test_transport_failure_reports_error(notifier, mock_smtp):
    _, server = mock_smtp
    server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

    status = await notifier.deliver("teacher@example.com", "Daily Class Report", "[]")

    assert status == DeliveryStatus.ERROR


@pytest.mark.asyncio
async def test_connection_failure_reports_error(notifier, mock_smtp):
    smtp_class, _ = mock_smtp
    smtp_class.side_effect = ConnectionRefusedError()

    status = await notifier.deliver("teacher@example.com", "Daily Class Report", "[]")

    assert status == DeliveryStatus.ERROR
