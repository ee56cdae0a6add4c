from urllib.parse import parse_qs, urlsplit

import aiosmtplib
import pytest

from src.modules.notifications.service import (
    build_manage_link,
    build_message,
    send_appointment_email,
)
from src.shared.enums import AppointmentStatus, NotificationEvent, NotificationStatus


@pytest.fixture
def smtp_settings(isolated_settings, monkeypatch):
    monkeypatch.setattr(isolated_settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(isolated_settings, "smtp_port", 587)
    monkeypatch.setattr(isolated_settings, "smtp_user", "bookings@example.com")
    monkeypatch.setattr(isolated_settings, "smtp_pass", "secret")
    return isolated_settings


def test_manage_link_carries_encoded_token(make_appointment):
    appointment = make_appointment(manage_token="a+b/c=")
    link = build_manage_link(appointment, "cancel")

    parts = urlsplit(link)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://book.example.com/"
    assert "a%2Bb%2Fc%3D" in parts.query
    query = parse_qs(parts.query)
    assert query == {"action": ["cancel"], "id": [appointment.id], "token": ["a+b/c="]}


def test_message_describes_status_and_links(make_appointment):
    appointment = make_appointment(first_name="<Sara>", status=AppointmentStatus.RESCHEDULED, time_slot="14:00")
    message = build_message(appointment, NotificationEvent.RESCHEDULED, "desk@example.com")

    assert message["Subject"] == "Your Elyassi Exchange appointment was rescheduled"
    assert message["To"] == appointment.email
    text = message.get_body(preferencelist=("plain",)).get_content()
    html_body = message.get_body(preferencelist=("html",)).get_content()
    assert "has been rescheduled" in text
    assert "Time: 14:00" in text
    assert "action=reschedule" in text and "action=cancel" in text
    assert "&lt;Sara&gt;" in html_body


@pytest.mark.asyncio
async def test_not_configured_without_credentials(make_appointment):
    async def never(_):
        raise AssertionError("should not send")

    outcome = await send_appointment_email(make_appointment(), NotificationEvent.CREATED, send=never)
    assert outcome == NotificationStatus.NOT_CONFIGURED


@pytest.mark.asyncio
async def test_sent_uses_configured_sender(smtp_settings, make_appointment):
    outbox = []

    async def capture(message):
        outbox.append(message)

    outcome = await send_appointment_email(make_appointment(), NotificationEvent.CREATED, send=capture)

    assert outcome == NotificationStatus.SENT
    assert outbox[0]["From"] == "bookings@example.com"
    assert outbox[0]["Subject"] == "Your appointment is set - Elyassi Exchange"


@pytest.mark.asyncio
async def test_transport_error_reports_failed(smtp_settings, make_appointment):
    async def broken(_):
        raise aiosmtplib.SMTPConnectError("connection refused")

    outcome = await send_appointment_email(make_appointment(), NotificationEvent.CANCELED, send=broken)
    assert outcome == NotificationStatus.FAILED


@pytest.mark.asyncio
async def test_default_transport_goes_through_aiosmtplib(smtp_settings, make_appointment, monkeypatch):
    calls = []

    async def fake_send(message, **kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(aiosmtplib, "send", fake_send)
    monkeypatch.setattr(smtp_settings, "smtp_port", 465)

    outcome = await send_appointment_email(make_appointment(), NotificationEvent.UPDATED)

    assert outcome == NotificationStatus.SENT
    assert calls[0]["hostname"] == "smtp.example.com"
    assert calls[0]["use_tls"] is True


@pytest.mark.asyncio
async def test_unbuildable_message_reports_failed(smtp_settings, make_appointment):
    async def never(_):
        raise AssertionError("should not send")

    appointment = make_appointment(email="a@b.com\r\nBcc: x@y.com")
    outcome = await send_appointment_email(appointment, NotificationEvent.CREATED, send=never)
    assert outcome == NotificationStatus.FAILED
