"""Best-effort appointment emails."""

from __future__ import annotations

import html
import logging
from collections.abc import Awaitable, Callable
from email.message import EmailMessage
from typing import Any
from urllib.parse import quote, urlencode

import aiosmtplib

from src.core.config import settings
from src.modules.appointments.models import Appointment
from src.shared.enums import AppointmentStatus, NotificationEvent, NotificationStatus

logger = logging.getLogger(__name__)

SendFunc = Callable[[EmailMessage], Awaitable[Any]]

_SUBJECTS = {
    NotificationEvent.CREATED: "Your appointment is set - {business}",
    NotificationEvent.RESCHEDULED: "Your {business} appointment was rescheduled",
    NotificationEvent.CANCELED: "Your {business} appointment was canceled",
    NotificationEvent.UPDATED: "Your {business} appointment update",
}

_STATUS_PHRASES = {
    AppointmentStatus.CONFIRMED: "is set",
    AppointmentStatus.RESCHEDULED: "has been rescheduled",
    AppointmentStatus.CANCELED: "has been canceled",
}


def build_manage_link(appointment: Appointment, action: str, base_url: str | None = None) -> str:
    base = (base_url or settings.public_base_url).rstrip("/")
    query = urlencode(
        {"action": action, "id": appointment.id, "token": appointment.manage_token},
        quote_via=quote,
    )
    return f"{base}/?{query}"


def build_subject(event: NotificationEvent) -> str:
    return _SUBJECTS[event].format(business=settings.business_name)


def build_message(appointment: Appointment, event: NotificationEvent, sender: str) -> EmailMessage:
    business = settings.business_name
    subject = build_subject(event)
    status_text = _STATUS_PHRASES.get(appointment.status, f"is {appointment.status}")
    reschedule_link = build_manage_link(appointment, "reschedule")
    cancel_link = build_manage_link(appointment, "cancel")

    text = (
        f"Hello {appointment.first_name},\n\n"
        f"Your appointment at {business} {status_text}.\n"
        f"Date: {appointment.date}\n"
        f"Time: {appointment.time_slot}\n\n"
        f"To reschedule: {reschedule_link}\n"
        f"To cancel: {cancel_link}\n\n"
        "Thank you."
    )
    body = f"""
      <div style="font-family: Arial, sans-serif; line-height: 1.6;">
        <h2>{html.escape(subject)}</h2>
        <p>Hello {html.escape(appointment.first_name)},</p>
        <p>Your appointment at <strong>{html.escape(business)}</strong> <strong>{status_text}</strong>.</p>
        <p><strong>Date:</strong> {html.escape(appointment.date)}<br />
        <strong>Time:</strong> {html.escape(appointment.time_slot)}</p>
        <p>
          <a href="{html.escape(reschedule_link)}" style="color:#0f766e;font-weight:600;">Reschedule</a>
          &middot;
          <a href="{html.escape(cancel_link)}" style="color:#b91c1c;font-weight:600;">Cancel appointment</a>
        </p>
        <p>Thank you for choosing {html.escape(business)}.</p>
      </div>
    """

    message = EmailMessage()
    message["From"] = sender
    message["To"] = appointment.email
    message["Subject"] = subject
    message.set_content(text)
    message.add_alternative(body, subtype="html")
    return message


async def _smtp_send(message: EmailMessage) -> None:
    port = settings.smtp_port
    await aiosmtplib.send(
        message,
        hostname=settings.smtp_host,
        port=port,
        username=settings.smtp_user,
        password=settings.smtp_pass,
        use_tls=port == 465,
        timeout=settings.smtp_timeout_seconds,
    )


async def send_appointment_email(
    appointment: Appointment,
    event: NotificationEvent,
    send: SendFunc | None = None,
) -> NotificationStatus:
    """Email the appointment holder; the outcome is informational only."""
    if not settings.smtp_configured:
        logger.info("SMTP not configured, skipping %s email for %s", event, appointment.id)
        return NotificationStatus.NOT_CONFIGURED

    sender = settings.smtp_from or settings.smtp_user
    try:
        message = build_message(appointment, event, sender)
        await (send or _smtp_send)(message)
    except (aiosmtplib.SMTPException, OSError, ValueError):
        logger.warning("Failed to send %s email for %s", event, appointment.id, exc_info=True)
        return NotificationStatus.FAILED

    logger.info("Sent %s email for %s", event, appointment.id)
    return NotificationStatus.SENT
