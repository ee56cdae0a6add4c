"""Appointment service layer."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from fastapi import UploadFile, status
from pydantic import validate_email

from src.core.config import settings
from src.core.exceptions import BusinessLogicError
from src.core.store import DocumentStore, StoreDocument
from src.modules.appointments.models import Appointment
from src.modules.appointments.schemas import (
    AppointmentAdminUpdate,
    AppointmentCreate,
    CancelRequest,
    RescheduleRequest,
    StatusCounts,
)
from src.modules.appointments.uploads import discard_document, ensure_allowed_type, save_document
from src.modules.notifications.service import send_appointment_email
from src.modules.schedule.service import ensure_bookable, validate_date, validate_time_slot
from src.shared.enums import AppointmentStatus, DocumentType, NotificationEvent, NotificationStatus
from src.shared.ulid import tokens_match

logger = logging.getLogger(__name__)

NOT_FOUND_OR_INVALID_TOKEN = "Appointment not found or token is invalid."

_REQUIRED_CREATE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "document_type",
    "document_number",
    "date",
    "time_slot",
)


def build_queue(appointments: Iterable[Appointment]) -> list[Appointment]:
    """Active appointments by date, slot and creation time; ties keep insertion order."""
    active = [item for item in appointments if item.is_active]
    return sorted(active, key=lambda item: (item.date, item.time_slot, item.created_at))


def build_stats(appointments: Iterable[Appointment]) -> StatusCounts:
    counts = {member.value: 0 for member in AppointmentStatus}
    for item in appointments:
        counts[item.status.value] += 1
    return StatusCounts(**counts)


def queue_position(appointment: Appointment, appointments: Iterable[Appointment]) -> int | None:
    for index, item in enumerate(build_queue(appointments), start=1):
        if item.id == appointment.id:
            return index
    return None


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _validate_email(value: str) -> str:
    """Accept a bare address only; it ends up in a mail header."""
    if any(char in value for char in "\r\n<>"):
        raise BusinessLogicError("Invalid email.", status.HTTP_400_BAD_REQUEST)
    try:
        validate_email(value)
    except ValueError as exc:
        raise BusinessLogicError("Invalid email.", status.HTTP_400_BAD_REQUEST) from exc
    return value


def _parse_document_type(value: str) -> DocumentType:
    try:
        return DocumentType(value)
    except ValueError as exc:
        raise BusinessLogicError("Invalid document type.", status.HTTP_400_BAD_REQUEST) from exc


def _parse_status(value: str) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError as exc:
        raise BusinessLogicError("Invalid status.", status.HTTP_400_BAD_REQUEST) from exc


class AppointmentService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create(self, payload: AppointmentCreate, upload: UploadFile | None) -> tuple[Appointment, NotificationStatus]:
        fields = {name: _clean(getattr(payload, name)) for name in _REQUIRED_CREATE_FIELDS}
        if not all(fields.values()):
            raise BusinessLogicError("Please fill out all required fields.", status.HTTP_400_BAD_REQUEST)
        if upload is None or not upload.filename:
            raise BusinessLogicError("Document file is required.", status.HTTP_400_BAD_REQUEST)

        email = _validate_email(fields["email"])
        target_date = validate_date(fields["date"])
        time_slot = validate_time_slot(fields["time_slot"])
        document_type = _parse_document_type(fields["document_type"])
        ensure_allowed_type(upload)

        # Streaming happens outside the store lock; the slot is checked again once locked.
        ensure_bookable(target_date, time_slot, self.store.read())
        uploads_dir = settings.uploads_dir
        document_file = await save_document(upload, uploads_dir, settings.max_upload_bytes)
        try:
            async with self.store.transaction() as document:
                ensure_bookable(target_date, time_slot, document)
                appointment = Appointment(
                    first_name=fields["first_name"],
                    last_name=fields["last_name"],
                    email=email,
                    document_type=document_type,
                    document_number=fields["document_number"],
                    document_file=document_file,
                    date=target_date,
                    time_slot=time_slot,
                )
                document.appointments.append(appointment)
        except Exception:
            discard_document(document_file, uploads_dir)
            raise

        logger.info("Booked appointment %s for %s %s", appointment.id, appointment.date, appointment.time_slot)
        email_status = await send_appointment_email(appointment, NotificationEvent.CREATED)
        return appointment, email_status

    def get_for_token(self, appointment_id: str, token: str | None) -> Appointment:
        if not token:
            raise BusinessLogicError("Token is required.", status.HTTP_400_BAD_REQUEST)
        return self._get_with_token(self.store.read(), appointment_id, token)

    async def reschedule(self, appointment_id: str, payload: RescheduleRequest) -> tuple[Appointment, NotificationStatus]:
        if not (payload.token and payload.date and payload.time_slot):
            raise BusinessLogicError("Token, date, and time slot are required.", status.HTTP_400_BAD_REQUEST)
        target_date = validate_date(payload.date)
        time_slot = validate_time_slot(payload.time_slot)

        async with self.store.transaction() as document:
            appointment = self._get_with_token(document, appointment_id, payload.token)
            self._ensure_not_canceled(appointment)
            ensure_bookable(target_date, time_slot, document, exclude_appointment_id=appointment.id)
            appointment.date = target_date
            appointment.time_slot = time_slot
            appointment.status = AppointmentStatus.RESCHEDULED
            appointment.touch()

        logger.info("Rescheduled appointment %s to %s %s", appointment.id, target_date, time_slot)
        email_status = await send_appointment_email(appointment, NotificationEvent.RESCHEDULED)
        return appointment, email_status

    async def cancel(self, appointment_id: str, payload: CancelRequest) -> tuple[Appointment, NotificationStatus]:
        if not payload.token:
            raise BusinessLogicError("Token is required.", status.HTTP_400_BAD_REQUEST)

        async with self.store.transaction() as document:
            appointment = self._get_with_token(document, appointment_id, payload.token)
            self._ensure_not_canceled(appointment)
            appointment.status = AppointmentStatus.CANCELED
            appointment.touch()

        logger.info("Canceled appointment %s", appointment.id)
        email_status = await send_appointment_email(appointment, NotificationEvent.CANCELED)
        return appointment, email_status

    def search_by_email(self, email: str | None) -> tuple[Appointment | None, int | None]:
        needle = _clean(email).lower()
        if not needle:
            raise BusinessLogicError("Email is required.", status.HTTP_400_BAD_REQUEST)
        document = self.store.read()
        matches = [item for item in document.appointments if item.email.lower() == needle]
        if not matches:
            return None, None
        # Equal timestamps resolve to the later insertion.
        latest = max(reversed(matches), key=lambda item: item.created_at)
        return latest, queue_position(latest, document.appointments)

    def queue(self) -> tuple[list[Appointment], StatusCounts]:
        document = self.store.read()
        return build_queue(document.appointments), build_stats(document.appointments)

    def admin_list(self) -> list[Appointment]:
        appointments = self.store.read().appointments
        return sorted(reversed(appointments), key=lambda item: item.created_at, reverse=True)

    async def admin_update(
        self,
        appointment_id: str,
        payload: AppointmentAdminUpdate,
    ) -> tuple[Appointment, NotificationStatus]:
        # Empty values mean "leave unchanged".
        update_data = {name: value.strip() for name, value in payload.model_dump().items() if _clean(value)}
        if not update_data:
            raise BusinessLogicError("No changes provided.", status.HTTP_400_BAD_REQUEST)

        new_status = _parse_status(update_data["status"]) if "status" in update_data else None
        new_date = validate_date(update_data["date"]) if "date" in update_data else None
        new_slot = validate_time_slot(update_data["time_slot"]) if "time_slot" in update_data else None

        async with self.store.transaction() as document:
            appointment = document.find(appointment_id)
            if appointment is None:
                raise BusinessLogicError("Appointment not found.", status.HTTP_404_NOT_FOUND)

            next_status = new_status or appointment.status
            next_date = new_date or appointment.date
            next_slot = new_slot or appointment.time_slot
            moving = new_date is not None or new_slot is not None
            reactivating = not appointment.is_active and next_status.is_active
            if next_status.is_active and (moving or reactivating):
                ensure_bookable(next_date, next_slot, document, exclude_appointment_id=appointment.id)

            appointment.status = next_status
            appointment.date = next_date
            appointment.time_slot = next_slot
            appointment.touch()

        logger.info("Admin updated appointment %s: %s", appointment.id, update_data)
        email_status = await send_appointment_email(appointment, NotificationEvent.UPDATED)
        return appointment, email_status

    @staticmethod
    def _get_with_token(document: StoreDocument, appointment_id: str, token: str) -> Appointment:
        appointment = document.find(appointment_id)
        if appointment is None or not tokens_match(appointment.manage_token, token):
            raise BusinessLogicError(NOT_FOUND_OR_INVALID_TOKEN, status.HTTP_404_NOT_FOUND)
        return appointment

    @staticmethod
    def _ensure_not_canceled(appointment: Appointment) -> None:
        if not appointment.is_active:
            raise BusinessLogicError("This appointment has been canceled.", status.HTTP_409_CONFLICT)
