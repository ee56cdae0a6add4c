"""Appointment records as persisted in the document store."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from src.shared.enums import AppointmentStatus, DocumentType
from src.shared.models import TimestampMixin
from src.shared.schemas import CamelModel
from src.shared.ulid import generate_manage_token, generate_ulid


class DocumentFile(CamelModel):
    original_name: str
    file_name: str
    mime_type: str
    size: int


class Appointment(TimestampMixin):
    id: str = Field(default_factory=generate_ulid)
    manage_token: str = Field(default_factory=generate_manage_token)
    first_name: str
    last_name: str
    email: str
    # New bookings only take DocumentType values; older records may hold other labels.
    document_type: DocumentType | str
    document_number: str
    document_file: DocumentFile | None = None
    date: str
    time_slot: str
    status: AppointmentStatus = AppointmentStatus.CONFIRMED

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        # Records written by older versions may carry statuses we no longer use.
        if not isinstance(value, str) or value not in set(AppointmentStatus):
            return AppointmentStatus.CONFIRMED
        return value

    @property
    def is_active(self) -> bool:
        return self.status.is_active
