"""Appointments schemas."""

from datetime import datetime

from src.modules.appointments.models import Appointment, DocumentFile
from src.shared.enums import AppointmentStatus, DocumentType, NotificationStatus
from src.shared.schemas import CamelModel


class AppointmentPublic(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    document_type: DocumentType | str
    document_number: str
    document_file: DocumentFile | None = None
    date: str
    time_slot: str
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, appointment: Appointment) -> "AppointmentPublic":
        return cls.model_validate(appointment.model_dump())


class AppointmentWithToken(AppointmentPublic):
    """Only returned to callers that already hold the management token."""

    manage_token: str


class AppointmentCreate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    document_type: str | None = None
    document_number: str | None = None
    date: str | None = None
    time_slot: str | None = None


class RescheduleRequest(CamelModel):
    token: str | None = None
    date: str | None = None
    time_slot: str | None = None


class CancelRequest(CamelModel):
    token: str | None = None


class AppointmentAdminUpdate(CamelModel):
    status: str | None = None
    date: str | None = None
    time_slot: str | None = None


class AppointmentCreated(CamelModel):
    appointment: AppointmentWithToken
    email_status: NotificationStatus


class AppointmentDetail(CamelModel):
    appointment: AppointmentWithToken


class AppointmentChanged(CamelModel):
    appointment: AppointmentPublic
    email_status: NotificationStatus


class AppointmentSearchResult(CamelModel):
    appointment: AppointmentPublic | None = None
    queue_position: int | None = None


class StatusCounts(CamelModel):
    confirmed: int = 0
    rescheduled: int = 0
    canceled: int = 0


class QueuePublic(CamelModel):
    queue: list[AppointmentPublic]
    stats: StatusCounts


class AppointmentList(CamelModel):
    appointments: list[AppointmentPublic]
