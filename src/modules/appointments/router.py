"""Appointments API routes."""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from src.core.store import DocumentStore, get_store
from src.modules.appointments.schemas import (
    AppointmentAdminUpdate,
    AppointmentChanged,
    AppointmentCreate,
    AppointmentCreated,
    AppointmentDetail,
    AppointmentList,
    AppointmentPublic,
    AppointmentSearchResult,
    AppointmentWithToken,
    CancelRequest,
    QueuePublic,
    RescheduleRequest,
)
from src.modules.appointments.service import AppointmentService

router = APIRouter(prefix="/api", tags=["appointments"])
# No authentication guards this surface; deploy it behind a trusted network or proxy.
admin_router = APIRouter(prefix="/api/admin/appointments", tags=["admin-appointments"])


def get_service(store: DocumentStore = Depends(get_store)) -> AppointmentService:
    return AppointmentService(store)


@router.post("/appointments", response_model=AppointmentCreated)
async def create_appointment(
    first_name: str | None = Form(None, alias="firstName"),
    last_name: str | None = Form(None, alias="lastName"),
    email: str | None = Form(None),
    document_type: str | None = Form(None, alias="documentType"),
    document_number: str | None = Form(None, alias="documentNumber"),
    date_value: str | None = Form(None, alias="date"),
    time_slot: str | None = Form(None, alias="timeSlot"),
    document_file: UploadFile | None = File(None, alias="documentFile"),
    service: AppointmentService = Depends(get_service),
) -> AppointmentCreated:
    payload = AppointmentCreate(
        first_name=first_name,
        last_name=last_name,
        email=email,
        document_type=document_type,
        document_number=document_number,
        date=date_value,
        time_slot=time_slot,
    )
    appointment, email_status = await service.create(payload, document_file)
    return AppointmentCreated(
        appointment=AppointmentWithToken.from_record(appointment),
        email_status=email_status,
    )


@router.get("/appointments/search", response_model=AppointmentSearchResult)
async def search_appointment(
    email: str | None = Query(None),
    service: AppointmentService = Depends(get_service),
) -> AppointmentSearchResult:
    appointment, position = service.search_by_email(email)
    if appointment is None:
        return AppointmentSearchResult()
    return AppointmentSearchResult(
        appointment=AppointmentPublic.from_record(appointment),
        queue_position=position,
    )


@router.get("/appointments/{appointment_id}", response_model=AppointmentDetail)
async def get_appointment(
    appointment_id: str,
    token: str | None = Query(None),
    service: AppointmentService = Depends(get_service),
) -> AppointmentDetail:
    appointment = service.get_for_token(appointment_id, token)
    return AppointmentDetail(appointment=AppointmentWithToken.from_record(appointment))


@router.patch("/appointments/{appointment_id}/reschedule", response_model=AppointmentChanged)
async def reschedule_appointment(
    appointment_id: str,
    payload: RescheduleRequest,
    service: AppointmentService = Depends(get_service),
) -> AppointmentChanged:
    appointment, email_status = await service.reschedule(appointment_id, payload)
    return AppointmentChanged(appointment=AppointmentPublic.from_record(appointment), email_status=email_status)


@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentChanged)
async def cancel_appointment(
    appointment_id: str,
    payload: CancelRequest,
    service: AppointmentService = Depends(get_service),
) -> AppointmentChanged:
    appointment, email_status = await service.cancel(appointment_id, payload)
    return AppointmentChanged(appointment=AppointmentPublic.from_record(appointment), email_status=email_status)


@router.get("/queue", response_model=QueuePublic)
async def appointment_queue(service: AppointmentService = Depends(get_service)) -> QueuePublic:
    queue, stats = service.queue()
    return QueuePublic(queue=[AppointmentPublic.from_record(item) for item in queue], stats=stats)


@admin_router.get("", response_model=AppointmentList)
async def admin_list_appointments(service: AppointmentService = Depends(get_service)) -> AppointmentList:
    return AppointmentList(appointments=[AppointmentPublic.from_record(item) for item in service.admin_list()])


@admin_router.patch("/{appointment_id}", response_model=AppointmentChanged)
async def admin_update_appointment(
    appointment_id: str,
    payload: AppointmentAdminUpdate,
    service: AppointmentService = Depends(get_service),
) -> AppointmentChanged:
    appointment, email_status = await service.admin_update(appointment_id, payload)
    return AppointmentChanged(appointment=AppointmentPublic.from_record(appointment), email_status=email_status)
