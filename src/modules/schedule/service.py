"""Business logic for computing availability."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date

from fastapi import status

from src.core.config import settings
from src.core.exceptions import BusinessLogicError
from src.core.store import StoreDocument
from src.modules.appointments.models import Appointment
from src.modules.schedule.schemas import AvailabilityPublic, TimeSlot
from src.shared.enums import Weekday

FIRST_SLOT_HOUR = 9
LAST_SLOT_HOUR = 16

TIME_SLOTS = [
    TimeSlot(value=f"{hour:02d}:00", label=f"{hour:02d}:00 - {hour + 1:02d}:00")
    for hour in range(FIRST_SLOT_HOUR, LAST_SLOT_HOUR + 1)
]
TIME_SLOT_VALUES = frozenset(slot.value for slot in TIME_SLOTS)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

UNAVAILABLE_REASON_CLOSED = "Selected date is closed."
UNAVAILABLE_REASON_FULL = "Selected time slot is full."


def validate_date(value: str) -> str:
    """Return ``value`` if it is a real ``YYYY-MM-DD`` calendar date."""
    if not _DATE_PATTERN.match(value):
        raise BusinessLogicError("Invalid date format.", status.HTTP_400_BAD_REQUEST)
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise BusinessLogicError("Invalid date format.", status.HTTP_400_BAD_REQUEST) from exc
    return value


def validate_time_slot(value: str) -> str:
    if value not in TIME_SLOT_VALUES:
        raise BusinessLogicError("Invalid time slot selected.", status.HTTP_400_BAD_REQUEST)
    return value


def is_closed_date(
    target_date: str,
    blocked_dates: Iterable[str],
    closed_weekdays: Iterable[int] | None = None,
) -> bool:
    if target_date in set(blocked_dates):
        return True
    if closed_weekdays is None:
        closed_weekdays = settings.closed_weekdays
    try:
        weekday = Weekday.from_date(date.fromisoformat(target_date))
    except ValueError:
        return False
    return weekday.day_number in set(closed_weekdays)


def count_reservations(
    target_date: str,
    appointments: Iterable[Appointment],
    exclude_appointment_id: str | None = None,
) -> dict[str, int]:
    counts = {slot.value: 0 for slot in TIME_SLOTS}
    for appointment in appointments:
        if appointment.date != target_date or not appointment.is_active:
            continue
        if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
            continue
        counts[appointment.time_slot] = counts.get(appointment.time_slot, 0) + 1
    return counts


def get_availability(
    target_date: str,
    document: StoreDocument,
    exclude_appointment_id: str | None = None,
) -> AvailabilityPublic:
    """Report closure and per-slot reservations for one date of a store snapshot.

    ``exclude_appointment_id`` drops one appointment from the counts so an
    appointment being moved does not compete with its own reservation.
    """
    return AvailabilityPublic(
        closed=is_closed_date(target_date, document.blocked_dates),
        slot_capacity=document.settings.slot_capacity,
        reserved_counts=count_reservations(target_date, document.appointments, exclude_appointment_id),
    )


def ensure_bookable(
    target_date: str,
    time_slot: str,
    document: StoreDocument,
    exclude_appointment_id: str | None = None,
) -> None:
    availability = get_availability(target_date, document, exclude_appointment_id)
    if availability.closed:
        raise BusinessLogicError(UNAVAILABLE_REASON_CLOSED, status.HTTP_409_CONFLICT)
    if availability.is_full(time_slot):
        raise BusinessLogicError(UNAVAILABLE_REASON_FULL, status.HTTP_409_CONFLICT)


def add_blocked_date(document: StoreDocument, value: str) -> list[str]:
    validate_date(value)
    if value not in document.blocked_dates:
        document.blocked_dates.append(value)
        document.blocked_dates.sort()
    return document.blocked_dates


def remove_blocked_date(document: StoreDocument, value: str) -> list[str]:
    document.blocked_dates = [item for item in document.blocked_dates if item != value]
    return document.blocked_dates
