"""Shared enumerations used across modules."""

from __future__ import annotations

from datetime import date
from enum import StrEnum


class AppointmentStatus(StrEnum):
    CONFIRMED = "confirmed"
    RESCHEDULED = "rescheduled"
    CANCELED = "canceled"

    @property
    def is_active(self) -> bool:
        return self is not AppointmentStatus.CANCELED


class DocumentType(StrEnum):
    PASSPORT = "passport"
    NATIONAL_ID = "national-id"


class NotificationEvent(StrEnum):
    CREATED = "created"
    RESCHEDULED = "rescheduled"
    CANCELED = "canceled"
    UPDATED = "updated"


class NotificationStatus(StrEnum):
    SENT = "sent"
    NOT_CONFIGURED = "not_configured"
    FAILED = "failed"


class Weekday(StrEnum):
    """Weekdays in the Sunday-first order used by ``CLOSED_WEEKDAYS``."""

    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

    @property
    def day_number(self) -> int:
        return list(Weekday).index(self)

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        members = list(cls)
        if not 0 <= index < len(members):
            msg = f"weekday index {index} out of range"
            raise ValueError(msg)
        return members[index]

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        # date.weekday() counts from Monday.
        return cls.from_index((value.weekday() + 1) % 7)
