"""Schedule schemas."""

from pydantic import Field

from src.shared.schemas import CamelModel


class TimeSlot(CamelModel):
    value: str
    label: str


class ConfigPublic(CamelModel):
    time_slots: list[TimeSlot]
    closed_weekdays: list[int]
    slot_capacity: int


class AvailabilityPublic(CamelModel):
    closed: bool
    slot_capacity: int
    reserved_counts: dict[str, int] = Field(default_factory=dict)

    def reserved(self, time_slot: str) -> int:
        return self.reserved_counts.get(time_slot, 0)

    def is_full(self, time_slot: str) -> bool:
        return self.reserved(time_slot) >= self.slot_capacity


class BlockedDateCreate(CamelModel):
    date: str | None = None


class BlockedDatesPublic(CamelModel):
    blocked_dates: list[str]
