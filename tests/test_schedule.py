import pytest
from fastapi import status

from src.core.exceptions import BusinessLogicError
from src.modules.schedule.service import (
    TIME_SLOTS,
    UNAVAILABLE_REASON_CLOSED,
    UNAVAILABLE_REASON_FULL,
    add_blocked_date,
    ensure_bookable,
    get_availability,
    is_closed_date,
    remove_blocked_date,
    validate_date,
    validate_time_slot,
)
from src.shared.enums import AppointmentStatus, Weekday

MONDAY = "2030-01-07"
FRIDAY = "2030-01-04"
SUNDAY = "2030-01-06"


def test_time_slots_cover_business_hours():
    assert [slot.value for slot in TIME_SLOTS] == [f"{hour:02d}:00" for hour in range(9, 17)]
    assert TIME_SLOTS[0].label == "09:00 - 10:00"
    assert TIME_SLOTS[-1].label == "16:00 - 17:00"


def test_weekday_indices_start_on_sunday():
    assert Weekday.from_index(0) is Weekday.SUNDAY
    assert Weekday.SUNDAY.day_number == 0
    assert Weekday.FRIDAY.day_number == 5


def test_weekly_closure_and_blocked_dates():
    assert is_closed_date(FRIDAY, [], closed_weekdays=[5]) is True
    assert is_closed_date(MONDAY, [], closed_weekdays=[5]) is False
    assert is_closed_date(MONDAY, [MONDAY], closed_weekdays=[]) is True
    assert is_closed_date(SUNDAY, [], closed_weekdays=[0]) is True


def test_closed_date_uses_configured_weekdays(isolated_settings, monkeypatch):
    monkeypatch.setattr(isolated_settings, "closed_weekdays_raw", "1")
    assert is_closed_date(MONDAY, []) is True
    assert is_closed_date(FRIDAY, []) is False


@pytest.mark.parametrize("value", ["2030-1-07", "07-01-2030", "2030-02-30", ""])
def test_validate_date_rejects_malformed(value):
    with pytest.raises(BusinessLogicError) as exc:
        validate_date(value)
    assert exc.value.status_code == status.HTTP_400_BAD_REQUEST


def test_validate_time_slot_rejects_unknown_slot():
    assert validate_time_slot("16:00") == "16:00"
    with pytest.raises(BusinessLogicError):
        validate_time_slot("17:00")


def test_availability_counts_active_appointments_only(seed, make_appointment):
    document = seed(
        make_appointment(time_slot="09:00"),
        make_appointment(time_slot="09:00", status=AppointmentStatus.RESCHEDULED),
        make_appointment(time_slot="09:00", status=AppointmentStatus.CANCELED),
        make_appointment(time_slot="10:00"),
        make_appointment(date="2030-01-08", time_slot="09:00"),
    )

    availability = get_availability(MONDAY, document)
    assert availability.closed is False
    assert availability.slot_capacity == 6
    assert availability.reserved("09:00") == 2
    assert availability.reserved("10:00") == 1
    assert availability.reserved("11:00") == 0


def test_closed_date_reported_regardless_of_capacity(seed):
    document = seed(slot_capacity=100, blocked_dates=(MONDAY,))
    assert get_availability(MONDAY, document).closed is True
    assert get_availability(FRIDAY, document).closed is True


def test_ensure_bookable_rejects_full_slot_and_allows_self(seed, make_appointment):
    own = make_appointment(time_slot="11:00")
    other = make_appointment(time_slot="11:00")
    document = seed(own, other, slot_capacity=2)

    with pytest.raises(BusinessLogicError) as exc:
        ensure_bookable(MONDAY, "11:00", document)
    assert exc.value.status_code == status.HTTP_409_CONFLICT
    assert exc.value.detail == UNAVAILABLE_REASON_FULL

    ensure_bookable(MONDAY, "11:00", document, exclude_appointment_id=own.id)


def test_ensure_bookable_rejects_closed_date(seed):
    document = seed()
    with pytest.raises(BusinessLogicError) as exc:
        ensure_bookable(FRIDAY, "09:00", document)
    assert exc.value.detail == UNAVAILABLE_REASON_CLOSED


def test_blocked_dates_are_a_sorted_set(seed):
    document = seed()
    add_blocked_date(document, "2030-03-01")
    add_blocked_date(document, "2030-02-01")
    add_blocked_date(document, "2030-03-01")
    assert document.blocked_dates == ["2030-02-01", "2030-03-01"]

    assert remove_blocked_date(document, "2030-02-01") == ["2030-03-01"]
    assert remove_blocked_date(document, "2031-01-01") == ["2030-03-01"]
