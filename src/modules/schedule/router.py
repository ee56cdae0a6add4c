"""Schedule routes: configuration, availability and blocked dates."""

from fastapi import APIRouter, Depends, Query, status

from src.core.config import settings
from src.core.exceptions import BusinessLogicError
from src.core.store import DocumentStore, get_store
from src.modules.schedule.schemas import (
    AvailabilityPublic,
    BlockedDateCreate,
    BlockedDatesPublic,
    ConfigPublic,
)
from src.modules.schedule.service import (
    TIME_SLOTS,
    add_blocked_date,
    get_availability,
    remove_blocked_date,
    validate_date,
)

router = APIRouter(prefix="/api", tags=["schedule"])


@router.get("/config", response_model=ConfigPublic)
async def booking_config(store: DocumentStore = Depends(get_store)) -> ConfigPublic:
    document = store.read()
    return ConfigPublic(
        time_slots=TIME_SLOTS,
        closed_weekdays=list(settings.closed_weekdays),
        slot_capacity=document.settings.slot_capacity,
    )


@router.get("/availability", response_model=AvailabilityPublic)
async def availability(
    date_value: str = Query(..., alias="date"),
    store: DocumentStore = Depends(get_store),
) -> AvailabilityPublic:
    return get_availability(validate_date(date_value), store.read())


@router.get("/blocked-dates", response_model=BlockedDatesPublic)
async def list_blocked_dates(store: DocumentStore = Depends(get_store)) -> BlockedDatesPublic:
    return BlockedDatesPublic(blocked_dates=store.read().blocked_dates)


@router.post("/blocked-dates", response_model=BlockedDatesPublic)
async def create_blocked_date(
    payload: BlockedDateCreate,
    store: DocumentStore = Depends(get_store),
) -> BlockedDatesPublic:
    if not payload.date:
        raise BusinessLogicError("Date is required.", status.HTTP_400_BAD_REQUEST)
    async with store.transaction() as document:
        blocked = add_blocked_date(document, payload.date)
    return BlockedDatesPublic(blocked_dates=blocked)


@router.delete("/blocked-dates/{date_value}", response_model=BlockedDatesPublic)
async def delete_blocked_date(
    date_value: str,
    store: DocumentStore = Depends(get_store),
) -> BlockedDatesPublic:
    async with store.transaction() as document:
        blocked = remove_blocked_date(document, date_value)
    return BlockedDatesPublic(blocked_dates=blocked)
