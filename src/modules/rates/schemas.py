"""Rate schemas."""

from datetime import datetime

from src.shared.schemas import CamelModel


class RateQuote(CamelModel):
    code: str
    name: str
    buy: float
    sell: float


class RatesPublic(CamelModel):
    updated_at: datetime
    rates: list[RateQuote]
