"""Indicative buy/sell quotes derived from a public exchange-rate snapshot."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx
from fastapi import Request, status

from src.core.config import settings
from src.modules.rates.schemas import RateQuote, RatesPublic

logger = logging.getLogger(__name__)

DEFAULT_CURRENCIES = (
    "USD",
    "EUR",
    "GBP",
    "AED",
    "TRY",
    "CAD",
    "AUD",
    "CHF",
    "CNY",
    "JPY",
    "KRW",
    "SAR",
)

CURRENCY_NAMES = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "AED": "UAE Dirham",
    "TRY": "Turkish Lira",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "CHF": "Swiss Franc",
    "CNY": "Chinese Yuan",
    "JPY": "Japanese Yen",
    "KRW": "South Korean Won",
    "SAR": "Saudi Riyal",
    "NOK": "Norwegian Krone",
    "SEK": "Swedish Krona",
    "DKK": "Danish Krone",
    "QAR": "Qatari Riyal",
    "OMR": "Omani Rial",
    "KWD": "Kuwaiti Dinar",
    "INR": "Indian Rupee",
    "PKR": "Pakistani Rupee",
    "RUB": "Russian Ruble",
}


class RateFetchError(Exception):
    """Raised when the upstream snapshot cannot be fetched or parsed."""


def quote_prices(mid: float, buy_margin: float, sell_margin: float) -> tuple[float, float]:
    return mid * (1 - buy_margin), mid * (1 + sell_margin)


def _positive_rate(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value > 0 else None


def compute_quotes(
    rates: Mapping[str, Any],
    codes: Iterable[str],
    local_currency: str,
    buy_margin: float,
    sell_margin: float,
) -> list[RateQuote]:
    """Price each code in the local currency; mid = local rate / code rate."""
    local_rate = _positive_rate(rates.get(local_currency))
    if local_rate is None:
        return []

    quotes: list[RateQuote] = []
    for code in set(codes):
        if code == local_currency:
            continue
        code_rate = _positive_rate(rates.get(code))
        if code_rate is None:
            continue
        buy, sell = quote_prices(local_rate / code_rate, buy_margin, sell_margin)
        quotes.append(RateQuote(code=code, name=CURRENCY_NAMES.get(code, code), buy=buy, sell=sell))
    return sorted(quotes, key=lambda quote: quote.code)


async def fetch_rate_snapshot(client: httpx.AsyncClient | None = None) -> dict[str, Any]:
    """Return the raw upstream payload, raising RateFetchError on any failure."""
    created_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=settings.rates_timeout_seconds)
        created_client = True
    try:
        response = await client.get(settings.rates_api_url)
    except httpx.HTTPError as exc:
        raise RateFetchError("Rate service is unavailable") from exc
    finally:
        if created_client:
            await client.aclose()

    if response.status_code != status.HTTP_200_OK:
        raise RateFetchError(f"Rate service returned status {response.status_code}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise RateFetchError("Failed to parse rate service response") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("rates"), dict):
        raise RateFetchError("Rate service response did not include rates")
    return payload


def _snapshot_time(payload: Mapping[str, Any]) -> datetime:
    stamp = payload.get("time_last_update_unix")
    if isinstance(stamp, (int, float)) and not isinstance(stamp, bool):
        return datetime.fromtimestamp(stamp, tz=timezone.utc)
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class RateCache:
    payload: RatesPublic
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class RateQuoter:
    """Computes quotes and keeps one cached result per variant (shortlist / all)."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.ttl_seconds = settings.rates_cache_seconds if ttl_seconds is None else ttl_seconds
        self.clock = clock
        self._cache: dict[bool, RateCache] = {}

    def cached(self, show_all: bool) -> RateCache | None:
        entry = self._cache.get(show_all)
        if entry is not None and entry.is_fresh(self.clock()):
            return entry
        return None

    def clear(self) -> None:
        self._cache.clear()

    async def get_rates(self, show_all: bool, buy_margin: float, sell_margin: float) -> RatesPublic:
        entry = self.cached(show_all)
        if entry is not None:
            return entry.payload

        try:
            snapshot = await fetch_rate_snapshot(self.client)
        except RateFetchError:
            logger.warning("Could not refresh exchange rates", exc_info=True)
            return RatesPublic(updated_at=datetime.now(tz=timezone.utc), rates=[])

        rates = snapshot["rates"]
        local_currency = settings.local_currency
        if _positive_rate(rates.get(local_currency)) is None:
            logger.warning("Rate snapshot has no %s rate", local_currency)
            return RatesPublic(updated_at=datetime.now(tz=timezone.utc), rates=[])

        codes = rates.keys() if show_all else DEFAULT_CURRENCIES
        payload = RatesPublic(
            updated_at=_snapshot_time(snapshot),
            rates=compute_quotes(rates, codes, local_currency, buy_margin, sell_margin),
        )
        self._cache[show_all] = RateCache(payload=payload, expires_at=self.clock() + self.ttl_seconds)
        return payload


def get_rate_quoter(request: Request) -> RateQuoter:
    """FastAPI dependency returning the quoter owned by the running app."""
    return request.app.state.rate_quoter
