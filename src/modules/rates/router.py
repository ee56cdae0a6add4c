"""Exchange rate routes."""

from fastapi import APIRouter, Depends, Query

from src.core.store import DocumentStore, get_store
from src.modules.rates.schemas import RatesPublic
from src.modules.rates.service import RateQuoter, get_rate_quoter

router = APIRouter(prefix="/api", tags=["rates"])


@router.get("/rates", response_model=RatesPublic)
async def rates(
    show_all: str = Query("0", alias="all"),
    quoter: RateQuoter = Depends(get_rate_quoter),
    store: DocumentStore = Depends(get_store),
) -> RatesPublic:
    store_settings = store.read().settings
    return await quoter.get_rates(
        show_all == "1",
        buy_margin=store_settings.buy_margin,
        sell_margin=store_settings.sell_margin,
    )
