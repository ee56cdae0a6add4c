"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.core.config import settings
from src.core.exceptions import register_exception_handlers
from src.core.logging import configure_logging
from src.core.store import get_document_store
from src.modules.appointments.router import admin_router as admin_appointments_router
from src.modules.appointments.router import router as appointments_router
from src.modules.rates.router import router as rates_router
from src.modules.rates.service import RateQuoter
from src.modules.schedule.router import router as schedule_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    get_document_store().ensure()
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Serving bookings from %s, uploads in %s", settings.store_path, settings.uploads_dir)
    yield


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.rate_quoter = RateQuoter()
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(schedule_router)
    app.include_router(appointments_router)
    app.include_router(admin_appointments_router)
    app.include_router(rates_router)

    # The booking and manage pages; emailed links point at "/?action=...".
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found, manage pages are not served", settings.static_dir)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port)
