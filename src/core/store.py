"""JSON document store and the FastAPI dependency exposing it."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError

from src.core.config import settings
from src.modules.appointments.models import Appointment
from src.shared.schemas import CamelModel

logger = logging.getLogger(__name__)


class StoreSettings(CamelModel):
    slot_capacity: int = Field(6, ge=1)
    buy_margin: float = Field(0.012, ge=0, lt=1)
    sell_margin: float = Field(0.018, ge=0)


class StoreDocument(CamelModel):
    """Everything the service persists: appointments, blocked dates, settings."""

    appointments: list[Appointment] = Field(default_factory=list)
    blocked_dates: list[str] = Field(default_factory=list)
    settings: StoreSettings = Field(default_factory=StoreSettings)
    # Records this version cannot read; written back verbatim so nothing is lost.
    unreadable_appointments: list[Any] = Field(default_factory=list, exclude=True)

    def find(self, appointment_id: str) -> Appointment | None:
        for appointment in self.appointments:
            if appointment.id == appointment_id:
                return appointment
        return None


def _parse_document(raw: dict[str, Any]) -> StoreDocument:
    appointments: list[Appointment] = []
    unreadable: list[Any] = []
    for item in raw.get("appointments") or []:
        try:
            appointments.append(Appointment.model_validate(item))
        except ValidationError:
            logger.warning("Keeping unreadable appointment record %r as is", item.get("id") if isinstance(item, dict) else item)
            unreadable.append(item)

    try:
        store_settings = StoreSettings.model_validate(raw.get("settings") or {})
    except ValidationError:
        logger.warning("Invalid store settings, falling back to defaults")
        store_settings = StoreSettings()

    blocked = [str(value) for value in raw.get("blockedDates") or []]
    return StoreDocument(
        appointments=appointments,
        blocked_dates=blocked,
        settings=store_settings,
        unreadable_appointments=unreadable,
    )


class DocumentStore:
    """A single JSON file read fully and rewritten fully on every change.

    Mutations go through :meth:`transaction`, which serialises writers with an
    ``asyncio.Lock`` so concurrent requests in one process cannot lose updates.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def ensure(self) -> None:
        if not self.path.exists():
            logger.info("Creating document store at %s", self.path)
            self.write(StoreDocument())

    def read(self) -> StoreDocument:
        if not self.path.exists():
            return StoreDocument()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.error("Document store %s is unreadable, using an empty document", self.path, exc_info=True)
            self._keep_copy()
            return StoreDocument()
        if not isinstance(raw, dict):
            logger.error("Document store %s does not hold an object, using an empty document", self.path)
            self._keep_copy()
            return StoreDocument()
        return _parse_document(raw)

    def _keep_copy(self) -> None:
        backup = self.path.with_name(f"{self.path.name}.corrupt")
        if backup.exists():
            return
        try:
            shutil.copy2(self.path, backup)
        except OSError:
            logger.error("Could not back up %s", self.path, exc_info=True)
        else:
            logger.warning("Saved a copy of the unreadable store to %s", backup)

    def write(self, document: StoreDocument) -> None:
        data = document.model_dump(mode="json", by_alias=True)
        data["appointments"].extend(document.unreadable_appointments)

        folder = self.path.resolve().parent
        folder.mkdir(parents=True, exist_ok=True)

        # Atomic write
        with tempfile.NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp") as tf:
            json.dump(data, tf, ensure_ascii=False, indent=2)
            tmp_name = tf.name

        os.replace(tmp_name, self.path)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StoreDocument]:
        """Yield the current document and persist it if the block exits cleanly."""
        async with self._lock:
            document = self.read()
            yield document
            self.write(document)


@lru_cache(1)
def get_document_store() -> DocumentStore:
    return DocumentStore(settings.store_path)


def get_store() -> DocumentStore:
    """FastAPI dependency that returns the shared document store."""
    return get_document_store()
