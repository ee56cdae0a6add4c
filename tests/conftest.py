from pathlib import Path
import sys

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.core.config import settings  # noqa: E402
from src.core.store import DocumentStore, StoreDocument, StoreSettings, get_store  # noqa: E402
from src.modules.appointments.models import Appointment  # noqa: E402
from src.shared.enums import DocumentType  # noqa: E402

# 2030-01-07 is a Monday.
OPEN_DATE = "2030-01-07"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "uploads_dir", tmp_path / "uploads")
    monkeypatch.setattr(settings, "static_dir", tmp_path / "public")
    monkeypatch.setattr(settings, "closed_weekdays_raw", "5")
    monkeypatch.setattr(settings, "public_base_url_raw", "https://book.example.com")
    monkeypatch.setattr(settings, "smtp_host", None)
    monkeypatch.setattr(settings, "smtp_port", None)
    monkeypatch.setattr(settings, "smtp_user", None)
    monkeypatch.setattr(settings, "smtp_pass", None)
    monkeypatch.setattr(settings, "smtp_from", None)
    monkeypatch.setattr(settings, "local_currency", "IRR")
    return settings


@pytest.fixture
def store(tmp_path) -> DocumentStore:
    document_store = DocumentStore(tmp_path / "data" / "store.json")
    document_store.ensure()
    return document_store


@pytest.fixture
def make_appointment():
    def factory(**overrides) -> Appointment:
        data = {
            "first_name": "Sara",
            "last_name": "Karimi",
            "email": "sara@example.com",
            "document_type": DocumentType.PASSPORT,
            "document_number": "P1234567",
            "date": OPEN_DATE,
            "time_slot": "09:00",
        }
        data.update(overrides)
        return Appointment(**data)

    return factory


@pytest.fixture
def seed(store):
    def write(*appointments: Appointment, slot_capacity: int = 6, blocked_dates: tuple[str, ...] = ()) -> StoreDocument:
        document = StoreDocument(
            appointments=list(appointments),
            blocked_dates=list(blocked_dates),
            settings=StoreSettings(slot_capacity=slot_capacity),
        )
        store.write(document)
        return document

    return write


@pytest.fixture
def app(store):
    from main import create_app

    application = create_app()
    application.dependency_overrides[get_store] = lambda: store
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
