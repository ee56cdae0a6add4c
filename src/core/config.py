"""Application configuration via Pydantic settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CLOSED_WEEKDAYS = (5,)


def parse_closed_weekdays(raw: str | None) -> tuple[int, ...]:
    """Parse a comma separated weekday list (0 = Sunday .. 6 = Saturday)."""
    if raw is None or not raw.strip():
        return DEFAULT_CLOSED_WEEKDAYS
    weekdays: list[int] = []
    for part in raw.split(","):
        try:
            value = int(part.strip())
        except ValueError:
            continue
        if 0 <= value <= 6 and value not in weekdays:
            weekdays.append(value)
    return tuple(weekdays)


class Settings(BaseSettings):
    """Central configuration object loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "Exchange Booking API"
    business_name: str = Field("Elyassi Exchange", alias="BUSINESS_NAME")
    debug: bool = False
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")
    public_base_url_raw: str | None = Field(None, alias="PUBLIC_BASE_URL")

    store_path: Path = Field(Path("data/store.json"), alias="STORE_PATH")
    uploads_dir: Path = Field(Path("uploads"), alias="UPLOADS_DIR")
    max_upload_bytes: int = Field(5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    static_dir: Path = Field(Path("public"), alias="STATIC_DIR")

    closed_weekdays_raw: str | None = Field(None, alias="CLOSED_WEEKDAYS")

    smtp_host: str | None = Field(None, alias="SMTP_HOST")
    smtp_port: int | None = Field(None, alias="SMTP_PORT")
    smtp_user: str | None = Field(None, alias="SMTP_USER")
    smtp_pass: str | None = Field(None, alias="SMTP_PASS")
    smtp_from: str | None = Field(None, alias="SMTP_FROM")
    smtp_timeout_seconds: float = Field(10.0, alias="SMTP_TIMEOUT_SECONDS")

    rates_api_url: str = Field("https://open.er-api.com/v6/latest/USD", alias="RATES_API_URL")
    rates_timeout_seconds: float = Field(10.0, alias="RATES_TIMEOUT_SECONDS")
    rates_cache_seconds: int = Field(300, alias="RATES_CACHE_SECONDS")
    local_currency: str = Field("IRR", alias="LOCAL_CURRENCY")

    @property
    def public_base_url(self) -> str:
        if self.public_base_url_raw:
            return self.public_base_url_raw.rstrip("/")
        return f"http://localhost:{self.port}"

    @property
    def closed_weekdays(self) -> tuple[int, ...]:
        return parse_closed_weekdays(self.closed_weekdays_raw)

    @property
    def smtp_configured(self) -> bool:
        return all((self.smtp_host, self.smtp_port, self.smtp_user, self.smtp_pass))


@lru_cache(1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings = get_settings()
