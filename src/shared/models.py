"""Reusable model mixins."""

from datetime import datetime, timezone

from pydantic import Field

from src.shared.schemas import CamelModel


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class TimestampMixin(CamelModel):
    """Track creation/update times in UTC."""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()
