from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import date, datetime, timezone
import uuid


def gen_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Aware UTC timestamp, used for every stored datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # naive datetimes are taken as UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def today() -> date:
    """Local calendar day, the date printed in document numbers."""
    return datetime.now().date()


class TimeStamped(BaseModel):
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def touch(self) -> "TimeStamped":
        self.updated_at = utcnow()
        return self
