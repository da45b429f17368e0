from __future__ import annotations
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Literal, Optional
from .common import TimeStamped, as_utc, gen_id, utcnow
from datetime import datetime

WorkflowStatus = Literal[
    "new", "docs_sent", "waiting_prejob", "ready_to_schedule",
    "scheduled", "in_progress", "completed", "invoiced", "paid",
]

class ChecklistItem(BaseModel):
    id: str = Field(default_factory=gen_id)
    question: str
    checked: bool = False
    answer: Optional[str] = None
    checked_at: Optional[datetime] = None
    answer_options: List[str] = Field(default_factory=list)

class Conversation(BaseModel):
    id: str = Field(default_factory=gen_id)
    message: str
    channel: Literal["call", "text", "email", "in_person", "other"] = "other"
    created_at: datetime = Field(default_factory=utcnow)

class Reminder(BaseModel):
    id: str = Field(default_factory=gen_id)
    client_id: str
    quote_id: Optional[str] = None
    remind_at: datetime
    done: bool = False
    note: Optional[str] = None
    snooze_days: int = 0

    @field_validator("remind_at")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        return as_utc(v)

    def is_due(self, now: datetime) -> bool:
        return not self.done and self.remind_at <= as_utc(now)

class Client(TimeStamped):
    id: str = Field(default_factory=gen_id)
    name: str
    phone: str | None = None
    email: EmailStr | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    notes: str | None = None

    workflow_status: WorkflowStatus = "new"
    scheduled_date: Optional[str] = None  # YYYY-MM-DD
    scheduled_time: Optional[str] = None  # "9:00 AM"
    company_id: Optional[str] = None

    checklist: List[ChecklistItem] = Field(default_factory=list)
    conversations: List[Conversation] = Field(default_factory=list)
    reminders: List[Reminder] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    def full_address(self) -> str:
        tail = " ".join(p for p in (self.state, self.zip) if p)
        parts = [p for p in (self.address, self.city, tail) if p]
        return ", ".join(parts)
