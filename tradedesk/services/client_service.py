from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from tradedesk import config
from tradedesk.models.client import ChecklistItem, Client, Conversation, Reminder, WorkflowStatus
from tradedesk.models.common import as_utc, utcnow
from tradedesk.storage.errors import RecordNotFound
from tradedesk.storage.json_repo import JsonRepository

log = logging.getLogger(__name__)


class ClientService:
    def __init__(self, data_dir: Optional[str | Path] = None):
        base = Path(data_dir) if data_dir else config.data_dir()
        self.repo = JsonRepository(base / "clients.json", entity_name="client", key="id")

    def list_clients(self) -> List[Client]:
        out: List[Client] = []
        for d in self.repo.list_all():
            try:
                out.append(Client(**d))
            except ValidationError as e:
                # skip broken rows so one bad record does not hide the others
                log.warning("Skipping invalid client %s: %s", d.get("id"), e)
        return sorted(out, key=lambda c: c.name.casefold())

    def add_client(self, client: Client) -> Client:
        self.repo.add(client)
        log.info("Added client %s (%s)", client.name, client.id)
        return client

    def update_client(self, client: Client) -> Client:
        client.touch()
        self.repo.update(client)
        return client

    def delete_client(self, client_id: str) -> bool:
        return self.repo.delete(client_id)

    def get_by_id(self, client_id: str) -> Optional[Client]:
        d = self.repo.get_by_id(client_id)
        if d is None:
            return None
        try:
            return Client(**d)
        except ValidationError:
            log.warning("Invalid client record %s", client_id)
            return None

    def require(self, client_id: str) -> Client:
        c = self.get_by_id(client_id)
        if c is None:
            raise RecordNotFound("client", "id", client_id)
        return c

    def search(self, text: str) -> List[Client]:
        needle = (text or "").strip().casefold()
        if not needle:
            return self.list_clients()
        return [
            c for c in self.list_clients()
            if any(needle in (v or "").casefold() for v in (c.name, c.phone, c.email))
        ]

    def list_by_company(self, company_id: str) -> List[Client]:
        return [c for c in self.list_clients() if c.company_id == company_id]

    def set_workflow_status(self, client_id: str, status: WorkflowStatus) -> Client:
        c = self.require(client_id)
        c.workflow_status = status
        return self.update_client(c)

    def schedule(self, client_id: str, on: str, at: Optional[str] = None) -> Client:
        c = self.require(client_id)
        c.scheduled_date = on
        c.scheduled_time = at
        c.workflow_status = "scheduled"
        return self.update_client(c)

    # ----------- checklist / conversations -----------
    def _find(self, items: list, item_id: str, label: str):
        for it in items:
            if it.id == item_id:
                return it
        raise RecordNotFound(label, "id", item_id)

    def add_checklist_item(self, client_id: str, question: str, answer_options: Iterable[str] = ()) -> ChecklistItem:
        with self.repo.lock:
            c = self.require(client_id)
            item = ChecklistItem(question=question, answer_options=list(answer_options))
            c.checklist.append(item)
            self.update_client(c)
        return item

    def check_item(self, client_id: str, item_id: str, answer: Optional[str] = None, checked: bool = True) -> ChecklistItem:
        """Unchecking clears the answer and the check time."""
        with self.repo.lock:
            c = self.require(client_id)
            item = self._find(c.checklist, item_id, "checklist item")
            item.checked = checked
            item.answer = answer if checked else None
            item.checked_at = utcnow() if checked else None
            self.update_client(c)
        return item

    def add_conversation(self, client_id: str, message: str, channel: str = "other") -> Conversation:
        with self.repo.lock:
            c = self.require(client_id)
            conv = Conversation(message=message, channel=channel)
            c.conversations.append(conv)
            self.update_client(c)
        return conv

    # ----------- reminders -----------
    def add_reminder(
        self,
        client_id: str,
        remind_at: datetime,
        note: Optional[str] = None,
        quote_id: Optional[str] = None,
    ) -> Reminder:
        with self.repo.lock:
            c = self.require(client_id)
            r = Reminder(client_id=c.id, remind_at=remind_at, note=note, quote_id=quote_id)
            c.reminders.append(r)
            self.update_client(c)
        log.info("Reminder for %s at %s", c.name, r.remind_at.isoformat())
        return r

    def update_reminder(self, client_id: str, reminder_id: str, **changes: Any) -> Reminder:
        with self.repo.lock:
            c = self.require(client_id)
            old = self._find(c.reminders, reminder_id, "reminder")
            new = Reminder.model_validate({**old.model_dump(), **changes, "id": old.id, "client_id": c.id})
            c.reminders = [new if r.id == old.id else r for r in c.reminders]
            self.update_client(c)
        return new

    def delete_reminder(self, client_id: str, reminder_id: str) -> bool:
        with self.repo.lock:
            c = self.require(client_id)
            kept = [r for r in c.reminders if r.id != reminder_id]
            if len(kept) == len(c.reminders):
                return False
            c.reminders = kept
            self.update_client(c)
        return True

    def toggle_reminder(self, client_id: str, reminder_id: str) -> Reminder:
        with self.repo.lock:
            r = self._find(self.require(client_id).reminders, reminder_id, "reminder")
            return self.update_reminder(client_id, reminder_id, done=not r.done)

    def snooze(self, client_id: str, reminder_id: str, days: int) -> Reminder:
        """Moves the reminder `days` later and reopens it."""
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise ValueError(f"snooze days must be a positive integer, got {days!r}")
        with self.repo.lock:
            r = self._find(self.require(client_id).reminders, reminder_id, "reminder")
            return self.update_reminder(
                client_id, reminder_id,
                remind_at=r.remind_at + timedelta(days=days), snooze_days=days, done=False,
            )

    def due_reminders(self, now: Optional[datetime] = None) -> List[Tuple[Client, Reminder]]:
        """Open reminders whose time has come, oldest first."""
        now = as_utc(now) if now else utcnow()
        rows = [(c, r) for c in self.list_clients() for r in c.reminders if r.is_due(now)]
        return sorted(rows, key=lambda row: row[1].remind_at)

    def overdue_reminders(self, now: Optional[datetime] = None) -> List[Tuple[Client, Reminder]]:
        """Open reminders from before the start of today (UTC)."""
        now = as_utc(now) if now else utcnow()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return [(c, r) for c, r in self.due_reminders(now) if r.remind_at < start_of_day]
