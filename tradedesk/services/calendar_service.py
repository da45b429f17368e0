from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel

from tradedesk import config
from tradedesk.pricing.engine import round2
from tradedesk.rendering.formatting import slug
from tradedesk.services.client_service import ClientService
from tradedesk.services.company_service import CompanyService
from tradedesk.services.quote_service import QuoteService

log = logging.getLogger(__name__)


class ScheduledJob(BaseModel):
    id: str
    type: Literal["client", "property"]
    name: str
    address: str = ""
    date: str  # YYYY-MM-DD
    time: Optional[str] = None
    company_name: Optional[str] = None
    quote_total: Optional[float] = None


class CalendarService:
    def __init__(self, data_dir: Optional[str | Path] = None, exports_dir: Optional[str | Path] = None):
        self.clients = ClientService(data_dir)
        self.companies = CompanyService(data_dir)
        self.quotes = QuoteService(data_dir)
        self.exports_dir = Path(exports_dir) if exports_dir else config.exports_dir() / "calendar"

    def scheduled_jobs(self, year: Optional[int] = None, month: Optional[int] = None) -> List[ScheduledJob]:
        """Scheduled clients, property units and quotes, sorted by date."""
        jobs: List[ScheduledJob] = []
        clients = {c.id: c for c in self.clients.list_clients()}

        for c in clients.values():
            if c.scheduled_date and c.workflow_status == "scheduled":
                jobs.append(ScheduledJob(
                    id=c.id, type="client", name=c.name, address=c.address or "",
                    date=c.scheduled_date, time=c.scheduled_time,
                ))

        companies = {co.id: co for co in self.companies.list_companies()}
        for p in self.companies.list_properties():
            if p.scheduled_date and p.workflow_status == "scheduled":
                co = companies.get(p.company_id)
                jobs.append(ScheduledJob(
                    id=p.id, type="property", name=p.display_name(), address=p.address,
                    date=p.scheduled_date, time=p.scheduled_time,
                    company_name=co.name if co else None,
                ))

        for q in self.quotes.list_quotes():
            if not q.appointment_date or q.status not in ("approved", "scheduled"):
                continue
            client = clients.get(q.client_id)
            # already listed through the client
            if client and client.scheduled_date == q.appointment_date:
                continue
            snap_name = q.client.name if q.client else None
            jobs.append(ScheduledJob(
                id=q.id, type="client",
                name=snap_name or (client.name if client else "Unknown"),
                address=(q.client.address if q.client else None) or (client.address if client else "") or "",
                date=q.appointment_date, time=q.appointment_time, quote_total=q.total,
            ))

        if year is not None and month is not None:
            prefix = f"{year:04d}-{month:02d}"
            jobs = [j for j in jobs if j.date.startswith(prefix)]
        return sorted(jobs, key=lambda j: j.date)

    @staticmethod
    def month_revenue(jobs: List[ScheduledJob]) -> float:
        return round2(sum(j.quote_total or 0 for j in jobs))

    def export_ics(self, job: ScheduledJob) -> Path:
        """All-day event file for one job."""
        from ics import Calendar, Event

        day = datetime.strptime(job.date, "%Y-%m-%d").date()
        e = Event()
        e.name = job.name
        e.begin = datetime(day.year, day.month, day.day)
        e.make_all_day()
        e.location = job.address or None
        e.description = " ".join(p for p in (job.time, job.company_name) if p) or None
        c = Calendar()
        c.events.add(e)

        self.exports_dir.mkdir(parents=True, exist_ok=True)
        path = self.exports_dir / f"{job.date} {slug(job.name)}.ics"
        with path.open("w", encoding="utf-8") as f:
            f.writelines(c)
        log.info("Calendar event written: %s", path)
        return path
