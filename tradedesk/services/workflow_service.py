from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional
from tradedesk.models.invoice import Invoice
from tradedesk.models.quote import Quote
from tradedesk.services.client_service import ClientService
from tradedesk.services.company_service import CompanyService
from tradedesk.services.invoice_service import InvoiceService
from tradedesk.services.quote_service import QuoteService
from tradedesk.services.settings_service import SettingsService

log = logging.getLogger(__name__)

class WorkflowService:
    """Moves a job along the pipeline: quote -> scheduled -> invoiced -> paid."""

    def __init__(self, data_dir: Optional[str | Path] = None):
        self.settings = SettingsService(data_dir)
        self.quotes = QuoteService(data_dir, settings=self.settings)
        self.invoices = InvoiceService(data_dir, settings=self.settings)
        self.clients = ClientService(data_dir)
        self.companies = CompanyService(data_dir)

    def _set_job_status(self, client_id: str, status, *, quote_id: Optional[str] = None, invoice_id: Optional[str] = None) -> None:
        # a property unit linked to the document carries the status, else the client does
        prop = self.companies.find_property_by_link(quote_id=quote_id, invoice_id=invoice_id)
        if prop is not None:
            self.companies.set_property_status(prop.id, status)
            return
        if self.clients.get_by_id(client_id) is not None:
            self.clients.set_workflow_status(client_id, status)

    # Step 1: approval + scheduling
    def approve_and_schedule(self, quote_id: str, on: str, at: Optional[str] = None) -> Quote:
        q = self.quotes.set_appointment(quote_id, on, at)
        q = self.quotes.set_status(q.id, "scheduled")
        prop = self.companies.find_property_by_link(quote_id=q.id)
        if prop is not None:
            self.companies.schedule_property(prop.id, on, at)
        elif self.clients.get_by_id(q.client_id) is not None:
            self.clients.schedule(q.client_id, on, at)
        return q

    # Step 2: invoice (one invoice per quote)
    def invoice_quote(self, quote_id: str) -> Invoice:
        q = self.quotes.require(quote_id)
        existing = self.invoices.get_by_quote(q.id)
        if existing is not None:
            return existing
        inv = self.invoices.create_from_quote(q)
        if q.status != "completed":
            self.quotes.set_status(q.id, "completed")
        prop = self.companies.find_property_by_link(quote_id=q.id)
        if prop is not None:
            prop.invoice_id = inv.id
            self.companies.update_property(prop)
        self._set_job_status(q.client_id, "invoiced", quote_id=q.id)
        return inv

    # Step 3: payment
    def record_payment(self, invoice_id: str, amount: float, method: Optional[str] = None) -> Invoice:
        inv = self.invoices.record_payment(invoice_id, amount, method)
        if inv.status == "paid":
            self._set_job_status(inv.client_id, "paid", quote_id=inv.quote_id, invoice_id=inv.id)
            log.info("Invoice %s fully paid", inv.number)
        return inv
