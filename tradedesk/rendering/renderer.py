from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from tradedesk import config
from tradedesk.models.client import Client
from tradedesk.models.contract import Contract
from tradedesk.models.invoice import Invoice
from tradedesk.models.quote import Quote
from tradedesk.models.settings import Settings
from tradedesk.pricing.engine import aggregate, payment_state
from tradedesk.rendering.contract_template import TITLE, contract_variables, fill_sections
from tradedesk.rendering.formatting import format_money, format_rate, slug

log = logging.getLogger(__name__)

Document = Union[Quote, Invoice, Contract]


class RenderError(RuntimeError):
    pass


def _clean_path(p: str) -> str:
    p = p.strip().strip('"').strip("'")
    return os.path.normpath(p)


def find_wkhtmltopdf(settings: Optional[Settings] = None) -> Optional[str]:
    """
    Locates the wkhtmltopdf binary:
    - WKHTMLTOPDF_PATH environment variable
    - settings.wkhtmltopdf_path
    - PATH
    """
    candidates = [os.environ.get("WKHTMLTOPDF_PATH"), settings.wkhtmltopdf_path if settings else None]
    for c in candidates:
        if c and Path(_clean_path(c)).is_file():
            return _clean_path(c)
    found = shutil.which("wkhtmltopdf")
    return _clean_path(found) if found else None


class DocumentRenderer:
    """
    Renders quotes, invoices and contracts to HTML (Jinja2) and PDF.
    Amounts shown on documents come from the pricing engine.
    """

    KINDS = {Quote: "quote", Invoice: "invoice", Contract: "contract"}

    def __init__(self, settings: Optional[Settings] = None, templates_dir: Optional[Path] = None) -> None:
        self.settings = settings or Settings()
        self.templates_dir = Path(templates_dir or config.TEMPLATES_DIR)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["money"] = lambda v: format_money(v, self.settings.currency_symbol)
        self.env.filters["rate"] = format_rate

    # ----------- context -----------
    def _company(self) -> Dict[str, Any]:
        s = self.settings
        return {
            "name": s.company_name,
            "left_lines": s.company_left_lines,
            "right_lines": s.company_right_lines,
            "watermark": s.watermark,
        }

    def _client(self, doc: Document, client: Optional[Client]) -> Dict[str, Any]:
        if client is not None:
            return {"name": client.name, "phone": client.phone, "email": client.email, "address": client.full_address()}
        snap = getattr(doc, "client", None)
        if snap is not None:
            return snap.model_dump()
        return {"name": "Client", "phone": None, "email": None, "address": None}

    def build_context(self, doc: Document, client: Optional[Client] = None) -> Dict[str, Any]:
        ctx: Dict[str, Any] = {
            "doc": doc,
            "number": doc.number or doc.id,
            "created": doc.created_at.strftime("%Y-%m-%d"),
            "company": self._company(),
            "client": self._client(doc, client),
        }
        if isinstance(doc, (Quote, Invoice)):
            ctx["items"] = doc.items
            ctx["totals"] = aggregate(doc.items, doc.tax_rate, doc.discount)
        if isinstance(doc, Invoice):
            ctx["payment"] = payment_state(ctx["totals"].total, doc.amount_paid)
        if isinstance(doc, Contract):
            ctx["payment"] = payment_state(doc.total_amount, doc.check_amount + doc.cash_amount)
            ctx["title"] = TITLE
            ctx["sections"] = fill_sections(contract_variables(doc, client, self.settings))
        return ctx

    # ----------- render -----------
    def render_html(self, doc: Document, client: Optional[Client] = None) -> str:
        kind = self.KINDS[type(doc)]
        tpl = self.env.get_template(f"{kind}.html")
        return tpl.render(**self.build_context(doc, client))

    def render_text(self, template_name: str, **ctx: Any) -> str:
        return self.env.get_template(template_name).render(company=self._company(), **ctx)

    def pdf_filename(self, doc: Document, client: Optional[Client] = None) -> str:
        kind = self.KINDS[type(doc)]
        cname = self._client(doc, client)["name"]
        return f"{kind}-{doc.number or doc.id} ({slug(cname)}).pdf"

    def export_pdf(self, doc: Document, client: Optional[Client] = None, out_dir: Optional[Union[str, Path]] = None) -> Path:
        """
        wkhtmltopdf (pdfkit) first, WeasyPrint as fallback.
        """
        html = self.render_html(doc, client)
        target_dir = Path(out_dir) if out_dir else config.exports_dir() / f"{self.KINDS[type(doc)]}s"
        target_dir.mkdir(parents=True, exist_ok=True)
        out_path = target_dir / self.pdf_filename(doc, client)
        css_path = self.templates_dir / "stylesheet.css"

        wkhtml = find_wkhtmltopdf(self.settings)
        if wkhtml:
            import pdfkit
            try:
                conf = pdfkit.configuration(wkhtmltopdf=wkhtml)
                options = {"enable-local-file-access": None, "quiet": "", "encoding": "UTF-8"}
                pdfkit.from_string(html, str(out_path), options=options, configuration=conf,
                                   css=str(css_path) if css_path.exists() else None)
                log.info("PDF written with wkhtmltopdf: %s", out_path)
                return out_path
            except OSError as e:
                log.warning("wkhtmltopdf failed (%s), falling back to WeasyPrint", e)

        try:
            from weasyprint import CSS, HTML
        except (ImportError, OSError) as e:
            # OSError: WeasyPrint installed without its pango/cairo system libraries
            raise RenderError(
                "wkhtmltopdf not found and WeasyPrint is not installed. "
                "Install WeasyPrint (pip install tradedesk[pdf]) or set WKHTMLTOPDF_PATH."
            ) from e
        styles = [CSS(filename=str(css_path))] if css_path.exists() else None
        HTML(string=html, base_url=str(self.templates_dir)).write_pdf(str(out_path), stylesheets=styles)
        log.info("PDF written with WeasyPrint: %s", out_path)
        return out_path
