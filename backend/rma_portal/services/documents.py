import io
import textwrap
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from rma_portal.core.config import settings
from rma_portal.models.ticket import Ticket

SHIPPING_METHOD_LABELS = {
    "own-package": "Eigene Verpackung",
    "avantor-box": "AVANTOR-Box mit Rückschein",
    "technician": "Techniker-Abholung",
    "complete-replacement": "Kompletttausch",
}


class ConfirmationData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    rma_number: str
    customer_number: str
    error_type: str
    shipping_method: str
    address: str

    display_number: Optional[str] = None
    display_location: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None

    @classmethod
    def from_ticket(cls, ticket: Ticket, error_title: Optional[str] = None) -> "ConfirmationData":
        return cls(
            rma_number=ticket.rma_number,
            customer_number=ticket.customer_number,
            error_type=error_title or ticket.error_type,
            shipping_method=ticket.shipping_method,
            address=ticket.shipping_address(),
            display_number=ticket.display_number,
            display_location=ticket.display_location,
            contact_person=ticket.contact_person,
            contact_email=ticket.contact_email,
        )


def _ts(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%d.%m.%Y %H:%M UTC")


def confirmation_filename(rma_number: str) -> str:
    return f"RMA-Dokument_{rma_number}.pdf"


def build_confirmation_text(data: ConfirmationData, generated_at: datetime) -> str:
    lines = []
    lines.append(settings.company_name)
    lines.append("RMA-Dokument")
    lines.append("")
    lines.append(f"RMA-Nummer: {data.rma_number}")
    lines.append(f"Kundennummer: {data.customer_number}")
    if data.display_number:
        lines.append(f"Display-Nummer: {data.display_number}")
    if data.display_location:
        lines.append(f"Display-Standort: {data.display_location}")
    if data.contact_person:
        lines.append(f"Ansprechpartner: {data.contact_person}")
    if data.contact_email:
        lines.append(f"Kontakt-E-Mail: {data.contact_email}")
    lines.append(f"Fehlerbeschreibung: {data.error_type}")
    lines.append(f"Versandoption: {SHIPPING_METHOD_LABELS.get(data.shipping_method, data.shipping_method)}")
    lines.append("")
    lines.append("Versandadresse:")
    lines.extend(data.address.splitlines() or [""])
    lines.append("")
    lines.append(f"Erstellt am: {_ts(generated_at)}")

    return "\n".join(lines) + "\n"


def render_confirmation_pdf(data: ConfirmationData, generated_at: datetime) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4, invariant=1)
    width, height = A4

    left = 54
    top = height - 54
    line_height = 14
    y = top

    body = build_confirmation_text(data, generated_at).splitlines()
    title, subtitle, rest = body[0], body[1], body[2:]

    c.setFont("Helvetica-Bold", 18)
    c.drawCentredString(width / 2, y, title)
    y -= 24
    c.setFont("Helvetica", 14)
    c.drawCentredString(width / 2, y, subtitle)
    y -= 12
    c.line(left, y, width - left, y)
    y -= 24

    c.setFont("Helvetica", 11)
    for raw in rest:
        for line in textwrap.wrap(raw, width=90) or [""]:
            if y <= 54:
                c.showPage()
                c.setFont("Helvetica", 11)
                y = top
            c.drawString(left, y, line)
            y -= line_height

    c.save()
    return buf.getvalue()
