from datetime import datetime, timezone

from rma_portal.core.config import settings
from rma_portal.models import Ticket
from rma_portal.services.documents import (
    ConfirmationData,
    build_confirmation_text,
    confirmation_filename,
    render_confirmation_pdf,
)

GENERATED = datetime(2026, 5, 4, 9, 30, tzinfo=timezone.utc)


def _sample():
    return ConfirmationData.model_validate(
        {
            "rmaNumber": "RMA-1",
            "customerNumber": "KD1",
            "errorType": "Display flickert",
            "shippingMethod": "Abholung",
            "address": "Str. 1\n12345 Stadt",
        }
    )


def test_confirmation_text_lists_ticket_details():
    text = build_confirmation_text(_sample(), GENERATED)

    assert text.startswith(settings.company_name)
    assert "RMA-Nummer: RMA-1" in text
    assert "Kundennummer: KD1" in text
    assert "Fehlerbeschreibung: Display flickert" in text
    assert "Versandoption: Abholung" in text
    assert "Str. 1\n12345 Stadt" in text
    assert "Erstellt am: 04.05.2026 09:30 UTC" in text
    assert "Display-Nummer" not in text


def test_known_shipping_methods_get_labels():
    data = _sample().model_copy(update={"shipping_method": "technician", "display_number": "D-17"})
    text = build_confirmation_text(data, GENERATED)
    assert "Versandoption: Techniker-Abholung" in text
    assert "Display-Nummer: D-17" in text


def test_pdf_is_rendered():
    pdf = render_confirmation_pdf(_sample(), GENERATED)
    assert pdf.startswith(b"%PDF")
    assert render_confirmation_pdf(_sample(), GENERATED) == pdf


def test_from_ticket_prefers_alternative_address():
    ticket = Ticket(
        rma_number="RMA-2026-000001",
        customer_number="KD100",
        error_type="lines",
        shipping_method="own-package",
        return_address="Hauptstr. 1",
        alternative_shipping=True,
        alternative_address="Nebenweg 2",
        alternative_zip="20095",
        alternative_city="Hamburg",
    )
    data = ConfirmationData.from_ticket(ticket, error_title="Linien im Bild")
    assert data.address == "Nebenweg 2\n20095 Hamburg"
    assert data.error_type == "Linien im Bild"


def test_filename():
    assert confirmation_filename("RMA-2026-123456") == "RMA-Dokument_RMA-2026-123456.pdf"
