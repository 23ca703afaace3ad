from sqlmodel import select

from rma_portal.models import ActivityLog


def _payload(rma_number="RMA-2026-300001", **overrides):
    payload = {
        "rmaNumber": rma_number,
        "customerNumber": "KD100",
        "errorCategory": "hardware",
        "errorType": "black-screen",
        "troubleshootingSteps": {"power": True, "socket": True},
        "restartConfirmed": True,
        "shippingMethod": "avantor-box",
        "returnAddress": "Hauptstr. 1\n12345 Berlin",
        "contactPerson": "Erika Muster",
        "contactEmail": "erika@example.com",
        "displayNumber": "D-17",
    }
    payload.update(overrides)
    return payload


def test_create_ticket(client, session, add_customer):
    add_customer("KD100")

    r = client.post("/support-tickets", json=_payload())
    assert r.status_code == 200
    body = r.json()
    assert body["rmaNumber"] == "RMA-2026-300001"
    assert body["status"] == "active"
    assert body["workflowStatus"] == "pending"
    assert body["troubleshootingSteps"] == {"power": True, "socket": True}

    entries = session.exec(select(ActivityLog).where(ActivityLog.activity_type == "ticket_created")).all()
    assert [e.entity_id for e in entries] == ["RMA-2026-300001"]


def test_unknown_customer_is_rejected(client, session):
    r = client.post("/support-tickets", json=_payload(customerNumber="NOPE"))
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid customer number"
    assert client.get("/support-tickets/RMA-2026-300001").status_code == 404


def test_duplicate_rma_number_is_rejected(client, add_customer):
    add_customer("KD100")
    assert client.post("/support-tickets", json=_payload()).status_code == 200

    r = client.post("/support-tickets", json=_payload(errorType="lines"))
    assert r.status_code == 409


def test_unknown_fields_are_rejected(client, add_customer):
    add_customer("KD100")
    r = client.post("/support-tickets", json=_payload(priority="high"))
    assert r.status_code == 422


def test_document_download(client, add_customer):
    add_customer("KD100")
    client.post("/support-tickets", json=_payload())

    r = client.get("/support-tickets/RMA-2026-300001/document")
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert 'filename="RMA-Dokument_RMA-2026-300001.pdf"' in r.headers["content-disposition"]
    assert r.content.startswith(b"%PDF")


def test_document_for_unknown_ticket(client):
    assert client.get("/support-tickets/RMA-0000-000000/document").status_code == 404


def test_track(client, add_customer):
    add_customer("KD100")
    client.post("/support-tickets", json=_payload())

    r = client.get("/track/RMA-2026-300001")
    assert r.status_code == 200
    body = r.json()
    assert body["workflowStatus"] == "pending"
    assert body["displayNumber"] == "D-17"
    assert "contactEmail" not in body


def test_customer_validation(client, add_customer):
    add_customer("KD100", name="Muster GmbH")

    assert client.get("/customers/KD999/validate").json() == {"valid": False}
    body = client.get("/customers/KD100/validate").json()
    assert body["valid"] is True
    assert body["customer"]["customerNumber"] == "KD100"


def test_error_types_are_seeded(client):
    r = client.get("/error-types")
    assert r.status_code == 200
    ids = {et["errorId"] for et in r.json()}
    assert {"black-screen", "lines", "bootloop-hang", "meldung-erscheint", "no-connection"} <= ids
    lines = next(et for et in r.json() if et["errorId"] == "lines")
    assert [o["id"] for o in lines["subOptions"]] == ["single-display", "multiple-displays"]
