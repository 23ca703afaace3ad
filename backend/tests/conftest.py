from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from rma_portal.core.config import settings
from rma_portal.db import session as session_mod
from rma_portal.db.session import get_session
from rma_portal.main import app
from rma_portal.models import Customer, Ticket


@pytest.fixture()
def engine(monkeypatch):
    # SQLite in-memory for unit tests; one shared connection across threads
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(session_mod, "engine", engine, raising=False)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture()
def client(engine):
    def override_get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers():
    return {"X-Admin-Key": settings.admin_api_key, "X-Admin-User": "alice"}


@pytest.fixture()
def add_customer(session):
    def _add(customer_number="KD100", name="Muster GmbH"):
        customer = Customer(customer_number=customer_number, name=name)
        session.add(customer)
        session.commit()
        session.refresh(customer)
        return customer

    return _add


@pytest.fixture()
def make_ticket(session):
    def _make(rma_number, age_days=0, now=None, **fields):
        now = now or datetime.now(timezone.utc)
        created = now - timedelta(days=age_days)
        data = {
            "customer_number": "KD100",
            "error_category": "hardware",
            "error_type": "lines",
            "shipping_method": "own-package",
            "return_address": "Hauptstr. 1\n12345 Berlin",
            "created_at": created,
            "updated_at": created,
        }
        data.update(fields)
        ticket = Ticket(rma_number=rma_number, **data)
        session.add(ticket)
        session.commit()
        session.refresh(ticket)
        return ticket

    return _make
