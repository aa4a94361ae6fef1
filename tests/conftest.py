from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from quoteforge.db import models  # noqa: F401
from quoteforge.db.models import SequenceCounter
from quoteforge.db.base import Base
from quoteforge.db.session import get_db
from quoteforge.main import create_app


@pytest.fixture()
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'quoteforge.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c


def make_item(**overrides: Any) -> dict[str, Any]:
    item = {
        "product_id": None,
        "product_name": "Widget",
        "description": "",
        "unit_price": 100,
        "quantity": 2,
        "unit_label": "pcs",
        "is_taxable": True,
    }
    item.update(overrides)
    return item


def make_draft_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "customer": {
            "name": "Acme Trading",
            "vat_no": "VAT-123",
            "address_lines": ["Road 1", "Manama"],
            "contact_name": "",
            "phone": "",
            "email": "buyer@acme.test",
        },
        "items": [make_item()],
        "discount": {"type": "percent", "value": 10},
        "vat_rate": 0.1,
        "currency": "BHD",
        "notes": "",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def item_factory():
    return make_item


@pytest.fixture()
def draft_payload():
    return make_draft_payload


@pytest.fixture()
def counter_value(db):
    """Read a sequence counter as committed, bypassing the session's identity map."""

    def _read(scope: str) -> int:
        row = db.query(SequenceCounter).populate_existing().filter(SequenceCounter.scope == scope).one_or_none()
        return row.value if row else 0

    return _read
