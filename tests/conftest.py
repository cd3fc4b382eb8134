"""
Shared pytest fixtures for hoopfund tests.

Sets required environment variables BEFORE the package is imported so that the
config classes (which read the environment at import time) pick up safe test
values instead of a developer's .env.
"""
from __future__ import annotations

import os
from typing import Any, Callable, Dict, Iterator, List, Optional

# ── Set env vars before any hoopfund import ───────────────────────────────────
os.environ.setdefault("FLASK_CONFIG", "testing")
os.environ.setdefault("SECRET_KEY", "testing-secret-key")
os.environ.setdefault("ADMIN_PASSWORD", "testing-admin-password")
os.environ.setdefault("SENTRY_DSN", "")

# ── Third-party ───────────────────────────────────────────────────────────────
import pytest
from flask import Flask
from flask.testing import FlaskClient

# ── hoopfund imports (safe after env vars are set) ────────────────────────────
from hoopfund import create_app
from hoopfund.config import TestingConfig
from hoopfund.extensions import db

ADMIN_PASSWORD = "testing-admin-password"


# ── App fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def app(tmp_path) -> Iterator[Flask]:
    """
    A fresh app per test. The in-memory SQLite engine is private to the app,
    so every test starts with empty tables; logos land in a temp directory.
    """
    app = create_app(TestingConfig, LOGO_STORAGE_DIR=str(tmp_path / "logos"))
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture
def admin_headers(client: FlaskClient) -> Dict[str, str]:
    resp = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


# ── Payload builders ──────────────────────────────────────────────────────────

def _player(i: int = 0, age: int = 25, consent: bool = False) -> Dict[str, Any]:
    return {
        "name": f"Player {chr(65 + i)}",
        "email": f"player{i}@example.com",
        "age": age,
        "emergency_contact_name": "Pat Contact",
        "emergency_contact_phone": "(555) 123-4567",
        "parent_consent": consent,
    }


@pytest.fixture
def registration_payload() -> Callable[..., Dict[str, Any]]:
    """Factory fixture: JSON body for POST /api/registrations."""

    def _build(
        registration_type: str = "team",
        size: int = 3,
        team_name: Optional[str] = "Downtown Dribblers",
        players: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "registration_type": registration_type,
            "players": players if players is not None else [_player(i) for i in range(size)],
            "medical_treatment_consent": True,
        }
        if team_name is not None:
            body["team_name"] = team_name
        return body

    return _build


@pytest.fixture
def make_player() -> Callable[..., Dict[str, Any]]:
    return _player


@pytest.fixture
def create_registration(client: FlaskClient, registration_payload) -> Callable[..., Dict[str, Any]]:
    """Factory fixture: register through the public API and return the row dict."""

    def _create(**kwargs: Any) -> Dict[str, Any]:
        resp = client.post("/api/registrations", json=registration_payload(**kwargs))
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["registration"]

    return _create


def _capture_event(
    registration_id: int,
    event_type: str = "PAYMENT.CAPTURE.COMPLETED",
    *,
    event_id: str = "WH-1",
    capture_id: str = "CAP-1",
    amount: str = "60.00",
    registration_type: str = "team",
    refund_of: Optional[str] = None,
) -> Dict[str, Any]:
    """A PayPal capture webhook body in the shape PayPal delivers."""
    resource: Dict[str, Any] = {
        "id": capture_id,
        "status": event_type.rsplit(".", 1)[-1],
        "amount": {"currency_code": "USD", "value": amount},
        "custom_id": f'{{"registration_id":{registration_id},"registration_type":"{registration_type}"}}',
    }
    if refund_of:
        resource["links"] = [
            {"rel": "up", "href": f"https://api-m.sandbox.paypal.com/v2/payments/captures/{refund_of}"}
        ]
    return {"id": event_id, "event_type": event_type, "resource": resource}


@pytest.fixture
def capture_event() -> Callable[..., Dict[str, Any]]:
    return _capture_event
