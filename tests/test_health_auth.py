import logging

from fastapi.testclient import TestClient

from conftest import ADMIN_HEADERS, FakeTransportFactory, make_settings
from govivid.main import create_app
from govivid.shared.auth import is_authorized


def test_health_reports_smtp_ready(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["smtpReady"] is True
    assert body["cors"] == "enabled"
    assert "T" in body["timestamp"]


def test_security_headers_are_set(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert "error" in response.json()


def test_is_authorized_accepts_any_configured_secret():
    accepted = ("first", "second")
    assert is_authorized("second", accepted)
    assert not is_authorized("third", accepted)
    assert not is_authorized("", accepted)
    assert not is_authorized(None, accepted)


def test_secondary_admin_password_is_accepted(tmp_path):
    settings = make_settings(tmp_path, admin_secrets=("primary", "from-vite"))
    with TestClient(create_app(settings, transport_factory=FakeTransportFactory())) as client:
        response = client.post(
            "/api/categories",
            json={"value": "social", "label": "Social"},
            headers={"x-admin-secret": "from-vite"},
        )
    assert response.status_code == 200


def test_no_admin_password_allows_requests_and_warns_once(tmp_path, caplog):
    settings = make_settings(tmp_path, admin_secrets=())

    with caplog.at_level(logging.WARNING, logger="govivid.shared.auth"):
        with TestClient(create_app(settings, transport_factory=FakeTransportFactory())) as client:
            first = client.post("/api/projects", json={"title": "Open"})
            second = client.post("/api/projects", json={"title": "Still open"})

    assert first.status_code == 200
    assert second.status_code == 200
    warnings = [r for r in caplog.records if "Admin authentication disabled" in r.getMessage()]
    assert len(warnings) == 1


def test_default_categories_seeded_on_startup(tmp_path):
    settings = make_settings(tmp_path, seed_categories=True)
    with TestClient(create_app(settings, transport_factory=FakeTransportFactory())) as client:
        categories = client.get("/api/categories").json()

    assert [c["value"] for c in categories] == ["branding", "digital", "social", "campaigns", "content"]
    assert categories[0] == {"id": 1, "value": "branding", "label": "Branding & Identity"}


def test_admin_header_name_is_case_insensitive(client):
    response = client.post(
        "/api/categories",
        json={"value": "digital", "label": "Digital"},
        headers={"X-Admin-Secret": ADMIN_HEADERS["x-admin-secret"]},
    )
    assert response.status_code == 200
