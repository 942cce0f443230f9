"""
Public Site Tests
=================

Contact form, service catalog, WhatsApp deep links and health checks.
"""

from urllib.parse import quote

import pytest
from sqlalchemy.exc import OperationalError

from app.db.models import ContactSubmission
from app.services import whatsapp_service

CONTACT = {
    "name": "Ana Perez",
    "email": "ana@example.com",
    "phone": "917-555-0101",
    "service": "ITIN",
    "message": "I need help renewing my ITIN this year.",
}


class TestContact:
    def test_submission_is_stored_and_forwarded(self, client, db, sent_emails):
        response = client.post("/api/contact", json=CONTACT)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["contact"]["name"] == "Ana Perez"
        assert db.query(ContactSubmission).count() == 1
        assert len(sent_emails) == 1
        assert "Ana Perez" in sent_emails[0]["subject"]

    @pytest.mark.parametrize(
        "override",
        [{"name": "A"}, {"email": "not-an-email"}, {"message": "too short"}, {"service": "x" * 101}],
    )
    def test_validation(self, client, override):
        assert client.post("/api/contact", json={**CONTACT, **override}).status_code == 422

    def test_email_failure_does_not_break_submission(self, client, monkeypatch):
        def broken(*args, **kwargs):
            raise ValueError("Resend down")

        monkeypatch.setattr(
            "app.services.email_service.email_service.send_contact_form_notification", broken
        )
        assert client.post("/api/contact", json=CONTACT).status_code == 200


class TestWhatsApp:
    def test_default_link_is_english(self, client):
        body = client.get("/api/site/whatsapp").json()
        assert body["language"] == "en"
        assert body["url"] == (
            "https://wa.me/19172574554?text="
            + quote("Hello, I would like information about your tax services", safe="")
        )

    def test_spanish_service_link(self, client):
        body = client.get("/api/site/whatsapp", params={"lang": "es", "service": "ITIN"}).json()
        assert body["message"] == "Hola, quiero información sobre sus servicios de taxes: ITIN"
        assert "%20" in body["url"]
        assert " " not in body["url"]

    def test_unknown_language_falls_back(self):
        assert whatsapp_service.normalize_language("de") == "en"
        assert whatsapp_service.normalize_language("pt-BR") == "pt"

    def test_service_catalog(self, client):
        body = client.get("/api/site/services", params={"lang": "fr"}).json()
        assert len(body) == 6
        assert all(s["whatsappUrl"].startswith("https://wa.me/19172574554?text=Bonjour") for s in body)


class TestHealth:
    def test_liveness(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["uptime"] >= 0
        assert "timestamp" in body

    def test_readiness(self, client):
        response = client.get("/health/detailed")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_readiness_degraded(self, client, monkeypatch):
        def fail(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("db down"))

        monkeypatch.setattr("sqlalchemy.orm.Session.execute", fail)
        response = client.get("/health/detailed")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "disconnected"

    def test_correlation_header(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"
