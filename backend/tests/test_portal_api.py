"""
Client Portal API Tests
=======================

Profile, tax cases, document upload/download ownership and appointments.
"""

import io
import os

import pytest

from app.db.models import ActivityLog, Appointment, CaseStatus, Document, DocumentCategory, TaxCase
from app.services.storage_service import storage_service

PDF_BYTES = b"%PDF-1.4 test document"


@pytest.fixture(autouse=True)
def local_uploads(tmp_path, monkeypatch):
    monkeypatch.setattr(storage_service, "upload_dir", tmp_path / "uploads")


def make_case(db, client_id, year=2024, status=CaseStatus.pending):
    tax_case = TaxCase(client_id=client_id, filing_year=year, status=status)
    db.add(tax_case)
    db.commit()
    db.refresh(tax_case)
    return tax_case


def upload(client, headers, data=None, content=PDF_BYTES, content_type="application/pdf", name="w2.pdf"):
    return client.post(
        "/api/documents/upload",
        headers=headers,
        files={"file": (name, io.BytesIO(content), content_type)},
        data=data or {},
    )


# =============================================================================
# Profile
# =============================================================================

class TestProfile:
    def test_get_profile(self, client, client_user, auth_headers):
        body = client.get("/api/user/profile", headers=auth_headers(client_user)).json()
        assert body["email"] == "client@example.com"
        assert body["isActive"] is True
        assert "zipCode" in body

    def test_update_profile_uses_camel_case(self, client, client_user, auth_headers):
        response = client.patch(
            "/api/user/profile",
            headers=auth_headers(client_user),
            json={"name": "  Renamed Client ", "zipCode": "10468", "city": ""},
        )
        body = response.json()
        assert response.status_code == 200
        assert body["name"] == "Renamed Client"
        assert body["zipCode"] == "10468"
        assert body["city"] is None

    def test_requires_auth(self, client):
        assert client.get("/api/user/profile").status_code == 401


# =============================================================================
# Cases
# =============================================================================

class TestCases:
    def test_lists_only_own_cases_newest_first(self, client, db, client_user, other_client, auth_headers):
        older = make_case(db, client_user.id, 2023)
        newer = make_case(db, client_user.id, 2024)
        make_case(db, other_client.id, 2024)

        body = client.get("/api/cases", headers=auth_headers(client_user)).json()
        assert [c["id"] for c in body] == [newer.id, older.id]
        assert body[0]["filingYear"] == 2024
        assert body[0]["status"] == "pending"

    def test_case_detail_is_owner_only(self, client, db, client_user, other_client, auth_headers):
        foreign = make_case(db, other_client.id)
        response = client.get(f"/api/cases/{foreign.id}", headers=auth_headers(client_user))
        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"

    def test_staff_can_read_any_case(self, client, db, client_user, preparer_user, auth_headers):
        tax_case = make_case(db, client_user.id)
        response = client.get(f"/api/cases/{tax_case.id}", headers=auth_headers(preparer_user))
        assert response.status_code == 200

    def test_missing_case(self, client, client_user, auth_headers):
        response = client.get("/api/cases/999", headers=auth_headers(client_user))
        assert response.status_code == 404
        assert response.json()["detail"] == "Case not found"


# =============================================================================
# Documents
# =============================================================================

class TestDocumentUpload:
    def test_upload_to_own_case(self, client, db, client_user, auth_headers, sent_emails):
        tax_case = make_case(db, client_user.id)
        response = upload(
            client,
            auth_headers(client_user),
            data={"caseId": str(tax_case.id), "category": "w2", "description": "My W-2"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["caseId"] == tax_case.id
        assert body["category"] == "w2"
        assert body["fileSize"] == len(PDF_BYTES)
        assert body["isFromPreparer"] is False
        assert "filePath" not in body

        stored = db.query(Document).one()
        assert os.path.exists(stored.file_path)
        assert stored.file_path.endswith("-w2.pdf")
        assert db.query(ActivityLog).filter(ActivityLog.action == "document_uploaded").count() == 1
        assert len(sent_emails) == 1

    def test_foreign_case_is_denied(self, client, db, client_user, other_client, auth_headers):
        foreign = make_case(db, other_client.id)
        response = upload(client, auth_headers(client_user), data={"caseId": str(foreign.id)})
        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"
        assert db.query(Document).count() == 0

    def test_unknown_category_falls_back_to_other(self, client, db, client_user, auth_headers):
        upload(client, auth_headers(client_user), data={"category": "tax-stuff"})
        assert db.query(Document).one().category == DocumentCategory.other

    def test_rejects_disallowed_type(self, client, client_user, auth_headers):
        response = upload(client, auth_headers(client_user), content_type="text/plain", name="notes.txt")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid file type"

    def test_rejects_oversized_file(self, client, client_user, auth_headers):
        big = b"0" * (10 * 1024 * 1024 + 1)
        response = upload(client, auth_headers(client_user), content=big)
        assert response.status_code == 413

    def test_missing_file(self, client, client_user, auth_headers):
        response = client.post("/api/documents/upload", headers=auth_headers(client_user), data={"category": "w2"})
        assert response.status_code == 400
        assert response.json()["detail"] == "No file uploaded"

    def test_staff_upload_for_client(self, client, db, client_user, preparer_user, auth_headers, sent_emails):
        response = upload(client, auth_headers(preparer_user), data={"clientId": str(client_user.id)})
        body = response.json()
        assert body["clientId"] == client_user.id
        assert body["isFromPreparer"] is True
        assert body["uploadedById"] == preparer_user.id
        assert sent_emails == []


class TestDocumentAccess:
    def test_list_own_documents(self, client, client_user, other_client, auth_headers):
        upload(client, auth_headers(client_user))
        upload(client, auth_headers(other_client))

        body = client.get("/api/documents", headers=auth_headers(client_user)).json()
        assert len(body) == 1
        assert body[0]["clientId"] == client_user.id

    def test_owner_downloads(self, client, client_user, auth_headers):
        doc_id = upload(client, auth_headers(client_user)).json()["id"]
        response = client.get(f"/api/documents/{doc_id}/download", headers=auth_headers(client_user))
        assert response.status_code == 200
        assert response.content == PDF_BYTES
        assert "w2.pdf" in response.headers["content-disposition"]

    def test_other_client_cannot_download(self, client, client_user, other_client, auth_headers):
        doc_id = upload(client, auth_headers(client_user)).json()["id"]
        response = client.get(f"/api/documents/{doc_id}/download", headers=auth_headers(other_client))
        assert response.status_code == 403

    def test_admin_downloads_any(self, client, client_user, admin_user, auth_headers):
        doc_id = upload(client, auth_headers(client_user)).json()["id"]
        response = client.get(f"/api/documents/{doc_id}/download", headers=auth_headers(admin_user))
        assert response.status_code == 200

    def test_missing_document(self, client, client_user, auth_headers):
        response = client.get("/api/documents/404/download", headers=auth_headers(client_user))
        assert response.status_code == 404
        assert response.json()["detail"] == "Document not found"

    def test_missing_file_on_disk(self, client, db, client_user, auth_headers):
        doc_id = upload(client, auth_headers(client_user)).json()["id"]
        os.remove(db.get(Document, doc_id).file_path)
        response = client.get(f"/api/documents/{doc_id}/download", headers=auth_headers(client_user))
        assert response.status_code == 404
        assert response.json()["detail"] == "File not found"

    def test_r2_document_redirects_to_signed_url(self, client, db, client_user, auth_headers, monkeypatch):
        doc = Document(client_id=client_user.id, file_name="w2.pdf", file_path="r2:documents/1-2-w2.pdf")
        db.add(doc)
        db.commit()
        monkeypatch.setattr(storage_service, "exists", lambda path: True)
        monkeypatch.setattr(
            storage_service, "generate_download_url", lambda path: "https://r2.example.com/signed"
        )

        response = client.get(
            f"/api/documents/{doc.id}/download", headers=auth_headers(client_user), follow_redirects=False
        )
        assert response.status_code == 307
        assert response.headers["location"] == "https://r2.example.com/signed"


# =============================================================================
# Appointments
# =============================================================================

class TestAppointments:
    def test_schedule_appointment(self, client, db, client_user, auth_headers, sent_emails):
        response = client.post(
            "/api/appointments",
            headers=auth_headers(client_user),
            json={"appointmentDate": "2025-03-10T15:00:00Z", "notes": "Bring W-2"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "scheduled"
        assert body["appointmentDate"].startswith("2025-03-10T15:00:00")

        assert db.query(Appointment).count() == 1
        assert db.query(ActivityLog).filter(ActivityLog.action == "appointment_scheduled").count() == 1
        assert len(sent_emails) == 2

    def test_date_required(self, client, client_user, auth_headers):
        response = client.post("/api/appointments", headers=auth_headers(client_user), json={"notes": "?"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Appointment date is required"

    def test_lists_only_own(self, client, client_user, other_client, auth_headers):
        client.post("/api/appointments", headers=auth_headers(other_client), json={"appointmentDate": "2025-03-10T15:00:00"})
        assert client.get("/api/appointments", headers=auth_headers(client_user)).json() == []
