"""
Admin API Tests
===============

Staff gating, dashboard statistics, client overview and case management.
"""

from decimal import Decimal

import pytest

from app.db.models import ActivityLog, CaseStatus, ContactSubmission, TaxCase


def make_case(db, client_id, status=CaseStatus.pending, final_amount=None, year=2024):
    tax_case = TaxCase(client_id=client_id, filing_year=year, status=status, final_amount=final_amount)
    db.add(tax_case)
    db.commit()
    db.refresh(tax_case)
    return tax_case


# =============================================================================
# Access control
# =============================================================================

class TestAdminGating:
    @pytest.mark.parametrize(
        "path",
        ["/api/admin/stats", "/api/admin/clients", "/api/admin/cases", "/api/admin/documents",
         "/api/admin/appointments", "/api/admin/contacts", "/api/admin/activity"],
    )
    def test_client_is_rejected(self, client, client_user, auth_headers, path):
        response = client.get(path, headers=auth_headers(client_user))
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_anonymous_is_rejected(self, client):
        assert client.get("/api/admin/stats").status_code == 401

    @pytest.mark.parametrize("staff", ["admin_user", "preparer_user"])
    def test_admin_and_preparer_share_access(self, client, auth_headers, request, staff):
        user = request.getfixturevalue(staff)
        assert client.get("/api/admin/stats", headers=auth_headers(user)).status_code == 200


# =============================================================================
# Dashboard
# =============================================================================

class TestStats:
    def test_empty(self, client, admin_user, auth_headers):
        body = client.get("/api/admin/stats", headers=auth_headers(admin_user)).json()
        assert body == {"totalClients": 0, "pendingCases": 0, "completedCases": 0, "totalRefunds": 0.0}

    def test_counts_and_refund_sum(self, client, db, admin_user, client_user, other_client, auth_headers):
        make_case(db, client_user.id, CaseStatus.pending)
        make_case(db, client_user.id, CaseStatus.in_process)
        make_case(db, client_user.id, CaseStatus.approved, Decimal("1200.50"))
        make_case(db, other_client.id, CaseStatus.refund_issued, Decimal("799.50"))
        make_case(db, other_client.id, CaseStatus.sent_to_irs)

        body = client.get("/api/admin/stats", headers=auth_headers(admin_user)).json()
        assert body["totalClients"] == 2
        assert body["pendingCases"] == 1
        assert body["completedCases"] == 2
        assert body["totalRefunds"] == pytest.approx(2000.0)

    def test_activity_feed(self, client, admin_user, client_user, auth_headers):
        client.post("/api/auth/login", json={"email": "client@example.com", "password": "Secret123"})
        client.cookies.clear()
        body = client.get("/api/admin/activity", headers=auth_headers(admin_user)).json()
        assert body[0]["action"] == "user_login"
        assert body[0]["userId"] == client_user.id


# =============================================================================
# Clients
# =============================================================================

class TestClients:
    def test_list_with_counts(self, client, db, admin_user, client_user, other_client, auth_headers):
        make_case(db, client_user.id)
        make_case(db, client_user.id, year=2023)

        body = client.get("/api/admin/clients", headers=auth_headers(admin_user)).json()
        by_email = {c["email"]: c for c in body}
        assert set(by_email) == {"client@example.com", "other@example.com"}
        assert by_email["client@example.com"]["caseCount"] == 2
        assert by_email["other@example.com"]["caseCount"] == 0
        assert "password" not in by_email["client@example.com"]

    def test_client_detail(self, client, db, admin_user, client_user, auth_headers):
        make_case(db, client_user.id)
        body = client.get(f"/api/admin/clients/{client_user.id}", headers=auth_headers(admin_user)).json()
        assert body["client"]["id"] == client_user.id
        assert len(body["cases"]) == 1
        assert body["documents"] == []
        assert body["appointments"] == []

    def test_unknown_client(self, client, admin_user, auth_headers):
        response = client.get("/api/admin/clients/999", headers=auth_headers(admin_user))
        assert response.status_code == 404


# =============================================================================
# Cases
# =============================================================================

class TestCaseManagement:
    def test_create_case(self, client, db, preparer_user, client_user, auth_headers):
        response = client.post(
            "/api/admin/cases",
            headers=auth_headers(preparer_user),
            json={"clientId": client_user.id, "filingYear": 2024, "filingStatus": "single", "dependents": 2},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["dependents"] == 2
        assert db.query(ActivityLog).filter(ActivityLog.action == "case_created").count() == 1

    @pytest.mark.parametrize("payload", [{"filingYear": 2024}, {"clientId": 1}, {}])
    def test_client_and_year_required(self, client, admin_user, auth_headers, payload):
        response = client.post("/api/admin/cases", headers=auth_headers(admin_user), json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "Client ID and filing year are required"

    def test_list_cases_with_client(self, client, db, admin_user, client_user, auth_headers):
        make_case(db, client_user.id)
        body = client.get("/api/admin/cases", headers=auth_headers(admin_user)).json()
        assert body[0]["client"]["email"] == "client@example.com"

    def test_filter_cases_by_status(self, client, db, admin_user, client_user, auth_headers):
        make_case(db, client_user.id, CaseStatus.pending)
        make_case(db, client_user.id, CaseStatus.approved)
        body = client.get("/api/admin/cases?status=approved", headers=auth_headers(admin_user)).json()
        assert [c["status"] for c in body] == ["approved"]

    def test_status_change_notifies_client(self, client, db, admin_user, client_user, auth_headers, sent_emails):
        tax_case = make_case(db, client_user.id)
        response = client.patch(
            f"/api/admin/cases/{tax_case.id}",
            headers=auth_headers(admin_user),
            json={"status": "refund_issued", "finalAmount": "1500.00", "notes": "Direct deposit"},
        )
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "refund_issued"
        assert Decimal(str(body["finalAmount"])) == Decimal("1500.00")
        assert body["notes"] == "Direct deposit"
        assert [mail["to"] for mail in sent_emails] == ["client@example.com"]
        assert db.query(ActivityLog).filter(ActivityLog.action == "case_updated").count() == 1

    def test_notes_only_update_sends_nothing(self, client, db, admin_user, client_user, auth_headers, sent_emails):
        tax_case = make_case(db, client_user.id)
        client.patch(f"/api/admin/cases/{tax_case.id}", headers=auth_headers(admin_user), json={"notes": "x"})
        assert sent_emails == []

    def test_update_missing_case(self, client, admin_user, auth_headers):
        response = client.patch("/api/admin/cases/999", headers=auth_headers(admin_user), json={"notes": "x"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Case not found"


# =============================================================================
# Leads & appointments
# =============================================================================

class TestLeads:
    def test_contacts_newest_first(self, client, db, admin_user, auth_headers):
        db.add_all([
            ContactSubmission(name="First", email="a@example.com", message="first message here"),
            ContactSubmission(name="Second", email="b@example.com", message="second message here"),
        ])
        db.commit()
        body = client.get("/api/admin/contacts", headers=auth_headers(admin_user)).json()
        assert [c["name"] for c in body] == ["Second", "First"]

    def test_appointments_include_client(self, client, admin_user, client_user, auth_headers):
        client.post(
            "/api/appointments",
            headers=auth_headers(client_user),
            json={"appointmentDate": "2025-02-01T10:00:00"},
        )
        body = client.get("/api/admin/appointments", headers=auth_headers(admin_user)).json()
        assert body[0]["client"]["id"] == client_user.id
