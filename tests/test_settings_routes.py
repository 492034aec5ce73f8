"""Tests for the /api/user settings endpoints."""

import re
from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient

from src.adapters.db.repositories.email_verification_repo import EmailVerificationRepository
from src.api.main import app
from src.util.time import utcnow
from tests.conftest import PASSWORD, bearer, login


def _token_from_mail(mailer, email: str) -> str:
    body = mailer.to(email)[-1]["body"]
    return re.search(r"\b[A-Za-z0-9]{64}\b", body).group(0)


class TestProfileAndName:
    def test_get_profile(self, client, auth_headers, user):
        response = client.get("/api/user/profile", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == user.email
        assert body["data"]["user"]["name"] == "Alice Smith"
        assert "hashed_password" not in body["data"]["user"]

    def test_requires_authentication(self, client):
        response = client.get("/api/user/profile")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Not authenticated"}

    def test_update_name_strips_markup(self, client, auth_headers):
        response = client.put("/api/user/name", json={"name": "  <b>Alice</b> O'Neil-Smith "}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Name updated successfully."
        assert response.json()["data"]["user"]["name"] == "Alice O'Neil-Smith"

    def test_update_name_rejects_digits(self, client, auth_headers):
        response = client.put("/api/user/name", json={"name": "R2D2"}, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"]["name"] == ["Name can only contain letters, spaces, hyphens, and apostrophes."]

    def test_missing_field_is_reported_per_field(self, client, auth_headers):
        response = client.put("/api/user/name", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert "name" in response.json()["errors"]


class TestEmailChange:
    def test_full_flow(self, client, auth_headers, mailer):
        response = client.post(
            "/api/user/email/request-change",
            json={"email": "New@Example.com", "current_password": PASSWORD},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {"new_email": "new@example.com", "expires_in_minutes": 30}

        token = _token_from_mail(mailer, "new@example.com")
        assert token not in response.text

        response = client.post("/api/user/email/verify", json={"token": token}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "new@example.com"
        assert client.get("/auth/me", headers=auth_headers).json()["email"] == "new@example.com"

    def test_wrong_password(self, client, auth_headers):
        response = client.post(
            "/api/user/email/request-change",
            json={"email": "new@example.com", "current_password": "nope"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"] == {"current_password": ["The provided password is incorrect."]}

    def test_all_field_errors_come_back_in_one_response(self, client, auth_headers):
        response = client.post(
            "/api/user/email/request-change",
            json={"email": "not-an-email", "current_password": "nope"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"current_password", "email"}

    def test_verify_without_request_is_404(self, client, auth_headers):
        response = client.post("/api/user/email/verify", json={"token": "a" * 64}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "No pending email verification found."}

    def test_verify_with_wrong_token_is_400(self, client, auth_headers):
        client.post(
            "/api/user/email/request-change",
            json={"email": "new@example.com", "current_password": PASSWORD},
            headers=auth_headers,
        )

        response = client.post("/api/user/email/verify", json={"token": "a" * 64}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid verification token."

    def test_verify_expired_token_is_400_and_discards_request(self, client, auth_headers, mailer, user, db_session):
        client.post(
            "/api/user/email/request-change",
            json={"email": "new@example.com", "current_password": PASSWORD},
            headers=auth_headers,
        )
        token = _token_from_mail(mailer, "new@example.com")
        repo = EmailVerificationRepository(db_session)
        verification = repo.get_latest_for_user(user.id)
        verification.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = client.post("/api/user/email/verify", json={"token": token}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Verification token has expired. Please request a new one."
        assert repo.list_for_user(user.id) == []


class TestPassword:
    def test_update_password(self, client, auth_headers, user, mailer):
        response = client.put(
            "/api/user/password",
            json={
                "current_password": PASSWORD,
                "password": "Brand-new-pass9",
                "password_confirmation": "Brand-new-pass9",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Password updated successfully."}
        assert client.post("/auth/login", json={"email": user.email, "password": PASSWORD}).status_code == 401
        login(client, user.email, "Brand-new-pass9")
        assert mailer.to(user.email)[-1]["subject"] == "Your Password Was Changed"

    def test_confirmation_mismatch(self, client, auth_headers):
        response = client.put(
            "/api/user/password",
            json={
                "current_password": PASSWORD,
                "password": "Brand-new-pass9",
                "password_confirmation": "Brand-new-pass8",
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"] == {"password": ["Password confirmation does not match."]}

    def test_weak_password(self, client, auth_headers):
        response = client.put(
            "/api/user/password",
            json={"current_password": PASSWORD, "password": "alllowercase1!", "password_confirmation": "alllowercase1!"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"] == {"password": ["Password must contain both upper and lower case letters."]}

    def test_same_as_current(self, client, auth_headers):
        response = client.put(
            "/api/user/password",
            json={"current_password": PASSWORD, "password": PASSWORD, "password_confirmation": PASSWORD},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "password" in response.json()["errors"]


class TestLogoutAll:
    def test_keeps_current_session_only(self, client, user):
        current = login(client, user.email)
        other = login(client, user.email)

        response = client.post("/api/user/logout-all", headers=bearer(current))

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out from all other devices successfully."
        assert client.get("/api/user/profile", headers=bearer(current)).status_code == 200
        assert client.get("/api/user/profile", headers=bearer(other)).status_code == 401


class TestAccountDeletion:
    def test_request_status_cancel(self, client, auth_headers):
        response = client.get("/api/user/account/deletion-status", headers=auth_headers)
        assert response.json() == {"success": True, "data": {"has_pending_deletion": False}}

        response = client.post(
            "/api/user/account/delete",
            json={"password": PASSWORD, "confirmation": True},
            headers=auth_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Account deletion requested. You have 30 days to cancel."
        assert body["data"]["days_remaining"] == 30
        assert "scheduled_deletion_at" in body["data"]

        status_data = client.get("/api/user/account/deletion-status", headers=auth_headers).json()["data"]
        assert status_data["has_pending_deletion"] is True
        assert status_data["days_remaining"] == 30
        assert "requested_at" in status_data

        response = client.post("/api/user/account/cancel-deletion", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Account deletion cancelled successfully."

        response = client.post("/api/user/account/cancel-deletion", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "No pending deletion request found."}

    def test_confirmation_must_be_true(self, client, auth_headers):
        response = client.post(
            "/api/user/account/delete",
            json={"password": PASSWORD, "confirmation": False},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "confirmation" in response.json()["errors"]


def test_unexpected_error_is_a_generic_500(db_session, mailer, user):
    from src.api.dependencies import get_db, get_mailer

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            headers = bearer(login(client, user.email))
            with patch(
                "src.api.routes.settings.SettingsService.get_profile",
                side_effect=RuntimeError("database exploded"),
            ):
                response = client.get("/api/user/profile", headers=headers)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Something went wrong. Please try again."}
    assert "exploded" not in response.text
