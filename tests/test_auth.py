"""Tests for /api/auth: register, login, logout, me and token handling."""

from bson import ObjectId

from library_api.core.security import create_access_token
from library_api.models.user import USERS_COLLECTION
from tests.support import DEFAULT_PASSWORD, ApiTestCase


class TestRegister(ApiTestCase):
    def test_register_creates_member(self) -> None:
        response = self.client.post(
            "/api/auth/register",
            json={"name": "Ada", "email": "Ada@Library.org", "password": "password123"},
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertEqual(body["email"], "ada@library.org")
        self.assertEqual(body["role"], "member")
        self.assertNotIn("password", body)
        stored = self.db[USERS_COLLECTION].find_one({"email": "ada@library.org"})
        self.assertNotEqual(stored["password"], "password123")

    def test_duplicate_email_is_conflict(self) -> None:
        self.create_user("ada@library.org")
        response = self.client.post(
            "/api/auth/register",
            json={"name": "Ada", "email": "ADA@library.org", "password": "password123"},
        )
        self.assertEqual(response.status_code, 409)

    def test_short_password_rejected(self) -> None:
        response = self.client.post(
            "/api/auth/register",
            json={"name": "Ada", "email": "ada@library.org", "password": "short"},
        )
        self.assertEqual(response.status_code, 422)

    def test_invalid_email_rejected(self) -> None:
        response = self.client.post(
            "/api/auth/register",
            json={"name": "Ada", "email": "not-an-email", "password": "password123"},
        )
        self.assertEqual(response.status_code, 422)


class TestLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.create_user("reader@library.org")

    def test_login_returns_token_and_sets_cookie(self) -> None:
        response = self.client.post(
            "/api/auth/login",
            json={"email": "reader@library.org", "password": DEFAULT_PASSWORD},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["user"]["id"], self.user_id)
        set_cookie = response.headers["set-cookie"]
        self.assertIn("token=", set_cookie)
        self.assertIn("HttpOnly", set_cookie)

    def test_wrong_password(self) -> None:
        response = self.client.post(
            "/api/auth/login",
            json={"email": "reader@library.org", "password": "wrong-password"},
        )
        self.assertEqual(response.status_code, 401)

    def test_unknown_email(self) -> None:
        response = self.client.post(
            "/api/auth/login",
            json={"email": "nobody@library.org", "password": DEFAULT_PASSWORD},
        )
        self.assertEqual(response.status_code, 401)

    def test_seeded_librarian_can_log_in(self) -> None:
        headers = self.librarian_headers()
        response = self.client.get("/api/auth/me", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "librarian")


class TestCurrentUser(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.create_user("reader@library.org")

    def test_me_with_bearer_token(self) -> None:
        response = self.client.get("/api/auth/me", headers=self.login("reader@library.org"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["email"], "reader@library.org")

    def test_me_with_cookie_then_logout(self) -> None:
        self.client.post(
            "/api/auth/login",
            json={"email": "reader@library.org", "password": DEFAULT_PASSWORD},
        )
        self.assertEqual(self.client.get("/api/auth/me").status_code, 200)
        response = self.client.post("/api/auth/logout")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_me_without_credentials(self) -> None:
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, 401)

    def test_garbage_token(self) -> None:
        response = self.client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
        self.assertEqual(response.status_code, 401)

    def test_token_for_deleted_user(self) -> None:
        token = create_access_token(str(ObjectId()), "member", self.settings)
        response = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "User not found")
