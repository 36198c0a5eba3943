"""Shared fixtures: settings, an in-memory MongoDB context and an API test case."""

import tempfile
import unittest
from pathlib import Path
from typing import Any

import mongomock
from fastapi.testclient import TestClient

from library_api.core.config import Settings
from library_api.core.context import AppContext
from library_api.core.database import ensure_indexes
from library_api.core.security import hash_password
from library_api.main import create_app
from library_api.models.book import BOOKS_COLLECTION, new_book_document
from library_api.models.user import USERS_COLLECTION, UserRole, new_user_document
from library_api.services.seed import LIBRARIAN_EMAIL, LIBRARIAN_PASSWORD, seed_librarian

TEST_MONGO_URI = "mongodb://localhost:27017/library_test"
DEFAULT_PASSWORD = "correct-horse-battery"


def make_settings(uploads_dir: Path | str = "uploads", **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "MONGO_URI": TEST_MONGO_URI,
        "UPLOADS_DIR": str(uploads_dir),
        "JWT_SECRET": "test-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_context(settings: Settings) -> AppContext:
    client = mongomock.MongoClient(tz_aware=True)
    db = client["library_test"]
    ensure_indexes(db)
    return AppContext(settings=settings, client=client, db=db)


class ApiTestCase(unittest.TestCase):
    """Runs each test against a fresh app, database and uploads directory."""

    settings_overrides: dict[str, Any] = {}

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.uploads_dir = Path(self._tmp.name) / "uploads"
        self.settings = make_settings(self.uploads_dir, **self.settings_overrides)
        self.context = make_context(self.settings)
        self.db = self.context.db
        self.app = create_app(self.context)
        self.client = TestClient(self.app)

    def tearDown(self) -> None:
        self.client.close()
        self._tmp.cleanup()

    def create_user(
        self,
        email: str,
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.MEMBER,
        name: str = "Reader",
    ) -> str:
        doc = new_user_document(name=name, email=email, password_hash=hash_password(password), role=role)
        return str(self.db[USERS_COLLECTION].insert_one(doc).inserted_id)

    def create_book(self, title: str = "Dune", author: str = "Frank Herbert", copies: int = 1, **kwargs: Any) -> str:
        doc = new_book_document(title=title, author=author, total_copies=copies, **kwargs)
        return str(self.db[BOOKS_COLLECTION].insert_one(doc).inserted_id)

    def login(self, email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
        """Log in and return Bearer headers; the cookie the login sets is dropped."""
        response = self.client.post("/api/auth/login", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        self.client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def librarian_headers(self) -> dict[str, str]:
        seed_librarian(self.db)
        return self.login(LIBRARIAN_EMAIL, LIBRARIAN_PASSWORD)

    def member_headers(self, email: str = "reader@library.org") -> dict[str, str]:
        self.create_user(email)
        return self.login(email)
