"""Tests for /api/books: catalog reads, librarian writes and cover images."""

from bson import ObjectId

from library_api.models.book import BOOKS_COLLECTION
from tests.support import ApiTestCase

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestBookReads(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.dune = self.create_book("Dune", "Frank Herbert", category="Science Fiction")
        self.create_book("Emma", "Jane Austen", category="Classics")

    def test_list_sorted_by_title(self) -> None:
        response = self.client.get("/api/books")
        self.assertEqual(response.status_code, 200)
        titles = [b["title"] for b in response.json()["books"]]
        self.assertEqual(titles, ["Dune", "Emma"])

    def test_search_title_or_author(self) -> None:
        by_author = self.client.get("/api/books", params={"q": "austen"}).json()["books"]
        self.assertEqual([b["title"] for b in by_author], ["Emma"])
        by_title = self.client.get("/api/books", params={"q": "DUN"}).json()["books"]
        self.assertEqual([b["title"] for b in by_title], ["Dune"])

    def test_search_is_not_a_regex(self) -> None:
        response = self.client.get("/api/books", params={"q": ".*"})
        self.assertEqual(response.json()["books"], [])

    def test_filter_by_category(self) -> None:
        books = self.client.get("/api/books", params={"category": "Classics"}).json()["books"]
        self.assertEqual([b["title"] for b in books], ["Emma"])

    def test_get_one(self) -> None:
        response = self.client.get(f"/api/books/{self.dune}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["author"], "Frank Herbert")

    def test_get_unknown_and_malformed_ids(self) -> None:
        self.assertEqual(self.client.get(f"/api/books/{ObjectId()}").status_code, 404)
        self.assertEqual(self.client.get("/api/books/not-an-id").status_code, 404)


class TestBookWrites(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.librarian_headers()

    def test_create_requires_librarian(self) -> None:
        payload = {"title": "Dune", "author": "Frank Herbert"}
        self.assertEqual(self.client.post("/api/books", json=payload).status_code, 401)
        member = self.member_headers()
        self.assertEqual(self.client.post("/api/books", json=payload, headers=member).status_code, 403)

    def test_create(self) -> None:
        response = self.client.post(
            "/api/books",
            json={"title": "Dune", "author": "Frank Herbert", "total_copies": 3, "isbn": "9780441013593"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertEqual(body["total_copies"], 3)
        self.assertEqual(body["available_copies"], 3)
        self.assertIsNone(body["image"])
        self.assertEqual(self.db[BOOKS_COLLECTION].count_documents({}), 1)

    def test_create_validates_copies(self) -> None:
        response = self.client.post(
            "/api/books",
            json={"title": "Dune", "author": "Frank Herbert", "total_copies": 0},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 422)

    def test_partial_update(self) -> None:
        book_id = self.create_book(copies=2)
        response = self.client.put(
            f"/api/books/{book_id}",
            json={"title": "Dune Messiah", "total_copies": 4},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["title"], "Dune Messiah")
        self.assertEqual(body["author"], "Frank Herbert")
        self.assertEqual(body["total_copies"], 4)
        self.assertEqual(body["available_copies"], 4)

    def test_shrink_keeps_loans_consistent(self) -> None:
        book_id = self.create_book(copies=2)
        member = self.member_headers()
        self.assertEqual(self.client.post(f"/api/borrow/{book_id}", headers=member).status_code, 201)
        response = self.client.put(f"/api/books/{book_id}", json={"total_copies": 1}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["available_copies"], 0)
        member2 = self.member_headers("second@library.org")
        self.assertEqual(self.client.post(f"/api/borrow/{book_id}", headers=member2).status_code, 409)

    def test_cannot_shrink_below_copies_on_loan(self) -> None:
        book_id = self.create_book(copies=2)
        for email in ("first@library.org", "second@library.org"):
            self.client.post(f"/api/borrow/{book_id}", headers=self.member_headers(email))
        response = self.client.put(f"/api/books/{book_id}", json={"total_copies": 1}, headers=self.headers)
        self.assertEqual(response.status_code, 409)
        book = self.client.get(f"/api/books/{book_id}").json()
        self.assertEqual((book["total_copies"], book["available_copies"]), (2, 0))

    def test_update_unknown_book(self) -> None:
        response = self.client.put(f"/api/books/{ObjectId()}", json={"title": "X"}, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_delete(self) -> None:
        book_id = self.create_book()
        response = self.client.delete(f"/api/books/{book_id}", headers=self.headers)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get(f"/api/books/{book_id}").status_code, 404)

    def test_delete_while_on_loan_is_conflict(self) -> None:
        book_id = self.create_book()
        self.client.post(f"/api/borrow/{book_id}", headers=self.member_headers())
        response = self.client.delete(f"/api/books/{book_id}", headers=self.headers)
        self.assertEqual(response.status_code, 409)


class TestBookImages(ApiTestCase):
    settings_overrides = {"MAX_UPLOAD_BYTES": 64}

    def setUp(self) -> None:
        super().setUp()
        self.headers = self.librarian_headers()
        self.book_id = self.create_book()

    def _upload(self, filename: str, content: bytes):
        return self.client.post(
            f"/api/books/{self.book_id}/image",
            files={"file": (filename, content, "application/octet-stream")},
            headers=self.headers,
        )

    def test_upload_is_served_statically(self) -> None:
        response = self._upload("cover.PNG", PNG_BYTES)
        self.assertEqual(response.status_code, 200, response.text)
        image = response.json()["image"]
        self.assertTrue(image.startswith("/uploads/"))
        self.assertTrue(image.endswith(".png"))
        served = self.client.get(image)
        self.assertEqual(served.status_code, 200)
        self.assertEqual(served.content, PNG_BYTES)

    def test_replacing_image_removes_old_file(self) -> None:
        first = self._upload("a.png", PNG_BYTES).json()["image"]
        second = self._upload("b.jpg", PNG_BYTES).json()["image"]
        self.assertNotEqual(first, second)
        self.assertEqual(self.client.get(first).status_code, 404)
        self.assertEqual(self.client.get(second).status_code, 200)

    def test_delete_book_removes_image(self) -> None:
        image = self._upload("a.png", PNG_BYTES).json()["image"]
        self.client.delete(f"/api/books/{self.book_id}", headers=self.headers)
        self.assertEqual(self.client.get(image).status_code, 404)

    def test_rejects_other_file_types(self) -> None:
        response = self._upload("notes.txt", b"hello")
        self.assertEqual(response.status_code, 422)
        self.assertEqual(list(self.uploads_dir.iterdir()), [])

    def test_rejects_oversized_file(self) -> None:
        response = self._upload("big.png", b"x" * 65)
        self.assertEqual(response.status_code, 413)

    def test_requires_librarian(self) -> None:
        response = self.client.post(
            f"/api/books/{self.book_id}/image",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
            headers=self.member_headers(),
        )
        self.assertEqual(response.status_code, 403)
