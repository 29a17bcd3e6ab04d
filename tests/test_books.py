"""
Tests for Books Endpoints

Tests all CRUD operations for the /api/books endpoints:
- GET /api/books (list with filters and pagination)
- GET /api/books/{book_id} (get single)
- POST /api/books (create) and POST /api/books/bulk
- PUT /api/books/{book_id} (partial update)
- DELETE /api/books/{book_id} (delete)

Test Organization:
- Each test class groups related tests
- Test names describe what's being tested
- Fixtures provide users, tokens and books
"""

from collections.abc import Callable

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from booktracker.models import Book

BOOKS_URL = "/api/books"
MISSING_ID = "0123456789abcdef01234567"


class TestCreateBook:
    """Tests for POST /api/books"""

    def test_create_book_defaults(self, client: TestClient, auth_headers: dict, sample_user):
        response = client.post(
            BOOKS_URL,
            headers=auth_headers,
            json={"title": "Dune", "author": "Herbert"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Book added successfully"

        book = body["data"]
        assert book["title"] == "Dune"
        assert book["author"] == "Herbert"
        assert book["status"] == "want-to-read"
        assert book["statusDisplay"] == "Want to Read"
        assert book["tags"] == []
        assert book["notes"] == ""
        assert book["ownerId"] == sample_user.id
        assert len(book["id"]) == 24
        assert "createdAt" in book
        assert "updatedAt" in book

    def test_create_book_sanitizes_tags(self, client: TestClient, auth_headers: dict):
        response = client.post(
            BOOKS_URL,
            headers=auth_headers,
            json={
                "title": "Dune",
                "author": "Frank Herbert",
                "tags": ["Fiction", " fiction ", "sci-fi"],
            },
        )

        assert response.json()["data"]["tags"] == ["fiction", "sci-fi"]

    def test_create_book_all_fields(self, client: TestClient, auth_headers: dict):
        response = client.post(
            BOOKS_URL,
            headers=auth_headers,
            json={
                "title": "  Dune ",
                "author": "Frank Herbert",
                "status": "completed",
                "notes": "Loved it",
            },
        )

        book = response.json()["data"]
        assert book["title"] == "Dune"
        assert book["status"] == "completed"
        assert book["statusDisplay"] == "Completed"
        assert book["notes"] == "Loved it"

    def test_create_book_missing_title(self, client: TestClient, auth_headers: dict):
        response = client.post(BOOKS_URL, headers=auth_headers, json={"author": "Herbert"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert {"field": "title", "message": "Title is required"} in body["errors"]

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({"title": "T" * 201, "author": "A"}, "title"),
            ({"title": "T", "author": "A" * 101}, "author"),
            ({"title": "T", "author": "A", "notes": "n" * 1001}, "notes"),
            ({"title": "T", "author": "A", "status": "abandoned"}, "status"),
            ({"title": "   ", "author": "A"}, "title"),
        ],
    )
    def test_create_book_invalid(self, client: TestClient, auth_headers: dict, payload, field):
        response = client.post(BOOKS_URL, headers=auth_headers, json=payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in [error["field"] for error in response.json()["errors"]]

    def test_create_book_requires_auth(self, client: TestClient):
        response = client.post(BOOKS_URL, json={"title": "Dune", "author": "Herbert"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestBulkCreate:
    """Tests for POST /api/books/bulk"""

    def test_bulk_create(self, client: TestClient, auth_headers: dict):
        response = client.post(
            f"{BOOKS_URL}/bulk",
            headers=auth_headers,
            json=[
                {"title": "Dune", "author": "Frank Herbert", "tags": ["SCI-FI"]},
                {"title": "Emma", "author": "Jane Austen", "status": "reading"},
            ],
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["message"] == "Books added successfully"
        assert body["count"] == 2
        assert [book["title"] for book in body["data"]] == ["Dune", "Emma"]
        assert body["data"][0]["tags"] == ["sci-fi"]
        assert body["data"][1]["status"] == "reading"

    def test_bulk_create_empty_list(self, client: TestClient, auth_headers: dict):
        response = client.post(f"{BOOKS_URL}/bulk", headers=auth_headers, json=[])

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_bulk_create_is_all_or_nothing(self, client: TestClient, auth_headers: dict):
        response = client.post(
            f"{BOOKS_URL}/bulk",
            headers=auth_headers,
            json=[{"title": "Dune", "author": "Frank Herbert"}, {"author": "No Title"}],
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert {"field": "1.title", "message": "Title is required"} in response.json()["errors"]

        listing = client.get(BOOKS_URL, headers=auth_headers).json()
        assert listing["total"] == 0


class TestListBooks:
    """Tests for GET /api/books"""

    def test_list_books_empty(self, client: TestClient, auth_headers: dict):
        response = client.get(BOOKS_URL, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["data"] == []
        assert body["count"] == 0
        assert body["total"] == 0
        assert body["page"] == 1
        assert body["limit"] == 10
        assert body["pages"] == 0

    def test_list_books_pagination(
        self, client: TestClient, auth_headers: dict, make_book: Callable[..., Book]
    ):
        for i in range(15):
            make_book(title=f"Book {i + 1}")

        first = client.get(BOOKS_URL, headers=auth_headers).json()
        second = client.get(f"{BOOKS_URL}?page=2", headers=auth_headers).json()

        assert first["count"] == 10
        assert first["total"] == 15
        assert first["pages"] == 2
        assert second["count"] == 5
        assert second["page"] == 2

        titles = [book["title"] for book in first["data"] + second["data"]]
        assert len(set(titles)) == 15

    def test_list_books_newest_first(
        self, client: TestClient, auth_headers: dict, make_book: Callable[..., Book]
    ):
        make_book(title="Oldest")
        make_book(title="Middle")
        make_book(title="Newest")

        titles = [book["title"] for book in client.get(BOOKS_URL, headers=auth_headers).json()["data"]]

        assert titles == ["Newest", "Middle", "Oldest"]

    @pytest.mark.parametrize(
        "query,page,limit",
        [
            ("page=0&limit=0", 1, 1),
            ("page=-5&limit=-5", 1, 1),
            ("limit=500", 1, 100),
            ("page=3&limit=25", 3, 25),
        ],
    )
    def test_list_books_clamps_pagination(
        self, client: TestClient, auth_headers: dict, query: str, page: int, limit: int
    ):
        body = client.get(f"{BOOKS_URL}?{query}", headers=auth_headers).json()

        assert body["page"] == page
        assert body["limit"] == limit

    def test_list_books_huge_page_is_empty(self, client: TestClient, auth_headers: dict, library):
        response = client.get(
            BOOKS_URL, headers=auth_headers, params={"page": 10**17, "limit": 100}
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["data"] == []
        assert body["count"] == 0
        assert body["total"] == len(library)
        assert body["page"] == 10**17
        assert body["pages"] == 1

    def test_list_books_non_integer_page(self, client: TestClient, auth_headers: dict):
        response = client.get(f"{BOOKS_URL}?page=abc", headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == "page"

    def test_list_books_by_status(self, client: TestClient, auth_headers: dict, library):
        body = client.get(f"{BOOKS_URL}?status=reading", headers=auth_headers).json()

        assert body["total"] == 2
        assert {book["status"] for book in body["data"]} == {"reading"}

    def test_list_books_unknown_status(self, client: TestClient, auth_headers: dict):
        response = client.get(f"{BOOKS_URL}?status=abandoned", headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"] == [
            {"field": "status", "message": "Status must be one of: want-to-read, reading, completed"}
        ]

    def test_list_books_by_tag_ignores_case(self, client: TestClient, auth_headers: dict, library):
        body = client.get(f"{BOOKS_URL}?tag=%20SCI-FI%20", headers=auth_headers).json()

        assert body["total"] == 3
        assert all("sci-fi" in book["tags"] for book in body["data"])

    def test_list_books_search(self, client: TestClient, auth_headers: dict, library):
        body = client.get(f"{BOOKS_URL}?search=ORWELL", headers=auth_headers).json()

        assert sorted(book["title"] for book in body["data"]) == ["1984", "Animal Farm"]

    def test_list_books_combined_filters(self, client: TestClient, auth_headers: dict, library):
        body = client.get(
            f"{BOOKS_URL}?status=completed&tag=classic&search=orwell",
            headers=auth_headers,
        ).json()

        assert body["total"] == 2

    def test_list_books_only_own(
        self,
        client: TestClient,
        auth_headers: dict,
        second_auth_headers: dict,
        library,
    ):
        body = client.get(BOOKS_URL, headers=second_auth_headers).json()

        assert body["total"] == 0


class TestGetBook:
    """Tests for GET /api/books/{book_id}"""

    def test_get_book(self, client: TestClient, auth_headers: dict, sample_book: Book):
        response = client.get(f"{BOOKS_URL}/{sample_book.id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert "message" not in body
        book = body["data"]
        assert book["id"] == sample_book.id
        assert book["title"] == "Dune"
        assert book["tags"] == ["sci-fi", "classic"]
        assert book["status"] == "reading"
        assert book["statusDisplay"] == "Reading"
        assert book["notes"] == "Re-read before the film"

    def test_get_book_not_found(self, client: TestClient, auth_headers: dict):
        response = client.get(f"{BOOKS_URL}/{MISSING_ID}", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Book not found"

    def test_get_book_invalid_id(self, client: TestClient, auth_headers: dict):
        response = client.get(f"{BOOKS_URL}/not-an-id", headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Invalid ID format"

    def test_get_book_of_other_user(
        self, client: TestClient, second_auth_headers: dict, sample_book: Book
    ):
        response = client.get(f"{BOOKS_URL}/{sample_book.id}", headers=second_auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Book not found"


class TestUpdateBook:
    """Tests for PUT /api/books/{book_id}"""

    def test_update_book_partial(self, client: TestClient, auth_headers: dict, sample_book: Book):
        response = client.put(
            f"{BOOKS_URL}/{sample_book.id}",
            headers=auth_headers,
            json={"status": "completed"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["message"] == "Book updated successfully"
        book = body["data"]
        assert book["status"] == "completed"
        assert book["statusDisplay"] == "Completed"
        # Unspecified fields stay as they were
        assert book["title"] == "Dune"
        assert book["author"] == "Frank Herbert"
        assert book["tags"] == ["sci-fi", "classic"]
        assert book["notes"] == "Re-read before the film"

    def test_update_book_replaces_tags(
        self, client: TestClient, auth_headers: dict, sample_book: Book
    ):
        response = client.put(
            f"{BOOKS_URL}/{sample_book.id}",
            headers=auth_headers,
            json={"tags": ["Space", "space ", "Desert"]},
        )

        assert response.json()["data"]["tags"] == ["space", "desert"]

        fetched = client.get(f"{BOOKS_URL}/{sample_book.id}", headers=auth_headers).json()
        assert fetched["data"]["tags"] == ["space", "desert"]

    def test_update_book_rejects_null_title(
        self, client: TestClient, auth_headers: dict, sample_book: Book
    ):
        response = client.put(
            f"{BOOKS_URL}/{sample_book.id}",
            headers=auth_headers,
            json={"title": None},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == "title"

    def test_update_book_of_other_user(
        self, client: TestClient, second_auth_headers: dict, sample_book: Book
    ):
        response = client.put(
            f"{BOOKS_URL}/{sample_book.id}",
            headers=second_auth_headers,
            json={"title": "Hijacked"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_book_not_found(self, client: TestClient, auth_headers: dict):
        response = client.put(
            f"{BOOKS_URL}/{MISSING_ID}",
            headers=auth_headers,
            json={"title": "Ghost"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDeleteBook:
    """Tests for DELETE /api/books/{book_id}"""

    def test_delete_book(self, client: TestClient, auth_headers: dict, sample_book: Book):
        book_id = sample_book.id

        response = client.delete(f"{BOOKS_URL}/{book_id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "success": True,
            "message": "Book deleted successfully",
            "data": {},
        }

        get_response = client.get(f"{BOOKS_URL}/{book_id}", headers=auth_headers)
        assert get_response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_book_of_other_user(
        self, client: TestClient, auth_headers: dict, second_auth_headers: dict, sample_book: Book
    ):
        response = client.delete(f"{BOOKS_URL}/{sample_book.id}", headers=second_auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

        # Still there for its owner
        get_response = client.get(f"{BOOKS_URL}/{sample_book.id}", headers=auth_headers)
        assert get_response.status_code == status.HTTP_200_OK

    def test_delete_book_invalid_id(self, client: TestClient, auth_headers: dict):
        response = client.delete(f"{BOOKS_URL}/12345", headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Invalid ID format"
