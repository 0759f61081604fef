import json

import pytest

from catalog_service.app import create_app

SEED_BOOKS = {
    "9780061120084": {
        "isbn": "9780061120084",
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
    },
    "9780451524935": {
        "isbn": "9780451524935",
        "title": "1984",
        "author": "George Orwell",
    },
    "9780062420701": {
        "isbn": "9780062420701",
        "title": "Go Set a Watchman",
        "author": "Harper Lee",
    },
}

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture
def books_file(tmp_path):
    path = tmp_path / "books.json"
    path.write_text(json.dumps(SEED_BOOKS), encoding="utf-8")
    return path


@pytest.fixture
def app(books_file):
    return create_app(
        {
            "TESTING": True,
            "BOOKS_FILE": str(books_file),
            "JWT_SECRET": TEST_SECRET,
            # keep hashing fast in tests
            "PASSWORD_HASH_METHOD": "pbkdf2:sha256:1000",
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    """Register and log in "alice", returning a ready Authorization header."""
    client.post("/users/register", json={"username": "alice", "password": "pw123"})
    resp = client.post("/users/login", json={"username": "alice", "password": "pw123"})
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}
