# catalog_service/stores.py
import json
import logging
from datetime import datetime, timezone

from werkzeug.security import check_password_hash, generate_password_hash

from .errors import BadRequest, Conflict, InternalError, NotFound, Unauthorized

logger = logging.getLogger(__name__)


def utc_timestamp():
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T12:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BookStore:
    """
    ISBN -> book record, seeded from a JSON file and rewritten to it
    on every successful insert.
    """

    def __init__(self, path, books=None):
        self.path = path
        self.books = books if books is not None else {}

    @classmethod
    def load(cls, path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                books = json.load(f)
            if not isinstance(books, dict):
                raise ValueError("expected a JSON object keyed by ISBN")
        except (OSError, ValueError) as e:
            logger.error("Error loading books data from %s: %s", path, e)
            books = {}
        else:
            logger.info("Loaded %d books from %s", len(books), path)
        return cls(path, books)

    def __len__(self):
        return len(self.books)

    def __contains__(self, isbn):
        return isbn in self.books

    def all(self):
        return self.books

    def get(self, isbn):
        book = self.books.get(isbn)
        if book is None:
            raise NotFound("Book not found")
        return book

    def search_by_author(self, author):
        return self._search("author", author)

    def search_by_title(self, title):
        return self._search("title", title)

    def _search(self, field, needle):
        needle = needle.lower()
        return {
            isbn: book
            for isbn, book in self.books.items()
            if needle in str(book.get(field) or "").lower()
        }

    def add(self, book):
        if not isinstance(book, dict) or not book.get("isbn"):
            raise BadRequest("ISBN is required")

        isbn = str(book["isbn"])
        if isbn in self.books:
            raise Conflict("Book already exists")

        # The insert stays in memory even if the rewrite below fails.
        self.books[isbn] = book
        try:
            self.save()
        except OSError as e:
            logger.exception("Failed to write %s after adding %s", self.path, isbn)
            raise InternalError("Failed to save book") from e

        logger.info("Added book %s (%s)", isbn, book.get("title"))
        return isbn, book

    def save(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.books, f, ensure_ascii=False, indent=2)


class ReviewStore:
    """
    ISBN -> {username -> review}. Lives in memory only; at most one
    review per user per book.
    """

    def __init__(self, books):
        self.books = books
        self.reviews = {}

    def for_book(self, isbn):
        book = self.books.get(isbn)
        return {
            "isbn": isbn,
            "title": book.get("title"),
            "reviews": self.reviews.get(isbn, {}),
        }

    def upsert(self, isbn, username, rating, text=None):
        self.books.get(isbn)  # raises NotFound for unknown books

        # JSON 5.0 is the integer 5
        if isinstance(rating, float) and rating.is_integer():
            rating = int(rating)
        # bool is an int subclass, reject it explicitly
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise BadRequest("Rating must be 1–5")

        record = {"rating": rating, "review": text, "reviewedAt": utc_timestamp()}
        self.reviews.setdefault(isbn, {})[username] = record
        logger.info("Review by %s on %s set to %s", username, isbn, rating)
        return record

    def delete(self, isbn, username):
        self.books.get(isbn)

        book_reviews = self.reviews.get(isbn)
        if not book_reviews or username not in book_reviews:
            raise NotFound("No review found for this user")

        del book_reviews[username]
        if not book_reviews:
            del self.reviews[isbn]
        logger.info("Review by %s on %s deleted", username, isbn)


class UserStore:
    """Registered users keyed by username. Never persisted."""

    def __init__(self, hash_method="pbkdf2:sha256"):
        self.hash_method = hash_method
        self.users = {}

    def __len__(self):
        return len(self.users)

    def register(self, username, password, email=None):
        if not isinstance(username, str) or not isinstance(password, str):
            raise BadRequest("Username and password required")
        if not username or not password:
            raise BadRequest("Username and password required")
        if username in self.users:
            raise Conflict("Username already exists")

        user = {
            "username": username,
            "password": generate_password_hash(password, method=self.hash_method),
            "email": email,
            "registeredAt": utc_timestamp(),
        }
        self.users[username] = user
        logger.info("Registered user %s", username)
        return user

    def verify(self, username, password):
        """
        Return the user record when the password matches. Unknown users and
        wrong passwords fail the same way.
        """
        user = self.users.get(username) if isinstance(username, str) else None
        if (
            user is None
            or not isinstance(password, str)
            or not check_password_hash(user["password"], password)
        ):
            logger.info("Failed login for %r", username)
            raise Unauthorized("Invalid credentials")
        return user
