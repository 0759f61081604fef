import logging

from flask import Blueprint, Flask, current_app, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound as RouteNotFound

from .auth import issue_token, require_token, token_lifetime
from .config import Config
from .errors import ApiError
from .stores import BookStore, ReviewStore, UserStore, utc_timestamp

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def stores():
    return current_app.extensions["bookreview"]


def request_body():
    """JSON body, or the fields of a form post when the body is not a JSON object."""
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict) and request.form:
        return request.form.to_dict()
    return data


def body_fields():
    """Request body as a dict; anything else (absent, malformed, a list) is {}."""
    data = request_body()
    return data if isinstance(data, dict) else {}


def answer_preflight():
    # every OPTIONS request succeeds, known path or not
    if request.method == "OPTIONS":
        return current_app.make_default_options_response()
    return None


# ---------------------------------------------------------
# Books
# ---------------------------------------------------------

@api.get("/books")
def list_books():
    return jsonify(
        {
            "success": True,
            "data": stores().books.all(),
            "message": "Books retrieved successfully",
        }
    )


@api.get("/books/isbn/<isbn>")
def get_book_by_isbn(isbn):
    book = stores().books.get(isbn)
    return jsonify({"success": True, "data": {isbn: book}})


@api.get("/books/author/<author>")
def get_books_by_author(author):
    return jsonify({"success": True, "data": stores().books.search_by_author(author)})


@api.get("/books/title/<title>")
def get_books_by_title(title):
    return jsonify({"success": True, "data": stores().books.search_by_title(title)})


@api.post("/books")
def add_book():
    """
    Add a book. The body is stored as-is and must carry an "isbn".

    Request JSON:
      {"isbn": "9780061120084", "title": "To Kill a Mockingbird", "author": "Harper Lee"}

    Form posts (application/x-www-form-urlencoded) are accepted too.
    """
    data = request_body()
    isbn, book = stores().books.add(data)
    return (
        jsonify({"success": True, "message": "Book added", "data": {isbn: book}}),
        201,
    )


# ---------------------------------------------------------
# Reviews
# ---------------------------------------------------------

@api.get("/books/<isbn>/reviews")
def list_reviews(isbn):
    return jsonify({"success": True, "data": stores().reviews.for_book(isbn)})


@api.put("/books/<isbn>/review")
@require_token
def put_review(isbn):
    data = body_fields()
    review = stores().reviews.upsert(
        isbn, g.username, data.get("rating"), data.get("review")
    )
    return jsonify({"success": True, "message": "Review added/updated", "data": review})


@api.delete("/books/<isbn>/review")
@require_token
def delete_review(isbn):
    stores().reviews.delete(isbn, g.username)
    return jsonify({"success": True, "message": "Review deleted"})


# ---------------------------------------------------------
# Users
# ---------------------------------------------------------

@api.post("/users/register")
def register_user():
    """
    Request JSON:
      {"username": "alice", "password": "pw123", "email": "alice@example.com"}

    The response echoes the stored record, password hash included.
    """
    data = body_fields()
    user = stores().users.register(
        data.get("username"), data.get("password"), data.get("email")
    )
    return jsonify({"success": True, "message": "User registered", "data": user}), 201


@api.post("/users/login")
def login_user():
    data = body_fields()
    user = stores().users.verify(data.get("username"), data.get("password"))
    token = issue_token(user["username"])
    return jsonify({"success": True, "token": token, "expiresIn": token_lifetime()})


# ---------------------------------------------------------
# Health
# ---------------------------------------------------------

@api.get("/health")
def health_check():
    s = stores()
    return jsonify(
        {
            "success": True,
            "message": "Server is running",
            "timestamp": utc_timestamp(),
            "total_books": len(s.books),
            "total_users": len(s.users),
        }
    )


# ---------------------------------------------------------
# Error handling
# ---------------------------------------------------------

def handle_api_error(e):
    return jsonify(e.to_dict()), e.status_code


def handle_http_error(e):
    # Unknown paths and known paths with the wrong verb look the same
    if isinstance(e, (RouteNotFound, MethodNotAllowed)):
        return jsonify({"success": False, "error": "Route not found"}), 404
    return jsonify({"success": False, "error": e.description}), e.code


def handle_unexpected_error(e):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "error": "Internal Server Error"}), 500


# ---------------------------------------------------------
# App factory
# ---------------------------------------------------------

class AppState:
    def __init__(self, books, reviews, users):
        self.books = books
        self.reviews = reviews
        self.users = users


def create_app(overrides=None):
    app = Flask(__name__, static_folder=None)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    # keep catalog and record fields in file/insertion order
    app.json.sort_keys = False

    app.before_request(answer_preflight)
    CORS(
        app,
        origins="*",
        send_wildcard=True,
        always_send=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Origin",
            "X-Requested-With",
            "Content-Type",
            "Accept",
            "Authorization",
        ],
    )

    books = BookStore.load(app.config["BOOKS_FILE"])
    app.extensions["bookreview"] = AppState(
        books=books,
        reviews=ReviewStore(books),
        users=UserStore(app.config["PASSWORD_HASH_METHOD"]),
    )

    app.register_blueprint(api)
    app.register_error_handler(ApiError, handle_api_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected_error)
    return app


def main():
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    port = app.config["PORT"]
    logger.info("Book Review API Server running on port %s", port)
    logger.info("Health check: http://localhost:%s/health", port)
    logger.info("Books loaded: %d", len(app.extensions["bookreview"].books))
    # one request at a time
    app.run(host="0.0.0.0", port=port, debug=app.config["DEBUG"], threaded=False)


if __name__ == "__main__":
    main()
