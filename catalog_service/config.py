import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    # JSON file holding the catalog, ISBN -> book record
    BOOKS_FILE = os.getenv("BOOKS_FILE", os.path.join(BASE_DIR, "data", "books.json"))

    # JWT settings for user authentication
    JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
    JWT_ALGORITHM = "HS256"
    JWT_EXP_HOURS = int(os.getenv("JWT_EXP_HOURS", "24"))

    # Any method accepted by werkzeug.security.generate_password_hash
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "pbkdf2:sha256")

    PORT = int(os.getenv("PORT", "3000"))
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
