import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, request

from .errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


def issue_token(username, now=None):
    """Sign a token for ``username`` that expires JWT_EXP_HOURS after ``now``."""
    cfg = current_app.config
    now = now or datetime.now(timezone.utc)
    payload = {
        "username": username,
        "iat": now,
        "exp": now + timedelta(hours=cfg["JWT_EXP_HOURS"]),
    }
    return jwt.encode(payload, cfg["JWT_SECRET"], algorithm=cfg["JWT_ALGORITHM"])


def decode_token(token):
    """
    Verify signature and expiry and return the username it carries.
    Any failure is a Forbidden: the caller did present a token.
    """
    cfg = current_app.config
    try:
        payload = jwt.decode(token, cfg["JWT_SECRET"], algorithms=[cfg["JWT_ALGORITHM"]])
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected token on %s: %s", request.path, e)
        raise Forbidden("Invalid or expired token") from e

    username = payload.get("username")
    if not isinstance(username, str) or not username:
        logger.warning("Token without username on %s", request.path)
        raise Forbidden("Invalid or expired token")
    return username


def token_lifetime():
    return f"{current_app.config['JWT_EXP_HOURS']}h"


def require_token(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        # "Bearer <token>"; the scheme word itself is not checked
        parts = request.headers.get("Authorization", "").split(" ")
        token = parts[1] if len(parts) > 1 else None
        if not token:
            raise Unauthorized("Access token required")

        g.username = decode_token(token)
        return func(*args, **kwargs)

    return wrapper
