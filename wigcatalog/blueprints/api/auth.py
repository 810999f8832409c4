"""Bearer-token check for write endpoints.

A stub: one shared token from API_ADMIN_TOKEN, disabled when empty.
"""
import hmac
import logging
from functools import wraps
from flask import current_app, request

from wigcatalog.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def require_admin(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        expected = current_app.config.get("API_ADMIN_TOKEN", "")
        if expected:
            header = request.headers.get("Authorization", "")
            token = header[len("Bearer "):] if header.startswith("Bearer ") else ""
            if not hmac.compare_digest(token, expected):
                logger.warning("Rejected write to %s: bad admin token", request.path)
                raise UnauthorizedError("Unauthorized")
        return view(*args, **kwargs)

    return wrapper
