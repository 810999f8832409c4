"""Error taxonomy and the JSON error responses the API returns."""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Internal server error"


class CatalogError(Exception):
    """Base error that services raise; carries the HTTP status to answer with."""

    status_code = 500

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class ValidationError(CatalogError):
    status_code = 400


class NotFoundError(CatalogError):
    status_code = 404


class ConflictError(CatalogError):
    status_code = 409


class UnauthorizedError(CatalogError):
    status_code = 401


class StorageError(CatalogError):
    """A backing store failed. The message is logged, never returned."""

    status_code = 500


def _error_response(message, status_code):
    response = jsonify({"error": message})
    response.status_code = status_code
    return response


def register_error_handlers(app):
    from wigcatalog.extensions import db

    @app.errorhandler(CatalogError)
    def handle_catalog_error(exc):
        if isinstance(exc, StorageError) or exc.status_code >= 500:
            logger.error("Storage failure: %s", exc.message, exc_info=exc.__cause__)
            db.session.rollback()
            return _error_response(GENERIC_MESSAGE, exc.status_code)
        return _error_response(exc.message, exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return _error_response(exc.description, exc.code)

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        logger.exception("Unhandled error while serving request")
        db.session.rollback()
        return _error_response(GENERIC_MESSAGE, 500)
