"""Error types raised by the workflow services.

Routes never catch these one by one: ``register_error_handlers`` turns any
``MapReviewError`` into the usual ``{'error': message}`` JSON body with the
matching status code.
"""

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class MapReviewError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class NotFoundError(MapReviewError):
    """A bundle, task or tag does not exist."""

    status_code = 404


class InvalidArgumentError(MapReviewError):
    """Malformed input such as an empty task list or unknown status code."""

    status_code = 400


class InvalidBundleStateError(MapReviewError):
    """The bundle has no member tasks to operate on."""

    status_code = 400


class PermissionDeniedError(MapReviewError):
    status_code = 403


def register_error_handlers(app):
    """Register JSON error handlers on the Flask application."""
    from mapreview import db

    @app.errorhandler(MapReviewError)
    def handle_mapreview_error(error):
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error(f'Database error: {error}')
        return jsonify({'error': 'Database error'}), 500
