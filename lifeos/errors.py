"""Error taxonomy shared by every route, and the handlers that turn it into JSON."""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR = "Internal server error"

CONFLICT_MESSAGES = {
    ("habit", "name"): "A habit with this name already exists",
    ("project", "name"): "A project with this name already exists",
    ("journal", "date"): "A journal entry for this date already exists",
}


class LifeOSError(Exception):
    status = 500
    message = INTERNAL_SERVER_ERROR

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {"message": self.message}


class Unauthenticated(LifeOSError):
    status = 401
    message = "Unauthorized"


class IdentityError(LifeOSError):
    status = 400
    message = "User has no email address"

    def __init__(self, code="MissingEmail", message=None):
        super().__init__(message)
        self.code = code


class NotFound(LifeOSError):
    status = 404
    message = "Record not found"


class Forbidden(LifeOSError):
    status = 403
    message = "Unauthorized"


class ValidationError(LifeOSError):
    status = 400
    message = "Validation failed"

    def __init__(self, issues, message=None):
        super().__init__(message)
        self.issues = issues

    def to_dict(self):
        return {"message": self.message, "issues": self.issues}


class ConstraintViolation(LifeOSError):
    """A uniqueness conflict, described by the entity and field that collided."""
    status = 409

    def __init__(self, entity, field):
        self.entity = entity
        self.field = field
        super().__init__(CONFLICT_MESSAGES.get((entity, field), "Resource already exists"))


def register_error_handlers(app, db):
    @app.errorhandler(LifeOSError)
    def handle_lifeos_error(e):
        if e.status >= 500:
            logger.error(f"Unexpected error: {e}")
        else:
            logger.debug(f"Request rejected with {e.status}: {e.message}")
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        logger.error(f"Database error: {str(e)}")
        db.session.rollback()
        return jsonify({"message": INTERNAL_SERVER_ERROR}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception(f"Unhandled error: {str(e)}")
        db.session.rollback()
        return jsonify({"message": INTERNAL_SERVER_ERROR}), 500
