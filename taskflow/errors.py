import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class TaskFlowError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'error': self.message}


class NotFound(TaskFlowError):
    status_code = 404
    message = 'Not found'


class InvalidDestination(TaskFlowError):
    """Raised for a status outside the kanban columns or an unusable target slot."""
    status_code = 400
    message = 'Invalid destination'


class ValidationFailed(TaskFlowError):
    status_code = 400
    message = 'Invalid request'

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self):
        data = super().to_dict()
        if self.errors:
            data['errors'] = self.errors
        return data


class PermissionDenied(TaskFlowError):
    status_code = 403
    message = 'Insufficient permissions'


class PersistenceFailure(TaskFlowError):
    status_code = 500
    message = 'Could not save changes'


def register_error_handlers(app):
    from taskflow import db

    @app.errorhandler(TaskFlowError)
    def handle_taskflow_error(error):
        if isinstance(error, PersistenceFailure):
            db.session.rollback()
            logger.error(f"Persistence failure: {error.__cause__ or error}")
        elif error.status_code >= 400:
            logger.warning(f"{error.__class__.__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'error': 'Internal server error'}), 500
