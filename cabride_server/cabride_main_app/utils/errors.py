"""Error taxonomy and the result dict returned by service operations"""

import logging
from functools import wraps

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors surfaced to service callers"""
    kind = 'error'
    status_code = 500

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_result(self):
        result = {
            'success': False,
            'error': self.message,
            'kind': self.kind,
            'status_code': self.status_code,
        }
        result.update(self.details)
        return result


class ValidationFailed(ServiceError):
    """Raised when input is malformed or missing"""
    kind = 'validation_error'
    status_code = 400


class NotFound(ServiceError):
    """Raised when a referenced record does not exist"""
    kind = 'not_found'
    status_code = 404


class Forbidden(ServiceError):
    """Raised when the caller does not own or match the resource"""
    kind = 'forbidden'
    status_code = 403


class Conflict(ServiceError):
    """Raised when a state-machine guard rejects the operation"""
    kind = 'conflict'
    status_code = 409

    def __init__(self, message, current_status=None, **details):
        if current_status is not None:
            details['current_status'] = current_status
        super().__init__(message, **details)
        self.current_status = current_status


class DependencyFailure(ServiceError):
    """Raised when the payment gateway or the database fails"""
    kind = 'dependency_failure'
    status_code = 502


def success(**payload):
    return {'success': True, **payload}


def service_result(method):
    """
    Convert a service method into one returning a discriminated result dict.

    The wrapped method returns its success payload as a dict; any ServiceError
    it raises becomes {'success': False, 'error', 'kind', 'status_code', ...}.
    """
    @wraps(method)
    def wrapper(*args, **kwargs):
        try:
            payload = method(*args, **kwargs)
        except ServiceError as e:
            logger.info(f'[SERVICE] {method.__qualname__} rejected: {e.kind} - {e.message}')
            return e.as_result()
        except DatabaseError as e:
            logger.exception(f'[SERVICE] {method.__qualname__} database failure')
            return DependencyFailure(f'Database error: {e}').as_result()
        return success(**(payload or {}))
    return wrapper
