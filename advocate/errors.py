"""
Errors raised on the request path, and their JSON rendering.

Each error is a :class:`werkzeug.exceptions.HTTPException`, so raising one
anywhere in a request aborts it with the right HTTP status. On top of the
status, every error carries a machine-readable ``error_code`` and optional
extra fields; :meth:`AdvocateError.to_dict` produces the response body::

    {"message": "Token expired", "code": "TOKEN_EXPIRED"}

The classes mirror the kinds of failure a client has to tell apart:

- :class:`Unauthenticated` -- missing, expired or invalid credentials (401).
- :class:`Unauthorized` -- valid identity, insufficient privilege (403).
- :class:`RateLimited` -- too many requests; carries ``retryAfter`` (429).
- :class:`ValidationFailed` -- malformed input (400).
- :class:`NotFound` -- the requested record does not exist (404).
- :class:`InternalError` -- an unexpected collaborator failure (500).

None of these are retried by the server.
"""

from typing import Any, Dict, List, Optional

from werkzeug.exceptions import HTTPException

from . import status


class AdvocateError(HTTPException):
    """Base class for errors rendered as ``{"message", "code", ...}``."""

    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = 'INTERNAL_ERROR'
    description = 'Internal server error'

    def __init__(self, description: Optional[str] = None,
                 error_code: Optional[str] = None, **extra: Any) -> None:
        super(AdvocateError, self).__init__(description)
        if error_code is not None:
            self.error_code = error_code
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as a JSON-serializable response body."""
        data: Dict[str, Any] = {'message': self.description,
                                'code': self.error_code}
        data.update(self.extra)
        return data


class Unauthenticated(AdvocateError):
    """No usable credential was presented."""

    code = status.HTTP_401_UNAUTHORIZED
    error_code = 'INVALID_TOKEN'
    description = 'Invalid token'


class Unauthorized(AdvocateError):
    """The principal may not perform the requested action."""

    code = status.HTTP_403_FORBIDDEN
    error_code = 'ACCESS_DENIED'
    description = 'Access denied'


class RateLimited(AdvocateError):
    """The caller has exhausted its request budget for the current window."""

    code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = 'RATE_LIMIT_EXCEEDED'
    description = 'Too many requests. Please try again later.'

    def __init__(self, retry_after: int,
                 description: Optional[str] = None) -> None:
        super(RateLimited, self).__init__(description, retryAfter=retry_after)
        self.retry_after = retry_after


class BadRequest(AdvocateError):
    """The request is well-formed but cannot be honored as stated."""

    code = status.HTTP_400_BAD_REQUEST
    error_code = 'BAD_REQUEST'
    description = 'Bad request'


class ValidationFailed(BadRequest):
    """Request input did not pass validation."""

    error_code = 'VALIDATION_FAILED'
    description = 'Validation failed'

    def __init__(self, errors: List[Dict[str, str]],
                 description: Optional[str] = None) -> None:
        AdvocateError.__init__(self, description, errors=errors)
        self.errors = errors


class NotFound(AdvocateError):
    """The requested record does not exist (or is not visible)."""

    code = status.HTTP_404_NOT_FOUND
    error_code = 'NOT_FOUND'
    description = 'Not found'


class InternalError(AdvocateError):
    """An unexpected failure in a collaborator."""


# Identity verification.

def token_required() -> Unauthenticated:
    return Unauthenticated('Access token required', 'TOKEN_REQUIRED')


def token_expired() -> Unauthenticated:
    return Unauthenticated('Token expired', 'TOKEN_EXPIRED')


def invalid_token(description: str = 'Invalid token') -> Unauthenticated:
    return Unauthenticated(description, 'INVALID_TOKEN')


def token_verification_failed() -> InternalError:
    return InternalError('Token verification failed',
                         'TOKEN_VERIFICATION_FAILED')


# Authorization gates.

def resource_not_found() -> BadRequest:
    return BadRequest('Resource not found', 'RESOURCE_NOT_FOUND')


def access_denied(description: str = 'Access denied. You can only access'
                                     ' your own resources.') -> Unauthorized:
    return Unauthorized(description, 'ACCESS_DENIED')


def subscription_required(required: str, current: str) -> Unauthorized:
    return Unauthorized(f'This feature requires {required} subscription',
                        'SUBSCRIPTION_REQUIRED',
                        requiredLevel=required, currentLevel=current)


def admin_required() -> Unauthorized:
    return Unauthorized('Admin access required', 'ADMIN_REQUIRED')
