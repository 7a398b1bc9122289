"""
Identity verification for API requests.

Protected routes are wrapped with :func:`authenticated`, which reads the
``Authorization: Bearer <token>`` header, verifies the token, resolves its
``user_id`` claim against the user store and stores the resulting
:class:`.domain.Principal` on :data:`flask.g`. Routes that personalize output
but remain public use :func:`optional_auth` instead.

.. code-block:: python

   @blueprint.route('/profile', methods=['GET'])
   @authenticated
   def get_profile() -> tuple:
       data, code, headers = authentication.profile(current_principal())
       return jsonify(data), code, headers

Authorization (ownership, plan, role, rate limit) happens afterwards, in
:mod:`advocate.auth.gates`.
"""

from functools import wraps
import logging
from typing import Any, Callable, Optional

from flask import current_app, g, request

from .. import domain, errors
from ..services import users
from . import exceptions, tokens

logger = logging.getLogger(__name__)


def authenticate(header: Optional[str]) -> domain.Principal:
    """
    Resolve an ``Authorization`` header to an active principal.

    Raises
    ------
    :class:`.errors.Unauthenticated`
        ``TOKEN_REQUIRED``, ``TOKEN_EXPIRED`` or ``INVALID_TOKEN``.
    :class:`.errors.InternalError`
        ``TOKEN_VERIFICATION_FAILED``, if the user could not be looked up.

    """
    try:
        token = tokens.from_header(header)
    except exceptions.MissingToken as e:
        raise errors.token_required() from e

    secret = current_app.config.get('JWT_SECRET')
    if not secret:
        logger.error('JWT_SECRET is not set')
        raise errors.token_verification_failed()

    try:
        claims = tokens.decode(token, secret)
    except exceptions.ExpiredToken as e:
        raise errors.token_expired() from e
    except exceptions.InvalidToken as e:
        raise errors.invalid_token() from e

    try:
        user = users.find_by_id(claims['user_id'])
    except Exception as e:
        logger.exception('User lookup failed during token verification')
        raise errors.token_verification_failed() from e

    if user is None or not user.is_active:
        logger.debug('Token for unknown or inactive user %s',
                     claims['user_id'])
        raise errors.invalid_token('Invalid token or user not found')
    return domain.Principal.from_user(user)


def authenticated(func: Callable) -> Callable:
    """Require a verified, active principal before calling ``func``."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        g.principal = authenticate(request.headers.get('Authorization'))
        return func(*args, **kwargs)
    return wrapper


def optional_auth(func: Callable) -> Callable:
    """Attach a principal if the request carries a good token; never fail."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            g.principal = authenticate(request.headers.get('Authorization'))
        except errors.AdvocateError as e:
            logger.debug('Continuing anonymously: %s', e.error_code)
            g.principal = None
        return func(*args, **kwargs)
    return wrapper


def current_principal() -> Optional[domain.Principal]:
    """Get the principal attached to the current request, if any."""
    return g.get('principal')
