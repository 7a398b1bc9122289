"""
Controllers for registration, login and the user's own profile.

Login issues a signed access token (see :mod:`advocate.auth.tokens`). The
token is not tracked by the server, so logging out only asks the client to
discard it.
"""

import logging
from typing import Any, Optional, Tuple

from flask import current_app

from .. import domain, status
from ..auth import tokens
from ..errors import BadRequest, InternalError, Unauthenticated
from ..services import users
from ..services.database import DatabaseUnavailable
from .forms import LoginForm, PasswordForm, ProfileForm, RegistrationForm, \
    validated

logger = logging.getLogger(__name__)

Response = Tuple[Optional[dict], int, dict]

PROFILE_EXISTS = ('Profile name already exists', 'PROFILE_EXISTS')
EMAIL_EXISTS = ('Email already registered', 'EMAIL_EXISTS')


def _issue(user: domain.User) -> str:
    return tokens.encode(user.user_id, current_app.config['JWT_SECRET'],
                         current_app.config['JWT_EXPIRES_IN'])


def register(payload: Any) -> Response:
    """
    Create a profile and log it in.

    Parameters
    ----------
    payload : dict
        ``profileName``, and optionally ``email`` and ``password``.

    Returns
    -------
    dict
        Response data, including the access token and the public profile.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    form = validated(RegistrationForm, payload)
    try:
        user = users.create_user(form.profileName.data.strip(),
                                 email=form.email.data or None,
                                 password=form.password.data or None)
    except users.ProfileExists as e:
        raise BadRequest(*PROFILE_EXISTS) from e
    except users.EmailExists as e:
        raise BadRequest(*EMAIL_EXISTS) from e
    except DatabaseUnavailable as e:
        logger.error('Registration failed: %s', e)
        raise InternalError('Registration failed') from e
    return {
        'message': 'Profile created successfully',
        'token': _issue(user),
        'user': user.public_profile()
    }, status.HTTP_201_CREATED, {}


def login(payload: Any) -> Response:
    """Authenticate by profile name or email (and password, if one is set)."""
    form = validated(LoginForm, payload)
    if not form.profileName.data and not form.email.data:
        raise BadRequest('Profile name or email is required',
                         'CREDENTIALS_REQUIRED')
    try:
        user = users.authenticate(profile_name=form.profileName.data or None,
                                  email=form.email.data or None,
                                  password=form.password.data or None)
    except users.AuthenticationFailed as e:
        logger.debug('Login failed: %s', e)
        raise Unauthenticated('Invalid credentials',
                              'INVALID_CREDENTIALS') from e
    logger.info('User %s logged in', user.user_id)
    return {
        'message': 'Login successful',
        'token': _issue(user),
        'user': user.public_profile()
    }, status.HTTP_200_OK, {}


def get_profile(principal: domain.Principal) -> Response:
    return {'user': principal.user.public_profile()}, status.HTTP_200_OK, {}


def verify(principal: domain.Principal) -> Response:
    return {'valid': True, 'user': principal.user.public_profile()}, \
        status.HTTP_200_OK, {}


def update_profile(principal: domain.Principal, payload: Any) -> Response:
    """Update profile name, email and preferences of the current user."""
    form = validated(ProfileForm, payload)
    preferences = payload.get('preferences') \
        if isinstance(payload.get('preferences'), dict) else None
    try:
        user = users.update_profile(principal.user_id,
                                    profile_name=form.profileName.data or None,
                                    email=form.email.data or None,
                                    preferences=preferences)
    except users.ProfileExists as e:
        raise BadRequest(*PROFILE_EXISTS) from e
    except users.EmailExists as e:
        raise BadRequest(*EMAIL_EXISTS) from e
    return {
        'message': 'Profile updated successfully',
        'user': user.public_profile()
    }, status.HTTP_200_OK, {}


def change_password(principal: domain.Principal, payload: Any) -> Response:
    form = validated(PasswordForm, payload)
    try:
        users.change_password(principal.user_id, form.currentPassword.data,
                              form.newPassword.data)
    except users.NoPassword as e:
        raise BadRequest('No password set for this account',
                         'NO_PASSWORD') from e
    except users.AuthenticationFailed as e:
        raise Unauthenticated('Current password is incorrect',
                              'INVALID_PASSWORD') from e
    return {'message': 'Password updated successfully'}, \
        status.HTTP_200_OK, {}


def logout(principal: domain.Principal) -> Response:
    logger.info('User %s logged out', principal.user_id)
    return {'message': 'Logout successful'}, status.HTTP_200_OK, {}
