"""Controllers for user administration, preferences and statistics."""

import logging
from datetime import datetime
from typing import Any, Optional, Tuple

from pytz import UTC

from .. import domain, errors, status
from ..services import cases, conversations, documents, journal, users
from .forms import UserQueryForm, ThemeForm, validated

logger = logging.getLogger(__name__)

Response = Tuple[Optional[dict], int, dict]


def _user_not_found() -> errors.NotFound:
    return errors.NotFound('User not found', 'USER_NOT_FOUND')


def _self_or_admin(principal: domain.Principal, user_id: str) -> None:
    if principal.user_id != str(user_id) and not principal.is_admin:
        raise errors.access_denied('Access denied')


def list_users(params: Any) -> Response:
    """List users, newest first. For administrators."""
    form = validated(UserQueryForm, params)
    found, pagination = users.list_users(page=form.page.data or 1,
                                         limit=form.limit.data or 10,
                                         search=params.get('search') or None,
                                         status=form.status.data or None)
    return {
        'users': [user.public_profile() for user in found],
        'pagination': pagination
    }, status.HTTP_200_OK, {}


def get_user(principal: domain.Principal, user_id: str) -> Response:
    """Get a user profile; users may only see their own."""
    _self_or_admin(principal, user_id)
    user = users.find_by_id(user_id)
    if user is None:
        raise _user_not_found()
    return {'user': user.public_profile()}, status.HTTP_200_OK, {}


def update_preferences(principal: domain.Principal, payload: Any) -> Response:
    validated(ThemeForm, payload)
    preferences = users.update_preferences(principal.user_id, payload or {})
    return {
        'message': 'Preferences updated successfully',
        'preferences': preferences
    }, status.HTTP_200_OK, {}


def deactivate(principal: domain.Principal) -> Response:
    """Deactivate the current user's account."""
    users.set_active(principal.user_id, False)
    return {'message': 'Account deactivated successfully'}, \
        status.HTTP_200_OK, {}


def reactivate(user_id: str) -> Response:
    try:
        user = users.set_active(user_id, True)
    except users.NoSuchUser as e:
        raise _user_not_found() from e
    return {
        'message': 'Account reactivated successfully',
        'user': user.public_profile()
    }, status.HTTP_200_OK, {}


def get_stats(principal: domain.Principal, user_id: str) -> Response:
    """Count the records a user owns."""
    _self_or_admin(principal, user_id)
    if users.find_by_id(user_id) is None:
        raise _user_not_found()
    return {
        'stats': {
            'cases': cases.count_for_user(user_id),
            'documents': documents.count_for_user(user_id),
            'journalEntries': journal.count_for_user(user_id),
            'chatConversations': conversations.count_for_user(user_id),
            'generatedAt': datetime.now(tz=UTC)
        }
    }, status.HTTP_200_OK, {}
