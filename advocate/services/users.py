"""
Provides access to user profiles.

This is the user store consulted by :mod:`advocate.auth`: :func:`find_by_id`
returns a :class:`.domain.User`, which has no password field at all. Password
hashes are only ever handled inside this module, via werkzeug's standard KDF.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pytz import UTC
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from .. import domain
from .database import db, DBUser, DatabaseUnavailable, default_preferences, \
    paginate, transaction

logger = logging.getLogger(__name__)


class NoSuchUser(RuntimeError):
    """User does not exist."""


class ProfileExists(RuntimeError):
    """A user with the requested profile name already exists."""


class EmailExists(RuntimeError):
    """A user with the requested email already exists."""


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate user with provided credentials."""


class NoPassword(RuntimeError):
    """The account has no password set."""


def _to_domain(db_user: DBUser) -> domain.User:
    return domain.User(
        user_id=str(db_user.user_id),
        profile_name=db_user.profile_name,
        email=db_user.email,
        avatar=db_user.avatar,
        role=domain.Role.parse(db_user.role),
        plan=domain.Plan.parse(db_user.plan),
        subscription_status=db_user.subscription_status,
        subscription_start=db_user.subscription_start,
        subscription_end=db_user.subscription_end,
        preferences=dict(db_user.preferences or {}),
        is_active=bool(db_user.is_active),
        has_password=db_user.password is not None,
        last_login=db_user.last_login,
        created_at=db_user.created_at
    )


def _load(user_id: Any) -> Optional[DBUser]:
    try:
        pk = int(user_id)
    except (TypeError, ValueError):
        return None
    try:
        return db.session.get(DBUser, pk)
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def _load_or_fail(user_id: Any) -> DBUser:
    db_user = _load(user_id)
    if db_user is None:
        raise NoSuchUser(f'No such user: {user_id}')
    return db_user


def _first(**filters: Any) -> Optional[DBUser]:
    try:
        return db.session.query(DBUser).filter_by(**filters).first()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def find_by_id(user_id: Any) -> Optional[domain.User]:
    """
    Get a user by ID.

    Parameters
    ----------
    user_id : str or int

    Returns
    -------
    :class:`.domain.User` or None

    Raises
    ------
    :class:`.DatabaseUnavailable`
        When there is a problem querying the database.

    """
    db_user = _load(user_id)
    if db_user is None:
        return None
    return _to_domain(db_user)


def create_user(profile_name: str, email: Optional[str] = None,
                password: Optional[str] = None) -> domain.User:
    """
    Create a new user profile.

    Raises
    ------
    :class:`ProfileExists`
    :class:`EmailExists`

    """
    if _first(profile_name=profile_name) is not None:
        raise ProfileExists(profile_name)
    if email and _first(email=email) is not None:
        raise EmailExists(email)

    db_user = DBUser(
        profile_name=profile_name,
        email=email or None,
        password=generate_password_hash(password) if password else None,
        preferences=default_preferences(),
        subscription_start=datetime.now(tz=UTC)
    )
    try:
        with transaction() as session:
            session.add(db_user)
    except IntegrityError as e:
        raise ProfileExists(profile_name) from e
    logger.info('Created user %s', db_user.user_id)
    return _to_domain(db_user)


def authenticate(profile_name: Optional[str] = None,
                 email: Optional[str] = None,
                 password: Optional[str] = None) -> domain.User:
    """
    Authenticate a user by profile name or email, and password.

    Accounts created without a password authenticate without one, and only
    without one. A successful authentication updates the last login time.

    Raises
    ------
    :class:`AuthenticationFailed`

    """
    if profile_name:
        db_user = _first(profile_name=profile_name)
    elif email:
        db_user = _first(email=email)
    else:
        raise AuthenticationFailed('Profile name or email is required')

    if db_user is None or not db_user.is_active:
        raise AuthenticationFailed('No such active user')
    if password and db_user.password:
        if not check_password_hash(db_user.password, password):
            raise AuthenticationFailed('Incorrect password')
    elif password or db_user.password:
        raise AuthenticationFailed('Password mismatch')

    with transaction():
        db_user.last_login = datetime.now(tz=UTC)
    return _to_domain(db_user)


def update_profile(user_id: str, profile_name: Optional[str] = None,
                   email: Optional[str] = None,
                   preferences: Optional[Dict[str, Any]] = None
                   ) -> domain.User:
    """
    Update profile name, email and/or preferences (shallow merge).

    Raises
    ------
    :class:`NoSuchUser`
    :class:`ProfileExists`
    :class:`EmailExists`

    """
    db_user = _load_or_fail(user_id)
    if profile_name and profile_name != db_user.profile_name:
        if _first(profile_name=profile_name) is not None:
            raise ProfileExists(profile_name)
        db_user.profile_name = profile_name
    if email and email != db_user.email:
        if _first(email=email) is not None:
            raise EmailExists(email)
        db_user.email = email
    if preferences:
        merged = dict(db_user.preferences or {})
        merged.update(preferences)
        db_user.preferences = merged
    with transaction():
        pass
    return _to_domain(db_user)


def update_preferences(user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge preference updates; ``notifications`` and ``privacy`` one level deep.

    Returns
    -------
    dict
        The resulting preferences.

    """
    db_user = _load_or_fail(user_id)
    preferences = dict(db_user.preferences or default_preferences())
    if updates.get('theme'):
        preferences['theme'] = updates['theme']
    for section in ('notifications', 'privacy'):
        if isinstance(updates.get(section), dict):
            merged = dict(preferences.get(section) or {})
            merged.update(updates[section])
            preferences[section] = merged
    with transaction():
        db_user.preferences = preferences
    return preferences


def change_password(user_id: str, current: str, new: str) -> None:
    """
    Replace the password of a user, after checking the current one.

    Raises
    ------
    :class:`NoPassword`
    :class:`AuthenticationFailed`

    """
    db_user = _load_or_fail(user_id)
    if not db_user.password:
        raise NoPassword(user_id)
    if not check_password_hash(db_user.password, current):
        raise AuthenticationFailed('Current password is incorrect')
    with transaction():
        db_user.password = generate_password_hash(new)


def set_active(user_id: str, active: bool) -> domain.User:
    """Activate or deactivate an account."""
    db_user = _load_or_fail(user_id)
    with transaction():
        db_user.is_active = active
    logger.info('User %s active=%s', user_id, active)
    return _to_domain(db_user)


def list_users(page: int = 1, limit: int = 10, search: Optional[str] = None,
               status: Optional[str] = None
               ) -> Tuple[List[domain.User], Dict[str, int]]:
    """Get a page of users, newest first."""
    query = db.session.query(DBUser)
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(DBUser.profile_name.ilike(pattern),
                                 DBUser.email.ilike(pattern)))
    if status:
        query = query.filter(DBUser.is_active == (status == 'active'))
    query = query.order_by(DBUser.created_at.desc(), DBUser.user_id.desc())
    rows, pagination = paginate(query, page, limit)
    return [_to_domain(row) for row in rows], pagination
