"""Advocate database models."""

from datetime import datetime

from pytz import UTC
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, \
    JSON, String, Text, UniqueConstraint
from flask_sqlalchemy import SQLAlchemy

db: SQLAlchemy = SQLAlchemy()


def _now() -> datetime:
    return datetime.now(tz=UTC)


def default_preferences() -> dict:
    return {
        'theme': 'dark',
        'notifications': {'email': True, 'push': True, 'reminders': True},
        'privacy': {'shareData': False, 'analytics': True}
    }


class DBUser(db.Model):
    """A user profile. Email and password are both optional."""

    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    profile_name = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), unique=True, nullable=True)
    password = Column(String(255), nullable=True)
    """Password hash; never leaves :mod:`advocate.services.users`."""
    avatar = Column(String(255), nullable=True)
    role = Column(String(16), nullable=False, default='user')
    preferences = Column(JSON, nullable=False, default=default_preferences)

    plan = Column(String(16), nullable=False, default='free')
    subscription_status = Column(String(16), nullable=False, default='active')
    subscription_start = Column(DateTime(timezone=True))
    subscription_end = Column(DateTime(timezone=True))

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    last_login = Column(DateTime(timezone=True), default=_now)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class DBCase(db.Model):
    """
    A legal case.

    Parties, court, financials and outcome are stored as JSON documents; so
    are the timeline, deadlines and notes, which are lists of dicts with
    string ``id`` keys.
    """

    __tablename__ = 'cases'
    __table_args__ = (UniqueConstraint('user_id', 'case_number'),)

    case_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('users.user_id'), nullable=False, index=True)
    case_number = Column(String(64), nullable=True)
    """Unique per owner; generated as ``CASE-<year>-<nnnn>`` if not given."""
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    case_type = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default='active', index=True)
    priority = Column(String(16), nullable=False, default='medium')

    court = Column(JSON, nullable=False, default=dict)
    parties = Column(JSON, nullable=False, default=dict)
    timeline = Column(JSON, nullable=False, default=list)
    notes = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    financials = Column(JSON, nullable=False, default=dict)
    deadlines = Column(JSON, nullable=False, default=list)
    outcome = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class DBConversation(db.Model):
    """A chat conversation; messages are a JSON list of dicts."""

    __tablename__ = 'conversations'

    conversation_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('users.user_id'), nullable=False, index=True)
    case_id = Column(ForeignKey('cases.case_id'), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(32), nullable=False, default='general')
    status = Column(String(16), nullable=False, default='active', index=True)

    messages = Column(JSON, nullable=False, default=list)
    context = Column(JSON, nullable=False, default=dict)
    settings = Column(JSON, nullable=False, default=dict)
    statistics = Column(JSON, nullable=False, default=dict)
    tags = Column(JSON, nullable=False, default=list)

    is_bookmarked = Column(Boolean, nullable=False, default=False)
    bookmarked_at = Column(DateTime(timezone=True))
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime(timezone=True))

    last_activity = Column(DateTime(timezone=True), default=_now)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class DBJournalEntry(db.Model):
    """
    A private journal entry.

    Reminders and the content edit history are JSON lists of dicts; word
    count and reading time are kept in ``stats``.
    """

    __tablename__ = 'journal_entries'

    entry_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('users.user_id'), nullable=False, index=True)
    case_id = Column(ForeignKey('cases.case_id'), nullable=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    mood = Column(String(16), nullable=False, default='neutral')
    category = Column(String(32), nullable=False, default='personal')
    is_private = Column(Boolean, nullable=False, default=True)

    tags = Column(JSON, nullable=False, default=list)
    stats = Column(JSON, nullable=False, default=dict)
    reminders = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False, default=1)
    edit_history = Column(JSON, nullable=False, default=list)

    is_favorite = Column(Boolean, nullable=False, default=False)
    favorited_at = Column(DateTime(timezone=True))
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class DBDocument(db.Model):
    """An uploaded file. The bytes live in a file store under ``filename``."""

    __tablename__ = 'documents'

    document_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('users.user_id'), nullable=False, index=True)
    case_id = Column(ForeignKey('cases.case_id'), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    filename = Column(String(255), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    mime_type = Column(String(128), nullable=True)
    file_type = Column(String(16), nullable=False, default='other')
    category = Column(String(32), nullable=False, default='other', index=True)
    status = Column(String(16), nullable=False, default='uploaded')

    tags = Column(JSON, nullable=False, default=list)
    annotations = Column(JSON, nullable=False, default=list)
    download_count = Column(Integer, nullable=False, default=0)
    last_accessed = Column(DateTime(timezone=True), default=_now)

    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)
