"""
Chat conversations.

As with cases, conversations are handed out as dicts in their API
representation. Messages are kept in a JSON column; message count and token
total in ``statistics`` are recomputed whenever messages change. Deleted
conversations are only flagged, and are invisible to every function here.
"""

from collections import Counter
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import uuid

from pytz import UTC
from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError

from .database import db, DBConversation, DatabaseUnavailable, paginate, \
    transaction

logger = logging.getLogger(__name__)

CATEGORIES = ('general', 'legal-advice', 'case-analysis', 'document-review',
              'research', 'strategy', 'other')
STATUSES = ('active', 'archived', 'deleted')
URGENCIES = ('low', 'medium', 'high', 'urgent')

DEFAULT_SETTINGS = {'aiModel': 'gpt-4', 'temperature': 0.7,
                    'maxTokens': 1000}

SORTABLE = {
    'lastActivity': DBConversation.last_activity,
    'createdAt': DBConversation.created_at,
    'updatedAt': DBConversation.updated_at,
    'title': DBConversation.title,
}

_FIELDS = {
    'title': 'title',
    'description': 'description',
    'category': 'category',
    'context': 'context',
    'tags': 'tags',
}


class NoSuchConversation(RuntimeError):
    """The conversation does not exist, or has been deleted."""


class NoSuchMessage(RuntimeError):
    """The message does not exist in the conversation."""


class NotEditable(RuntimeError):
    """Only messages written by the user may be edited."""


def _now() -> datetime:
    return datetime.now(tz=UTC)


def to_dict(db_conv: DBConversation,
            with_messages: bool = True) -> Dict[str, Any]:
    """Get the API representation of a conversation."""
    data = {
        'id': str(db_conv.conversation_id),
        'userId': str(db_conv.user_id),
        'caseId': str(db_conv.case_id) if db_conv.case_id else None,
        'title': db_conv.title,
        'description': db_conv.description,
        'category': db_conv.category,
        'status': db_conv.status,
        'context': db_conv.context or {},
        'settings': db_conv.settings or {},
        'statistics': db_conv.statistics or {},
        'tags': list(db_conv.tags or []),
        'isBookmarked': bool(db_conv.is_bookmarked),
        'bookmarkedAt': db_conv.bookmarked_at,
        'lastActivity': db_conv.last_activity,
        'createdAt': db_conv.created_at,
        'updatedAt': db_conv.updated_at,
    }
    if with_messages:
        data['messages'] = list(db_conv.messages or [])
    return data


def _statistics(messages: List[Dict[str, Any]],
                previous: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    stats = dict(previous or {})
    stats['messageCount'] = len(messages)
    stats['totalTokens'] = sum((m.get('metadata') or {}).get('tokens') or 0
                               for m in messages)
    return stats


def _touch(db_conv: DBConversation) -> None:
    now = _now()
    db_conv.updated_at = now
    db_conv.last_activity = now


def _visible(user_id: str) -> Any:
    return db.session.query(DBConversation).filter(
        DBConversation.user_id == int(user_id),
        DBConversation.is_deleted.is_(False)
    )


def _load_or_fail(conversation_id: Any, user_id: str) -> DBConversation:
    try:
        pk = int(conversation_id)
    except (TypeError, ValueError) as e:
        raise NoSuchConversation(conversation_id) from e
    try:
        db_conv = _visible(user_id) \
            .filter(DBConversation.conversation_id == pk).first()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    if db_conv is None:
        raise NoSuchConversation(conversation_id)
    return db_conv


def get_conversation(conversation_id: Any, user_id: str) -> Dict[str, Any]:
    return to_dict(_load_or_fail(conversation_id, user_id))


def list_conversations(user_id: str, page: int = 1, limit: int = 10,
                       search: Optional[str] = None,
                       status: Optional[str] = 'active',
                       category: Optional[str] = None,
                       bookmarked: bool = False,
                       sort_by: str = 'lastActivity',
                       sort_order: str = 'desc'
                       ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Get a page of conversations, without their messages."""
    query = _visible(user_id)
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            DBConversation.title.ilike(pattern),
            DBConversation.description.ilike(pattern),
            cast(DBConversation.messages, String).ilike(pattern)
        ))
    if status:
        query = query.filter(DBConversation.status == status)
    if category:
        query = query.filter(DBConversation.category == category)
    if bookmarked:
        query = query.filter(DBConversation.is_bookmarked.is_(True))
    column = SORTABLE.get(sort_by, DBConversation.last_activity)
    query = query.order_by(column.desc() if sort_order == 'desc'
                           else column.asc())
    rows, pagination = paginate(query, page, limit)
    return [to_dict(row, with_messages=False) for row in rows], pagination


def search(user_id: str, terms: str, page: int = 1, limit: int = 10
           ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """
    Find conversations whose title or messages contain any of ``terms``.

    Results are ordered by recent activity.
    """
    words = [word for word in terms.split() if word]
    query = _visible(user_id)
    if words:
        query = query.filter(or_(*[
            clause for word in words for clause in (
                DBConversation.title.ilike(f'%{word}%'),
                cast(DBConversation.messages, String).ilike(f'%{word}%')
            )
        ]))
    query = query.order_by(DBConversation.last_activity.desc())
    rows, pagination = paginate(query, page, limit)
    return [to_dict(row, with_messages=False) for row in rows], pagination


def create_conversation(user_id: str, data: Dict[str, Any],
                        case_id: Optional[str] = None) -> Dict[str, Any]:
    """Start a conversation, optionally about one of the user's cases."""
    db_conv = DBConversation(user_id=int(user_id),
                             case_id=int(case_id) if case_id else None)
    for field, column in _FIELDS.items():
        if data.get(field) is not None:
            setattr(db_conv, column, data[field])
    settings = dict(DEFAULT_SETTINGS)
    settings.update(data.get('settings') or {})
    db_conv.settings = settings
    db_conv.messages = []
    db_conv.statistics = _statistics([])
    with transaction() as session:
        session.add(db_conv)
    logger.info('Created conversation %s for user %s',
                db_conv.conversation_id, user_id)
    return to_dict(db_conv)


def update_conversation(conversation_id: Any, user_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
    db_conv = _load_or_fail(conversation_id, user_id)
    for field, column in _FIELDS.items():
        if field in data:
            setattr(db_conv, column, data[field])
    if isinstance(data.get('settings'), dict):
        settings = dict(db_conv.settings or {})
        settings.update(data['settings'])
        db_conv.settings = settings
    with transaction():
        _touch(db_conv)
    return to_dict(db_conv)


def delete_conversation(conversation_id: Any, user_id: str) -> None:
    """Flag a conversation as deleted."""
    db_conv = _load_or_fail(conversation_id, user_id)
    with transaction():
        db_conv.is_deleted = True
        db_conv.deleted_at = _now()
        db_conv.status = 'deleted'
        _touch(db_conv)


def toggle_bookmark(conversation_id: Any, user_id: str) -> bool:
    """Flip the bookmark flag; returns the new value."""
    db_conv = _load_or_fail(conversation_id, user_id)
    with transaction():
        db_conv.is_bookmarked = not db_conv.is_bookmarked
        db_conv.bookmarked_at = _now() if db_conv.is_bookmarked else None
        _touch(db_conv)
    return db_conv.is_bookmarked


def archive(conversation_id: Any, user_id: str) -> None:
    db_conv = _load_or_fail(conversation_id, user_id)
    with transaction():
        db_conv.status = 'archived'
        _touch(db_conv)


def add_message(conversation_id: Any, user_id: str, role: str, content: str,
                metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Append a message and commit it; returns the message.

    Each message is committed on its own, so a user message survives a
    failure to produce the reply that follows it.
    """
    db_conv = _load_or_fail(conversation_id, user_id)
    message = {
        'id': uuid.uuid4().hex,
        'role': role,
        'content': content,
        'timestamp': _now().isoformat(),
        'metadata': metadata or {},
        'isEdited': False,
        'editHistory': [],
    }
    messages = list(db_conv.messages or []) + [message]
    with transaction():
        db_conv.messages = messages
        db_conv.statistics = _statistics(messages, db_conv.statistics)
        _touch(db_conv)
    return message


def edit_message(conversation_id: Any, user_id: str, message_id: str,
                 content: str) -> Dict[str, Any]:
    """
    Replace the content of a user message, keeping the previous version.

    Raises
    ------
    :class:`NoSuchMessage`
    :class:`NotEditable`

    """
    db_conv = _load_or_fail(conversation_id, user_id)
    messages = [dict(m) for m in db_conv.messages or []]
    for message in messages:
        if message.get('id') == message_id:
            break
    else:
        raise NoSuchMessage(message_id)
    if message.get('role') != 'user':
        raise NotEditable(message_id)
    history = list(message.get('editHistory') or [])
    history.append({'content': message['content'],
                    'editedAt': _now().isoformat()})
    message.update(content=content, isEdited=True, editHistory=history)
    with transaction():
        db_conv.messages = messages
        _touch(db_conv)
    return message


def count_for_user(user_id: str) -> int:
    try:
        return _visible(user_id).with_entities(
            func.count(DBConversation.conversation_id)).scalar()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def statistics(user_id: str) -> Dict[str, Any]:
    """Summarize a user's conversations."""
    try:
        rows = _visible(user_id).all()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    messages = [(r.statistics or {}).get('messageCount', 0) for r in rows]
    return {
        'totalConversations': len(rows),
        'totalMessages': sum(messages),
        'totalTokens': sum((r.statistics or {}).get('totalTokens', 0)
                           for r in rows),
        'averageMessagesPerConversation':
            round(sum(messages) / len(rows)) if rows else 0,
        'bookmarkedCount': sum(1 for r in rows if r.is_bookmarked),
        'categoryBreakdown': dict(Counter(r.category for r in rows)),
        'statusBreakdown': dict(Counter(r.status for r in rows)),
        'generatedAt': _now(),
    }
