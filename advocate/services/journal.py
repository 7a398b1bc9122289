"""
Journal entries.

Entries are private to their author and handed out as dicts. Word count and
reading time are recomputed whenever the content changes, and every content
change bumps ``version`` and keeps the previous text in ``editHistory``.
Deleted entries are only flagged.
"""

from collections import Counter
import logging
import math
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
import uuid

from dateutil import parser as date_parser
from pytz import UTC
from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError

from . import cases
from .database import db, DBJournalEntry, DatabaseUnavailable, paginate, \
    transaction

logger = logging.getLogger(__name__)

MOODS = ('very-sad', 'sad', 'neutral', 'happy', 'very-happy')
CATEGORIES = ('personal', 'case-related', 'reflection', 'goal', 'milestone',
              'other')

WORDS_PER_MINUTE = 200
SUMMARY_LENGTH = 150

SORTABLE = {
    'createdAt': DBJournalEntry.created_at,
    'updatedAt': DBJournalEntry.updated_at,
    'title': DBJournalEntry.title,
}

_FIELDS = {
    'title': 'title',
    'mood': 'mood',
    'category': 'category',
    'tags': 'tags',
    'isPrivate': 'is_private',
}

_TAG = re.compile(r'<[^>]*>')


class NoSuchEntry(RuntimeError):
    """The entry does not exist, or has been deleted."""


def _now() -> datetime:
    return datetime.now(tz=UTC)


def text_stats(content: str) -> Dict[str, int]:
    """Count words, and minutes to read them at 200 words a minute."""
    words = len((content or '').split())
    return {'wordCount': words,
            'readingTime': math.ceil(words / WORDS_PER_MINUTE)}


def summarize(content: str, length: int = SUMMARY_LENGTH) -> str:
    """The first ``length`` characters of the content, without markup."""
    text = _TAG.sub('', content or '')
    if len(text) <= length:
        return text
    return text[:length] + '...'


def parse_date(value: str) -> datetime:
    """Parse an ISO-8601 date; dates without a zone are taken as UTC."""
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_dict(entry: DBJournalEntry, with_content: bool = True
            ) -> Dict[str, Any]:
    """
    Get the API representation of an entry.

    Listings leave out ``content`` and carry a ``summary`` instead.
    """
    data = {
        'id': str(entry.entry_id),
        'userId': str(entry.user_id),
        'caseId': str(entry.case_id) if entry.case_id else None,
        'title': entry.title,
        'mood': entry.mood,
        'category': entry.category,
        'tags': list(entry.tags or []),
        'isPrivate': bool(entry.is_private),
        'metadata': dict(entry.stats or {}),
        'reminders': list(entry.reminders or []),
        'favorites': {'isFavorite': bool(entry.is_favorite),
                      'favoritedAt': entry.favorited_at},
        'version': entry.version,
        'createdAt': entry.created_at,
        'updatedAt': entry.updated_at,
    }
    if with_content:
        data['content'] = entry.content
        data['editHistory'] = list(entry.edit_history or [])
    else:
        data['summary'] = summarize(entry.content)
    return data


def _visible(user_id: str) -> Any:
    return db.session.query(DBJournalEntry).filter(
        DBJournalEntry.user_id == int(user_id),
        DBJournalEntry.is_deleted.is_(False)
    )


def _load_or_fail(entry_id: Any, user_id: str) -> DBJournalEntry:
    try:
        pk = int(entry_id)
    except (TypeError, ValueError) as e:
        raise NoSuchEntry(entry_id) from e
    try:
        entry = _visible(user_id) \
            .filter(DBJournalEntry.entry_id == pk).first()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    if entry is None:
        raise NoSuchEntry(entry_id)
    return entry


def _all(query: Any) -> List[DBJournalEntry]:
    try:
        return query.all()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def get_entry(entry_id: Any, user_id: str) -> Dict[str, Any]:
    return to_dict(_load_or_fail(entry_id, user_id))


def list_entries(user_id: str, page: int = 1, limit: int = 10,
                 search: Optional[str] = None,
                 category: Optional[str] = None,
                 mood: Optional[str] = None,
                 case_id: Optional[str] = None,
                 favorites: bool = False,
                 sort_by: str = 'createdAt',
                 sort_order: str = 'desc'
                 ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Get a page of entries, summarized."""
    query = _visible(user_id)
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            DBJournalEntry.title.ilike(pattern),
            DBJournalEntry.content.ilike(pattern),
            cast(DBJournalEntry.tags, String).ilike(pattern)
        ))
    if category:
        query = query.filter(DBJournalEntry.category == category)
    if mood:
        query = query.filter(DBJournalEntry.mood == mood)
    if case_id:
        try:
            query = query.filter(DBJournalEntry.case_id == int(case_id))
        except ValueError:
            return [], {'current': page, 'total': 0, 'count': 0,
                        'totalRecords': 0}
    if favorites:
        query = query.filter(DBJournalEntry.is_favorite.is_(True))
    column = SORTABLE.get(sort_by, DBJournalEntry.created_at)
    query = query.order_by(column.desc() if sort_order == 'desc'
                           else column.asc())
    rows, pagination = paginate(query, page, limit)
    return [to_dict(row, with_content=False) for row in rows], pagination


def search(user_id: str, terms: str, page: int = 1, limit: int = 10
           ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Find entries whose title, content or tags contain any of ``terms``."""
    words = [word for word in terms.split() if word]
    query = _visible(user_id)
    if words:
        query = query.filter(or_(*[
            clause for word in words for clause in (
                DBJournalEntry.title.ilike(f'%{word}%'),
                DBJournalEntry.content.ilike(f'%{word}%'),
                cast(DBJournalEntry.tags, String).ilike(f'%{word}%')
            )
        ]))
    query = query.order_by(DBJournalEntry.created_at.desc())
    rows, pagination = paginate(query, page, limit)
    return [to_dict(row, with_content=False) for row in rows], pagination


def create_entry(user_id: str, data: Dict[str, Any],
                 case_id: Optional[str] = None) -> Dict[str, Any]:
    entry = DBJournalEntry(user_id=int(user_id),
                           case_id=int(case_id) if case_id else None,
                           content=data['content'])
    for field, column in _FIELDS.items():
        if data.get(field) is not None:
            setattr(entry, column, data[field])
    entry.stats = text_stats(entry.content)
    entry.reminders = []
    entry.edit_history = []
    with transaction() as session:
        session.add(entry)
    logger.info('Created journal entry %s for user %s', entry.entry_id,
                user_id)
    return to_dict(entry)


def update_entry(entry_id: Any, user_id: str, data: Dict[str, Any],
                 case_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Change an entry.

    A new ``content`` that differs from the current one is versioned: the
    old text goes into the edit history under the old version number.
    """
    entry = _load_or_fail(entry_id, user_id)
    with transaction():
        for field, column in _FIELDS.items():
            if field in data:
                setattr(entry, column, data[field])
        if 'caseId' in data:
            entry.case_id = int(case_id) if case_id else None
        content = data.get('content')
        if content is not None and content != entry.content:
            history = list(entry.edit_history or [])
            history.append({'version': entry.version,
                            'content': entry.content,
                            'editedAt': _now().isoformat(),
                            'changes': 'Content updated'})
            entry.edit_history = history
            entry.version = (entry.version or 1) + 1
            entry.content = content
            entry.stats = text_stats(content)
        entry.updated_at = _now()
    return to_dict(entry)


def delete_entry(entry_id: Any, user_id: str) -> None:
    """Flag an entry as deleted."""
    entry = _load_or_fail(entry_id, user_id)
    with transaction():
        entry.is_deleted = True
        entry.deleted_at = _now()


def toggle_favorite(entry_id: Any, user_id: str) -> bool:
    """Flip the favorite flag; returns the new value."""
    entry = _load_or_fail(entry_id, user_id)
    with transaction():
        entry.is_favorite = not entry.is_favorite
        entry.favorited_at = _now() if entry.is_favorite else None
    return entry.is_favorite


def add_reminder(entry_id: Any, user_id: str, date: str,
                 message: str) -> Dict[str, Any]:
    """Attach a reminder to an entry; returns the reminder."""
    entry = _load_or_fail(entry_id, user_id)
    reminder = {
        'id': uuid.uuid4().hex,
        'date': parse_date(date).isoformat(),
        'message': message,
        'completed': False,
    }
    with transaction():
        entry.reminders = list(entry.reminders or []) + [reminder]
        entry.updated_at = _now()
    return reminder


def upcoming_reminders(user_id: str, days: int = 7,
                       now: Optional[datetime] = None
                       ) -> List[Dict[str, Any]]:
    """
    Open reminders due within the next ``days`` days, soonest first.

    Reminders in the past or already completed are left out.
    """
    now = now or _now()
    until = now + timedelta(days=days)
    found = []
    for entry in _all(_visible(user_id)):
        case_title = None
        for reminder in entry.reminders or []:
            if not isinstance(reminder, dict) or reminder.get('completed'):
                continue
            try:
                due = parse_date(reminder.get('date') or '')
            except ValueError:
                continue
            if not now <= due <= until:
                continue
            if entry.case_id and case_title is None:
                case = cases.get_case(entry.case_id)
                case_title = case['title'] if case else None
            found.append({
                'entryId': str(entry.entry_id),
                'entryTitle': entry.title,
                'caseId': str(entry.case_id) if entry.case_id else None,
                'caseTitle': case_title,
                'reminderId': reminder.get('id'),
                'date': due,
                'message': reminder.get('message'),
            })
    return sorted(found, key=lambda r: r['date'])


def count_for_user(user_id: str) -> int:
    try:
        return _visible(user_id).with_entities(
            func.count(DBJournalEntry.entry_id)).scalar()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def statistics(user_id: str) -> Dict[str, Any]:
    """Summarize a user's journal."""
    rows = _all(_visible(user_id))
    words = sum((r.stats or {}).get('wordCount', 0) for r in rows)
    return {
        'totalEntries': len(rows),
        'totalWords': words,
        'averageWords': round(words / len(rows)) if rows else 0,
        'totalReadingTime': sum((r.stats or {}).get('readingTime', 0)
                                for r in rows),
        'favoritesCount': sum(1 for r in rows if r.is_favorite),
        'categoryBreakdown': dict(Counter(r.category for r in rows)),
        'moodBreakdown': dict(Counter(r.mood for r in rows)),
        'generatedAt': _now(),
    }
