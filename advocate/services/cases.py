"""
Case records.

Cases are returned to callers as plain dicts in their API representation
(camelCase keys, ``userId`` included), which is also what the ownership gate
inspects. Timeline events, deadlines and notes live in JSON columns on the
case row and are addressed by string ``id``.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
import uuid

from dateutil import parser as date_parser
from pytz import UTC
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .database import db, DBCase, DatabaseUnavailable, paginate, transaction

logger = logging.getLogger(__name__)

CASE_TYPES = ('civil', 'criminal', 'family', 'corporate', 'immigration',
              'employment', 'personal-injury', 'real-estate',
              'intellectual-property', 'bankruptcy', 'tax', 'other')
STATUSES = ('active', 'pending', 'closed', 'on-hold', 'appealed')
PRIORITIES = ('low', 'medium', 'high', 'urgent')
EVENT_TYPES = ('filing', 'hearing', 'deadline', 'meeting', 'document',
               'communication', 'other')
EVENT_STATUSES = ('upcoming', 'completed', 'missed', 'cancelled')

SORTABLE = {
    'createdAt': DBCase.created_at,
    'updatedAt': DBCase.updated_at,
    'title': DBCase.title,
    'caseNumber': DBCase.case_number,
    'priority': DBCase.priority,
    'status': DBCase.status,
}

_FIELDS = {
    'caseNumber': 'case_number',
    'title': 'title',
    'description': 'description',
    'caseType': 'case_type',
    'status': 'status',
    'priority': 'priority',
    'court': 'court',
    'parties': 'parties',
    'tags': 'tags',
    'financials': 'financials',
    'deadlines': 'deadlines',
    'outcome': 'outcome',
}
"""API field name to column, for fields a client may set directly."""


class NoSuchCase(RuntimeError):
    """The case does not exist."""


class NoSuchEvent(RuntimeError):
    """The timeline event does not exist on the case."""


class DuplicateCaseNumber(RuntimeError):
    """Another case already has the requested case number."""


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


def _timestamp(value: Any) -> str:
    """Normalize a client-supplied date to an ISO-8601 string."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = date_parser.isoparse(str(value))
    if parsed.tzinfo is None:
        parsed = UTC.localize(parsed)
    return parsed.isoformat()


def to_dict(db_case: DBCase) -> Dict[str, Any]:
    """Get the API representation of a case."""
    return {
        'id': str(db_case.case_id),
        'userId': str(db_case.user_id),
        'caseNumber': db_case.case_number,
        'title': db_case.title,
        'description': db_case.description,
        'caseType': db_case.case_type,
        'status': db_case.status,
        'priority': db_case.priority,
        'court': db_case.court or {},
        'parties': db_case.parties or {},
        'timeline': list(db_case.timeline or []),
        'notes': list(db_case.notes or []),
        'tags': list(db_case.tags or []),
        'financials': db_case.financials or {},
        'deadlines': list(db_case.deadlines or []),
        'outcome': db_case.outcome or {},
        'createdAt': db_case.created_at,
        'updatedAt': db_case.updated_at,
    }


def _load(case_id: Any) -> Optional[DBCase]:
    try:
        pk = int(case_id)
    except (TypeError, ValueError):
        return None
    try:
        return db.session.get(DBCase, pk)
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def _load_or_fail(case_id: Any) -> DBCase:
    db_case = _load(case_id)
    if db_case is None:
        raise NoSuchCase(f'No such case: {case_id}')
    return db_case


def get_case(case_id: Any) -> Optional[Dict[str, Any]]:
    """Get a case by ID, whoever owns it."""
    db_case = _load(case_id)
    return to_dict(db_case) if db_case is not None else None


def get_owned_case(case_id: Any, user_id: str) -> Optional[Dict[str, Any]]:
    """Get a case by ID, only if ``user_id`` owns it."""
    case = get_case(case_id)
    if case is None or case['userId'] != str(user_id):
        return None
    return case


def count_for_user(user_id: str) -> int:
    try:
        return db.session.query(func.count(DBCase.case_id)) \
            .filter(DBCase.user_id == int(user_id)).scalar()
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e


def next_case_number(user_id: str, year: Optional[int] = None) -> str:
    """
    Generate ``CASE-<year>-<nnnn>`` from the user's case count.

    Counts up from there past numbers the user already has, which happens
    after a case is deleted.
    """
    if year is None:
        year = _now().year
    try:
        taken = {number for number, in db.session.query(DBCase.case_number)
                 .filter(DBCase.user_id == int(user_id))}
    except SQLAlchemyError as e:
        raise DatabaseUnavailable(f'Could not query database: {e}') from e
    sequence = len(taken) + 1
    while f'CASE-{year}-{sequence:04d}' in taken:
        sequence += 1
    return f'CASE-{year}-{sequence:04d}'


def list_cases(user_id: str, page: int = 1, limit: int = 10,
               search: Optional[str] = None, status: Optional[str] = None,
               case_type: Optional[str] = None,
               priority: Optional[str] = None, sort_by: str = 'updatedAt',
               sort_order: str = 'desc'
               ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Get a filtered, sorted page of a user's cases."""
    query = db.session.query(DBCase).filter(DBCase.user_id == int(user_id))
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(DBCase.title.ilike(pattern),
                                 DBCase.description.ilike(pattern),
                                 DBCase.case_number.ilike(pattern)))
    if status:
        query = query.filter(DBCase.status == status)
    if case_type:
        query = query.filter(DBCase.case_type == case_type)
    if priority:
        query = query.filter(DBCase.priority == priority)
    column = SORTABLE.get(sort_by, DBCase.updated_at)
    query = query.order_by(column.desc() if sort_order == 'desc'
                           else column.asc())
    rows, pagination = paginate(query, page, limit)
    return [to_dict(row) for row in rows], pagination


def create_case(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a case for ``user_id``.

    A case number is generated if none is given.

    Raises
    ------
    :class:`DuplicateCaseNumber`

    """
    db_case = DBCase(user_id=int(user_id))
    for field, column in _FIELDS.items():
        if data.get(field) is not None:
            setattr(db_case, column, data[field])
    if not db_case.case_number:
        db_case.case_number = next_case_number(user_id)
    db_case.timeline = []
    db_case.notes = []
    try:
        with transaction() as session:
            session.add(db_case)
    except IntegrityError as e:
        raise DuplicateCaseNumber(db_case.case_number) from e
    logger.info('Created case %s for user %s', db_case.case_id, user_id)
    return to_dict(db_case)


def update_case(case_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update the directly settable fields of a case.

    Raises
    ------
    :class:`NoSuchCase`
    :class:`DuplicateCaseNumber`

    """
    db_case = _load_or_fail(case_id)
    renumbered = 'caseNumber' in data \
        and data['caseNumber'] != db_case.case_number
    for field, column in _FIELDS.items():
        if field in data:
            setattr(db_case, column, data[field])
    try:
        with transaction():
            db_case.updated_at = _now()
    except IntegrityError as e:
        if not renumbered:
            raise
        raise DuplicateCaseNumber(data['caseNumber']) from e
    return to_dict(db_case)


def delete_case(case_id: Any) -> None:
    db_case = _load_or_fail(case_id)
    with transaction() as session:
        session.delete(db_case)
    logger.info('Deleted case %s', case_id)


def add_timeline_event(case_id: Any, event: Dict[str, Any]) -> Dict[str, Any]:
    """Append an event to the case timeline; returns the updated case."""
    db_case = _load_or_fail(case_id)
    new_event = {
        'id': str(event.get('id') or _new_id()),
        'date': _timestamp(event['date']),
        'title': event['title'],
        'description': event['description'],
        'type': event.get('type') or 'other',
        'status': event.get('status') or 'upcoming',
        'priority': event.get('priority') or 'medium',
        'createdAt': _now().isoformat(),
    }
    with transaction():
        db_case.timeline = list(db_case.timeline or []) + [new_event]
    return to_dict(db_case)


def update_timeline_event(case_id: Any, event_id: str,
                          updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update one timeline event; returns the event.

    Raises
    ------
    :class:`NoSuchEvent`

    """
    db_case = _load_or_fail(case_id)
    timeline = [dict(event) for event in db_case.timeline or []]
    for event in timeline:
        if event.get('id') == event_id:
            break
    else:
        raise NoSuchEvent(event_id)
    for key in ('title', 'description', 'type', 'status', 'priority'):
        if key in updates:
            event[key] = updates[key]
    if updates.get('date'):
        event['date'] = _timestamp(updates['date'])
    with transaction():
        db_case.timeline = timeline
    return event


def delete_timeline_event(case_id: Any, event_id: str) -> None:
    db_case = _load_or_fail(case_id)
    timeline = [event for event in db_case.timeline or []
                if event.get('id') != event_id]
    if len(timeline) == len(db_case.timeline or []):
        raise NoSuchEvent(event_id)
    with transaction():
        db_case.timeline = timeline


def upcoming_deadlines(case: Dict[str, Any], days: int = 30,
                       now: Optional[datetime] = None
                       ) -> List[Dict[str, Any]]:
    """Get the incomplete deadlines of ``case`` falling in the next ``days``."""
    if now is None:
        now = _now()
    horizon = now + timedelta(days=days)
    upcoming = []
    for deadline in case.get('deadlines') or []:
        if not isinstance(deadline, dict):
            continue
        if deadline.get('completed') or not deadline.get('date'):
            continue
        try:
            when = date_parser.isoparse(_timestamp(deadline['date']))
        except ValueError:
            logger.warning('Skipping deadline with bad date %r',
                           deadline['date'])
            continue
        if now <= when <= horizon:
            upcoming.append(deadline)
    return upcoming


def add_note(case_id: Any, content: str,
             title: Optional[str] = None) -> Dict[str, Any]:
    """Add a note to a case; returns the note."""
    db_case = _load_or_fail(case_id)
    now = _now().isoformat()
    note = {
        'id': _new_id(),
        'title': title or 'Untitled Note',
        'content': content,
        'createdAt': now,
        'updatedAt': now,
    }
    with transaction():
        db_case.notes = list(db_case.notes or []) + [note]
    return note
