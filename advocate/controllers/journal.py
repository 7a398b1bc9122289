"""Controllers for journal entries."""

from typing import Any, Optional, Tuple

from .. import domain, errors, status
from ..services import cases, journal
from .forms import JournalEntryForm, JournalQueryForm, JournalUpdateForm, \
    ReminderForm, TextSearchForm, UpcomingRemindersForm, check_types, \
    validated

Response = Tuple[Optional[dict], int, dict]

ENTRY_FIELD_TYPES = {'title': str, 'content': str, 'mood': str,
                     'category': str, 'tags': list, 'isPrivate': bool}


def entry_not_found() -> errors.NotFound:
    return errors.NotFound('Journal entry not found', 'ENTRY_NOT_FOUND')


def _check_entry_fields(payload: Any, nullable: Tuple[str, ...] = ()) -> None:
    check_types(payload, ENTRY_FIELD_TYPES, nullable=nullable)
    blank = [{'field': name, 'message': 'Must not be blank'}
             for name in ('title', 'content')
             if isinstance(payload.get(name), str)
             and not payload[name].strip()]
    if blank:
        raise errors.ValidationFailed(blank)


def _owned_case_or_fail(case_id: Optional[str], user_id: str) -> None:
    if case_id and cases.get_owned_case(case_id, user_id) is None:
        raise errors.BadRequest('Case not found or access denied',
                                'INVALID_CASE')


def list_entries(principal: domain.Principal, params: Any) -> Response:
    form = validated(JournalQueryForm, params)
    found, pagination = journal.list_entries(
        principal.user_id,
        page=form.page.data or 1,
        limit=form.limit.data or 10,
        search=params.get('search') or None,
        category=form.category.data or None,
        mood=form.mood.data or None,
        case_id=form.caseId.data or None,
        favorites=form.favorites.data == 'true',
        sort_by=params.get('sortBy') or 'createdAt',
        sort_order=form.sortOrder.data or 'desc'
    )
    return {'entries': found, 'pagination': pagination}, \
        status.HTTP_200_OK, {}


def get_entry(principal: domain.Principal, entry_id: int) -> Response:
    try:
        entry = journal.get_entry(entry_id, principal.user_id)
    except journal.NoSuchEntry as e:
        raise entry_not_found() from e
    return {'entry': entry}, status.HTTP_200_OK, {}


def create_entry(principal: domain.Principal, payload: Any) -> Response:
    """Write an entry, optionally about one of the user's cases."""
    payload = payload if isinstance(payload, dict) else {}
    form = validated(JournalEntryForm, payload)
    _check_entry_fields(payload, nullable=tuple(ENTRY_FIELD_TYPES))
    case_id = form.caseId.data or None
    _owned_case_or_fail(case_id, principal.user_id)
    data = dict(payload, title=form.title.data)
    entry = journal.create_entry(principal.user_id, data, case_id=case_id)
    return {
        'message': 'Journal entry created successfully',
        'entry': entry
    }, status.HTTP_201_CREATED, {}


def update_entry(principal: domain.Principal, entry_id: int,
                 payload: Any) -> Response:
    payload = payload if isinstance(payload, dict) else {}
    form = validated(JournalUpdateForm, payload)
    _check_entry_fields(payload)
    case_id = form.caseId.data or None
    _owned_case_or_fail(case_id, principal.user_id)
    data = dict(payload)
    if 'title' in data:
        data['title'] = form.title.data
    try:
        entry = journal.update_entry(entry_id, principal.user_id, data,
                                     case_id=case_id)
    except journal.NoSuchEntry as e:
        raise entry_not_found() from e
    return {
        'message': 'Journal entry updated successfully',
        'entry': entry
    }, status.HTTP_200_OK, {}


def delete_entry(principal: domain.Principal, entry_id: int) -> Response:
    try:
        journal.delete_entry(entry_id, principal.user_id)
    except journal.NoSuchEntry as e:
        raise entry_not_found() from e
    return {'message': 'Journal entry deleted successfully'}, \
        status.HTTP_200_OK, {}


def toggle_favorite(principal: domain.Principal, entry_id: int) -> Response:
    try:
        favorite = journal.toggle_favorite(entry_id, principal.user_id)
    except journal.NoSuchEntry as e:
        raise entry_not_found() from e
    verb = 'added to' if favorite else 'removed from'
    return {
        'message': f'Journal entry {verb} favorites',
        'isFavorite': favorite
    }, status.HTTP_200_OK, {}


def add_reminder(principal: domain.Principal, entry_id: int,
                 payload: Any) -> Response:
    form = validated(ReminderForm, payload)
    try:
        reminder = journal.add_reminder(entry_id, principal.user_id,
                                        form.date.data, form.message.data)
    except journal.NoSuchEntry as e:
        raise entry_not_found() from e
    return {
        'message': 'Reminder added successfully',
        'reminder': reminder
    }, status.HTTP_201_CREATED, {}


def upcoming_reminders(principal: domain.Principal, params: Any) -> Response:
    form = validated(UpcomingRemindersForm, params)
    days = form.days.data or 7
    found = journal.upcoming_reminders(principal.user_id, days=days)
    return {'reminders': found, 'count': len(found), 'days': days}, \
        status.HTTP_200_OK, {}


def search(principal: domain.Principal, params: Any) -> Response:
    form = validated(TextSearchForm, params)
    found, pagination = journal.search(principal.user_id, form.q.data,
                                       page=form.page.data or 1,
                                       limit=form.limit.data or 10)
    return {
        'entries': found,
        'pagination': pagination,
        'searchQuery': form.q.data
    }, status.HTTP_200_OK, {}


def statistics(principal: domain.Principal) -> Response:
    return journal.statistics(principal.user_id), status.HTTP_200_OK, {}
