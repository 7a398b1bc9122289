"""
Controllers for case records.

Routes that address a single case load it with :func:`load_case` and pass it
through the ownership gate before any of the functions here are called, so
they can assume the principal owns ``case``.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from .. import domain, errors, status
from ..services import cases
from .forms import CaseForm, CaseQueryForm, CaseUpdateForm, \
    DeadlineQueryForm, NoteForm, TimelineEventForm, TimelineUpdateForm, \
    check_types, validated

logger = logging.getLogger(__name__)

Response = Tuple[Optional[dict], int, dict]


CASE_FIELD_TYPES = {
    'caseNumber': str,
    'title': str,
    'description': str,
    'caseType': str,
    'status': str,
    'priority': str,
    'court': dict,
    'parties': dict,
    'tags': list,
    'financials': dict,
    'deadlines': list,
    'outcome': dict,
}
"""JSON type of each case field a client may set."""


def _check_case_fields(payload: Any, nullable: Any = ()) -> None:
    check_types(payload, CASE_FIELD_TYPES, nullable=nullable)
    deadlines = payload.get('deadlines') if isinstance(payload, dict) else None
    if deadlines and not all(isinstance(d, dict) for d in deadlines):
        raise errors.ValidationFailed([{
            'field': 'deadlines', 'message': 'Each deadline must be an object'
        }])


def case_not_found() -> errors.NotFound:
    return errors.NotFound('Case not found', 'CASE_NOT_FOUND')


def event_not_found() -> errors.NotFound:
    return errors.NotFound('Timeline event not found', 'EVENT_NOT_FOUND')


def load_case(case_id: Any, **kwargs: Any) -> Dict[str, Any]:
    """Resource loader for case routes."""
    case = cases.get_case(case_id)
    if case is None:
        raise case_not_found()
    return case


def list_cases(principal: domain.Principal, params: Any) -> Response:
    form = validated(CaseQueryForm, params)
    found, pagination = cases.list_cases(
        principal.user_id,
        page=form.page.data or 1,
        limit=form.limit.data or 10,
        search=params.get('search') or None,
        status=form.status.data or None,
        case_type=params.get('caseType') or None,
        priority=form.priority.data or None,
        sort_by=params.get('sortBy') or 'updatedAt',
        sort_order=form.sortOrder.data or 'desc'
    )
    return {'cases': found, 'pagination': pagination}, status.HTTP_200_OK, {}


def get_case(case: Dict[str, Any]) -> Response:
    return {'case': case}, status.HTTP_200_OK, {}


def create_case(principal: domain.Principal, payload: Any) -> Response:
    """
    Create a case owned by the principal.

    Returns
    -------
    dict
        The new case.
    int
        201 on success.
    dict
        ``Location`` header.

    """
    validated(CaseForm, payload)
    _check_case_fields(payload, nullable=tuple(CASE_FIELD_TYPES))
    try:
        case = cases.create_case(principal.user_id, payload)
    except cases.DuplicateCaseNumber as e:
        raise errors.BadRequest('Case number already exists',
                                'DUPLICATE_CASE_NUMBER') from e
    return {
        'message': 'Case created successfully',
        'case': case
    }, status.HTTP_201_CREATED, {'Location': f'/api/cases/{case["id"]}'}


def update_case(case: Dict[str, Any], payload: Any) -> Response:
    validated(CaseUpdateForm, payload)
    _check_case_fields(payload, nullable=('caseNumber',))
    try:
        updated = cases.update_case(case['id'], payload)
    except cases.NoSuchCase as e:
        raise case_not_found() from e
    except cases.DuplicateCaseNumber as e:
        raise errors.BadRequest('Case number already exists',
                                'DUPLICATE_CASE_NUMBER') from e
    return {
        'message': 'Case updated successfully',
        'case': updated
    }, status.HTTP_200_OK, {}


def delete_case(case: Dict[str, Any]) -> Response:
    try:
        cases.delete_case(case['id'])
    except cases.NoSuchCase as e:
        raise case_not_found() from e
    return {'message': 'Case deleted successfully'}, status.HTTP_200_OK, {}


def add_timeline_event(case: Dict[str, Any], payload: Any) -> Response:
    validated(TimelineEventForm, payload)
    updated = cases.add_timeline_event(case['id'], payload)
    return {
        'message': 'Timeline event added successfully',
        'case': updated
    }, status.HTTP_201_CREATED, {}


def update_timeline_event(case: Dict[str, Any], event_id: str,
                          payload: Any) -> Response:
    validated(TimelineUpdateForm, payload)
    try:
        event = cases.update_timeline_event(case['id'], event_id, payload)
    except cases.NoSuchEvent as e:
        raise event_not_found() from e
    return {
        'message': 'Timeline event updated successfully',
        'event': event
    }, status.HTTP_200_OK, {}


def delete_timeline_event(case: Dict[str, Any], event_id: str) -> Response:
    try:
        cases.delete_timeline_event(case['id'], event_id)
    except cases.NoSuchEvent as e:
        raise event_not_found() from e
    return {'message': 'Timeline event deleted successfully'}, \
        status.HTTP_200_OK, {}


def upcoming_deadlines(case: Dict[str, Any], params: Any) -> Response:
    form = validated(DeadlineQueryForm, params)
    days = form.days.data if form.days.data is not None else 30
    deadlines = cases.upcoming_deadlines(case, days=days)
    return {'deadlines': deadlines, 'count': len(deadlines)}, \
        status.HTTP_200_OK, {}


def add_note(case: Dict[str, Any], payload: Any) -> Response:
    form = validated(NoteForm, payload)
    note = cases.add_note(case['id'], form.content.data.strip(),
                          title=form.title.data or None)
    return {
        'message': 'Note added successfully',
        'note': note
    }, status.HTTP_201_CREATED, {}
