"""Controllers for legal resources, research tools and risk assessment."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
import uuid

from flask import current_app
from pytz import UTC

from .. import domain, errors, risk, status
from ..services import cases, resources
from .cases import case_not_found
from .forms import ResourceQueryForm, RiskAssessmentForm, validated

logger = logging.getLogger(__name__)

Response = Tuple[Optional[dict], int, dict]


def search(params: Any) -> Response:
    form = validated(ResourceQueryForm, params)
    found, pagination = resources.search(
        q=form.q.data or None,
        category=form.category.data or None,
        type=form.type.data or None,
        jurisdiction=form.jurisdiction.data or None,
        page=form.page.data or 1,
        limit=form.limit.data or 10,
        sort_by=params.get('sortBy') or 'relevanceScore',
        sort_order=form.sortOrder.data or 'desc'
    )
    return {
        'resources': found,
        'pagination': pagination,
        'filters': {
            'searchQuery': form.q.data or None,
            'category': form.category.data or None,
            'type': form.type.data or None,
            'jurisdiction': form.jurisdiction.data or None
        }
    }, status.HTTP_200_OK, {}


def categories() -> Response:
    return resources.categories(), status.HTTP_200_OK, {}


def recommendations(case: Dict[str, Any]) -> Response:
    """Resources relevant to the type of ``case``."""
    found = resources.recommend(case['caseType'])
    return {
        'resources': found,
        'caseInfo': {
            'id': case['id'],
            'title': case['title'],
            'type': case['caseType'],
            'priority': case['priority']
        },
        'count': len(found)
    }, status.HTTP_200_OK, {}


def assess_risk(principal: domain.Principal, payload: Any) -> Response:
    """
    Score the risk factors of a matter, optionally tied to one of the
    principal's cases.

    Returns
    -------
    dict
        ``message`` and ``assessment``.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    payload = payload if isinstance(payload, dict) else {}
    form = validated(RiskAssessmentForm, payload)
    additional = payload.get('additionalFactors') or []
    if not isinstance(additional, list):
        raise errors.ValidationFailed([{
            'field': 'additionalFactors', 'message': 'Must be a list'}])

    case_info = None
    case_id = form.caseId.data or None
    if case_id:
        case = cases.get_owned_case(case_id, principal.user_id)
        if case is None:
            raise case_not_found()
        case_info = {'id': case['id'], 'title': case['title'],
                     'type': case['caseType'], 'status': case['status']}

    factor_set = domain.RiskFactorSet(
        factors=payload.get('factors'),
        additional_factors=[str(factor) for factor in additional],
        description=form.description.data or None
    )
    assessment = risk.assess(
        factor_set, strict=current_app.config.get('RISK_STRICT_FACTORS', False)
    )
    data = assessment.to_dict()
    data.update({
        'id': uuid.uuid4().hex,
        'userId': principal.user_id,
        'caseId': case_id,
        'caseInfo': case_info,
        'riskColor': risk.LEVEL_COLORS[assessment.risk_level],
        'additionalFactors': factor_set.additional_factors,
        'description': factor_set.description,
        'createdAt': datetime.now(tz=UTC)
    })
    logger.debug('Risk assessment for user %s: %s', principal.user_id,
                 assessment.risk_level)
    return {'message': 'Risk assessment completed', 'assessment': data}, \
        status.HTTP_200_OK, {}


def risk_template() -> Response:
    return {'template': risk.template()}, status.HTTP_200_OK, {}


def research_tools() -> Response:
    return {'tools': resources.research_tools()}, status.HTTP_200_OK, {}
