"""
Controllers for the communication toolkit.

Templates, tips and practice scenarios are static; analysis and generation
work only on the request body.
"""

from datetime import datetime
from typing import Any, Optional, Tuple

from pytz import UTC

from .. import domain, errors, status
from ..services import communication
from .forms import AnalysisForm, GenerationForm, ScenarioQueryForm, \
    TemplateQueryForm, TipsQueryForm, check_types, validated

Response = Tuple[Optional[dict], int, dict]


def list_templates(principal: domain.Principal, params: Any) -> Response:
    form = validated(TemplateQueryForm, params)
    kind = form.type.data or 'all'
    found = communication.list_templates(kind,
                                         category=form.category.data or None,
                                         tone=form.tone.data or None)
    return {
        'templates': found,
        'count': len(found),
        'filters': {'type': kind, 'category': form.category.data or None,
                    'tone': form.tone.data or None}
    }, status.HTTP_200_OK, {}


def get_template(principal: domain.Principal, template_id: str) -> Response:
    template = communication.get_template(template_id)
    if template is None:
        raise errors.NotFound('Template not found', 'TEMPLATE_NOT_FOUND')
    return {'template': template}, status.HTTP_200_OK, {}


def analyze(principal: domain.Principal, payload: Any) -> Response:
    form = validated(AnalysisForm, payload)
    kind = form.type.data or 'general'
    audience = form.audience.data or 'general'
    text = form.text.data
    return {
        'message': 'Communication analysis completed',
        'analysis': communication.analyze(text, kind, audience),
        'originalText': text,
        'metadata': {'type': kind, 'audience': audience,
                     'analyzedAt': datetime.now(tz=UTC)}
    }, status.HTTP_200_OK, {}


def tips(principal: domain.Principal, params: Any) -> Response:
    form = validated(TipsQueryForm, params)
    category = form.category.data or 'all'
    return {'tips': communication.tips(category), 'category': category}, \
        status.HTTP_200_OK, {}


def scenarios(principal: domain.Principal, params: Any) -> Response:
    """Practice scenarios; intermediate ones unless a difficulty is given."""
    form = validated(ScenarioQueryForm, params)
    difficulty = form.difficulty.data or 'intermediate'
    kind = form.type.data or None
    found = communication.scenarios(difficulty, kind)
    return {
        'scenarios': found,
        'count': len(found),
        'filters': {'difficulty': difficulty, 'type': kind}
    }, status.HTTP_200_OK, {}


def generate(principal: domain.Principal, payload: Any) -> Response:
    """
    Draft a communication from a purpose and key points.

    Returns
    -------
    dict
        ``communication`` with the drafted ``template``, and the
        ``parameters`` it was drafted from.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    payload = payload if isinstance(payload, dict) else {}
    form = validated(GenerationForm, payload)
    check_types(payload, {'keyPoints': list, 'context': str},
                nullable=('keyPoints', 'context'))
    key_points = [str(point) for point in payload.get('keyPoints') or []]
    parameters = {
        'type': form.type.data,
        'audience': form.audience.data,
        'purpose': form.purpose.data,
        'tone': form.tone.data or 'professional',
        'keyPoints': key_points,
        'context': form.context.data or '',
    }
    drafted = communication.generate(form.type.data, form.purpose.data,
                                     key_points, parameters['context'])
    return {
        'message': 'Communication generated successfully',
        'communication': drafted,
        'parameters': parameters,
        'generatedAt': datetime.now(tz=UTC)
    }, status.HTTP_200_OK, {}
