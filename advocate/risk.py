"""
Case risk assessment.

A risk assessment scores five categorical factors of a legal matter against a
fixed weight table, averages the weights into a risk score in ``[0, 1]``, and
derives a risk level and a list of recommendations from the score and from
individual factor values.

.. code-block:: python

   from advocate import risk
   from advocate.domain import RiskFactorSet

   assessment = risk.assess(RiskFactorSet(factors={
       'case_complexity': 'high',
       'evidence_strength': 'weak',
       'opponent_resources': 'extensive',
       'time_constraints': 'urgent',
       'financial_impact': 'high',
   }))
   assessment.risk_score      # 0.76
   assessment.risk_level      # 'high'

:func:`assess` is a pure function of its input.
"""

from typing import Any, Dict, List, Mapping, NamedTuple, Tuple

from .domain import FactorDetail, RiskAssessment, RiskFactorSet
from .errors import ValidationFailed


class Weight(NamedTuple):
    score: float
    description: str


RISK_FACTORS: Dict[str, Dict[str, Weight]] = {
    'case_complexity': {
        'low': Weight(0.2, 'Straightforward case with clear precedents'),
        'medium': Weight(0.5, 'Moderate complexity with some challenging'
                              ' aspects'),
        'high': Weight(0.8, 'Complex case with multiple legal issues'),
    },
    'evidence_strength': {
        'strong': Weight(0.1, 'Strong evidence supporting your position'),
        'moderate': Weight(0.4, 'Adequate evidence with some gaps'),
        'weak': Weight(0.7, 'Limited or weak evidence'),
    },
    'opponent_resources': {
        'limited': Weight(0.2, 'Opponent has limited legal resources'),
        'moderate': Weight(0.4, 'Opponent has adequate legal representation'),
        'extensive': Weight(0.7, 'Opponent has extensive legal resources'),
    },
    'time_constraints': {
        'adequate': Weight(0.1, 'Sufficient time to prepare case'),
        'tight': Weight(0.4, 'Limited time for case preparation'),
        'urgent': Weight(0.8, 'Very tight deadlines and time pressure'),
    },
    'financial_impact': {
        'low': Weight(0.2, 'Low financial stakes'),
        'medium': Weight(0.5, 'Moderate financial implications'),
        'high': Weight(0.8, 'High financial stakes involved'),
    },
}
"""Severity weight and rationale for each (factor, label) pair."""

REQUIRED_FACTORS: Tuple[str, ...] = tuple(RISK_FACTORS)

HIGH_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.4
ESCALATION_THRESHOLD = 0.6

ESCALATION = [
    'Consider seeking experienced legal counsel',
    'Develop a comprehensive case strategy',
    'Allocate additional resources for case preparation',
]
EVIDENCE = [
    'Focus on gathering additional evidence',
    'Consider expert witnesses or testimony',
]
DEADLINES = [
    'Prioritize critical deadlines',
    'Consider requesting extensions where possible',
]
PREPARATION = [
    'Prepare for well-funded opposition',
    'Focus on strong legal arguments and precedents',
]

LEVEL_COLORS = {'low': 'green', 'medium': 'yellow', 'high': 'red'}

ADDITIONAL_FACTOR_OPTIONS = [
    'Statute of limitations concerns',
    'Jurisdictional issues',
    'Precedent availability',
    'Public interest impact',
    'Media attention potential',
    'Settlement likelihood',
    'Appeal probability',
    'Enforcement challenges',
]


def validate(factors: Any, strict: bool = False) -> None:
    """
    Check that ``factors`` names a known label for every required factor.

    Parameters
    ----------
    factors : dict
        Factor key to severity label.
    strict : bool
        If ``True``, keys that are not in :data:`RISK_FACTORS` are errors too.

    Raises
    ------
    :class:`.ValidationFailed`

    """
    if not isinstance(factors, Mapping):
        raise ValidationFailed([{'field': 'factors',
                                 'message': 'Risk factors are required'}])
    errors = []
    for key in REQUIRED_FACTORS:
        value = factors.get(key)
        if not isinstance(value, str) or value not in RISK_FACTORS[key]:
            allowed = ', '.join(RISK_FACTORS[key])
            errors.append({'field': f'factors.{key}',
                           'message': f'Must be one of: {allowed}'})
    if strict:
        for key in factors:
            if key not in RISK_FACTORS:
                errors.append({'field': f'factors.{key}',
                               'message': 'Unrecognized risk factor'})
    if errors:
        raise ValidationFailed(errors)


def risk_level(score: float) -> str:
    if score >= HIGH_THRESHOLD:
        return 'high'
    if score >= MEDIUM_THRESHOLD:
        return 'medium'
    return 'low'


def recommend(score: float, factors: Mapping[str, str]) -> List[str]:
    """Collect the recommendations of every rule that applies."""
    recommendations: List[str] = []
    if score >= ESCALATION_THRESHOLD:
        recommendations.extend(ESCALATION)
    if factors.get('evidence_strength') == 'weak':
        recommendations.extend(EVIDENCE)
    if factors.get('time_constraints') == 'urgent':
        recommendations.extend(DEADLINES)
    if factors.get('opponent_resources') == 'extensive':
        recommendations.extend(PREPARATION)
    return recommendations


def assess(factor_set: RiskFactorSet, strict: bool = False) -> RiskAssessment:
    """
    Score a :class:`.RiskFactorSet`.

    Only (factor, label) pairs found in :data:`RISK_FACTORS` contribute to the
    score; anything else is skipped unless ``strict`` is set.

    Parameters
    ----------
    factor_set : :class:`.RiskFactorSet`
    strict : bool
        Reject unrecognized factor keys rather than skipping them.

    Returns
    -------
    :class:`.RiskAssessment`

    Raises
    ------
    :class:`.ValidationFailed`
        If a required factor is missing or has an unknown label.

    """
    factors = factor_set.factors
    validate(factors, strict=strict)

    details: Dict[str, FactorDetail] = {}
    for key, value in factors.items():
        if not isinstance(value, str):
            continue
        weight = RISK_FACTORS.get(key, {}).get(value)
        if weight is None:
            continue
        details[key] = FactorDetail(value=value, score=weight.score,
                                    description=weight.description)

    total = sum(detail.score for detail in details.values())
    average = total / len(details) if details else 0.0
    score = round(average, 2)
    return RiskAssessment(
        risk_score=score,
        risk_level=risk_level(average),
        factors=details,
        recommendations=recommend(average, factors)
    )


def template() -> Dict[str, Any]:
    """Describe the factors and options a client can submit."""
    return {
        'factors': [
            {
                'id': key,
                'name': key.replace('_', ' ').title(),
                'options': [
                    {
                        'value': label,
                        'label': label.capitalize(),
                        'description': weight.description,
                        'score': weight.score,
                    } for label, weight in options.items()
                ]
            } for key, options in RISK_FACTORS.items()
        ],
        'additionalFactorOptions': list(ADDITIONAL_FACTOR_OPTIONS),
    }
