"""
Communication templates, tips, practice scenarios and text analysis.

Everything here is static data or a pure function of its arguments; nothing
is stored.
"""

import math
import re
from typing import Any, Dict, List, Optional, Sequence

TEMPLATE_TYPES = ('email', 'letter', 'court')
TONES = ('professional', 'formal', 'assertive', 'empathetic')
ANALYSIS_TYPES = ('email', 'letter', 'court', 'general')
AUDIENCES = ('client', 'opposing-counsel', 'court', 'colleague', 'general')
TIP_CATEGORIES = ('tone', 'structure', 'language')
DIFFICULTIES = ('beginner', 'intermediate', 'advanced')
SCENARIO_TYPES = ('negotiation', 'client-meeting', 'court-appearance',
                  'mediation')
GENERATED_TYPES = ('email', 'letter', 'memo', 'brief')
GENERATION_AUDIENCES = ('client', 'opposing-counsel', 'court', 'colleague')

WORDS_PER_MINUTE = 200

TEMPLATES: Dict[str, List[Dict[str, str]]] = {
    'email': [
        {
            'id': 'client-update',
            'title': 'Client Case Update',
            'category': 'client-communication',
            'tone': 'professional',
            'template': (
                'Dear [Client Name],\n\n'
                'I hope this email finds you well. I wanted to provide you'
                ' with an update on your case regarding [Case Matter].\n\n'
                '[Update Content]\n\n'
                'Next Steps:\n'
                '- [Action Item 1]\n'
                '- [Action Item 2]\n\n'
                "Please don't hesitate to contact me if you have any"
                ' questions or concerns.\n\n'
                'Best regards,\n'
                '[Your Name]'
            ),
        },
        {
            'id': 'opposing-counsel',
            'title': 'Letter to Opposing Counsel',
            'category': 'professional-correspondence',
            'tone': 'formal',
            'template': (
                'Dear [Attorney Name],\n\n'
                'I am writing regarding [Case/Matter Reference].\n\n'
                '[Main Content]\n\n'
                'I look forward to your prompt response.\n\n'
                'Sincerely,\n'
                '[Your Name]\n'
                '[Title]\n'
                '[Law Firm]'
            ),
        },
    ],
    'letter': [
        {
            'id': 'demand-letter',
            'title': 'Demand Letter Template',
            'category': 'legal-demand',
            'tone': 'assertive',
            'template': (
                '[Date]\n\n'
                '[Recipient Name]\n'
                '[Address]\n\n'
                'Re: [Subject Matter]\n\n'
                'Dear [Recipient Name],\n\n'
                'This letter serves as formal notice that'
                ' [Demand Statement].\n\n'
                '[Supporting Facts and Legal Basis]\n\n'
                'DEMAND: [Specific Demand]\n\n'
                'You have [Time Period] from the date of this letter to'
                ' [Required Action]. Failure to comply will result in'
                ' [Consequences].\n\n'
                'Sincerely,\n'
                '[Your Name]'
            ),
        },
    ],
    'court': [
        {
            'id': 'motion-brief',
            'title': 'Motion Brief Template',
            'category': 'court-filing',
            'tone': 'formal',
            'template': (
                '[Court Header]\n\n'
                'MOTION FOR [Relief Sought]\n\n'
                'TO THE HONORABLE COURT:\n\n'
                '[Party] respectfully moves this Court for [Relief] and'
                ' states as follows:\n\n'
                'I. INTRODUCTION\n[Brief overview]\n\n'
                'II. STATEMENT OF FACTS\n[Relevant facts]\n\n'
                'III. LEGAL ARGUMENT\n[Legal basis]\n\n'
                'IV. CONCLUSION\n'
                'For the foregoing reasons, [Party] respectfully requests'
                ' that this Court [Specific Relief].\n\n'
                'Respectfully submitted,\n'
                '[Attorney Name]'
            ),
        },
    ],
}

TIPS: Dict[str, Any] = {
    'tone': {
        'professional': [
            'Use clear, concise language',
            'Maintain formal structure',
            'Be respectful and courteous',
            'Avoid emotional language',
        ],
        'assertive': [
            'State your position clearly',
            'Use active voice',
            'Be direct but not aggressive',
            'Support claims with facts',
        ],
        'empathetic': [
            "Acknowledge the recipient's concerns",
            'Use understanding language',
            'Show genuine care',
            'Offer support and solutions',
        ],
    },
    'structure': [
        'Start with a clear subject line',
        'Open with appropriate greeting',
        'State purpose in first paragraph',
        'Organize content logically',
        'Close with clear next steps',
        'Use professional signature',
    ],
    'language': [
        'Use plain English when possible',
        'Define legal terms if necessary',
        'Be specific and concrete',
        'Avoid redundancy',
        'Proofread carefully',
    ],
}

SCENARIOS: List[Dict[str, Any]] = [
    {
        'id': 'client-difficult-news',
        'title': 'Delivering Difficult News to Client',
        'type': 'client-meeting',
        'difficulty': 'intermediate',
        'description': 'Practice delivering unfavorable case developments to'
                       ' a client',
        'situation': "Your client's case has taken an unexpected turn. Key"
                     ' evidence has been ruled inadmissible.',
        'objectives': [
            'Deliver the news clearly and professionally',
            'Maintain client confidence',
            'Explain next steps',
            'Address client concerns',
        ],
        'tips': [
            'Be direct but empathetic',
            'Focus on solutions, not just problems',
            'Allow time for questions',
            'Reassure about your commitment',
        ],
    },
    {
        'id': 'opposing-counsel-negotiation',
        'title': 'Settlement Negotiation',
        'type': 'negotiation',
        'difficulty': 'advanced',
        'description': 'Navigate a complex settlement negotiation with'
                       ' opposing counsel',
        'situation': "You're negotiating a settlement in a personal injury"
                     ' case. The opposing party has made an initial offer.',
        'objectives': [
            "Present your client's position effectively",
            'Counter offer strategically',
            'Identify areas of compromise',
            'Maintain professional relationships',
        ],
        'tips': [
            'Prepare your BATNA (Best Alternative to Negotiated Agreement)',
            'Listen actively to understand interests',
            'Use objective criteria',
            'Separate people from positions',
        ],
    },
    {
        'id': 'court-oral-argument',
        'title': 'Oral Argument Preparation',
        'type': 'court-appearance',
        'difficulty': 'advanced',
        'description': 'Prepare for and practice oral arguments before the'
                       ' court',
        'situation': "You're arguing a motion for summary judgment. The"
                     ' judge has specific concerns about your case.',
        'objectives': [
            'Present legal arguments clearly',
            "Address judge's questions directly",
            'Distinguish unfavorable precedents',
            'Maintain composure under pressure',
        ],
        'tips': [
            'Know your case inside and out',
            'Anticipate difficult questions',
            'Practice with colleagues',
            'Prepare concise answers',
        ],
    },
]

POSITIVE_WORDS = frozenset(('pleased', 'happy', 'excellent', 'great',
                            'wonderful', 'appreciate', 'thank'))
NEGATIVE_WORDS = frozenset(('unfortunately', 'regret', 'sorry',
                            'disappointed', 'concerned', 'issue', 'problem'))
FORMAL_WORDS = frozenset(('pursuant', 'therefore', 'hereby', 'whereas',
                          'aforementioned', 'heretofore'))

GENERATION_SUGGESTIONS = [
    'Customize the recipient information',
    'Review for tone consistency',
    'Add specific dates and deadlines',
    'Proofread before sending',
]

_SENTENCE_END = re.compile(r'[.!?]+')
_PARAGRAPH_BREAK = re.compile(r'\n\s*\n')
_VOWEL_RUN = re.compile(r'[aeiouy]+', re.IGNORECASE)
_CLOSING = re.compile(r'Best regards|Sincerely|Thank you', re.IGNORECASE)


def _round(value: float) -> int:
    """Round halves up."""
    return int(math.floor(value + 0.5))


def list_templates(kind: str = 'all', category: Optional[str] = None,
                   tone: Optional[str] = None) -> List[Dict[str, str]]:
    if kind == 'all':
        found = [t for group in TEMPLATES.values() for t in group]
    else:
        found = list(TEMPLATES.get(kind, []))
    if category:
        found = [t for t in found if t['category'] == category]
    if tone:
        found = [t for t in found if t['tone'] == tone]
    return found


def get_template(template_id: str) -> Optional[Dict[str, str]]:
    for group in TEMPLATES.values():
        for template in group:
            if template['id'] == template_id:
                return template
    return None


def tips(category: str = 'all') -> Dict[str, Any]:
    if category == 'all':
        return dict(TIPS)
    if category in TIPS:
        return {category: TIPS[category]}
    return {}


def scenarios(difficulty: Optional[str] = 'intermediate',
              kind: Optional[str] = None) -> List[Dict[str, Any]]:
    """Practice scenarios; only intermediate ones unless told otherwise."""
    found = SCENARIOS
    if difficulty:
        found = [s for s in found if s['difficulty'] == difficulty]
    if kind:
        found = [s for s in found if s['type'] == kind]
    return list(found)


def _sentences(text: str) -> int:
    return len([s for s in _SENTENCE_END.split(text) if s.strip()])


def readability(text: str) -> int:
    """
    Approximate the Flesch reading ease of ``text``, clamped to 0-100.

    Syllables are estimated as runs of vowels.
    """
    words = len(text.split())
    sentences = _sentences(text)
    if not words or not sentences:
        return 0
    syllables = len(_VOWEL_RUN.split(text)) - 1
    score = 206.835 - 1.015 * (words / sentences) \
        - 84.6 * (syllables / words)
    return max(0, min(100, _round(score)))


def tone(text: str) -> Dict[str, Any]:
    """Count tone markers among the words of ``text``."""
    words = text.lower().split()
    positive = sum(1 for word in words if word in POSITIVE_WORDS)
    negative = sum(1 for word in words if word in NEGATIVE_WORDS)
    formal = sum(1 for word in words if word in FORMAL_WORDS)
    overall = 'neutral'
    if positive > negative:
        overall = 'positive'
    elif negative > positive:
        overall = 'negative'
    return {
        'tone': overall,
        'formality': 'formal' if formal > 2 else 'informal',
        'positiveCount': positive,
        'negativeCount': negative,
        'formalCount': formal,
    }


def suggestions(text: str, kind: str, audience: str) -> List[str]:
    found = []
    if len(text) < 50:
        found.append('Consider expanding your message for better clarity')
    if '!!!' in text or '???' in text:
        found.append('Use single punctuation marks for professional'
                     ' communication')
    if audience == 'client' and any(len(w) > 12 for w in text.split(' ')):
        found.append('Consider using simpler language when communicating'
                     ' with clients')
    if kind == 'court' and 'Respectfully' not in text:
        found.append('Court communications should include respectful'
                     ' language')
    return found


def strengths(text: str) -> List[str]:
    found = []
    if 'Thank you' in text or 'Please' in text:
        found.append('Polite and courteous tone')
    if re.search(r'\d+', text):
        found.append('Includes specific details and numbers')
    if 'Next steps' in text or 'Action' in text:
        found.append('Provides clear action items')
    return found


def improvements(text: str) -> List[str]:
    found = []
    if '?' not in text:
        found.append('Consider asking questions to encourage engagement')
    if len(text.split('\n')) < 3:
        found.append('Break content into paragraphs for better readability')
    if not _CLOSING.search(text):
        found.append('Add a professional closing')
    return found


def analyze(text: str, kind: str = 'general',
            audience: str = 'general') -> Dict[str, Any]:
    """Measure a draft and suggest how to improve it."""
    return {
        'wordCount': len(text.split()),
        'characterCount': len(text),
        'sentenceCount': _sentences(text),
        'paragraphCount': len(_PARAGRAPH_BREAK.split(text)),
        'readabilityScore': readability(text),
        'toneAnalysis': tone(text),
        'suggestions': suggestions(text, kind, audience),
        'strengths': strengths(text),
        'improvements': improvements(text),
    }


def _email(purpose: str, key_points: Sequence[str], context: str) -> str:
    body = ''
    if context:
        body += f'Background: {context}\n\n'
    if key_points:
        body += 'Key Points:\n' \
            + '\n'.join(f'• {point}' for point in key_points) + '\n\n'
    return (f'Subject: {purpose}\n\n'
            'Dear [Recipient Name],\n\n'
            'I hope this email finds you well. I am writing to'
            f' {purpose.lower()}.\n\n'
            f'{body}'
            'Please let me know if you have any questions or need'
            ' additional information.\n\n'
            'Best regards,\n'
            '[Your Name]')


def _letter(purpose: str, key_points: Sequence[str], context: str) -> str:
    body = ''
    if context:
        body += f'{context}\n\n'
    if key_points:
        body += '\n\n'.join(key_points) + '\n\n'
    return ('[Date]\n\n'
            '[Recipient Name]\n'
            '[Address]\n\n'
            f'Re: {purpose}\n\n'
            'Dear [Recipient Name],\n\n'
            f'{body}'
            'I look forward to your response.\n\n'
            'Sincerely,\n'
            '[Your Name]')


def _memo(purpose: str, key_points: Sequence[str], context: str) -> str:
    body = ''
    if context:
        body += f'BACKGROUND\n{context}\n\n'
    if key_points:
        body += 'DISCUSSION\n' \
            + '\n'.join(f'{i}. {point}'
                        for i, point in enumerate(key_points, 1)) + '\n\n'
    return ('MEMORANDUM\n\n'
            'TO: [Recipient Name]\n'
            'FROM: [Your Name]\n'
            'DATE: [Date]\n'
            f'RE: {purpose}\n\n'
            f'{body}'
            'Please contact me with any questions.')


def _brief(purpose: str, key_points: Sequence[str], context: str) -> str:
    body = ''
    if context:
        body += f'STATEMENT OF FACTS\n{context}\n\n'
    if key_points:
        body += 'ARGUMENT\n' \
            + '\n\n'.join(f'{i}. {point}'
                          for i, point in enumerate(key_points, 1)) + '\n\n'
    return ('[Court Header]\n\n'
            f'BRIEF REGARDING {purpose.upper()}\n\n'
            'TO THE HONORABLE COURT:\n\n'
            f'{body}'
            'For the foregoing reasons, [Party] respectfully requests that'
            ' this Court grant the relief sought.\n\n'
            'Respectfully submitted,\n'
            '[Attorney Name]')


_WRITERS = {'email': _email, 'letter': _letter, 'memo': _memo,
            'brief': _brief}


def generate(kind: str, purpose: str, key_points: Sequence[str] = (),
             context: str = '') -> Dict[str, Any]:
    """Draft a communication of the given kind with placeholders to fill."""
    template = _WRITERS[kind](purpose, [str(p) for p in key_points],
                              context)
    words = len(template.split())
    return {
        'template': template,
        'wordCount': words,
        'estimatedReadTime': math.ceil(words / WORDS_PER_MINUTE),
        'suggestions': list(GENERATION_SUGGESTIONS),
    }
