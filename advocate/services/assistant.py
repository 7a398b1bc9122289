"""
Canned legal assistant.

Stands in for a language-model integration: picks a reply by keyword and
reports plausible usage metadata. Callers must be prepared for
:class:`AssistantUnavailable`, which a real backend raises when the upstream
service fails.
"""

import random
from typing import Any, Dict, List, NamedTuple, Optional

PREAMBLE = ("I understand your question. As an AI legal advocate, I'm here "
            "to help you with your legal matters. ")

REPLIES = (
    ('contract', "Regarding contracts, it's important to carefully review "
                 "all terms and conditions. Consider having a legal "
                 "professional review any significant agreements."),
    ('case', "For case-related matters, I recommend organizing all relevant "
             "documents and maintaining detailed records of all "
             "communications and deadlines."),
    ('legal', "Legal matters can be complex. I suggest consulting with a "
              "qualified attorney for specific legal advice tailored to your "
              "situation."),
)
FALLBACK = ("Could you provide more specific details about your legal "
            "question so I can better assist you?")

DEFAULT_MODEL = 'gpt-4'
DEFAULT_TEMPERATURE = 0.7


class AssistantUnavailable(IOError):
    """The assistant could not produce a reply."""


class Reply(NamedTuple):
    content: str
    metadata: Dict[str, Any]


def generate(messages: List[Dict[str, Any]],
             settings: Optional[Dict[str, Any]] = None) -> Reply:
    """
    Reply to the last message in ``messages``.

    Raises
    ------
    :class:`AssistantUnavailable`

    """
    if not messages:
        raise AssistantUnavailable('Nothing to reply to')
    settings = settings or {}
    text = str(messages[-1].get('content', '')).lower()
    for keyword, reply in REPLIES:
        if keyword in text:
            break
    else:
        reply = FALLBACK
    temperature = settings.get('temperature')
    if temperature is None:
        temperature = DEFAULT_TEMPERATURE
    return Reply(content=PREAMBLE + reply, metadata={
        'tokens': random.randint(50, 149),
        'model': settings.get('aiModel') or DEFAULT_MODEL,
        'temperature': temperature,
        'processingTime': random.randint(500, 2499),
        'confidence': 0.85
    })
