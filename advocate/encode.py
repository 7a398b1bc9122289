"""JSON serialization for API responses."""

from datetime import date, datetime
from enum import Enum
from typing import Any

from flask.json.provider import DefaultJSONProvider


class ISO8601JSONProvider(DefaultJSONProvider):
    """Renders datetimes as ISO-8601 strings and enums by value."""

    sort_keys = False

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        return DefaultJSONProvider.default(o)
