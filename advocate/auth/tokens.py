"""Functions for working with access tokens on user requests."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from pytz import UTC
import jwt

from . import exceptions

ALGORITHM = 'HS256'


def encode(user_id: str, secret: str, expires_in: int,
           now: Optional[datetime] = None) -> str:
    """
    Issue a signed access token for a user.

    Parameters
    ----------
    user_id : str
    secret : str
        Shared secret used to sign the token.
    expires_in : int
        Lifetime of the token, in seconds.
    now : :class:`datetime`
        Issue time; defaults to the current time.

    Returns
    -------
    str

    """
    if now is None:
        now = datetime.now(tz=UTC)
    claims = {
        'user_id': str(user_id),
        'iat': now,
        'exp': now + timedelta(seconds=expires_in)
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode(token: str, secret: str) -> Dict[str, Any]:
    """
    Verify an access token and get its claims.

    Raises
    ------
    :class:`.exceptions.ExpiredToken`
        The signature is fine but the token has expired.
    :class:`.exceptions.InvalidToken`
        The token is malformed, forged, or has no ``user_id`` claim.

    """
    try:
        claims: Dict[str, Any] = jwt.decode(token, secret,
                                            algorithms=[ALGORITHM],
                                            options={'require': ['exp']})
    except jwt.exceptions.ExpiredSignatureError as e:
        raise exceptions.ExpiredToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise exceptions.InvalidToken('Not a valid token') from e
    if not claims.get('user_id'):
        raise exceptions.InvalidToken('Token payload malformed')
    return claims


def from_header(header: Optional[str]) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises
    ------
    :class:`.exceptions.MissingToken`

    """
    if not header:
        raise exceptions.MissingToken('No Authorization header')
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise exceptions.MissingToken('Authorization header is malformed')
    return parts[1]
