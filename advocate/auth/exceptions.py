"""Exceptions raised while working with access tokens."""


class InvalidToken(ValueError):
    """Token is malformed, has a bad signature, or lacks required claims."""


class ExpiredToken(InvalidToken):
    """Token was valid, but its expiry has passed."""


class MissingToken(ValueError):
    """No bearer token was found on the request."""


class ConfigurationError(RuntimeError):
    """A required auth configuration parameter is missing."""
