"""Errors raised by music sources."""


class SourceError(Exception):
    """A remote lookup failed (network, bad status, unparseable response)."""


class AuthenticationError(SourceError):
    """Credentials are missing or were rejected by the catalog."""
