"""
Typed failures for the articles feature.

Routers translate these into HTTP status codes; nothing here is recovered
locally.
"""

from __future__ import annotations


class ArticlesError(RuntimeError):
    pass


class MalformedCursor(ArticlesError, ValueError):
    """The token is not a structurally valid pagination cursor."""


class InvalidCursor(ArticlesError):
    """The `after` argument of a page request could not be decoded."""


class StoreUnavailable(ArticlesError):
    """The database could not be reached (no pool, refused/lost connection, timeout)."""


class StoreQueryFailed(ArticlesError):
    """The database rejected or failed a statement."""


class ValidationFailed(ArticlesError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
