"""
Opaque pagination cursors.

Cursor format: urlsafe-base64("<article id>:<unix seconds>")

The token is obfuscated, not signed: clients cannot casually edit the fields,
but nothing stops a determined client from forging one. Only the second is
kept, so two articles created within the same second are told apart by id.
"""

from __future__ import annotations

import base64
import binascii
import math
import re
from datetime import datetime, timezone

from .errors import MalformedCursor

_SEPARATOR = ":"
_INT_RE = re.compile(r"-?[0-9]{1,19}")

# Article ids are Postgres BIGINT.
ID_MIN = -(2**63)
ID_MAX = 2**63 - 1


def _epoch_seconds(created_at: datetime) -> int:
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return math.floor(created_at.timestamp())


def encode_cursor(article_id: int, created_at: datetime) -> str:
    raw = f"{int(article_id)}{_SEPARATOR}{_epoch_seconds(created_at)}"
    return base64.urlsafe_b64encode(raw.encode("ascii")).decode("ascii")


def _parse_int(field: str, name: str) -> int:
    if not _INT_RE.fullmatch(field):
        raise MalformedCursor(f"Cursor {name} is not an integer.")
    try:
        return int(field)
    except ValueError as e:
        raise MalformedCursor(f"Cursor {name} is not an integer.") from e


def decode_cursor(token: str | bytes) -> tuple[int, datetime]:
    """
    Decode a cursor into (article id, created_at truncated to the second, UTC).

    Raises MalformedCursor for anything encode_cursor could not have produced.
    """
    try:
        raw_token = token.encode("ascii") if isinstance(token, str) else bytes(token)
        decoded = base64.b64decode(raw_token, altchars=b"-_", validate=True)
        payload = decoded.decode("ascii")
    except (TypeError, UnicodeError, binascii.Error) as e:
        raise MalformedCursor("Cursor is not valid base64.") from e

    parts = payload.split(_SEPARATOR)
    if len(parts) != 2:
        raise MalformedCursor("Cursor must contain exactly two fields.")

    article_id = _parse_int(parts[0], "id")
    if not ID_MIN <= article_id <= ID_MAX:
        raise MalformedCursor("Cursor id is out of range.")
    seconds = _parse_int(parts[1], "timestamp")
    try:
        created_at = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedCursor("Cursor timestamp is out of range.") from e

    return article_id, created_at
