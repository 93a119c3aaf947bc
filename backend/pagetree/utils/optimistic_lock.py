from datetime import timezone

from dateutil.parser import ParserError, parse
from flask import request

from pagetree.domain.invariants.exceptions import ConflictError, ValidationError


def as_utc(ts):
    """Stored timestamps are naive UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def enforce_optimistic_lock(page):
    """
    Refuse to overwrite a page edited after the client loaded it.

    The client sends the page's updated_at back as If-Unmodified-Since;
    without the header nothing is checked.
    """
    header = request.headers.get("If-Unmodified-Since")
    if not header:
        return

    try:
        client_ts = as_utc(parse(header))
    except (ParserError, ValueError, OverflowError):
        raise ValidationError("Invalid If-Unmodified-Since header")

    if page.updated_at and as_utc(page.updated_at) > client_ts:
        raise ConflictError(f"Page {page.id} has been modified by someone else")
