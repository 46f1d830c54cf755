"""Parsing for the ``Retry-After`` response header."""

from __future__ import annotations

import email.utils
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

_SECONDS_RE = re.compile(r"^\d+(?:\.\d+)?$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_retry_after(
    value: Optional[str],
    *,
    clock: Callable[[], datetime] = utcnow,
) -> Optional[float]:
    """Return the wait in seconds requested by a ``Retry-After`` value.

    Two formats are accepted, tried in order::

        Retry-After: 120
        Retry-After: Fri, 31 Dec 1999 23:59:59 GMT

    ``None`` means "no hint": the header is absent or empty, the date is not
    in the future, or the value is not recognized. A malformed header never
    raises.
    """

    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    if _SECONDS_RE.match(value):
        return float(value)

    try:
        target = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        LOGGER.debug("Ignoring unparsable Retry-After value %r", value)
        return None
    if target is None:
        return None
    if target.tzinfo is None:
        target = target.replace(tzinfo=timezone.utc)

    now = clock()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if target <= now:
        return None
    return (target - now).total_seconds()


__all__ = ["parse_retry_after", "utcnow"]
