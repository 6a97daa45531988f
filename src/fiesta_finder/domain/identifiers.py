"""Slug identifiers for festivals and pending submissions."""

import re
import threading
import time
from collections.abc import Callable

DEFAULT_BASE = "festival"

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def make_id(name: str) -> str:
    """Derive a stable slug from a display name."""
    slug = _DISALLOWED.sub("", (name or "").lower()).strip()
    slug = _WHITESPACE.sub("-", slug)
    return _HYPHENS.sub("-", slug)


class _MonotonicMillis:
    """Millisecond clock that never repeats a value."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            now = int(self._clock() * 1000)
            self._last = max(now, self._last + 1)
            return self._last


_submission_tokens = _MonotonicMillis()


def make_submission_id(name: str) -> str:
    """Derive a unique submission id: the slug plus a millisecond token."""
    base = make_id(name) or DEFAULT_BASE
    return f"{base}-{_submission_tokens.next()}"
