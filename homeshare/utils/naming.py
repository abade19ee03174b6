"""Storage name derivation for uploaded files."""

import re
import threading
import time
from typing import Optional

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_STORAGE_NAME = re.compile(r"^(\d+)-(.*)$", re.DOTALL)

FALLBACK_NAME = "unnamed"


def sanitize_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with an underscore."""
    sanitized = _UNSAFE_CHARS.sub("_", name or "")
    return sanitized or FALLBACK_NAME


def build_storage_name(millis: int, original_name: str) -> str:
    return f"{millis}-{sanitize_name(original_name)}"


def split_storage_name(storage_name: str) -> tuple[Optional[int], str]:
    """Split a storage name into (timestamp, original name).

    Names that were not produced by the upload pipeline (no numeric
    prefix) are returned whole with a timestamp of None.
    """
    match = _STORAGE_NAME.match(storage_name)
    if not match or not match.group(2):
        return None, storage_name
    return int(match.group(1)), match.group(2)


def original_name_from_storage(storage_name: str) -> str:
    return split_storage_name(storage_name)[1]


class TimestampAllocator:
    """Hands out strictly increasing millisecond timestamps.

    Two uploads in the same millisecond get consecutive values, so the
    storage name stays unique without altering the original-name part.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        now = int(self._clock() * 1000)
        with self._lock:
            self._last = max(now, self._last + 1)
            return self._last
