"""Clock abstraction so report timestamps can be pinned in tests."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Return the current time in epoch milliseconds."""


class SystemClock:
    """Wall clock backed by :func:`time.time`."""

    def now(self) -> int:
        return int(time.time() * 1000)
