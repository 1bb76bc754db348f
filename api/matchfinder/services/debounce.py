from __future__ import annotations

import time
from typing import Callable

from ..config import SEARCH_DEBOUNCE_MS


class SearchDebouncer:
    """Holds typed search text until it has been stable for `delay` seconds.

    Every keystroke restarts the window. Nothing blocks: callers poll
    `settled()` when they are about to recompute.
    """

    def __init__(self, delay: float = SEARCH_DEBOUNCE_MS / 1000.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.delay = delay
        self._clock = clock
        self._committed = ""
        self._pending: str | None = None
        self._deadline = 0.0

    def type(self, text: str) -> None:
        self._pending = text
        self._deadline = self._clock() + self.delay

    def settled(self) -> str:
        if self._pending is not None and self._clock() >= self._deadline:
            self._committed = self._pending
            self._pending = None
        return self._committed

    def flush(self) -> str:
        if self._pending is not None:
            self._committed = self._pending
            self._pending = None
        return self._committed

    @property
    def is_pending(self) -> bool:
        return self._pending is not None
