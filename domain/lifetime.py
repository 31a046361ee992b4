# domain/lifetime.py
from __future__ import annotations

import threading
import time
from typing import Optional

from domain.errors import CancelledError


class Lifetime:
    """
    Cancellable lifetime of one run, with an optional deadline.
    Blocking operations (HTTP calls) read remaining() as their timeout and
    poll check() while they wait, so cancel() unblocks them.
    """

    def __init__(self, timeout_sec: Optional[float] = None):
        self._cancelled = threading.Event()
        self._reason = ""
        self._deadline: Optional[float] = None
        if timeout_sec is not None:
            self._deadline = time.monotonic() + timeout_sec

    @classmethod
    def background(cls) -> "Lifetime":
        return cls()

    def cancel(self, reason: str = "run cancelled") -> None:
        self._reason = reason
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        if self._cancelled.is_set():
            raise CancelledError(self._reason)
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise CancelledError("deadline exceeded")
