# domain/history.py
from __future__ import annotations

from collections import deque
from typing import Any, Deque, Iterator, List, Optional

HISTORY_CAPACITY = 10

# names under which the history is visible to expressions
CURRENT_VALUE_REF = "$"
HISTORY_REF = "$history"


class ValueHistory:
    """
    Newest-first buffer of the values produced by a run.
    Pushing beyond capacity silently drops the oldest entry.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("history capacity must be positive")
        self._values: Deque[Any] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen or 0

    def push(self, value: Any) -> None:
        self._values.appendleft(value)

    def newest(self) -> Optional[Any]:
        return self._values[0] if self._values else None

    def as_list(self) -> List[Any]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __bool__(self) -> bool:
        return bool(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __getitem__(self, index: int) -> Any:
        return self._values[index]
