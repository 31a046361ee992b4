# application/ports/value_engine.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

# Value handles are opaque to the core: only the engine creates,
# combines and prints them.
Value = Any


class ValueEnginePort(ABC):
    @abstractmethod
    def compile(self, text: str, scope: Mapping[str, Value], filename: Optional[str] = None) -> Value:
        """
        Compile an expression. Names in scope are visible as references.
        Raises CompileError.
        """
        ...

    @abstractmethod
    def unify(self, a: Value, b: Value) -> Value:
        """
        Structural merge of two values. Raises ConflictError listing
        every conflicting path.
        """
        ...

    @abstractmethod
    def encode(self, data: Any) -> Value:
        """
        Encode plain host data (dict / list / str / int / float / bool / None).
        Raises EncodeError.
        """
        ...

    @abstractmethod
    def stringify(self, value: Value) -> str:
        ...

    @abstractmethod
    def top(self) -> Value:
        """The unconstrained value; unifying with it is a no-op."""
        ...
