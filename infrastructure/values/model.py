# infrastructure/values/model.py
"""
Immutable values of the expression language.

    _                    Top      (anything)
    "a" 1 2.5 true null  Atom     (concrete scalar)
    int string number    Kind
    >0 <=5 != 3 =~ "re"  Bound
    int & >0             Conjunction of constraints
    "a" | "b"            Disjunction
    {a: 1}               Struct   (open: unifies field-wise)
    [1, 2] [1, ...int]   ListValue
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

KIND_NAMES = ("int", "float", "number", "string", "bool", "null")
NUMERIC_KINDS = ("int", "float")


def kind_of(value: Any) -> str:
    # bool first: True is an int for Python
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    raise TypeError(f"unsupported scalar {value!r}")


def kind_accepts(kind: str, atom_kind: str) -> bool:
    if kind == "number":
        return atom_kind in NUMERIC_KINDS
    return kind == atom_kind


class Value:
    """Marker base of every expression value."""

    @property
    def concrete(self) -> bool:
        return False


@dataclass(frozen=True)
class Top(Value):
    pass


TOP = Top()


@dataclass(frozen=True)
class Atom(Value):
    kind: str
    value: Any

    @classmethod
    def of(cls, value: Any) -> "Atom":
        return cls(kind_of(value), value)

    @property
    def concrete(self) -> bool:
        return True

    @property
    def is_number(self) -> bool:
        return self.kind in NUMERIC_KINDS


@dataclass(frozen=True)
class Kind(Value):
    name: str


@dataclass(frozen=True)
class Bound(Value):
    op: str  # one of < <= > >= != =~ !~
    limit: Atom


@dataclass(frozen=True)
class Conjunction(Value):
    parts: Tuple[Value, ...]


@dataclass(frozen=True)
class Disjunction(Value):
    options: Tuple[Value, ...]


@dataclass(frozen=True)
class Struct(Value):
    fields: Tuple[Tuple[str, Value], ...] = ()

    def get(self, name: str) -> Optional[Value]:
        for k, v in self.fields:
            if k == name:
                return v
        return None

    def as_dict(self) -> Dict[str, Value]:
        return dict(self.fields)

    @property
    def concrete(self) -> bool:
        return all(v.concrete for _, v in self.fields)


@dataclass(frozen=True)
class ListValue(Value):
    items: Tuple[Value, ...] = ()
    tail: Optional[Value] = None  # None: closed list; otherwise type of extra items

    @property
    def open(self) -> bool:
        return self.tail is not None

    @property
    def concrete(self) -> bool:
        return not self.open and all(v.concrete for v in self.items)


def to_python(value: Value) -> Any:
    """
    Plain data for a concrete value. Raises ValueError when the value is
    not concrete.
    """
    if isinstance(value, Atom):
        return value.value
    if isinstance(value, Struct):
        return {k: to_python(v) for k, v in value.fields}
    if isinstance(value, ListValue) and not value.open:
        return [to_python(v) for v in value.items]
    raise ValueError(f"value is not concrete: {type(value).__name__}")
