# infrastructure/values/engine.py
from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from application.ports.value_engine import ValueEnginePort
from domain.errors import EncodeError
from infrastructure.values.compiler import compile_expression
from infrastructure.values.model import TOP, Atom, ListValue, Struct, Value
from infrastructure.values.printer import stringify
from infrastructure.values.unify import unify


class ExpressionEngine(ValueEnginePort):
    """
    Value engine backed by the small CUE-flavoured expression language of
    this package. Stateless; one instance per run is still the rule so an
    engine with caches can be swapped in.
    """

    def compile(self, text: str, scope: Mapping[str, Any], filename: Optional[str] = None) -> Value:
        refs: Dict[str, Value] = {name: self.encode(value) for name, value in scope.items()}
        return compile_expression(text, refs, filename=filename)

    def unify(self, a: Value, b: Value) -> Value:
        return unify(a, b)

    def encode(self, data: Any) -> Value:
        return _encode(data, "")

    def stringify(self, value: Value) -> str:
        return stringify(value)

    def top(self) -> Value:
        return TOP


def _encode(data: Any, path: str) -> Value:
    if isinstance(data, Value):
        return data
    if data is None or isinstance(data, (bool, int, str)):
        return Atom.of(data)
    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise EncodeError(f"{path or 'value'}: cannot encode {data}", data)
        return Atom.of(data)
    if isinstance(data, Mapping):
        fields = []
        for key, value in data.items():
            if not isinstance(key, str):
                raise EncodeError(f"{path or 'value'}: struct labels must be strings, got {key!r}", data)
            fields.append((key, _encode(value, f"{path}.{key}" if path else key)))
        return Struct(tuple(fields))
    if isinstance(data, (list, tuple)):
        return ListValue(tuple(_encode(v, f"{path}.{i}" if path else str(i)) for i, v in enumerate(data)))
    raise EncodeError(f"{path or 'value'}: cannot encode value of type {type(data).__name__}", data)
