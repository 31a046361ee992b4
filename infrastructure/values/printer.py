# infrastructure/values/printer.py
from __future__ import annotations

import json
import re

from infrastructure.values.model import (
    Atom,
    Bound,
    Conjunction,
    Disjunction,
    Kind,
    ListValue,
    Struct,
    Top,
    Value,
)

_IDENT = re.compile(r"^[A-Za-z_$#][A-Za-z0-9_$#]*$")
_RESERVED = {"_", "true", "false", "null"}


def format_label(name: str) -> str:
    if _IDENT.match(name) and name not in _RESERVED:
        return name
    return json.dumps(name, ensure_ascii=False)


def format_atom(atom: Atom) -> str:
    if atom.kind == "string":
        return json.dumps(atom.value, ensure_ascii=False)
    if atom.kind == "bool":
        return "true" if atom.value else "false"
    if atom.kind == "null":
        return "null"
    return repr(atom.value)


def render(value: Value) -> str:
    """Compact one-line rendering: {foo: "bar", n: [1, 2]}"""
    if isinstance(value, Top):
        return "_"
    if isinstance(value, Atom):
        return format_atom(value)
    if isinstance(value, Kind):
        return value.name
    if isinstance(value, Bound):
        return f"{value.op}{format_atom(value.limit)}"
    if isinstance(value, Conjunction):
        return " & ".join(render(p) for p in value.parts)
    if isinstance(value, Disjunction):
        return " | ".join(render(o) for o in value.options)
    if isinstance(value, Struct):
        if not value.fields:
            return "{}"
        body = ", ".join(f"{format_label(k)}: {render(v)}" for k, v in value.fields)
        return "{" + body + "}"
    if isinstance(value, ListValue):
        parts = [render(v) for v in value.items]
        if value.open:
            parts.append("..." if isinstance(value.tail, Top) else "..." + render(value.tail))
        return "[" + ", ".join(parts) + "]"
    raise TypeError(f"cannot render {value!r}")


def stringify(value: Value) -> str:
    """Like render, but a top-level string comes out without quotes."""
    if isinstance(value, Atom) and value.kind == "string":
        return value.value
    return render(value)
