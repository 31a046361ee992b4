# infrastructure/values/unify.py
from __future__ import annotations

import operator
import re
from typing import Callable, Dict, List, Optional, Tuple

from domain.errors import Conflict, ConflictError
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
    kind_accepts,
)
from infrastructure.values.printer import render

_ORDER_OPS: Dict[str, Callable] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def unify(a: Value, b: Value) -> Value:
    errs: List[Conflict] = []
    result = _unify(a, b, "", errs)
    if result is None:
        raise ConflictError(errs)
    return result


def join_path(path: str, label: str) -> str:
    return f"{path}.{label}" if path else label


def atoms_equal(a: Atom, b: Atom) -> bool:
    return a.kind == b.kind and a.value == b.value


def check_atom(constraint: Value, atom: Atom) -> Optional[str]:
    """Reason why atom violates constraint (Kind or Bound), None when it holds."""
    if isinstance(constraint, Kind):
        if kind_accepts(constraint.name, atom.kind):
            return None
        return (
            f"conflicting values {constraint.name} and {render(atom)} "
            f"(mismatched types {constraint.name} and {atom.kind})"
        )

    if isinstance(constraint, Bound):
        op, limit = constraint.op, constraint.limit
        if op == "!=":
            if atoms_equal(atom, limit):
                return f"invalid value {render(atom)} (out of bound !={render(limit)})"
            return None
        if op in ("=~", "!~"):
            if atom.kind != "string":
                return f"invalid value {render(atom)} (mismatched types string and {atom.kind})"
            found = re.search(limit.value, atom.value) is not None
            if found != (op == "=~"):
                return f"invalid value {render(atom)} (out of bound {op}{render(limit)})"
            return None
        comparable = (atom.is_number and limit.is_number) or (atom.kind == limit.kind == "string")
        if not comparable:
            return f"invalid value {render(atom)} (mismatched types {limit.kind} and {atom.kind})"
        if not _ORDER_OPS[op](atom.value, limit.value):
            return f"invalid value {render(atom)} (out of bound {op}{render(limit)})"
        return None

    raise TypeError(f"not a constraint: {constraint!r}")


def _conflict(path: str, errs: List[Conflict], reason: str) -> None:
    errs.append((path, reason))
    return None


def _type_name(v: Value) -> str:
    if isinstance(v, Struct):
        return "struct"
    if isinstance(v, ListValue):
        return "list"
    if isinstance(v, Atom):
        return v.kind
    if isinstance(v, Kind):
        return v.name
    return "constraint"


def _unify(a: Value, b: Value, path: str, errs: List[Conflict]) -> Optional[Value]:
    if isinstance(a, Top):
        return b
    if isinstance(b, Top):
        return a

    if isinstance(a, Disjunction) or isinstance(b, Disjunction):
        return _unify_disjunction(a, b, path, errs)

    if isinstance(a, Struct) and isinstance(b, Struct):
        return _unify_structs(a, b, path, errs)
    if isinstance(a, ListValue) and isinstance(b, ListValue):
        return _unify_lists(a, b, path, errs)
    if isinstance(a, (Struct, ListValue)) or isinstance(b, (Struct, ListValue)):
        return _conflict(
            path,
            errs,
            f"conflicting values {render(a)} and {render(b)} "
            f"(mismatched types {_type_name(a)} and {_type_name(b)})",
        )

    if isinstance(a, Atom) and isinstance(b, Atom):
        if atoms_equal(a, b):
            return a
        reason = f"conflicting values {render(a)} and {render(b)}"
        if a.kind != b.kind:
            reason += f" (mismatched types {a.kind} and {b.kind})"
        return _conflict(path, errs, reason)

    if isinstance(a, Atom) or isinstance(b, Atom):
        atom, constraint = (a, b) if isinstance(a, Atom) else (b, a)
        parts = constraint.parts if isinstance(constraint, Conjunction) else (constraint,)
        for part in parts:
            reason = check_atom(part, atom)
            if reason is not None:
                return _conflict(path, errs, reason)
        return atom

    return _merge_constraints(a, b, path, errs)


def _flatten(v: Value) -> Tuple[Value, ...]:
    return v.parts if isinstance(v, Conjunction) else (v,)


def _meet_kinds(a: str, b: str) -> Optional[str]:
    if a == b:
        return a
    if a == "number" and b in ("int", "float"):
        return b
    if b == "number" and a in ("int", "float"):
        return a
    return None


def _merge_constraints(a: Value, b: Value, path: str, errs: List[Conflict]) -> Optional[Value]:
    kind: Optional[str] = None
    bounds: List[Bound] = []
    for part in _flatten(a) + _flatten(b):
        if isinstance(part, Kind):
            if kind is None:
                kind = part.name
                continue
            met = _meet_kinds(kind, part.name)
            if met is None:
                return _conflict(path, errs, f"conflicting values {kind} and {part.name} (mismatched types)")
            kind = met
        elif part not in bounds:
            bounds.append(part)

    if kind is not None:
        for bound in bounds:
            if bound.op in ("=~", "!~"):
                ok = kind == "string"
            elif bound.op == "!=":
                ok = True
            else:
                ok = kind_accepts(kind, bound.limit.kind) or (
                    kind in ("int", "float", "number") and bound.limit.is_number
                )
            if not ok:
                return _conflict(path, errs, f"conflicting values {kind} and {render(bound)} (mismatched types)")

    parts: List[Value] = ([Kind(kind)] if kind is not None else []) + list(bounds)
    if len(parts) == 1:
        return parts[0]
    return Conjunction(tuple(parts))


def _unify_disjunction(a: Value, b: Value, path: str, errs: List[Conflict]) -> Optional[Value]:
    left = a.options if isinstance(a, Disjunction) else (a,)
    right = b.options if isinstance(b, Disjunction) else (b,)

    matches: List[Value] = []
    for x in left:
        for y in right:
            trial: List[Conflict] = []
            r = _unify(x, y, path, trial)
            if r is not None and r not in matches:
                matches.append(r)

    if not matches:
        return _conflict(path, errs, f"{render(a)} does not match {render(b)} (empty disjunction)")
    if len(matches) == 1:
        return matches[0]
    return Disjunction(tuple(matches))


def _unify_structs(a: Struct, b: Struct, path: str, errs: List[Conflict]) -> Optional[Struct]:
    merged: List[Tuple[str, Value]] = []
    other = b.as_dict()
    failed = False

    for name, value in a.fields:
        if name in other:
            r = _unify(value, other[name], join_path(path, name), errs)
            if r is None:
                failed = True
                continue
            merged.append((name, r))
        else:
            merged.append((name, value))

    seen = {name for name, _ in a.fields}
    for name, value in b.fields:
        if name not in seen:
            merged.append((name, value))

    if failed:
        return None
    return Struct(tuple(merged))


def _unify_lists(a: ListValue, b: ListValue, path: str, errs: List[Conflict]) -> Optional[ListValue]:
    la, lb = len(a.items), len(b.items)
    if (la < lb and not a.open) or (lb < la and not b.open):
        return _conflict(path, errs, f"incompatible list lengths ({la} and {lb})")

    items: List[Value] = []
    failed = False
    for i in range(max(la, lb)):
        x = a.items[i] if i < la else a.tail
        y = b.items[i] if i < lb else b.tail
        r = _unify(x, y, join_path(path, str(i)), errs)
        if r is None:
            failed = True
            continue
        items.append(r)

    tail: Optional[Value] = None
    if a.open and b.open:
        tail = _unify(a.tail, b.tail, join_path(path, "..."), errs)
        if tail is None:
            failed = True

    if failed:
        return None
    return ListValue(tuple(items), tail)
