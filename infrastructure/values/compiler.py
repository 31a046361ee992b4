# infrastructure/values/compiler.py
from __future__ import annotations

import json
import math
import operator
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from lark import Token, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from domain.errors import CompileError, ConflictError, TestDriveError
from infrastructure.values.grammar import expression_parser
from infrastructure.values.model import (
    KIND_NAMES,
    TOP,
    Atom,
    Bound,
    Disjunction,
    Kind,
    ListValue,
    Struct,
    Value,
)
from infrastructure.values.printer import render
from infrastructure.values.unify import atoms_equal, unify

BUILTINS: Dict[str, Value] = {
    "_": TOP,
    "true": Atom.of(True),
    "false": Atom.of(False),
    "null": Atom.of(None),
    **{name: Kind(name) for name in KIND_NAMES if name != "null"},
}

_ARITH: Dict[str, Callable[[Any, Any], Any]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}

_COMPARE: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _number(value: Any) -> Atom:
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        raise CompileError(f"invalid number {value}")
    return Atom.of(value)


@v_args(inline=True)
class _Evaluator(Transformer):
    """Evaluates the parse tree bottom-up into Values."""

    def __init__(self, scope: Mapping[str, Value]):
        super().__init__()
        self._scope = scope

    # --- document and structs -------------------------------------------

    def start(self, *children: Any) -> Value:
        if not children:
            return Struct()
        body = children[0]
        if isinstance(body, list):
            return self._build_struct(body)
        return body

    def fields(self, *children: Any) -> List[Tuple[str, Value]]:
        if len(children) == 1:
            return [children[0]]
        head, last = children
        return head + [last]

    def field(self, label: str, value: Value) -> Tuple[str, Value]:
        return label, value

    def nested_field(self, label: str, inner: Tuple[str, Value]) -> Tuple[str, Value]:
        return label, Struct((inner,))

    def ident_label(self, token: Token) -> str:
        return str(token)

    def string_label(self, token: Token) -> str:
        return self._decode_string(token)

    def struct(self, *children: Any) -> Struct:
        return self._build_struct(children[0] if children else [])

    def _build_struct(self, fields: List[Tuple[str, Value]]) -> Struct:
        merged: Dict[str, Value] = {}
        for name, value in fields:
            if name in merged:
                try:
                    value = unify(merged[name], value)
                except ConflictError as exc:
                    raise CompileError(f"{name}: {exc.message}") from exc
            merged[name] = value
        return Struct(tuple(merged.items()))

    # --- lists -----------------------------------------------------------

    def list(self, *children: Any) -> ListValue:
        items: List[Value] = []
        tail: Optional[Value] = None
        for kind, value in (children[0] if children else []):
            if tail is not None:
                raise CompileError("... must be the last list element")
            if kind == "...":
                tail = value
            else:
                items.append(value)
        return ListValue(tuple(items), tail)

    def items(self, *children: Any) -> List[Tuple[str, Value]]:
        if len(children) == 1:
            return [children[0]]
        head, last = children
        return head + [last]

    def elem(self, value: Value) -> Tuple[str, Value]:
        return "item", value

    def ellipsis(self, value: Value = TOP) -> Tuple[str, Value]:
        return "...", value

    # --- literals and references -----------------------------------------

    def string(self, token: Token) -> Atom:
        return Atom.of(self._decode_string(token))

    def int(self, token: Token) -> Atom:
        return Atom.of(int(token))

    def float(self, token: Token) -> Atom:
        return _number(float(token))

    def ref(self, token: Token) -> Value:
        name = str(token)
        if name in self._scope:
            return self._scope[name]
        if name in BUILTINS:
            return BUILTINS[name]
        raise CompileError(f'reference "{name}" not found')

    def _decode_string(self, token: Token) -> str:
        try:
            return json.loads(str(token))
        except ValueError as exc:
            raise CompileError(f"invalid string literal {token}: {exc}") from exc

    # --- selection -------------------------------------------------------

    def selector(self, token: Token) -> str:
        if token.type == "STRING":
            return self._decode_string(token)
        return str(token)

    def select(self, target: Value, name: str) -> Value:
        if isinstance(target, ListValue) and name.isdigit():
            return self._list_item(target, int(name))
        if not isinstance(target, Struct):
            raise CompileError(f"cannot select field {name} of {render(target)}")
        found = target.get(name)
        if found is None:
            raise CompileError(f"undefined field: {name}")
        return found

    def index(self, target: Value, key: Value) -> Value:
        if not isinstance(key, Atom):
            raise CompileError(f"invalid index {render(key)} (not concrete)")
        if isinstance(target, ListValue) and key.kind == "int":
            return self._list_item(target, key.value)
        if isinstance(target, Struct) and key.kind == "string":
            return self.select(target, key.value)
        raise CompileError(f"invalid index {render(key)} for {render(target)}")

    def _list_item(self, target: ListValue, i: int) -> Value:
        if i < 0:
            raise CompileError(f"invalid negative index {i}")
        if i < len(target.items):
            return target.items[i]
        if target.open:
            return target.tail
        raise CompileError(f"index out of range [{i}] with length {len(target.items)}")

    # --- operators -------------------------------------------------------

    def add(self, a: Value, b: Value) -> Value:
        return self._arith("+", a, b)

    def sub(self, a: Value, b: Value) -> Value:
        return self._arith("-", a, b)

    def mul(self, a: Value, b: Value) -> Value:
        return self._arith("*", a, b)

    def div(self, a: Value, b: Value) -> Value:
        return self._arith("/", a, b)

    def _arith(self, op: str, a: Value, b: Value) -> Value:
        if op == "+" and isinstance(a, ListValue) and isinstance(b, ListValue):
            if a.open or b.open:
                raise CompileError("cannot concatenate open lists")
            return ListValue(a.items + b.items)
        x, y = self._concrete(a, op), self._concrete(b, op)
        if op == "+" and x.kind == y.kind == "string":
            return Atom.of(x.value + y.value)
        if not (x.is_number and y.is_number):
            raise CompileError(f"invalid operation {render(a)} {op} {render(b)} (mismatched types {x.kind} and {y.kind})")
        if op == "/" and y.value == 0:
            raise CompileError("division by zero")
        result = _ARITH[op](x.value, y.value)
        if op == "/":
            result = float(result)
        return _number(result)

    def neg(self, a: Value) -> Value:
        x = self._concrete(a, "-")
        if not x.is_number:
            raise CompileError(f"invalid operation -{render(a)}")
        return _number(-x.value)

    def not_(self, a: Value) -> Value:
        x = self._concrete(a, "!")
        if x.kind != "bool":
            raise CompileError(f"invalid operation !{render(a)}")
        return Atom.of(not x.value)

    def compare(self, a: Value, op: Token, b: Value) -> Atom:
        op = str(op)
        x, y = self._concrete(a, op), self._concrete(b, op)
        if op in ("==", "!="):
            equal = atoms_equal(x, y) or (x.is_number and y.is_number and x.value == y.value)
            return Atom.of(equal if op == "==" else not equal)
        if op in ("=~", "!~"):
            if x.kind != "string" or y.kind != "string":
                raise CompileError(f"invalid operation {render(a)} {op} {render(b)}")
            found = re.search(self._pattern(y.value), x.value) is not None
            return Atom.of(found if op == "=~" else not found)
        comparable = (x.is_number and y.is_number) or (x.kind == y.kind == "string")
        if not comparable:
            raise CompileError(f"invalid operation {render(a)} {op} {render(b)} (mismatched types {x.kind} and {y.kind})")
        return Atom.of(_COMPARE[op](x.value, y.value))

    def bound(self, op: Token, limit: Value) -> Bound:
        op = str(op)
        if op == "==":
            raise CompileError("unary == is not a bound, write the value itself")
        x = self._concrete(limit, op)
        if op in ("=~", "!~"):
            if x.kind != "string":
                raise CompileError(f"{op} needs a string pattern, got {render(limit)}")
            self._pattern(x.value)
        elif op != "!=" and not (x.is_number or x.kind == "string"):
            raise CompileError(f"invalid bound {op}{render(limit)}")
        return Bound(op, x)

    def conjunction(self, *parts: Value) -> Value:
        result = parts[0]
        for part in parts[1:]:
            try:
                result = unify(result, part)
            except ConflictError as exc:
                raise CompileError(exc.message) from exc
        return result

    def disjunction(self, *options: Value) -> Value:
        flat: List[Value] = []
        for option in options:
            for o in (option.options if isinstance(option, Disjunction) else (option,)):
                if o not in flat:
                    flat.append(o)
        if len(flat) == 1:
            return flat[0]
        return Disjunction(tuple(flat))

    def _concrete(self, value: Value, op: str) -> Atom:
        if isinstance(value, Atom):
            return value
        raise CompileError(f"invalid operand {render(value)} for {op} (not a concrete scalar)")

    def _pattern(self, pattern: str) -> str:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise CompileError(f"invalid regular expression {pattern!r}: {exc}") from exc
        return pattern


def compile_expression(text: str, scope: Mapping[str, Value], filename: Optional[str] = None) -> Value:
    try:
        tree = expression_parser().parse(text)
    except UnexpectedInput as exc:
        raise CompileError(
            f"syntax error at line {exc.line}, column {exc.column}: {_describe(exc)}",
            expr=text,
            source_name=filename,
        ) from exc

    try:
        return _Evaluator(scope).transform(tree)
    except VisitError as exc:
        cause = exc.orig_exc
        if isinstance(cause, TestDriveError):
            raise CompileError(cause.message, expr=text, source_name=filename) from cause
        raise


def _describe(exc: UnexpectedInput) -> str:
    token = getattr(exc, "token", None)
    if token is not None:
        return f"unexpected {token!r}"
    char = getattr(exc, "char", None)
    if char is not None:
        return f"unexpected character {char!r}"
    return "unexpected end of input"
