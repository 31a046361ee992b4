# application/services/expander.py
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, List

from domain.errors import ExpandError, InvalidEscapeError, TestDriveError

if TYPE_CHECKING:
    from domain.run import RunState

ESCAPE = "\\"


class _Mode(Enum):
    LITERAL = "literal"
    SAW_ESCAPE = "saw_escape"
    IN_EXPR = "in_expr"


class Expander:
    """
    Expands \\(expr) placeholders using the values of a RunState.

    - \\(expr)   -> stringified value of expr ($ and $history are visible)
    - \\\\        -> a single backslash
    - \\x        -> kept as is (JSON escapes in bodies survive)
    - \\)        -> InvalidEscapeError
    - an unterminated \\( is copied literally with everything after it
    """

    def expand(self, text: str, state: "RunState") -> str:
        if ESCAPE not in text:
            return text

        out: List[str] = []
        mode = _Mode.LITERAL
        part = 0        # start of the literal run not yet copied to out
        expr_start = 0
        depth = 0

        for i, ch in enumerate(text):
            if mode is _Mode.IN_EXPR:
                if ch == "(":
                    depth += 1
                elif ch == ")":
                    if depth > 0:
                        depth -= 1
                        continue
                    out.append(self._evaluate(text[expr_start:i], expr_start, state))
                    part = i + 1
                    mode = _Mode.LITERAL
                continue

            if mode is _Mode.SAW_ESCAPE:
                if ch == ESCAPE:
                    out.append(text[part:i])
                    part = i + 1
                    mode = _Mode.LITERAL
                elif ch == "(":
                    out.append(text[part : i - 1])
                    part = i - 1
                    expr_start = i + 1
                    depth = 0
                    mode = _Mode.IN_EXPR
                elif ch == ")":
                    raise InvalidEscapeError(i, ch)
                else:
                    mode = _Mode.LITERAL
                continue

            if ch == ESCAPE:
                mode = _Mode.SAW_ESCAPE

        # also covers an unterminated \( : copied from the marker on
        if part < len(text):
            out.append(text[part:])
        return "".join(out)

    def _evaluate(self, expr: str, position: int, state: "RunState") -> str:
        try:
            value = state.compile_value(expr)
        except TestDriveError as exc:
            raise ExpandError(expr, position, exc) from exc
        return state.stringify(value)
