# domain/errors.py
from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple


class TestDriveError(Exception):
    """
    Base class of every failure raised while parsing or running a script.
    source_name / line are filled in by whoever knows the location
    (the sectionizer for parse errors, the executor for run errors).
    """

    __test__ = False  # keep pytest from collecting it

    def __init__(self, message: str, source_name: Optional[str] = None, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.source_name = source_name
        self.line = line

    def with_location(self, source_name: str, line: int) -> "TestDriveError":
        if self.source_name is None:
            self.source_name = source_name
        if self.line is None:
            self.line = line
        return self

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.source_name}: {self.message}" if self.source_name else self.message
        return f"{self.source_name or '<script>'}:{self.line}: {self.message}"


# --- parsing ---------------------------------------------------------------

class ParseError(TestDriveError):
    pass


class UnknownCommandError(ParseError):
    def __init__(self, keyword: str, line: int, source_name: Optional[str] = None):
        super().__init__(f"unknown command {keyword}", source_name=source_name, line=line)
        self.keyword = keyword


class HeredocError(ParseError):
    pass


class HttpSyntaxError(ParseError):
    pass


# --- value language --------------------------------------------------------

class CompileError(TestDriveError):
    def __init__(self, message: str, expr: str = "", source_name: Optional[str] = None):
        super().__init__(message, source_name=source_name)
        self.expr = expr


Conflict = Tuple[str, str]  # (dotted path, reason)


def _format_conflicts(conflicts: Sequence[Conflict]) -> str:
    parts = []
    for path, reason in conflicts:
        parts.append(f"{path}: {reason}" if path else reason)
    return "; ".join(parts)


class ConflictError(TestDriveError):
    """Unification failed. conflicts keeps every (path, reason) pair found."""

    prefix = ""

    def __init__(self, conflicts: Sequence[Conflict]):
        self.conflicts: List[Conflict] = list(conflicts)
        super().__init__(self.prefix + _format_conflicts(self.conflicts))

    @property
    def paths(self) -> List[str]:
        return [path for path, _ in self.conflicts]


class MatchError(ConflictError):
    prefix = "value does not match: "


class EncodeError(TestDriveError):
    def __init__(self, message: str, data: Any = None):
        super().__init__(message)
        self.data = data


# --- expansion -------------------------------------------------------------

class ExpandError(TestDriveError):
    def __init__(self, expr: str, position: int, cause: Exception):
        super().__init__(f"cannot evaluate expression {expr} at position {position}: {cause}")
        self.expr = expr
        self.position = position
        self.cause = cause


class InvalidEscapeError(TestDriveError):
    def __init__(self, position: int, char: str = ")"):
        super().__init__(f"invalid escape sequence at position {position} ({char})")
        self.position = position


# --- transport -------------------------------------------------------------

class TransportError(TestDriveError):
    pass


class CancelledError(TransportError):
    pass


class ResponseDecodeError(TestDriveError):
    pass
