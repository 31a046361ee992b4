# application/commands/value_commands.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from application.commands.base import Command, ParsedCommand, Parser
from application.commands.heredoc import read_payload
from application.parsing.line_source import LineSource
from domain.errors import ConflictError, MatchError
from domain.run import RunState


@dataclass(frozen=True)
class SetValue(Command):
    """VALUE <expr>: push the compiled expression."""
    text: str

    def run(self, state: RunState) -> None:
        state.push_value(state.compile_value(self.text))


@dataclass(frozen=True)
class MatchValue(Command):
    """
    MATCH <expr>: unify the expression with the newest value and push the
    merged result. Nothing is pushed when the values conflict.
    """
    text: str

    def run(self, state: RunState) -> None:
        expected = state.compile_value(self.text)
        try:
            merged = state.unify_value(expected)
        except ConflictError as exc:
            raise MatchError(exc.conflicts) from exc
        state.push_value(merged)


def value_command_parser(factory: Callable[[str], Command]) -> Parser:
    def parse(remainder: str, lines: LineSource) -> ParsedCommand:
        payload, consumed = read_payload(remainder, lines)
        return ParsedCommand(factory(payload), consumed)

    return parse


parse_set_value = value_command_parser(SetValue)
parse_match_value = value_command_parser(MatchValue)
