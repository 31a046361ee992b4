# application/parsing/sectionizer.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from application.executor.command_registry import CommandRegistry
from application.parsing.line_source import LineSource, ScriptInput
from domain.errors import ParseError, UnknownCommandError
from domain.script import LocatedCommand, Script, Section

COMMENT_PREFIX = "//"
SECTION_PREFIX = "#"


@dataclass
class _OpenSection:
    name: str
    start_line: int
    commands: List[LocatedCommand] = field(default_factory=list)

    @property
    def worth_keeping(self) -> bool:
        return bool(self.commands or self.name)

    def close(self) -> Section:
        return Section(name=self.name, commands=tuple(self.commands), start_line=self.start_line)


class Sectionizer:
    """
    Splits script text into sections of located commands.

        # section name
        // comment
        KEYWORD remainder
    """

    def __init__(self, registry: CommandRegistry):
        self._registry = registry

    def parse(self, source_name: str, stream: ScriptInput) -> Script:
        lines = LineSource(stream)
        sections: List[Section] = []
        current: Optional[_OpenSection] = None
        lineno = 0

        while True:
            raw = lines.read_line()
            if raw is None:
                break
            lineno += 1

            line = raw.strip()
            if not line or line.startswith(COMMENT_PREFIX):
                continue

            if line.startswith(SECTION_PREFIX):
                if current is not None and current.worth_keeping:
                    sections.append(current.close())
                current = _OpenSection(name=line[len(SECTION_PREFIX):].strip(), start_line=lineno)
                continue

            keyword, _, remainder = line.partition(" ")
            parser = self._registry.find(keyword)
            if parser is None:
                raise UnknownCommandError(keyword, lineno, source_name=source_name)

            try:
                parsed = parser(remainder.strip(), lines)
            except ParseError as exc:
                exc.message = f"{keyword}: {exc.message}"
                raise exc.with_location(source_name, lineno)
            except ValueError as exc:
                raise ParseError(f"{keyword}: {exc}", source_name=source_name, line=lineno) from exc

            if current is None:
                current = _OpenSection(name="", start_line=lineno)
            current.commands.append(LocatedCommand(parsed.command, source_name, lineno))
            lineno += parsed.lines_consumed

        if current is not None and current.worth_keeping:
            sections.append(current.close())
        return Script(source_name=source_name, sections=tuple(sections))
