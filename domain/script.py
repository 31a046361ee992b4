# domain/script.py
"""
Script domain model
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Tuple

if TYPE_CHECKING:
    from application.commands.base import Command


@dataclass(frozen=True)
class LocatedCommand:
    command: "Command"
    source_name: str
    line: int


@dataclass(frozen=True)
class Section:
    """
    Named group of commands, usually one test case.
    """
    name: str
    commands: Tuple[LocatedCommand, ...] = ()
    start_line: int = 0


@dataclass(frozen=True)
class Script:
    """
    Script aggregate root: the ordered sections of one parsed source.
    """
    source_name: str
    sections: Tuple[Section, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Section]:
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    def __getitem__(self, index: int) -> Section:
        return self.sections[index]

    @property
    def command_count(self) -> int:
        return sum(len(s.commands) for s in self.sections)
