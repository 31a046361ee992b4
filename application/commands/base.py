# application/commands/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from application.parsing.line_source import LineSource
    from domain.run import RunState


class Command(ABC):
    @abstractmethod
    def run(self, state: "RunState") -> None:
        """
        Update state with the result of the command.
        Raises a TestDriveError subclass on failure.
        """
        ...


@dataclass(frozen=True)
class ParsedCommand:
    command: Command
    lines_consumed: int = 0


# (remainder of the command line, source positioned at the next line)
Parser = Callable[[str, "LineSource"], ParsedCommand]
