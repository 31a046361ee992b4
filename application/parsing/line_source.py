# application/parsing/line_source.py
from __future__ import annotations

import io
from typing import Iterable, Iterator, Optional, TextIO, Union

ScriptInput = Union[str, bytes, TextIO, Iterable[str]]


class LineSource:
    """
    Forward-only reader over script text, shared by the sectionizer and the
    command parsers so a parser can consume the lines that follow its command.
    """

    def __init__(self, stream: ScriptInput):
        if isinstance(stream, bytes):
            stream = stream.decode("utf-8")
        if isinstance(stream, str):
            stream = io.StringIO(stream)
        self._lines: Iterator = iter(stream)

    def read_line(self) -> Optional[str]:
        """Next raw line (newline included), or None at end of input."""
        line = next(self._lines, None)
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        return line
