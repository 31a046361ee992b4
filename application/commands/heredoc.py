# application/commands/heredoc.py
from __future__ import annotations

from typing import List, Tuple

from application.parsing.line_source import LineSource
from domain.errors import HeredocError

HEREDOC_MARK = "^"


def read_until(lines: LineSource, terminator: str) -> Tuple[List[str], int]:
    """
    Read trimmed lines up to (not including) the terminator line, or to the
    end of input. Returns the lines and how many physical lines were read,
    the terminator line included.
    """
    out: List[str] = []
    consumed = 0
    while True:
        raw = lines.read_line()
        if raw is None:
            break
        consumed += 1
        line = raw.strip()
        if line == terminator:
            break
        out.append(line)
    return out, consumed


def heredoc_terminator(token: str) -> str:
    terminator = token[len(HEREDOC_MARK):].strip()
    if not terminator:
        raise HeredocError(f"missing heredoc terminator after {HEREDOC_MARK}")
    return terminator


def read_payload(remainder: str, lines: LineSource) -> Tuple[str, int]:
    """
    Payload of a command: the remainder itself, or the heredoc body when the
    remainder is ^TERMINATOR.
    """
    if not remainder.startswith(HEREDOC_MARK):
        return remainder, 0
    body, consumed = read_until(lines, heredoc_terminator(remainder))
    return "\n".join(body), consumed
