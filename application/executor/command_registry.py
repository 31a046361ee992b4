# application/executor/command_registry.py
from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional

from application.commands.base import Parser
from application.commands.http_command import parse_http
from application.commands.value_commands import parse_match_value, parse_set_value

DEFAULT_PARSERS: Mapping[str, Parser] = {
    "VALUE": parse_set_value,
    "MATCH": parse_match_value,
}


def common_parsers() -> Dict[str, Parser]:
    """Parsers most scripts want on top of the built-ins."""
    return {"HTTP": parse_http}


class CommandRegistry:
    """
    Keyword -> parser. The built-ins are always present; parsers passed in
    extend them and win when they reuse a built-in keyword.
    """

    def __init__(self, parsers: Optional[Mapping[str, Parser]] = None):
        merged: Dict[str, Parser] = dict(DEFAULT_PARSERS)
        merged.update(parsers or {})
        self._parsers = merged

    def find(self, keyword: str) -> Optional[Parser]:
        return self._parsers.get(keyword)

    def keywords(self) -> Iterator[str]:
        return iter(sorted(self._parsers))

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._parsers
