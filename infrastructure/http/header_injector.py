# infrastructure/http/header_injector.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable

from application.ports.http_transport import HttpRequest


def parse_header_args(values: Iterable[str]) -> Dict[str, str]:
    """["Name: value", ...] -> {"Name": "value"}"""
    headers: Dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"invalid header {raw!r}, expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


@dataclass(frozen=True)
class HeaderInjector:
    """
    Request interceptor setting fixed headers (e.g. Authorization) on every
    request. Headers already present in the script are kept unless
    override is set.
    """
    headers: Dict[str, str] = field(default_factory=dict)
    override: bool = False

    def __call__(self, request: HttpRequest) -> HttpRequest:
        for name, value in self.headers.items():
            if self.override or request.header(name) is None:
                request = request.with_header(name, value)
        return request
