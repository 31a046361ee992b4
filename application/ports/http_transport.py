# application/ports/http_transport.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class HttpRequest:
    method: str
    url: str
    headers: Tuple[Tuple[str, str], ...] = ()
    body: str = ""

    def header(self, name: str) -> Optional[str]:
        for k, v in self.headers:
            if k.lower() == name.lower():
                return v
        return None

    def with_header(self, name: str, value: str) -> "HttpRequest":
        kept = tuple((k, v) for k, v in self.headers if k.lower() != name.lower())
        return replace(self, headers=kept + ((name, value),))

    def with_url(self, url: str) -> "HttpRequest":
        return replace(self, url=url)

    def with_body(self, body: str) -> "HttpRequest":
        return replace(self, body=body)


@dataclass(frozen=True)
class HttpResponse:
    status: int
    reason: str = ""
    url: str = ""
    headers: Dict[str, List[str]] = field(default_factory=dict)
    content: bytes = b""
    encoding: Optional[str] = None

    @property
    def status_line(self) -> str:
        return f"{self.status} {self.reason}".strip()

    def header(self, name: str) -> str:
        for k, values in self.headers.items():
            if k.lower() == name.lower() and values:
                return values[0]
        return ""

    @property
    def text(self) -> str:
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            # unknown charset label
            return self.content.decode("utf-8", errors="replace")


RequestInterceptor = Callable[[HttpRequest], HttpRequest]


class HttpTransportPort(ABC):
    @abstractmethod
    def send(self, request: HttpRequest, timeout: Optional[float] = None) -> HttpResponse:
        """
        Execute the request. Raises TransportError on any network failure.
        """
        ...

    def close(self) -> None:
        return None
