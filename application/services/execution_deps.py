# application/services/execution_deps.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Protocol

from application.ports.http_transport import HttpRequest, HttpTransportPort, RequestInterceptor
from application.ports.logger import LoggerPort


class UrlResolverPort(Protocol):
    def resolve_url(self, url: str) -> str:
        ...


@dataclass(frozen=True)
class ExecutionDeps:
    logger: LoggerPort
    transport: Optional[HttpTransportPort] = None
    url_resolver: Optional[UrlResolverPort] = None
    request_interceptor: Optional[RequestInterceptor] = None

    def resolve_url(self, url: str) -> str:
        if self.url_resolver is None:
            return url
        return self.url_resolver.resolve_url(url)

    def intercept(self, request: HttpRequest) -> HttpRequest:
        if self.request_interceptor is None:
            return request
        return self.request_interceptor(request) or request

    def with_logger(self, logger: LoggerPort) -> "ExecutionDeps":
        return replace(self, logger=logger)
