# application/ports/requests_client.py
from __future__ import annotations

import requests
from typing import Dict, List, Optional

from application.ports.http_transport import HttpRequest, HttpResponse, HttpTransportPort
from domain.errors import TransportError


def _header_multimap(resp: requests.Response) -> Dict[str, List[str]]:
    # urllib3 keeps repeated headers apart; requests folds them with ", "
    raw_headers = getattr(resp.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        out: Dict[str, List[str]] = {}
        for name in raw_headers.keys():
            out.setdefault(name, [])
            for value in raw_headers.getlist(name):
                out[name].append(value)
        return out
    return {k: [v] for k, v in resp.headers.items()}


def _declared_charset(content_type: str) -> Optional[str]:
    # explicit charset only; requests falls back to ISO-8859-1 for bare text/*
    for param in content_type.split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip("\"'")
    return None


class RequestsHttpTransport(HttpTransportPort):
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_headers: Optional[Dict[str, str]] = None,
        timeout_sec: Optional[float] = 20,
    ):
        self._session = session or requests.Session()
        self._base_headers = base_headers or {}
        self._timeout = timeout_sec

    def send(self, request: HttpRequest, timeout: Optional[float] = None) -> HttpResponse:
        merged = dict(self._base_headers)
        merged.update(dict(request.headers))

        # the run deadline wins over the transport default when it is tighter
        effective = self._timeout
        if timeout is not None and (effective is None or timeout < effective):
            effective = timeout

        try:
            resp = self._session.request(
                method=request.method.upper(),
                url=request.url,
                headers=merged,
                data=request.body.encode("utf-8") if request.body else None,
                timeout=effective,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{request.method} {request.url}: {exc}") from exc

        return HttpResponse(
            status=resp.status_code,
            reason=resp.reason or "",
            url=str(resp.url),
            headers=_header_multimap(resp),
            content=resp.content,
            encoding=_declared_charset(resp.headers.get("Content-Type", "")),
        )

    def close(self) -> None:
        self._session.close()
