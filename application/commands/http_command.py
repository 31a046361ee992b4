# application/commands/http_command.py
from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from application.commands.base import Command, ParsedCommand
from application.commands.heredoc import HEREDOC_MARK, heredoc_terminator, read_until
from application.parsing.line_source import LineSource
from application.ports.http_transport import HttpRequest, HttpResponse, HttpTransportPort
from application.services.redactor import mask_pairs
from domain.errors import HttpSyntaxError, ResponseDecodeError, TransportError
from domain.lifetime import Lifetime
from domain.run import RunState

HTTP_SYNTAX = "expected [^<END>] <VERB> <URL>"

# how often a pending request looks at the run lifetime
CANCEL_POLL_SEC = 0.05


def parse_http(remainder: str, lines: LineSource) -> ParsedCommand:
    """
    HTTP <VERB> <URL>
    HTTP ^END <VERB> <URL>
    Name: value        (headers, one per line)
                       (blank line)
    body...            (expanded with \\(expr) before sending)
    END

    The command pushes:
        status: {code: int, line: string}
        headers: [string]: [...string]
        body: _            (decoded when the content type is JSON)
    """
    parts = remainder.split()
    if len(parts) == 3 and parts[0].startswith(HEREDOC_MARK):
        end, verb, url = heredoc_terminator(parts[0]), parts[1], parts[2]
    elif len(parts) == 2 and not parts[0].startswith(HEREDOC_MARK):
        end, verb, url = None, parts[0], parts[1]
    else:
        raise HttpSyntaxError(HTTP_SYNTAX)

    if not verb.isalpha():
        raise HttpSyntaxError(f"invalid HTTP method {verb!r}, {HTTP_SYNTAX}")

    headers: List[Tuple[str, str]] = []
    body_lines: List[str] = []
    consumed = 0
    if end is not None:
        raw_lines, consumed = read_until(lines, end)
        headers_done = False
        for line in raw_lines:
            if headers_done:
                body_lines.append(line)
                continue
            if line == "":
                headers_done = True
                continue
            name, sep, value = line.partition(":")
            if not sep or not name.strip():
                raise HttpSyntaxError(f"malformed header line {line!r}, expected Name: value")
            headers = [(k, v) for k, v in headers if k.lower() != name.strip().lower()]
            headers.append((name.strip(), value.strip()))

    request = HttpRequest(
        method=verb.upper(),
        url=url,
        headers=tuple(headers),
        body="\n".join(body_lines),
    )
    return ParsedCommand(HttpCommand(request), consumed)


@dataclass(frozen=True)
class HttpCommand(Command):
    request: HttpRequest

    def run(self, state: RunState) -> None:
        deps = state.deps
        if deps is None or deps.transport is None:
            raise TransportError("no HTTP transport configured")

        state.lifetime.check()

        req = self.request.with_url(deps.resolve_url(self.request.url))
        if req.body:
            req = req.with_body(state.expand(req.body))
        req = deps.intercept(req)

        deps.logger.debug(
            "http.request",
            method=req.method,
            url=req.url,
            headers=mask_pairs(req.headers),
            body_len=len(req.body),
        )

        resp = send_with_lifetime(deps.transport, req, state.lifetime)

        deps.logger.info(
            "http.response",
            method=req.method,
            url=req.url,
            status=resp.status,
        )

        state.push_value(state.encode_value(response_to_data(resp)))


def send_with_lifetime(transport: HttpTransportPort, request: HttpRequest, lifetime: Lifetime) -> HttpResponse:
    """
    Send on a worker thread and return its response, or raise CancelledError
    as soon as the lifetime ends. An abandoned call finishes in the background
    and its result is dropped.
    """
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="testdrive-http")
    try:
        future = pool.submit(transport.send, request, lifetime.remaining())
        while True:
            done, _ = wait([future], timeout=CANCEL_POLL_SEC)
            lifetime.check()
            if done:
                return future.result()
    finally:
        pool.shutdown(wait=False)


def response_to_data(resp: HttpResponse) -> Dict[str, Any]:
    body: Any
    if "json" in resp.header("content-type").lower():
        if resp.content.strip():
            try:
                body = json.loads(resp.text)
            except ValueError as exc:
                raise ResponseDecodeError(f"failed to parse as JSON: {exc}") from exc
        else:
            body = None
    else:
        body = resp.text

    return {
        "status": {"code": resp.status, "line": resp.status_line},
        "headers": {name: list(values) for name, values in resp.headers.items()},
        "body": body,
    }
