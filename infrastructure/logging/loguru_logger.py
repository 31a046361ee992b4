# infrastructure/logging/loguru_logger.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from loguru import logger as _loguru

from application.ports.logger import LoggerPort


@dataclass(frozen=True)
class LoguruLogger(LoggerPort):
    """
    Human readable events through loguru. section.start carries a message
    field which is printed as is; other events print as "event k=v ...".
    """
    bound: Dict[str, Any] = field(default_factory=dict)

    def bind(self, **fields: Any) -> "LoguruLogger":
        merged = dict(self.bound)
        merged.update(fields)
        return LoguruLogger(bound=merged)

    def debug(self, event: str, **fields: Any) -> None:
        self._emit("DEBUG", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._emit("INFO", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._emit("ERROR", event, fields)

    def _emit(self, level: str, event: str, fields: Dict[str, Any]) -> None:
        payload = dict(fields)
        message = payload.pop("message", None)
        text = message if message is not None else event
        if payload:
            text += " " + " ".join(f"{k}={v}" for k, v in payload.items())
        _loguru.bind(event=event, **self.bound).log(level, text)
