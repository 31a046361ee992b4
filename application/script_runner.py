# application/script_runner.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from application.engine import Engine
from domain.errors import TestDriveError
from domain.lifetime import Lifetime


@dataclass(frozen=True)
class ScriptReport:
    name: str
    ok: bool
    error: Optional[str] = None
    source_name: Optional[str] = None
    line: Optional[int] = None

    @property
    def location(self) -> str:
        if self.line is None:
            return self.source_name or self.name
        return f"{self.source_name or self.name}:{self.line}"


class ScriptRunner:
    """
    Runs script files one by one, each with its own state and lifetime.
    """

    def __init__(self, engine: Engine, timeout_sec: Optional[float] = None):
        self._engine = engine
        self._timeout_sec = timeout_sec

    def run_file(self, path: Path) -> ScriptReport:
        name = str(path)
        try:
            with path.open("r", encoding="utf-8") as fh:
                state = self._engine.execute_script(name, fh, lifetime=Lifetime(self._timeout_sec))
        except TestDriveError as exc:
            return ScriptReport(name, ok=False, error=exc.message, source_name=exc.source_name, line=exc.line)
        except OSError as exc:
            return ScriptReport(name, ok=False, error=f"cannot read script: {exc}")

        if state.last_error is not None:
            source_name, line = state.location()
            return ScriptReport(name, ok=False, error=state.last_error.message, source_name=source_name, line=line)
        return ScriptReport(name, ok=True)

    def run_all(
        self,
        paths: Iterable[Path],
        on_report: Optional[Callable[[ScriptReport], None]] = None,
    ) -> List[ScriptReport]:
        reports: List[ScriptReport] = []
        for path in paths:
            report = self.run_file(path)
            reports.append(report)
            if on_report is not None:
                on_report(report)
        return reports
