# application/executor/script_executor.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional
import time
import uuid

from application.outcome import CommandOutcome
from application.services.execution_deps import ExecutionDeps
from domain.errors import TestDriveError
from domain.run import RunState
from domain.script import LocatedCommand, Section


@dataclass(frozen=True)
class ExecutionResult:
    ok: bool
    error: Optional[TestDriveError] = None
    source_name: Optional[str] = None
    line: Optional[int] = None
    section: Optional[str] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class ScriptExecutor:
    """
    Runs sections and their commands in document order against one RunState.
    The first failing command stops the run; values already pushed stay in
    the history.
    """

    def execute(self, sections: Iterable[Section], state: RunState, deps: ExecutionDeps) -> ExecutionResult:
        # ★run_id を付与（呼び元が指定していれば尊重）
        if not state.run_id:
            state.run_id = uuid.uuid4().hex

        deps = deps.with_logger(deps.logger.bind(run_id=state.run_id))

        state.deps = deps
        try:
            return self._execute_sections(list(sections), state, deps)
        finally:
            state.deps = None

    def _execute_sections(self, sections: list, state: RunState, deps: ExecutionDeps) -> ExecutionResult:
        deps.logger.info("run.start", sections=len(sections))

        for section in sections:
            deps.logger.info(
                "section.start",
                section=section.name,
                line=section.start_line,
                message=f'Executing section "{section.name}"',
            )

            for located in section.commands:
                outcome = self._run_command(located, state, deps)
                if outcome.ok:
                    continue

                deps.logger.error(
                    "command.failed",
                    section=section.name,
                    source=located.source_name,
                    line=located.line,
                    command=type(located.command).__name__,
                    error=outcome.error_message,
                )
                deps.logger.info("run.end", ok=False)
                return ExecutionResult(
                    ok=False,
                    error=outcome.error,
                    source_name=located.source_name,
                    line=located.line,
                    section=section.name,
                )

            newest = state.newest()
            deps.logger.info(
                "section.end",
                section=section.name,
                value=state.stringify(newest) if newest is not None else None,
            )

        deps.logger.info("run.end", ok=True)
        return ExecutionResult(ok=True)

    def _run_command(self, located: LocatedCommand, state: RunState, deps: ExecutionDeps) -> CommandOutcome:
        state.source_name = located.source_name
        state.line = located.line

        deps.logger.debug(
            "command.start",
            command=type(located.command).__name__,
            source=located.source_name,
            line=located.line,
        )
        t0 = time.perf_counter()

        try:
            located.command.run(state)
        except TestDriveError as exc:
            exc.with_location(located.source_name, located.line)
            state.last_error = exc
            return CommandOutcome(ok=False, error=exc)

        deps.logger.debug(
            "command.end",
            line=located.line,
            elapsed_ms=int((time.perf_counter() - t0) * 1000),
        )
        return CommandOutcome(ok=True)
