# application/engine.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional

from application.commands.base import Parser
from application.executor.command_registry import CommandRegistry, common_parsers
from application.executor.script_executor import ExecutionResult, ScriptExecutor
from application.parsing.line_source import ScriptInput
from application.parsing.sectionizer import Sectionizer
from application.ports.http_transport import HttpTransportPort, RequestInterceptor
from application.ports.logger import LoggerPort, NullLogger
from application.ports.value_engine import ValueEnginePort
from application.services.execution_deps import ExecutionDeps
from domain.errors import TestDriveError
from domain.lifetime import Lifetime
from domain.run import RunState
from domain.script import Script


def _default_value_engine() -> ValueEnginePort:
    from infrastructure.values import ExpressionEngine

    return ExpressionEngine()


def _default_transport() -> HttpTransportPort:
    from application.ports.requests_client import RequestsHttpTransport

    return RequestsHttpTransport()


@dataclass(frozen=True)
class EngineConfig:
    parsers: Mapping[str, Parser] = field(default_factory=dict)
    logger: LoggerPort = field(default_factory=NullLogger)
    transport: Optional[HttpTransportPort] = None
    base_url: Optional[str] = None
    request_interceptor: Optional[RequestInterceptor] = None
    value_engine_factory: Callable[[], ValueEnginePort] = _default_value_engine


class Engine:
    """
    Parses and executes scripts.

        engine = Engine().configure(parsers=common_parsers(), base_url="http://localhost:8080")
        state = engine.execute_script("smoke.testdrive", open("smoke.testdrive"))
        if state.last_error:
            ...

    Every run gets its own RunState, so one engine can run scripts
    concurrently.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._registry = CommandRegistry(self._config.parsers)
        self._sectionizer = Sectionizer(self._registry)
        self._executor = ScriptExecutor()
        self._transport = self._config.transport
        self._owns_transport = False
        # no session unless HTTP is registered
        if self._transport is None and "HTTP" in self._registry:
            self._transport = _default_transport()
            self._owns_transport = True

    @classmethod
    def with_common_parsers(cls, **changes: Any) -> "Engine":
        return cls(EngineConfig(parsers=common_parsers(), **changes))

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def configure(self, **changes: Any) -> "Engine":
        """A new engine with the given EngineConfig fields replaced."""
        if "parsers" in changes:
            merged = dict(self._config.parsers)
            merged.update(changes["parsers"] or {})
            changes["parsers"] = merged
        return Engine(replace(self._config, **changes))

    def close(self) -> None:
        """Release the HTTP session the engine created for itself."""
        if self._owns_transport and self._transport is not None:
            self._transport.close()

    def parse(self, source_name: str, stream: ScriptInput) -> Script:
        return self._sectionizer.parse(source_name, stream)

    def new_state(self, lifetime: Optional[Lifetime] = None) -> RunState:
        return RunState(
            values=self._config.value_engine_factory(),
            lifetime=lifetime or Lifetime.background(),
        )

    def execute(self, state: RunState, script: Script) -> ExecutionResult:
        return self._executor.execute(script.sections, state, self._deps())

    def execute_script(
        self,
        source_name: str,
        stream: ScriptInput,
        lifetime: Optional[Lifetime] = None,
    ) -> RunState:
        """
        Parse and run a whole script. Parse errors are raised; run errors
        are left in state.last_error with state.location() pointing at the
        failing command.
        """
        script = self.parse(source_name, stream)
        state = self.new_state(lifetime)
        state.source_name = source_name
        self.execute(state, script)
        return state

    def _deps(self) -> ExecutionDeps:
        cfg = self._config
        resolver = None
        if cfg.base_url:
            from infrastructure.url.base_url_resolver import BaseUrlResolver

            resolver = BaseUrlResolver(cfg.base_url)
        return ExecutionDeps(
            logger=cfg.logger,
            transport=self._transport,
            url_resolver=resolver,
            request_interceptor=cfg.request_interceptor,
        )


def run_script(engine: Engine, source_name: str, stream: ScriptInput) -> ExecutionResult:
    """Parse and execute, folding parse errors into the result."""
    try:
        script = engine.parse(source_name, stream)
    except TestDriveError as exc:
        return ExecutionResult(ok=False, error=exc, source_name=exc.source_name, line=exc.line)
    state = engine.new_state()
    state.source_name = source_name
    return engine.execute(state, script)
