# tests/application/executor/test_script_executor.py
from dataclasses import dataclass

import pytest
from application.commands.base import Command
from application.executor.script_executor import ExecutionResult, ScriptExecutor
from application.services.execution_deps import ExecutionDeps
from domain.errors import MatchError, TestDriveError
from domain.run import RunState
from domain.script import LocatedCommand, Section
from infrastructure.values import ExpressionEngine


@dataclass(frozen=True)
class PushCommand(Command):
    data: object

    def run(self, state) -> None:
        state.push_value(state.encode_value(self.data))


@dataclass(frozen=True)
class FailCommand(Command):
    message: str = "boom"

    def run(self, state) -> None:
        raise TestDriveError(self.message)


@dataclass(frozen=True)
class RecordLocationCommand(Command):
    seen: list

    def run(self, state) -> None:
        self.seen.append(state.location())


class MockLogger:
    def __init__(self):
        self.logs = []
        self.bound = {}

    def debug(self, event, **kwargs):
        self.logs.append({"level": "debug", "event": event, **self.bound, **kwargs})

    def info(self, event, **kwargs):
        self.logs.append({"level": "info", "event": event, **self.bound, **kwargs})

    def error(self, event, **kwargs):
        self.logs.append({"level": "error", "event": event, **self.bound, **kwargs})

    def bind(self, **kwargs):
        # Return a new logger with bound context
        new_logger = MockLogger()
        new_logger.logs = self.logs
        new_logger.bound = {**self.bound, **kwargs}
        return new_logger

    def events(self, name):
        return [log for log in self.logs if log["event"] == name]


def _section(name, *commands, first_line=2):
    return Section(
        name=name,
        commands=tuple(LocatedCommand(c, "t.testdrive", first_line + i) for i, c in enumerate(commands)),
        start_line=first_line - 1,
    )


class TestScriptExecutor:
    def create(self):
        logger = MockLogger()
        state = RunState(values=ExpressionEngine())
        return ScriptExecutor(), state, ExecutionDeps(logger=logger), logger

    def test_runs_every_section(self):
        executor, state, deps, logger = self.create()
        sections = [
            _section("one", PushCommand(1)),
            _section("two", PushCommand(2), PushCommand(3), first_line=5),
            _section("three"),
        ]

        result = executor.execute(sections, state, deps)

        assert result == ExecutionResult(ok=True)
        assert state.history.as_list() == [state.encode_value(3), state.encode_value(2), state.encode_value(1)]
        assert len(logger.events("section.start")) == 3
        assert len(logger.events("section.end")) == 3

    def test_section_logs(self):
        executor, state, deps, logger = self.create()

        executor.execute([_section("basic", PushCommand({"foo": "bar"}))], state, deps)

        start = logger.events("section.start")[0]
        assert start["message"] == 'Executing section "basic"'
        end = logger.events("section.end")[0]
        assert end["value"] == '{foo: "bar"}'

    def test_run_id_is_bound(self):
        executor, state, deps, logger = self.create()

        executor.execute([_section("s", PushCommand(1))], state, deps)

        assert state.run_id
        assert all(log["run_id"] == state.run_id for log in logger.logs)

    def test_run_id_from_caller_is_kept(self):
        executor, state, deps, logger = self.create()
        state.run_id = "run-fixed"

        executor.execute([], state, deps)

        assert state.run_id == "run-fixed"
        assert logger.events("run.end")[0]["ok"] is True

    def test_stops_at_first_failure(self):
        executor, state, deps, logger = self.create()
        sections = [
            _section("ok", PushCommand(1)),
            _section("bad", PushCommand(2), FailCommand("kaput"), PushCommand(3), first_line=10),
            _section("never", PushCommand(4), first_line=20),
        ]

        result = executor.execute(sections, state, deps)

        assert result.ok is False
        assert result.section == "bad"
        assert (result.source_name, result.line) == ("t.testdrive", 11)
        assert result.error_message == "t.testdrive:11: kaput"
        # values pushed before the failure stay
        assert len(state.history) == 2
        assert state.last_error is result.error
        assert state.location() == ("t.testdrive", 11)
        assert [log["section"] for log in logger.events("section.start")] == ["ok", "bad"]
        assert logger.events("command.failed")[0]["error"] == "t.testdrive:11: kaput"

    def test_raise_for_error(self):
        executor, state, deps, _ = self.create()
        result = executor.execute([_section("bad", FailCommand())], state, deps)

        with pytest.raises(TestDriveError, match="boom"):
            result.raise_for_error()
        ExecutionResult(ok=True).raise_for_error()

    def test_location_updated_before_each_command(self):
        executor, state, deps, _ = self.create()
        seen = []
        cmd = RecordLocationCommand(seen)

        executor.execute([_section("s", cmd, cmd, first_line=4)], state, deps)

        assert seen == [("t.testdrive", 4), ("t.testdrive", 5)]

    def test_deps_bound_only_during_execution(self):
        executor, state, deps, _ = self.create()
        executor.execute([_section("s", PushCommand(1))], state, deps)
        assert state.deps is None

    def test_match_error_keeps_type(self):
        executor, state, deps, _ = self.create()

        @dataclass(frozen=True)
        class Mismatch(Command):
            def run(self, state) -> None:
                raise MatchError([("a", "conflicting values 1 and 2")])

        result = executor.execute([_section("s", Mismatch())], state, deps)
        assert isinstance(result.error, MatchError)
