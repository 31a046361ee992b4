# domain/run.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from domain.errors import TestDriveError
from domain.history import CURRENT_VALUE_REF, HISTORY_REF, ValueHistory
from domain.lifetime import Lifetime

if TYPE_CHECKING:
    from application.ports.value_engine import ValueEnginePort
    from application.services.execution_deps import ExecutionDeps


@dataclass
class RunState:
    """
    Everything one execution of a script owns: the value history, the
    location of the command being run, the lifetime and a private
    value-engine instance. Never shared between runs.
    """
    values: "ValueEnginePort"
    lifetime: Lifetime = field(default_factory=Lifetime.background)
    run_id: str = ""

    source_name: str = ""
    line: int = 0
    last_error: Optional[TestDriveError] = None
    history: ValueHistory = field(default_factory=ValueHistory)

    # bound by the executor for the duration of one execute() call
    deps: Optional["ExecutionDeps"] = None

    def location(self) -> Tuple[str, int]:
        return self.source_name, self.line

    def push_value(self, value: Any) -> None:
        self.history.push(value)

    def newest(self) -> Optional[Any]:
        return self.history.newest()

    def scope(self) -> Dict[str, Any]:
        refs: Dict[str, Any] = {HISTORY_REF: self.history.as_list()}
        if self.history:
            refs[CURRENT_VALUE_REF] = self.history.newest()
        return refs

    def compile_value(self, text: str) -> Any:
        return self.values.compile(text, self.scope(), filename=self.source_name or None)

    def unify_value(self, value: Any) -> Any:
        last = self.history.newest() if self.history else self.values.top()
        return self.values.unify(last, value)

    def encode_value(self, data: Any) -> Any:
        return self.values.encode(data)

    def stringify(self, value: Any) -> str:
        return self.values.stringify(value)

    def expand(self, text: str) -> str:
        """
        Replace every \\(expr) in text with the evaluated expression.
        """
        from application.services.expander import Expander

        return Expander().expand(text, self)
