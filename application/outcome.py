# application/outcome.py
from dataclasses import dataclass
from typing import Optional

from domain.errors import TestDriveError


@dataclass(frozen=True)
class CommandOutcome:
    ok: bool
    error: Optional[TestDriveError] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None
