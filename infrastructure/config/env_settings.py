# infrastructure/config/env_settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

ENV_PREFIX = "TESTDRIVE_"
LOG_FORMATS = ("json", "text")


@dataclass(frozen=True)
class EnvEngineSettings:
    """
    Engine defaults read from TESTDRIVE_* variables.
    Values from the .env file win over the process environment.
    """
    base_url: Optional[str] = None
    timeout_sec: Optional[float] = None
    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def load(cls, env_path: Optional[Path] = None) -> "EnvEngineSettings":
        return cls.from_mapping(_merged_env(env_path or Path.cwd() / ".env"))

    @classmethod
    def from_mapping(cls, env: Dict[str, Optional[str]]) -> "EnvEngineSettings":
        timeout_raw = env.get(ENV_PREFIX + "TIMEOUT_SEC")
        timeout: Optional[float] = None
        if timeout_raw:
            try:
                timeout = float(timeout_raw)
            except ValueError as exc:
                raise ValueError(f"{ENV_PREFIX}TIMEOUT_SEC must be a number, got {timeout_raw!r}") from exc
            if timeout <= 0:
                raise ValueError(f"{ENV_PREFIX}TIMEOUT_SEC must be positive, got {timeout_raw!r}")

        log_format = (env.get(ENV_PREFIX + "LOG_FORMAT") or "text").lower()
        if log_format not in LOG_FORMATS:
            raise ValueError(f"{ENV_PREFIX}LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}")

        return cls(
            base_url=env.get(ENV_PREFIX + "BASE_URL") or None,
            timeout_sec=timeout,
            log_level=(env.get(ENV_PREFIX + "LOG_LEVEL") or "INFO").upper(),
            log_format=log_format,
        )


def _merged_env(env_path: Path) -> Dict[str, Optional[str]]:
    # .envファイルの値を優先し、環境変数で補う
    values: Dict[str, Optional[str]] = dict(dotenv_values(env_path)) if env_path.exists() else {}
    for key, value in os.environ.items():
        if key not in values:
            values[key] = value
    return values
