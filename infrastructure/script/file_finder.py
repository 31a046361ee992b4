# infrastructure/script/file_finder.py
"""Find script files under directories."""
from pathlib import Path
from typing import Iterable, List

SCRIPT_SUFFIX = ".testdrive"


class ScriptFileFinder:
    """Search *.testdrive files under the given paths."""

    def __init__(self, suffix: str = SCRIPT_SUFFIX):
        self.suffix = suffix

    def find(self, paths: Iterable[Path]) -> List[Path]:
        """
        Expand paths into script files.

        Args:
            paths: files (taken as they are) or directories (searched recursively)

        Returns:
            Files in a deterministic order, without duplicates.

        Raises:
            FileNotFoundError: a path does not exist.
        """
        found: List[Path] = []
        for path in paths:
            if path.is_file():
                candidates = [path]
            elif path.is_dir():
                candidates = sorted(p for p in path.rglob(f"*{self.suffix}") if p.is_file())
            else:
                raise FileNotFoundError(f"no such file or directory: {path}")

            for candidate in candidates:
                if candidate not in found:
                    found.append(candidate)
        return found
