"""Strip development artifacts from a working copy."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, List, Sequence

from ..logging import get_logger

# Tests and docs are not listed and survive sanitizing.
DEFAULT_DENYLIST: Sequence[str] = (
    ".github",
    ".git",
    ".vscode",
    ".idea",
    "node_modules",
    "dist",
    "build",
    "__pycache__",
    ".next",
    "venv",
    "env",
    ".venv",
    ".pytest_cache",
    ".mypy_cache",
)


class TemplateSanitizer:
    """Removes a fixed denylist of top-level directories from a tree."""

    def __init__(self, denylist: Iterable[str] | None = None) -> None:
        self.denylist: List[str] = list(denylist if denylist is not None else DEFAULT_DENYLIST)
        self.logger = get_logger("sanitizer")

    def sanitize(self, root: Path) -> List[str]:
        """Remove denylisted entries and return the names actually removed.

        Missing entries are skipped and removal errors are logged, never raised.
        """
        root = Path(root)
        removed: List[str] = []
        for name in self.denylist:
            target = root / name
            if not target.exists() and not target.is_symlink():
                continue
            try:
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            except OSError as exc:
                self.logger.warning("Could not remove %s: %s", target, exc)
                continue
            removed.append(name)

        if removed:
            self.logger.debug("Removed %s from %s", ", ".join(removed), root)
        return removed


__all__ = ["DEFAULT_DENYLIST", "TemplateSanitizer"]
