"""Helper utilities for constructing throwaway source trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Dict, Mapping


class RepoBuilder:
    """Utility for writing files into a throwaway repository tree."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the repository."""
        write_tree(self.root, files)

    def snapshot(self) -> Dict[str, bytes]:
        """Return every file under the root keyed by relative posix path."""
        return snapshot_tree(self.root)

    def path(self) -> Path:
        """Return the repository root path."""
        return self.root


def write_tree(root: Path, files: Mapping[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        normalised = textwrap.dedent(content).lstrip("\n")
        path.write_text(normalised, encoding="utf-8")


def snapshot_tree(root: Path) -> Dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


__all__ = ["RepoBuilder", "snapshot_tree", "write_tree"]
