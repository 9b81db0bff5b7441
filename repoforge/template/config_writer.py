"""Write the Replit run configuration and provenance README into a working copy."""

from __future__ import annotations

import json
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..logging import get_logger
from ..models import DetectionResult, SourceLocator

RUN_CONFIG_FILENAME = ".replit"
README_FILENAME = "README.md"
NIX_CHANNEL = "stable-24_05"

_RUNTIME_CHANNELS = {
    "nodejs": "nodejs-20",
    "python": "python3-11",
}
_DEFAULT_CHANNEL = "bash"

_LANGUAGE_LABELS = {
    "nodejs": "Node.js",
    "python": "Python",
}


def runtime_channel(language: str) -> str:
    return _RUNTIME_CHANNELS.get(language, _DEFAULT_CHANNEL)


def _toml_string(value: object) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes.
    return json.dumps(str(value), ensure_ascii=False)


class WorkspaceConfigWriter:
    """Renders `.replit` and `README.md` from the templates shipped with the package."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.filters["toml_string"] = _toml_string
        self.logger = get_logger("config_writer")

    def write_run_config(self, root: Path, language: str, run_command: str) -> bool:
        """Write `.replit` unless one exists; return True when a file was written."""
        target = self._claim_target(root, RUN_CONFIG_FILENAME)
        if target.exists():
            self.logger.info("%s already exists, skipping creation", RUN_CONFIG_FILENAME)
            return False

        content = self._env.get_template("replit.j2").render(
            run_command=run_command,
            channel=runtime_channel(language),
            nix_channel=NIX_CHANNEL,
        )
        target.write_text(content, encoding="utf-8")
        return True

    def write_readme(
        self,
        root: Path,
        locator: SourceLocator,
        detection: DetectionResult,
    ) -> Path:
        """Replace README.md with generated provenance documentation."""
        target = self._claim_target(root, README_FILENAME)
        content = self._env.get_template("README.md.j2").render(
            owner=locator.owner,
            repo=locator.repo,
            branch=locator.default_branch,
            source_url=locator.html_url,
            language_label=_LANGUAGE_LABELS.get(detection.language, detection.language),
            framework=detection.framework,
            run_command=detection.run_command,
        )
        target.write_text(content, encoding="utf-8")
        return target

    def configure(self, root: Path, locator: SourceLocator, detection: DetectionResult) -> bool:
        """Run both writers; return whether a run configuration was created."""
        written = self.write_run_config(root, detection.language, detection.run_command)
        self.write_readme(root, locator, detection)
        return written

    def _claim_target(self, root: Path, name: str) -> Path:
        """Return the path for `name` directly inside `root`.

        A symlink left there by the source tree is removed, so a planted
        `.replit` counts as missing and nothing is written through it.
        """
        root = Path(root)
        target = root / name
        if target.is_symlink():
            self.logger.warning("Removing symlinked %s from working copy", name)
            target.unlink()
        if not target.resolve().is_relative_to(root.resolve()):
            raise OSError(f"{name} resolves outside the working copy {root}")
        return target


__all__ = [
    "NIX_CHANNEL",
    "README_FILENAME",
    "RUN_CONFIG_FILENAME",
    "WorkspaceConfigWriter",
    "runtime_channel",
]
