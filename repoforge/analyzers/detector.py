"""Infer language, framework and run command from a working copy."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Set

from ..logging import get_logger
from ..models import (
    PLACEHOLDER_RUN_COMMAND,
    DetectionHints,
    DetectionResult,
    Language,
)
from .manifests import (
    PACKAGE_JSON,
    PYPROJECT_TOML,
    REQUIREMENTS_TXT,
    build_node_run_command,
    detect_node_package_manager,
    list_entries,
    load_package_json,
    load_python_dependencies,
    node_dependency_names,
    node_scripts,
)

_HINTABLE_LANGUAGES = {"nodejs", "python"}


class ProjectDetector:
    """Best-effort classifier over the top-level manifests of a tree.

    Node manifests win over Python ones. Within a family the first matching
    rule decides the framework and run command. ``detect`` never raises: an
    unrecognised tree yields ``other`` with a placeholder command.
    """

    def __init__(self) -> None:
        self.logger = get_logger("detector")

    def detect(self, root: Path, hints: DetectionHints | None = None) -> DetectionResult:
        try:
            result = self._detect(Path(root))
        except Exception as exc:  # pragma: no cover - manifest loaders already absorb I/O errors
            self.logger.warning("Detection failed for %s: %s", root, exc)
            result = DetectionResult(language="other", framework=None, run_command=PLACEHOLDER_RUN_COMMAND)

        if hints is not None:
            result = apply_hints(result, hints)

        self.logger.debug(
            "Detected %s (%s): %s",
            result.language,
            result.framework or "no framework",
            result.run_command,
        )
        return result

    def _detect(self, root: Path) -> DetectionResult:
        entries = list_entries(root)
        if PACKAGE_JSON in entries:
            return self._detect_node(root, entries)
        if REQUIREMENTS_TXT in entries or PYPROJECT_TOML in entries:
            return self._detect_python(root, entries)
        return DetectionResult(language="other", framework=None, run_command=PLACEHOLDER_RUN_COMMAND)

    # ------------------------------------------------------------------
    # Node.js heuristics

    def _detect_node(self, root: Path, entries: Set[str]) -> DetectionResult:
        manager = detect_node_package_manager(entries)
        package = load_package_json(root)
        if package is None:
            self.logger.warning("package.json in %s could not be parsed", root)
            return DetectionResult(
                language="nodejs",
                framework=None,
                run_command=build_node_run_command("dev", manager),
            )

        framework = detect_node_framework(node_dependency_names(package))
        scripts = node_scripts(package)
        if "dev" in scripts:
            run_command = build_node_run_command("dev", manager)
        elif "start" in scripts:
            run_command = build_node_run_command("start", manager)
        else:
            run_command = build_node_run_command("dev", manager)
        return DetectionResult(language="nodejs", framework=framework, run_command=run_command)

    # ------------------------------------------------------------------
    # Python heuristics

    def _detect_python(self, root: Path, entries: Set[str]) -> DetectionResult:
        deps = set(load_python_dependencies(root))
        install = (
            "pip install -r requirements.txt"
            if REQUIREMENTS_TXT in entries
            else "pip install ."
        )
        has_app = "app.py" in entries

        framework: Optional[str] = None
        if "flask" in deps or has_app:
            framework = "flask"
            entry = "app.py" if has_app else "main.py"
            command = f"python {entry}"
        elif "fastapi" in deps:
            framework = "fastapi"
            command = "uvicorn main:app --reload"
        elif "django" in deps or "manage.py" in entries:
            framework = "django"
            command = "python manage.py runserver"
        else:
            # main.py is the conventional entry even when it is missing.
            command = "python main.py"

        return DetectionResult(
            language="python",
            framework=framework,
            run_command=f"{install} && {command}",
        )


def detect_node_framework(dependencies: Set[str]) -> Optional[str]:
    lower = {dep.lower() for dep in dependencies}
    if "next" in lower:
        return "nextjs"
    if "vite" in lower and "react" in lower:
        return "vite"
    if "react" in lower:
        return "react"
    return None


def apply_hints(result: DetectionResult, hints: DetectionHints) -> DetectionResult:
    """Backfill fields the heuristics left empty; never override a detection."""
    language: Language = result.language
    if language == "other" and hints.language in _HINTABLE_LANGUAGES:
        language = hints.language  # type: ignore[assignment]

    framework = result.framework or hints.framework or None

    run_command = result.run_command
    if run_command == PLACEHOLDER_RUN_COMMAND and hints.run_command and hints.run_command.strip():
        run_command = hints.run_command.strip()

    return DetectionResult(language=language, framework=framework, run_command=run_command)


def detect_project(root: Path, hints: DetectionHints | None = None) -> DetectionResult:
    """Module-level shortcut for :meth:`ProjectDetector.detect`."""
    return ProjectDetector().detect(root, hints)


__all__ = ["ProjectDetector", "apply_hints", "detect_node_framework", "detect_project"]
