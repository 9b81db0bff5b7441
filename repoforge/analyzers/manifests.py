"""Helpers for reading dependency manifests from a working copy."""

from __future__ import annotations

import json
import re
import tomllib
from pathlib import Path
from typing import Dict, List, Set

PACKAGE_JSON = "package.json"
REQUIREMENTS_TXT = "requirements.txt"
PYPROJECT_TOML = "pyproject.toml"
DOCKERFILE = "Dockerfile"

_VERSION_SPLIT = re.compile(r"[<>=!~;@\s]")


def list_entries(root: Path) -> Set[str]:
    """Return the names of the top-level entries in ``root``."""
    try:
        return {entry.name for entry in root.iterdir()}
    except OSError:
        return set()


def read_text(path: Path) -> str:
    """Return file contents, or an empty string when unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


# Python dependency helpers


def normalise_package_name(raw: str) -> str:
    name = _VERSION_SPLIT.split(raw.strip(), 1)[0]
    name = name.split("[", 1)[0]
    return name.strip().lower().replace("_", "-")


def load_python_dependencies(root: Path) -> List[str]:
    """Collect normalised Python dependency names from requirements.txt and pyproject.toml."""
    deps: Set[str] = set()

    requirements = root / REQUIREMENTS_TXT
    if requirements.is_file():
        deps.update(_parse_requirements(read_text(requirements)))

    pyproject = root / PYPROJECT_TOML
    if pyproject.is_file():
        deps.update(_parse_pyproject(read_text(pyproject)))

    deps.discard("")
    deps.discard("python")
    return sorted(deps)


def _parse_requirements(text: str) -> List[str]:
    packages: List[str] = []
    for line in text.splitlines():
        stripped = line.split("#", 1)[0].strip()
        if not stripped or stripped.startswith("-"):
            continue
        packages.append(normalise_package_name(stripped))
    return packages


def _parse_pyproject(text: str) -> List[str]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return []

    dependencies: List[object] = []
    project = data.get("project")
    if isinstance(project, dict):
        dependencies.extend(project.get("dependencies", []) or [])
        optional = project.get("optional-dependencies", {}) or {}
        if isinstance(optional, dict):
            for values in optional.values():
                dependencies.extend(values or [])

    tool = data.get("tool")
    poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
    if isinstance(poetry, dict):
        poetry_deps = poetry.get("dependencies", {}) or {}
        if isinstance(poetry_deps, dict):
            dependencies.extend(poetry_deps.keys())

    return [normalise_package_name(dep) for dep in dependencies if isinstance(dep, str)]


# Node.js helpers


def load_package_json(root: Path) -> Dict[str, object] | None:
    """Return the parsed package.json, or None when missing or malformed."""
    package_json = root / PACKAGE_JSON
    if not package_json.is_file():
        return None
    try:
        data = json.loads(read_text(package_json))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def node_dependency_names(package: Dict[str, object]) -> Set[str]:
    """Combined runtime and development dependency names."""
    names: Set[str] = set()
    for key in ("dependencies", "devDependencies"):
        deps = package.get(key)
        if isinstance(deps, dict):
            names.update(str(name) for name in deps)
    return names


def node_scripts(package: Dict[str, object]) -> Dict[str, str]:
    scripts = package.get("scripts")
    if not isinstance(scripts, dict):
        return {}
    return {str(name): str(command) for name, command in scripts.items()}


def detect_node_package_manager(entries: Set[str]) -> str:
    """Infer the preferred Node package manager based on lockfiles."""
    if "pnpm-lock.yaml" in entries:
        return "pnpm"
    if "yarn.lock" in entries:
        return "yarn"
    return "npm"


def build_node_script_command(script: str, manager: str) -> str:
    manager = manager.lower()
    if manager in {"pnpm", "yarn"}:
        return f"{manager} {script}"
    # npm run <script>, except start which can be `npm start`
    if script == "start":
        return "npm start"
    return f"npm run {script}"


def build_node_run_command(script: str, manager: str) -> str:
    """Install dependencies, then run ``script``."""
    return f"{manager} install && {build_node_script_command(script, manager)}"


__all__ = [
    "DOCKERFILE",
    "PACKAGE_JSON",
    "PYPROJECT_TOML",
    "REQUIREMENTS_TXT",
    "build_node_run_command",
    "build_node_script_command",
    "detect_node_package_manager",
    "list_entries",
    "load_package_json",
    "load_python_dependencies",
    "node_dependency_names",
    "node_scripts",
    "normalise_package_name",
    "read_text",
]
