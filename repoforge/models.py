"""Core data models shared across repoforge components."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

Language = Literal["nodejs", "python", "other"]
Severity = Literal["error", "warning", "info"]

PLACEHOLDER_RUN_COMMAND = 'echo "Please see README.md for instructions"'

_OWNER_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")
_REPO_RE = re.compile(r"^[A-Za-z0-9._-]{1,100}$")
_BRANCH_RE = re.compile(r"^[A-Za-z0-9._/-]{1,255}$")


@dataclass(frozen=True)
class SourceLocator:
    """Identifies the upstream repository and branch to clone."""

    owner: str
    repo: str
    default_branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    @property
    def clone_url(self) -> str:
        return f"{self.html_url}.git"

    def validate(self, *, require_branch: bool = True) -> None:
        """Raise ValueError when a field cannot be a GitHub owner, repository or branch."""
        if not self.owner or not self.repo:
            raise ValueError("Invalid repository: owner and repo are required")
        if not _OWNER_RE.match(self.owner):
            raise ValueError(f"Invalid repository owner: {self.owner!r}")
        if not _REPO_RE.match(self.repo) or self.repo in {".", ".."}:
            raise ValueError(f"Invalid repository name: {self.repo!r}")
        if require_branch and (
            not _BRANCH_RE.match(self.default_branch or "")
            or self.default_branch.startswith("-")
            or ".." in self.default_branch
        ):
            raise ValueError(f"Invalid branch name: {self.default_branch!r}")


@dataclass(frozen=True)
class DetectionHints:
    """Caller-supplied values used only where detection found nothing."""

    language: Optional[str] = None
    framework: Optional[str] = None
    run_command: Optional[str] = None


@dataclass(frozen=True)
class DetectionResult:
    """Language, framework and run command inferred from a working copy."""

    language: Language
    framework: Optional[str]
    run_command: str


@dataclass(frozen=True)
class TemplateDescriptor:
    """Published template repository handed back to the caller."""

    template_repo_url: str
    import_url: str
    template_name: str
    detected_language: Language
    detected_framework: Optional[str]
    run_command: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PreflightIssue:
    """A single finding reported by the preflight analyzer."""

    severity: Severity
    message: str


@dataclass(frozen=True)
class DetectedFiles:
    """Presence flags for the manifests preflight looks at."""

    has_package_json: bool = False
    has_requirements_txt: bool = False
    has_pyproject_toml: bool = False
    has_dockerfile: bool = False
    has_run_config: bool = False


@dataclass
class PreflightResult:
    """Read-only compatibility report for a repository."""

    language: Optional[str]
    framework: Optional[str]
    run_command: Optional[str]
    confidence: float
    issues: List[PreflightIssue] = field(default_factory=list)
    detected_files: DetectedFiles = field(default_factory=DetectedFiles)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "DetectedFiles",
    "DetectionHints",
    "DetectionResult",
    "Language",
    "PLACEHOLDER_RUN_COMMAND",
    "PreflightIssue",
    "PreflightResult",
    "Severity",
    "SourceLocator",
    "TemplateDescriptor",
]
