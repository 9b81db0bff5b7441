"""Read-only compatibility analysis of a repository before materializing it."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .analyzers.detector import ProjectDetector
from .analyzers.manifests import (
    DOCKERFILE,
    PACKAGE_JSON,
    PYPROJECT_TOML,
    REQUIREMENTS_TXT,
    list_entries,
    load_package_json,
    node_dependency_names,
    node_scripts,
)
from .config import ForgeConfig
from .git.workspace import GitCommandError, GitWorkspace, WorkingCopy
from .logging import get_logger
from .models import DetectedFiles, PreflightIssue, PreflightResult, SourceLocator
from .template.config_writer import RUN_CONFIG_FILENAME

CONFIDENCE_PRECONFIGURED = 1.0
CONFIDENCE_NODE_FULLSTACK = 0.9
CONFIDENCE_NODE_REACT = 0.8
CONFIDENCE_NODE_SERVER = 0.7
CONFIDENCE_NODE_SCRIPT = 0.6
CONFIDENCE_NODE_BARE = 0.4
CONFIDENCE_PYTHON_PROJECT = 0.7
CONFIDENCE_PYTHON_REQUIREMENTS = 0.6
CONFIDENCE_CONTAINER = 0.3
CONFIDENCE_NONE = 0.0

_SERVER_FRAMEWORKS = ("express", "koa", "fastify", "@hapi/hapi")


def inspect_files(root: Path) -> DetectedFiles:
    entries = list_entries(Path(root))
    return DetectedFiles(
        has_package_json=PACKAGE_JSON in entries,
        has_requirements_txt=REQUIREMENTS_TXT in entries,
        has_pyproject_toml=PYPROJECT_TOML in entries,
        has_dockerfile=DOCKERFILE in entries,
        has_run_config=RUN_CONFIG_FILENAME in entries,
    )


def score_tree(root: Path, detector: ProjectDetector | None = None) -> PreflightResult:
    """Score an already checked-out tree. Never touches the network."""
    root = Path(root)
    detected = inspect_files(root)

    if detected.has_run_config:
        return PreflightResult(
            language="pre-configured",
            framework="Replit",
            run_command="Already configured in .replit file",
            confidence=CONFIDENCE_PRECONFIGURED,
            issues=[
                PreflightIssue("info", "Repository already has a .replit configuration file.")
            ],
            detected_files=detected,
        )

    detector = detector or ProjectDetector()
    issues: List[PreflightIssue] = []

    if detected.has_package_json:
        detection = detector.detect(root)
        framework = detection.framework
        package = load_package_json(root)
        if package is None:
            confidence = CONFIDENCE_NODE_BARE
            issues.append(
                PreflightIssue(
                    "warning",
                    "package.json could not be parsed. May need manual configuration.",
                )
            )
        else:
            deps = {dep.lower() for dep in node_dependency_names(package)}
            scripts = node_scripts(package)
            server = next((name for name in _SERVER_FRAMEWORKS if name in deps), None)
            if framework in ("nextjs", "vite"):
                confidence = CONFIDENCE_NODE_FULLSTACK
            elif framework == "react":
                confidence = CONFIDENCE_NODE_REACT
            elif server is not None:
                framework = server
                confidence = CONFIDENCE_NODE_SERVER
                issues.append(
                    PreflightIssue(
                        "warning",
                        f"{server} server detected. Make sure it binds to 0.0.0.0 and reads the "
                        "port from the PORT environment variable for Replit compatibility.",
                    )
                )
            elif "dev" in scripts or "start" in scripts:
                confidence = CONFIDENCE_NODE_SCRIPT
            else:
                confidence = CONFIDENCE_NODE_BARE
                issues.append(
                    PreflightIssue(
                        "warning",
                        "No dev or start script found in package.json. May need manual configuration.",
                    )
                )
        return PreflightResult(
            language=detection.language,
            framework=framework,
            run_command=detection.run_command,
            confidence=confidence,
            issues=issues,
            detected_files=detected,
        )

    if detected.has_requirements_txt or detected.has_pyproject_toml:
        detection = detector.detect(root)
        if detected.has_pyproject_toml:
            confidence = CONFIDENCE_PYTHON_PROJECT
            issues.append(
                PreflightIssue(
                    "info",
                    "pyproject.toml detected. May need to adjust the entry point (main.py, app.py, etc.).",
                )
            )
        else:
            confidence = CONFIDENCE_PYTHON_REQUIREMENTS
            issues.append(
                PreflightIssue(
                    "warning",
                    "Python project detected. May need to specify the correct entry point "
                    "(main.py, app.py, manage.py, etc.).",
                )
            )
        return PreflightResult(
            language=detection.language,
            framework=detection.framework,
            run_command=detection.run_command,
            confidence=confidence,
            issues=issues,
            detected_files=detected,
        )

    if detected.has_dockerfile:
        return PreflightResult(
            language="docker",
            framework="container",
            run_command=None,
            confidence=CONFIDENCE_CONTAINER,
            issues=[
                PreflightIssue(
                    "warning",
                    "Dockerfile detected. Replit supports Docker, but may need manual configuration.",
                )
            ],
            detected_files=detected,
        )

    return PreflightResult(
        language=None,
        framework=None,
        run_command=None,
        confidence=CONFIDENCE_NONE,
        issues=[
            PreflightIssue(
                "error",
                "Could not detect language or framework. No package.json, requirements.txt, "
                "or pyproject.toml found.",
            )
        ],
        detected_files=detected,
    )


def failure_result(message: str, detected: DetectedFiles | None = None) -> PreflightResult:
    return PreflightResult(
        language=None,
        framework=None,
        run_command=None,
        confidence=CONFIDENCE_NONE,
        issues=[PreflightIssue("error", message)],
        detected_files=detected or DetectedFiles(),
    )


class PreflightAnalyzer:
    """Clones a repository read-only and reports how ready it is for Replit.

    ``analyze`` is total: every failure is reported in-band as an error issue
    with zero confidence.
    """

    def __init__(
        self,
        config: ForgeConfig | None = None,
        *,
        git: GitWorkspace | None = None,
        detector: ProjectDetector | None = None,
    ) -> None:
        self.config = config or ForgeConfig()
        self.git = git or GitWorkspace()
        self.detector = detector or ProjectDetector()
        self.logger = get_logger("preflight")

    def analyze(self, owner: str, repo: str, *, branch: str | None = None) -> PreflightResult:
        branch = branch or None
        locator = SourceLocator(owner=owner, repo=repo, default_branch=branch or "")
        try:
            locator.validate(require_branch=branch is not None)
        except ValueError as exc:
            return failure_result(str(exc))

        copy: Optional[WorkingCopy] = None
        try:
            copy = WorkingCopy(prefix="repoforge-preflight-", parent=self.config.work_dir)
            self.logger.info("Cloning %s to %s", locator.full_name, copy.path)
            self.git.clone(
                locator.clone_url,
                copy.path,
                branch=branch,
                timeout=self.config.timeouts.preflight_clone,
            )
            self.logger.info("Clone complete, analyzing files...")
            result = score_tree(copy.path, self.detector)
            self.logger.info(
                "Analysis complete: %s, confidence: %s",
                result.language or "unknown",
                result.confidence,
            )
            return result
        except GitCommandError as exc:
            self.logger.error("Error analyzing %s: %s", locator.full_name, exc)
            return failure_result(f"Failed to clone repository: {exc.detail}")
        except Exception as exc:  # pragma: no cover - analyze must never raise
            self.logger.error("Error analyzing %s: %s", locator.full_name, exc)
            return failure_result(f"Failed to clone or analyze repository: {exc}")
        finally:
            if copy is not None:
                copy.release()


def analyze(owner: str, repo: str, *, config: ForgeConfig | None = None) -> PreflightResult:
    """Analyze with default collaborators."""
    return PreflightAnalyzer(config).analyze(owner, repo)


__all__ = [
    "PreflightAnalyzer",
    "analyze",
    "failure_result",
    "inspect_files",
    "score_tree",
]
