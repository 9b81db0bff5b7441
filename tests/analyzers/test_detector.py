"""Tests for the project detector heuristics."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoforge.analyzers.detector import ProjectDetector, apply_hints, detect_node_framework
from repoforge.models import PLACEHOLDER_RUN_COMMAND, DetectionHints, DetectionResult
from tests._fixtures.repo_builder import RepoBuilder


def _detect(repo_builder: RepoBuilder, files: dict[str, str], hints: DetectionHints | None = None) -> DetectionResult:
    repo_builder.write(files)
    return ProjectDetector().detect(repo_builder.path(), hints)


def test_detects_nextjs_with_dev_script(repo_builder: RepoBuilder) -> None:
    result = _detect(
        repo_builder,
        {
            "package.json": """
            {
              "scripts": {"dev": "next dev", "start": "next start"},
              "dependencies": {"next": "14.0.0", "react": "18.2.0"}
            }
            """,
        },
    )

    assert result == DetectionResult(
        language="nodejs",
        framework="nextjs",
        run_command="npm install && npm run dev",
    )


def test_detects_vite_only_alongside_react(repo_builder: RepoBuilder) -> None:
    result = _detect(
        repo_builder,
        {
            "package.json": """
            {
              "scripts": {"dev": "vite"},
              "dependencies": {"react": "18.2.0"},
              "devDependencies": {"vite": "5.0.0"}
            }
            """,
        },
    )

    assert result.framework == "vite"


def test_vite_without_ui_library_has_no_framework() -> None:
    assert detect_node_framework({"vite"}) is None
    assert detect_node_framework({"react"}) == "react"
    assert detect_node_framework({"express"}) is None


def test_start_script_used_when_dev_missing(repo_builder: RepoBuilder) -> None:
    result = _detect(
        repo_builder,
        {"package.json": '{"scripts": {"start": "react-scripts start"}, "dependencies": {"react": "18"}}'},
    )

    assert result.framework == "react"
    assert result.run_command == "npm install && npm start"


def test_node_without_scripts_falls_back_to_dev(repo_builder: RepoBuilder) -> None:
    result = _detect(repo_builder, {"package.json": '{"name": "bare"}'})

    assert result.language == "nodejs"
    assert result.framework is None
    assert result.run_command == "npm install && npm run dev"


def test_invalid_package_json_still_detects_node(repo_builder: RepoBuilder) -> None:
    result = _detect(repo_builder, {"package.json": "{not json"})

    assert result.language == "nodejs"
    assert result.run_command == "npm install && npm run dev"


def test_lockfile_selects_package_manager(repo_builder: RepoBuilder) -> None:
    result = _detect(
        repo_builder,
        {
            "package.json": '{"scripts": {"dev": "vite"}}',
            "pnpm-lock.yaml": "lockfileVersion: 6.0\n",
        },
    )

    assert result.run_command == "pnpm install && pnpm dev"


def test_node_manifest_wins_over_python(repo_builder: RepoBuilder) -> None:
    result = _detect(
        repo_builder,
        {
            "package.json": '{"scripts": {"dev": "vite"}}',
            "requirements.txt": "flask\n",
        },
    )

    assert result.language == "nodejs"


def test_detects_flask_with_app_entry(repo_builder: RepoBuilder) -> None:
    result = _detect(
        repo_builder,
        {
            "requirements.txt": "Flask==3.0.0\ngunicorn\n",
            "app.py": "from flask import Flask\n",
        },
    )

    assert result == DetectionResult(
        language="python",
        framework="flask",
        run_command="pip install -r requirements.txt && python app.py",
    )


def test_flask_dependency_without_app_py_runs_main(repo_builder: RepoBuilder) -> None:
    result = _detect(repo_builder, {"requirements.txt": "flask>=2\n", "main.py": ""})

    assert result.framework == "flask"
    assert result.run_command == "pip install -r requirements.txt && python main.py"


def test_flask_extension_is_not_flask(repo_builder: RepoBuilder) -> None:
    result = _detect(repo_builder, {"requirements.txt": "flask-cors\n", "main.py": ""})

    assert result.framework is None
    assert result.run_command == "pip install -r requirements.txt && python main.py"


def test_detects_fastapi(repo_builder: RepoBuilder) -> None:
    result = _detect(repo_builder, {"requirements.txt": "fastapi[all]\nuvicorn\n", "main.py": ""})

    assert result.framework == "fastapi"
    assert result.run_command == "pip install -r requirements.txt && uvicorn main:app --reload"


@pytest.mark.parametrize(
    "files",
    [
        {"requirements.txt": "Django>=5\n"},
        {"requirements.txt": "psycopg\n", "manage.py": "import django\n"},
    ],
)
def test_detects_django(repo_builder: RepoBuilder, files: dict[str, str]) -> None:
    result = _detect(repo_builder, files)

    assert result.framework == "django"
    assert result.run_command.endswith("python manage.py runserver")


def test_pyproject_only_installs_project(repo_builder: RepoBuilder) -> None:
    result = _detect(
        repo_builder,
        {
            "pyproject.toml": """
            [project]
            name = "demo"
            dependencies = ["fastapi>=0.110", "uvicorn"]
            """,
        },
    )

    assert result.language == "python"
    assert result.framework == "fastapi"
    assert result.run_command == "pip install . && uvicorn main:app --reload"


def test_unrecognised_tree_gets_placeholder(repo_builder: RepoBuilder) -> None:
    result = _detect(repo_builder, {"main.go": "package main\n", "Dockerfile": "FROM scratch\n"})

    assert result == DetectionResult(language="other", framework=None, run_command=PLACEHOLDER_RUN_COMMAND)


def test_missing_directory_never_raises(tmp_path: Path) -> None:
    result = ProjectDetector().detect(tmp_path / "does-not-exist")

    assert result.language == "other"
    assert result.run_command


def test_hints_backfill_empty_fields(repo_builder: RepoBuilder) -> None:
    hints = DetectionHints(language="python", framework="streamlit", run_command="streamlit run app.py")
    result = _detect(repo_builder, {"notes.txt": "hello\n"}, hints)

    assert result == DetectionResult(
        language="python",
        framework="streamlit",
        run_command="streamlit run app.py",
    )


def test_hints_never_override_detection(repo_builder: RepoBuilder) -> None:
    hints = DetectionHints(language="python", framework="django", run_command="make run")
    result = _detect(
        repo_builder,
        {"package.json": '{"scripts": {"dev": "next dev"}, "dependencies": {"next": "14"}}'},
        hints,
    )

    assert result.language == "nodejs"
    assert result.framework == "nextjs"
    assert result.run_command == "npm install && npm run dev"


def test_unknown_language_hint_is_ignored() -> None:
    base = DetectionResult(language="other", framework=None, run_command=PLACEHOLDER_RUN_COMMAND)

    result = apply_hints(base, DetectionHints(language="rust"))

    assert result.language == "other"
    assert result.run_command == PLACEHOLDER_RUN_COMMAND
