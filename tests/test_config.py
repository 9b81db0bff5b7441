"""Tests for repoforge.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoforge.config import ConfigError, ForgeConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, ForgeConfig)
    assert config.ide_host == "https://replit.com"
    assert config.canonical_branch == "main"
    assert config.template_suffix == "replit-template"
    assert config.target_namespace is None
    assert config.work_dir is None
    assert config.timeouts.clone == pytest.approx(120.0)
    assert config.timeouts.preflight_clone == pytest.approx(30.0)
    assert config.timeouts.pipeline == pytest.approx(180.0)
    assert config.bot.name == "Tutorial Tinder Bot"
    assert config.bot.email == "bot@tutorial-tinder.app"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".repoforge.yml").write_text(
        """
ide_host: "https://ide.example.com/"
api_base_url: "https://ghe.example.com/api/v3"
template_suffix: "starter"
target_namespace: "templates"
work_dir: "scratch"
timeouts:
  clone: 60
  preflight_clone: "15"
  pipeline: 90.5
bot:
  name: "Template Bot"
  email: "templates@example.com"
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path, environ={})

    assert config.ide_host == "https://ide.example.com/"
    assert config.api_base_url == "https://ghe.example.com/api/v3"
    assert config.template_suffix == "starter"
    assert config.target_namespace == "templates"
    assert config.work_dir == (tmp_path / "scratch").resolve()
    assert config.timeouts.clone == pytest.approx(60.0)
    assert config.timeouts.preflight_clone == pytest.approx(15.0)
    assert config.timeouts.pipeline == pytest.approx(90.5)
    assert config.bot.name == "Template Bot"
    assert config.bot.email == "templates@example.com"
    assert config.import_url("templates/demo") == "https://ide.example.com/github/templates/demo"


def test_load_config_accepts_explicit_file(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("canonical_branch: trunk\n", encoding="utf-8")

    assert load_config(config_file, environ={}).canonical_branch == "trunk"


def test_environment_overrides_file(tmp_path: Path) -> None:
    (tmp_path / ".repoforge.yml").write_text(
        "target_namespace: from-file\ntimeouts:\n  pipeline: 100\n", encoding="utf-8"
    )

    config = load_config(
        tmp_path,
        environ={
            "REPOFORGE_TARGET_NAMESPACE": "from-env",
            "REPOFORGE_WORK_DIR": str(tmp_path / "env-work"),
            "REPOFORGE_PIPELINE_TIMEOUT": "45",
        },
    )

    assert config.target_namespace == "from-env"
    assert config.work_dir == tmp_path / "env-work"
    assert config.timeouts.pipeline == pytest.approx(45.0)


def test_invalid_environment_timeout_is_ignored(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={"REPOFORGE_PIPELINE_TIMEOUT": "soon"})

    assert config.timeouts.pipeline == pytest.approx(180.0)


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".repoforge.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path, environ={}) == ForgeConfig()


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".repoforge.yml").write_text("timeouts: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path, environ={})


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".repoforge.yml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path, environ={})


def test_non_positive_timeout_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".repoforge.yml").write_text("timeouts:\n  clone: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="timeouts.clone"):
        load_config(tmp_path, environ={})
