"""Configuration loading for repoforge (.repoforge.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

CONFIG_FILENAME = ".repoforge.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TimeoutConfig:
    """Wall-clock limits, in seconds."""

    clone: float = 120.0
    preflight_clone: float = 30.0
    pipeline: float = 180.0


@dataclass
class BotIdentity:
    """Author identity used for the template's initial commit."""

    name: str = "Tutorial Tinder Bot"
    email: str = "bot@tutorial-tinder.app"


@dataclass
class ForgeConfig:
    """Represents the settings defined in .repoforge.yml."""

    ide_host: str = "https://replit.com"
    api_base_url: Optional[str] = None
    canonical_branch: str = "main"
    template_suffix: str = "replit-template"
    target_namespace: Optional[str] = None
    work_dir: Optional[Path] = None
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    bot: BotIdentity = field(default_factory=BotIdentity)

    def import_url(self, full_name: str) -> str:
        return f"{self.ide_host.rstrip('/')}/github/{full_name}"


def load_config(
    config_path: Path | None = None, *, environ: Mapping[str, str] | None = None
) -> ForgeConfig:
    """Load configuration from disk, then apply environment overrides."""
    env = os.environ if environ is None else environ
    config = ForgeConfig()

    if config_path is not None:
        config_file = _resolve_config_path(config_path)
        if config_file.exists():
            data = _read_config(config_file)
            _apply_mapping(config, data, root=config_file.parent)

    _apply_environment(config, env)
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _apply_mapping(config: ForgeConfig, data: Dict[str, Any], *, root: Path) -> None:
    for key in ("ide_host", "api_base_url", "canonical_branch", "template_suffix"):
        value = _as_str(data.get(key))
        if value:
            setattr(config, key, value)

    namespace = _as_str(data.get("target_namespace"))
    if namespace:
        config.target_namespace = namespace

    work_dir = _as_str(data.get("work_dir"))
    if work_dir:
        config.work_dir = (root / work_dir).resolve()

    timeouts = _as_dict(data.get("timeouts"))
    for key in ("clone", "preflight_clone", "pipeline"):
        value = _as_float(timeouts.get(key))
        if value is not None:
            if value <= 0:
                raise ConfigError(f"timeouts.{key} must be positive")
            setattr(config.timeouts, key, value)

    bot = _as_dict(data.get("bot"))
    name = _as_str(bot.get("name"))
    email = _as_str(bot.get("email"))
    if name:
        config.bot.name = name
    if email:
        config.bot.email = email


def _apply_environment(config: ForgeConfig, env: Mapping[str, str]) -> None:
    namespace = env.get("REPOFORGE_TARGET_NAMESPACE")
    if namespace:
        config.target_namespace = namespace

    work_dir = env.get("REPOFORGE_WORK_DIR")
    if work_dir:
        config.work_dir = Path(work_dir).expanduser()

    pipeline_timeout = _as_float(env.get("REPOFORGE_PIPELINE_TIMEOUT"))
    if pipeline_timeout is not None and pipeline_timeout > 0:
        config.timeouts.pipeline = pipeline_timeout


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


__all__ = [
    "BotIdentity",
    "CONFIG_FILENAME",
    "ConfigError",
    "ForgeConfig",
    "TimeoutConfig",
    "load_config",
]
