"""Turn a working copy into a template: sanitize it and write run configuration."""

from __future__ import annotations

from .config_writer import RUN_CONFIG_FILENAME, WorkspaceConfigWriter, runtime_channel
from .sanitizer import DEFAULT_DENYLIST, TemplateSanitizer

__all__ = [
    "DEFAULT_DENYLIST",
    "RUN_CONFIG_FILENAME",
    "TemplateSanitizer",
    "WorkspaceConfigWriter",
    "runtime_channel",
]
