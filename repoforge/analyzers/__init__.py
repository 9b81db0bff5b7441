"""Manifest inspection and project detection."""

from __future__ import annotations

from .detector import ProjectDetector, apply_hints, detect_node_framework, detect_project

__all__ = ["ProjectDetector", "apply_hints", "detect_node_framework", "detect_project"]
