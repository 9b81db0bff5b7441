"""Git helpers for cloning, versioning and pushing working copies."""

from __future__ import annotations

from .workspace import GitCommandError, GitWorkspace, WorkingCopy, authenticated_url, is_empty_checkout

__all__ = ["GitCommandError", "GitWorkspace", "WorkingCopy", "authenticated_url", "is_empty_checkout"]
