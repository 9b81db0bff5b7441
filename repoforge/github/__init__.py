"""GitHub repository host adapter."""

from __future__ import annotations

from .host import CreatedRepository, GitHubHost, RepositoryHost, classify_status

__all__ = ["CreatedRepository", "GitHubHost", "RepositoryHost", "classify_status"]
