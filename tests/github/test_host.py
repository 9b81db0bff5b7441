"""Tests for the GitHub repository host."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from githubkit.exception import GitHubException

from repoforge.credentials import Credential
from repoforge.errors import PublishFailure, PublishFailureReason
from repoforge.github.host import GitHubHost, classify_status

TOKEN = "ghp_hosttoken456"


class FakeRepos:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def _respond(self, owner: str, name: str) -> SimpleNamespace:
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            parsed_data=SimpleNamespace(
                owner=SimpleNamespace(login=owner),
                name=name,
                full_name=f"{owner}/{name}",
                html_url=f"https://github.com/{owner}/{name}",
                clone_url=f"https://github.com/{owner}/{name}.git",
            )
        )

    def create_in_org(self, org: str, **kwargs: Any) -> SimpleNamespace:
        self.calls.append({"method": "create_in_org", "org": org, **kwargs})
        return self._respond(org, kwargs["name"])

    def create_for_authenticated_user(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append({"method": "create_for_authenticated_user", **kwargs})
        return self._respond("octocat", kwargs["name"])

    def update(self, owner: str, repo: str, **kwargs: Any) -> SimpleNamespace:
        self.calls.append({"method": "update", "owner": owner, "repo": repo, **kwargs})
        if self.error is not None:
            raise self.error
        return SimpleNamespace()


def _host(repos: FakeRepos) -> GitHubHost:
    client = SimpleNamespace(rest=SimpleNamespace(repos=repos))
    return GitHubHost(Credential(TOKEN), githubkit_client=client)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("status", "reason"),
    [
        (401, PublishFailureReason.CREDENTIAL),
        (403, PublishFailureReason.CREDENTIAL),
        (422, PublishFailureReason.NAMING),
        (500, PublishFailureReason.REJECTED),
        (None, PublishFailureReason.REJECTED),
    ],
)
def test_classify_status(status, reason) -> None:  # type: ignore[no-untyped-def]
    assert classify_status(status) is reason


def test_create_repository_for_user() -> None:
    repos = FakeRepos()

    created = _host(repos).create_repository("demo-replit-template-1", description="desc")

    assert created.full_name == "octocat/demo-replit-template-1"
    assert created.clone_url == "https://github.com/octocat/demo-replit-template-1.git"
    assert repos.calls == [
        {
            "method": "create_for_authenticated_user",
            "name": "demo-replit-template-1",
            "description": "desc",
            "private": False,
            "auto_init": False,
        }
    ]


def test_create_repository_in_organization() -> None:
    repos = FakeRepos()

    created = _host(repos).create_repository("demo", description="d", namespace="templates")

    assert created.owner == "templates"
    assert repos.calls[0]["method"] == "create_in_org"
    assert repos.calls[0]["org"] == "templates"
    assert repos.calls[0]["auto_init"] is False


def test_transport_error_becomes_redacted_publish_failure() -> None:
    repos = FakeRepos(error=GitHubException(f"connection reset while sending token {TOKEN}"))

    with pytest.raises(PublishFailure) as excinfo:
        _host(repos).create_repository("demo", description="d")

    failure = excinfo.value
    assert failure.reason is PublishFailureReason.REJECTED
    assert failure.attempted_name == "demo"
    assert TOKEN not in str(failure)
    assert not failure.requires_reauthentication


def test_set_default_branch_updates_repository() -> None:
    repos = FakeRepos()

    _host(repos).set_default_branch("octocat", "demo", "main")

    assert repos.calls == [
        {"method": "update", "owner": "octocat", "repo": "demo", "default_branch": "main"}
    ]


def test_set_default_branch_failure_is_publish_failure() -> None:
    repos = FakeRepos(error=GitHubException("boom"))

    with pytest.raises(PublishFailure, match="Could not set default branch"):
        _host(repos).set_default_branch("octocat", "demo", "main")
