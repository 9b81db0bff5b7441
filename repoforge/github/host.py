"""Remote repository host: create repositories and set their default branch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.retry import RetryChainDecision, RetryRateLimit, RetryServerError

from ..credentials import Credential, redact
from ..errors import PublishFailure, PublishFailureReason
from ..logging import get_logger

UNAUTHORIZED = 401
FORBIDDEN = 403
UNPROCESSABLE_ENTITY = 422


@dataclass(frozen=True)
class CreatedRepository:
    """The parts of a freshly created repository the pipeline needs."""

    owner: str
    name: str
    full_name: str
    html_url: str
    clone_url: str


class RepositoryHost(Protocol):
    """Capabilities the materializer needs from a version-control host."""

    def create_repository(
        self, name: str, *, description: str, namespace: str | None = None
    ) -> CreatedRepository: ...

    def set_default_branch(self, owner: str, repo: str, branch: str) -> None: ...


def classify_status(status_code: int | None) -> PublishFailureReason:
    if status_code in (UNAUTHORIZED, FORBIDDEN):
        return PublishFailureReason.CREDENTIAL
    if status_code == UNPROCESSABLE_ENTITY:
        return PublishFailureReason.NAMING
    return PublishFailureReason.REJECTED


def get_githubkit_client(credential: Credential, base_url: str | None = None) -> GitHubKit[Any]:
    retry_chain = RetryChainDecision(RetryServerError(), RetryRateLimit(max_retry=3))
    kwargs: dict[str, Any] = {"auto_retry": retry_chain}
    if base_url:
        kwargs["base_url"] = base_url
    return GitHubKit[TokenAuthStrategy](auth=TokenAuthStrategy(token=credential.token), **kwargs)


class GitHubHost:
    """GitHub REST implementation of :class:`RepositoryHost`."""

    def __init__(
        self,
        credential: Credential,
        *,
        base_url: str | None = None,
        githubkit_client: GitHubKit[Any] | None = None,
    ) -> None:
        self._credential = credential
        self._client = githubkit_client or get_githubkit_client(credential, base_url)
        self.logger = get_logger("github")

    def create_repository(
        self, name: str, *, description: str, namespace: str | None = None
    ) -> CreatedRepository:
        """Create a public, empty repository under ``namespace`` or the authenticated user."""
        target = namespace or "authenticated user"
        try:
            if namespace:
                response = self._client.rest.repos.create_in_org(
                    namespace,
                    name=name,
                    description=description,
                    private=False,
                    auto_init=False,
                )
            else:
                response = self._client.rest.repos.create_for_authenticated_user(
                    name=name,
                    description=description,
                    private=False,
                    auto_init=False,
                )
        except GitHubKitRequestFailed as exc:
            status = exc.response.status_code
            raise PublishFailure(
                f"Repository creation under {target} was rejected",
                reason=classify_status(status),
                attempted_name=name,
                status_code=status,
            ) from None
        except GitHubKitGitHubException as exc:
            raise PublishFailure(
                f"Repository creation under {target} failed: {redact(str(exc), self._credential)}",
                attempted_name=name,
            ) from None

        data = response.parsed_data
        return CreatedRepository(
            owner=data.owner.login,
            name=data.name,
            full_name=data.full_name,
            html_url=data.html_url,
            clone_url=data.clone_url,
        )

    def set_default_branch(self, owner: str, repo: str, branch: str) -> None:
        try:
            self._client.rest.repos.update(owner, repo, default_branch=branch)
        except GitHubKitRequestFailed as exc:
            status = exc.response.status_code
            raise PublishFailure(
                f"Could not set default branch of {owner}/{repo} to {branch}",
                reason=classify_status(status),
                attempted_name=repo,
                status_code=status,
            ) from None
        except GitHubKitGitHubException as exc:
            raise PublishFailure(
                f"Could not set default branch of {owner}/{repo}: {redact(str(exc), self._credential)}",
                attempted_name=repo,
            ) from None


__all__ = [
    "CreatedRepository",
    "GitHubHost",
    "RepositoryHost",
    "classify_status",
    "get_githubkit_client",
]
