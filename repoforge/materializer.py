"""Pipeline that turns an upstream repository into a published template repository."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Callable, Optional

from .analyzers.detector import ProjectDetector
from .config import ForgeConfig
from .credentials import Credential, CredentialLike, coerce_credential
from .errors import CloneFailure, ConfigurationFailure, PublishFailure, TimeoutFailure
from .git.workspace import GitCommandError, GitWorkspace, WorkingCopy, is_empty_checkout
from .github.host import CreatedRepository, GitHubHost, RepositoryHost
from .logging import get_logger
from .models import DetectionHints, DetectionResult, SourceLocator, TemplateDescriptor
from .template.config_writer import WorkspaceConfigWriter
from .template.sanitizer import TemplateSanitizer

HostFactory = Callable[[Credential], RepositoryHost]


class Materializer:
    """Clones, cleans, configures and republishes a repository as a template.

    Stages run strictly in order and none is retried. Nothing is created on the
    remote host until the working copy has been committed, so a failure in any
    earlier stage leaves no remote footprint. The working copy is removed on
    every exit path.
    """

    def __init__(
        self,
        config: ForgeConfig | None = None,
        *,
        git: GitWorkspace | None = None,
        detector: ProjectDetector | None = None,
        sanitizer: TemplateSanitizer | None = None,
        config_writer: WorkspaceConfigWriter | None = None,
        host_factory: HostFactory | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or ForgeConfig()
        self.git = git or GitWorkspace()
        self.detector = detector or ProjectDetector()
        self.sanitizer = sanitizer or TemplateSanitizer()
        self.config_writer = config_writer or WorkspaceConfigWriter()
        self._host_factory = host_factory or self._default_host_factory
        self._clock = clock
        self.logger = get_logger("materializer")

    def materialize(
        self,
        locator: SourceLocator,
        credential: CredentialLike,
        target_namespace: str | None = None,
        *,
        hints: DetectionHints | None = None,
    ) -> TemplateDescriptor:
        """Run the full pipeline and return the published template descriptor."""
        resolved = self._require_credential(credential)
        try:
            locator.validate()
        except ValueError as exc:
            raise ConfigurationFailure(str(exc), repository=locator.full_name) from None

        namespace = target_namespace or self.config.target_namespace
        copy = WorkingCopy(prefix="repoforge-template-", parent=self.config.work_dir)
        try:
            return self._run_pipeline(copy.path, locator, resolved, namespace, hints)
        finally:
            copy.release()

    def materialize_with_timeout(
        self,
        locator: SourceLocator,
        credential: CredentialLike,
        target_namespace: str | None = None,
        *,
        hints: DetectionHints | None = None,
        timeout: float | None = None,
    ) -> TemplateDescriptor:
        """Race :meth:`materialize` against a wall-clock limit.

        On expiry the caller gets a :class:`TimeoutFailure` while the worker
        thread keeps running; in-flight git or network calls are not killed,
        and the worker still releases its working copy when it finishes.
        """
        limit = timeout if timeout is not None else self.config.timeouts.pipeline
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="repoforge-materialize")
        try:
            future = executor.submit(
                self.materialize, locator, credential, target_namespace, hints=hints
            )
            try:
                return future.result(timeout=limit)
            except FutureTimeoutError:
                self.logger.error(
                    "Template generation for %s abandoned after %g seconds", locator.full_name, limit
                )
                raise TimeoutFailure(
                    f"Template generation timed out after {limit:g} seconds",
                    repository=locator.full_name,
                ) from None
        finally:
            executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Pipeline stages

    def _run_pipeline(
        self,
        repo_path: Path,
        locator: SourceLocator,
        credential: Credential,
        namespace: Optional[str],
        hints: Optional[DetectionHints],
    ) -> TemplateDescriptor:
        self.logger.info("Step 1/6: Cloning %s...", locator.full_name)
        self._acquire(repo_path, locator)

        self.logger.info("Step 2/6: Detecting language and framework...")
        detection = self.detector.detect(repo_path, hints)
        self.logger.info(
            "Detected: %s, %s", detection.language, detection.framework or "no framework"
        )

        self.logger.info("Step 3/6: Cleaning unnecessary files...")
        self._prepare(repo_path, locator, detection)

        self.logger.info("Step 4/6: Initializing new git repository...")
        self._version(repo_path, locator)

        self.logger.info("Step 5/6: Creating GitHub repository...")
        host = self._host_factory(credential)
        template_name = self._template_name(locator)
        created = self._publish(host, locator, template_name, namespace)

        self.logger.info("Step 6/6: Pushing to %s...", created.html_url)
        self._push(host, repo_path, created, credential)

        descriptor = TemplateDescriptor(
            template_repo_url=created.html_url,
            import_url=self.config.import_url(created.full_name),
            template_name=created.name,
            detected_language=detection.language,
            detected_framework=detection.framework,
            run_command=detection.run_command,
        )
        self.logger.info("Success! Template available at %s", descriptor.template_repo_url)
        return descriptor

    def _acquire(self, repo_path: Path, locator: SourceLocator) -> None:
        timeout = self.config.timeouts.clone
        try:
            self.git.clone(
                locator.clone_url,
                repo_path,
                branch=locator.default_branch,
                timeout=timeout,
            )
        except GitCommandError as exc:
            if exc.timed_out:
                raise CloneFailure(
                    f"Repository clone timeout ({timeout:g} seconds): repository is too large or network is slow",
                    repository=locator.full_name,
                ) from None
            raise CloneFailure(
                f"Repository could not be cloned: {exc.detail}",
                repository=locator.full_name,
            ) from None

        if is_empty_checkout(repo_path):
            raise CloneFailure(
                "Clone verification failed: directory is empty after clone",
                repository=locator.full_name,
            )

    def _prepare(self, repo_path: Path, locator: SourceLocator, detection: DetectionResult) -> None:
        self.sanitizer.sanitize(repo_path)
        self.logger.info("Writing Replit configuration and template README...")
        try:
            self.config_writer.configure(repo_path, locator, detection)
        except OSError as exc:
            raise CloneFailure(
                f"Working copy could not be configured: {exc}",
                repository=locator.full_name,
            ) from None

    def _version(self, repo_path: Path, locator: SourceLocator) -> None:
        try:
            self.git.create_fresh_history(
                repo_path,
                author_name=self.config.bot.name,
                author_email=self.config.bot.email,
                message=f"chore: generate Replit-friendly template from {locator.full_name}",
                branch=self.config.canonical_branch,
            )
        except GitCommandError as exc:
            raise CloneFailure(
                f"Working copy could not be committed: {exc}",
                repository=locator.full_name,
            ) from None

    def _publish(
        self,
        host: RepositoryHost,
        locator: SourceLocator,
        template_name: str,
        namespace: Optional[str],
    ) -> CreatedRepository:
        description = f"Replit-ready template generated from {locator.full_name}"
        if namespace:
            try:
                created = host.create_repository(
                    template_name, description=description, namespace=namespace
                )
            except PublishFailure as exc:
                self.logger.warning(
                    "Org creation failed (%s), falling back to user repo", exc.message
                )
            else:
                self.logger.info("Created in organization: %s", namespace)
                return created

        created = host.create_repository(template_name, description=description)
        self.logger.info("Created in user account: %s", created.owner)
        return created

    def _push(
        self,
        host: RepositoryHost,
        repo_path: Path,
        created: CreatedRepository,
        credential: Credential,
    ) -> None:
        branch = self.config.canonical_branch
        try:
            self.git.push(repo_path, created.clone_url, credential, branch=branch)
        except GitCommandError as exc:
            raise PublishFailure(
                f"Push to {created.full_name} failed: {exc.detail}",
                attempted_name=created.name,
                repository=created.full_name,
            ) from None
        self.logger.info("Successfully pushed to %s branch", branch)

        try:
            host.set_default_branch(created.owner, created.name, branch)
        except PublishFailure as exc:
            self.logger.warning("Could not update default branch: %s", exc.message)
        else:
            self.logger.info("Default branch updated to %s", branch)

    # ------------------------------------------------------------------
    # Helpers

    def _template_name(self, locator: SourceLocator) -> str:
        timestamp = int(self._clock() * 1000)
        return f"{locator.repo}-{self.config.template_suffix}-{timestamp}"

    @staticmethod
    def _require_credential(credential: CredentialLike) -> Credential:
        resolved = coerce_credential(credential)
        if resolved is None or not resolved.token or not resolved.token.strip():
            raise ConfigurationFailure(
                "GitHub authentication required: please connect your GitHub account"
            )
        if resolved.is_expired():
            raise ConfigurationFailure(
                "GitHub credential has expired: please reconnect your GitHub account"
            )
        return resolved

    def _default_host_factory(self, credential: Credential) -> RepositoryHost:
        return GitHubHost(credential, base_url=self.config.api_base_url)


def materialize(
    locator: SourceLocator,
    credential: CredentialLike,
    target_namespace: str | None = None,
    *,
    hints: DetectionHints | None = None,
    config: ForgeConfig | None = None,
) -> TemplateDescriptor:
    """Materialize with default collaborators and the configured outer timeout."""
    return Materializer(config).materialize_with_timeout(
        locator, credential, target_namespace, hints=hints
    )


__all__ = ["HostFactory", "Materializer", "materialize"]
