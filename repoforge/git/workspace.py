"""Working-copy management: shallow clone, fresh history, authenticated push."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlsplit, urlunsplit

from ..credentials import Credential, redact
from ..logging import get_logger

Runner = Callable[..., str]


class GitCommandError(RuntimeError):
    """A git invocation failed or exceeded its timeout.

    The message never contains credentials; command lines are redacted before
    the error is built.
    """

    def __init__(self, command: str, detail: str, *, timed_out: bool = False) -> None:
        self.command = command
        self.detail = detail
        self.timed_out = timed_out
        super().__init__(f"{command}: {detail}" if detail else command)


class WorkingCopy:
    """An exclusively owned temporary directory, removed exactly once."""

    def __init__(self, *, prefix: str = "repoforge-", parent: Path | None = None) -> None:
        if parent is not None:
            Path(parent).mkdir(parents=True, exist_ok=True)
        self.path = Path(tempfile.mkdtemp(prefix=prefix, dir=str(parent) if parent else None))
        self._released = False
        self.logger = get_logger("workspace")

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            # A clone abandoned on timeout may still be writing into the directory.
            self.logger.error("Error cleaning up working copy %s: %s", self.path, exc)
            shutil.rmtree(self.path, ignore_errors=True)

    def __enter__(self) -> "WorkingCopy":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def is_empty_checkout(path: Path) -> bool:
    """True when ``path`` holds nothing besides VCS metadata."""
    try:
        return not any(entry.name != ".git" for entry in Path(path).iterdir())
    except OSError:
        return True


def authenticated_url(clone_url: str, credential: Credential) -> str:
    """Embed the credential in an HTTPS remote URL."""
    parts = urlsplit(clone_url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"x-access-token:{credential.token}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class GitWorkspace:
    """Runs the git commands needed to turn a clone into a fresh template history."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("git")

    def clone(
        self,
        url: str,
        destination: Path,
        *,
        branch: str | None = None,
        depth: int = 1,
        timeout: float | None = None,
    ) -> None:
        """Shallow, single-branch clone of ``url`` into ``destination``."""
        args: List[str] = ["git", "clone", "--depth", str(depth), "--single-branch"]
        if branch:
            args.extend(["--branch", branch])
        args.extend([url, str(destination)])
        self._run(args, cwd=Path(destination).parent, timeout=timeout)

    def create_fresh_history(
        self,
        repo_path: Path,
        *,
        author_name: str,
        author_email: str,
        message: str,
        branch: str = "main",
    ) -> None:
        """Initialise a new repository, commit everything, then rename the branch.

        The rename happens after the first commit because renaming an unborn
        branch is unreliable across git versions.
        """
        repo = Path(repo_path)
        self._run(["git", "init"], cwd=repo)
        self._run(["git", "config", "user.name", author_name], cwd=repo)
        self._run(["git", "config", "user.email", author_email], cwd=repo)
        self._run(["git", "add", "--all", "."], cwd=repo)
        self._run(["git", "commit", "--no-gpg-sign", "-m", message], cwd=repo)

        try:
            current = self._run(
                ["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=repo, capture_output=True
            ).strip()
            if current and current != branch:
                self._run(["git", "branch", "-M", branch], cwd=repo)
                self.logger.info("Renamed branch from '%s' to '%s'", current, branch)
            else:
                self.logger.debug("Branch already named %s", branch)
        except GitCommandError as exc:
            self.logger.warning("Could not rename branch to %s: %s", branch, exc)

    def push(
        self,
        repo_path: Path,
        clone_url: str,
        credential: Credential,
        *,
        branch: str = "main",
        remote: str = "origin",
        timeout: float | None = None,
    ) -> None:
        """Add ``clone_url`` as ``remote`` (token embedded) and push ``branch`` upstream."""
        repo = Path(repo_path)
        remote_url = authenticated_url(clone_url, credential)
        self._run(["git", "remote", "add", remote, remote_url], cwd=repo, credential=credential)
        self._run(
            ["git", "push", "--set-upstream", remote, branch],
            cwd=repo,
            credential=credential,
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Helpers

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
        timeout: float | None = None,
        credential: Credential | None = None,
    ) -> str:
        argv = list(args)
        printable = redact(" ".join(argv[:3]), credential)
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        self.logger.debug("Running %s in %s", printable, cwd)
        try:
            return self._runner(
                argv,
                cwd=cwd,
                env=env,
                capture_output=capture_output,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise GitCommandError(
                printable, f"timed out after {exc.timeout:g} seconds", timed_out=True
            ) from None
        except subprocess.CalledProcessError as exc:
            detail = redact((exc.stderr or exc.output or "").strip(), credential)
            raise GitCommandError(printable, detail or f"exit status {exc.returncode}") from None
        except FileNotFoundError as exc:
            raise GitCommandError(printable, f"git executable not found ({exc})") from None

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
        timeout: Optional[float] = None,
    ) -> str:
        # Output is always captured so failures carry git's stderr.
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
        if capture_output:
            return completed.stdout
        return ""


__all__ = [
    "GitCommandError",
    "GitWorkspace",
    "WorkingCopy",
    "authenticated_url",
    "is_empty_checkout",
]
