"""CLI entrypoints for repoforge commands."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Tuple

from .config import ConfigError, ForgeConfig, load_config
from .errors import PublishFailure, TemplateError
from .logging import configure_logging
from .materializer import Materializer
from .models import DetectionHints, SourceLocator
from .preflight import PreflightAnalyzer


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "repository",
        help="Source repository as OWNER/REPO.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoforge",
        description="Turn GitHub repositories into Replit-ready templates.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .repoforge.yml (defaults to the current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    preflight_parser = subparsers.add_parser(
        "preflight",
        help="Analyze a repository without publishing anything.",
    )
    _add_common_options(preflight_parser)
    preflight_parser.add_argument(
        "--branch",
        default=None,
        help="Branch to inspect (defaults to the remote default branch).",
    )

    materialize_parser = subparsers.add_parser(
        "materialize",
        help="Generate and publish a template repository.",
    )
    _add_common_options(materialize_parser)
    materialize_parser.add_argument(
        "--branch",
        default="main",
        help="Source branch to clone.",
    )
    materialize_parser.add_argument(
        "--org",
        default=None,
        help="Organization to create the template in (falls back to your account).",
    )
    materialize_parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to $GITHUB_TOKEN).",
    )
    materialize_parser.add_argument("--language", default=None, help="Language hint.")
    materialize_parser.add_argument("--framework", default=None, help="Framework hint.")
    materialize_parser.add_argument("--run-command", default=None, help="Run command hint.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repoforge commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(args.config or Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    try:
        owner, repo = _split_repository(args.repository)
    except ValueError as exc:
        parser.exit(2, f"{exc}\n")

    if args.command == "preflight":
        _run_preflight(config, owner, repo, args)
    elif args.command == "materialize":
        _run_materialize(parser, config, owner, repo, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_preflight(config: ForgeConfig, owner: str, repo: str, args: argparse.Namespace) -> None:
    result = PreflightAnalyzer(config).analyze(owner, repo, branch=args.branch)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    print(f"{owner}/{repo}: confidence {result.confidence:.1f}")
    print(f"  language:    {result.language or 'unknown'}")
    print(f"  framework:   {result.framework or 'none'}")
    print(f"  run command: {result.run_command or 'n/a'}")
    for issue in result.issues:
        print(f"  [{issue.severity}] {issue.message}")


def _run_materialize(
    parser: argparse.ArgumentParser,
    config: ForgeConfig,
    owner: str,
    repo: str,
    args: argparse.Namespace,
) -> None:
    locator = SourceLocator(owner=owner, repo=repo, default_branch=args.branch)
    hints = DetectionHints(
        language=args.language,
        framework=args.framework,
        run_command=args.run_command,
    )
    token = args.token or os.environ.get("GITHUB_TOKEN")
    try:
        descriptor = Materializer(config).materialize_with_timeout(
            locator, token, args.org, hints=hints
        )
    except TemplateError as exc:
        hint = ""
        if isinstance(exc, PublishFailure) and exc.requires_reauthentication:
            hint = "Check that your GitHub token can create repositories.\n"
        parser.exit(
            1,
            f"repoforge materialize failed: {exc}\n{hint}"
            f"You can still open the original repository unmodified: "
            f"{config.import_url(locator.full_name)}\n",
        )

    if args.json:
        print(json.dumps(descriptor.to_dict(), indent=2))
        return
    print(f"Template created at {descriptor.template_repo_url}")
    print(f"Open in Replit: {descriptor.import_url}")


def _split_repository(value: str) -> Tuple[str, str]:
    owner, sep, repo = value.strip().partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ValueError(f"Expected OWNER/REPO, got {value!r}")
    return owner, repo.removesuffix(".git")


if __name__ == "__main__":
    main(sys.argv[1:])
