"""Command-line entry point for composerfork."""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import sys
from typing import Any, List, Optional, Sequence

from .common.logging_utils import configure_logging, extra_context, is_debug_enabled
from .composer.commands import (
    COMMAND_TYPES,
    default_project_name,
    detect_php_version,
    normalize_recipe,
    prepare_composer_command,
    validate_package_name,
)
from .composer.forks import apply_forks
from .composer.manifest import ComposerJsonService
from .config import Settings, load_settings
from .constants import ExitCodes
from .descriptors import ForkSet, build_fork_descriptors
from .errors import (
    ComposerForkError,
    ConfigError,
    InvalidReference,
    ManifestParseError,
    NotFoundError,
    RemoteFetchError,
)
from .prepare_input import FORMATS, prepare_input
from .repository.github import GitHubClient
from .repository.identifier import parse_identifier
from .repository.manifest_resolver import ManifestResolver
from .repository.pull_requests import resolve_pr

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="composerfork",
        description="Point a Composer project at forks, branches and pull requests on GitHub",
        add_help=True,
    )
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to YAML config file",
                        action="store",
                        type=str)
    parser.add_argument("--token",
                        dest="TOKEN",
                        help="GitHub access token (defaults to GITHUB_TOKEN)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: COMPOSERFORK_LOG_LEVEL or INFO)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", metavar="command")
    subparsers.required = True

    fork_parser = subparsers.add_parser(
        "fork",
        help="Add forks to composer.json as vcs repositories with aliased branch constraints",
    )
    fork_parser.add_argument("REFS",
                             help="GitHub repository, branch (org/repo/tree/branch) or PR reference",
                             nargs="+",
                             metavar="ref")
    fork_parser.add_argument("-d", "--directory",
                             dest="DIRECTORY",
                             help="Project directory containing composer.json (default: current directory)",
                             action="store",
                             type=str,
                             default=".")
    fork_parser.add_argument("--pr",
                             dest="REQUIRE_PR",
                             help="Only accept pull request references",
                             action="store_true")

    describe_parser = subparsers.add_parser(
        "describe",
        help="Show the composer name, clone URL and PR details for a reference",
    )
    describe_parser.add_argument("REF",
                                 help="GitHub repository, branch or PR reference",
                                 metavar="ref")

    prepare_parser = subparsers.add_parser(
        "prepare-input",
        help="Turn a markdown list of links into command arguments",
    )
    prepare_parser.add_argument("TEXT",
                                help="Markdown list, one '- <link>' per line",
                                metavar="text")
    prepare_parser.add_argument("-f", "--format",
                                dest="FORMAT",
                                help="Output format: pr (--pr=a --pr=b) or spaces (a b)",
                                action="store",
                                type=str.lower,
                                choices=FORMATS,
                                default="spaces")

    args_parser = subparsers.add_parser(
        "composer-args",
        help="Print the argument list for a composer command",
    )
    args_parser.add_argument("COMPOSER_COMMAND",
                             help="Composer command to build arguments for",
                             choices=COMMAND_TYPES,
                             metavar="command")
    args_parser.add_argument("RECIPE",
                             help="Recipe to create a project from (core, cms, installer, sink or a package name)",
                             nargs="?",
                             metavar="recipe")
    args_parser.add_argument("--constraint",
                             dest="CONSTRAINT",
                             help="Version constraint for the recipe",
                             action="store",
                             type=str)
    args_parser.add_argument("-o", "--option",
                             dest="OPTIONS",
                             help="Extra option to pass to composer, e.g. --option=--prefer-source (repeatable)",
                             action="append",
                             default=[])
    args_parser.add_argument("--with-prs",
                             dest="WITH_PRS",
                             help="Mark the project name as including pull requests",
                             action="store_true")

    php_parser = subparsers.add_parser(
        "php-version",
        help="Print the lowest PHP version allowed by composer.json",
    )
    php_parser.add_argument("-d", "--directory",
                            dest="DIRECTORY",
                            help="Directory containing composer.json (default: current directory)",
                            action="store",
                            type=str,
                            default=".")

    return parser.parse_args(argv)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments."""
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _build_resolver(settings: Settings) -> ManifestResolver:
    client = GitHubClient(
        base_url=settings.github_api_base,
        token=settings.github_token,
        timeout=settings.request_timeout,
    )
    return ManifestResolver(client)


def run_fork(args: argparse.Namespace, settings: Settings) -> ForkSet:
    """Resolve the references and write them into the project's composer.json."""
    service = ComposerJsonService(os.path.abspath(args.DIRECTORY))
    # Fail before any network traffic if there's nothing to write to
    service.validate_exists()

    resolver = _build_resolver(settings)
    forks = build_fork_descriptors(
        args.REFS,
        resolver,
        require_pr=args.REQUIRE_PR,
        known_orgs=settings.known_orgs,
    )
    apply_forks(service, forks)
    logger.info("Added %d fork(s) to %s", len(forks), service.path)
    return forks


def run_describe(args: argparse.Namespace, settings: Settings) -> List[str]:
    """Lines describing one reference, for printing."""
    identifier = parse_identifier(args.REF)
    resolver = _build_resolver(settings)

    lines = [
        f"Package:   {resolver.display_name(identifier)}",
        f"Clone URL: {identifier.clone_url}",
    ]
    if identifier.branch:
        lines.append(f"Branch:    {identifier.branch}")
    if identifier.is_pull_request:
        details = resolve_pr(resolver.client, identifier, settings.known_orgs)
        lines.extend([
            f"PR:        #{identifier.pr} from {details.from_org}",
            f"PR remote: {details.remote_url} ({details.remote_name.value})",
            f"PR branch: {details.pr_branch} -> {details.base_branch}",
        ])
    return lines


def run_prepare_input(args: argparse.Namespace) -> str:
    return prepare_input(args.TEXT, args.FORMAT)


def run_composer_args(args: argparse.Namespace) -> List[str]:
    """The composer argument list and, for ``create``, the project name."""
    recipe = None
    if args.RECIPE:
        recipe = normalize_recipe(args.RECIPE)
        if not validate_package_name(recipe):
            raise InvalidReference(args.RECIPE, "composer package name")

    command = prepare_composer_command(args.OPTIONS, args.COMPOSER_COMMAND, recipe, args.CONSTRAINT)
    lines = [shlex.join(["composer", *command])]
    if args.COMPOSER_COMMAND == "create" and args.CONSTRAINT:
        lines.append(f"Project:   {default_project_name(recipe, args.CONSTRAINT, args.WITH_PRS)}")
    return lines


def run_php_version(args: argparse.Namespace) -> str:
    service = ComposerJsonService(os.path.abspath(args.DIRECTORY))
    doc = service.load()
    return detect_php_version(doc.get("require") or {})


def exit_code_for(exc: ComposerForkError) -> ExitCodes:
    """Exit code for a failed command."""
    if isinstance(exc, RemoteFetchError):
        return ExitCodes.CONNECTION_ERROR
    if isinstance(exc, (NotFoundError, ManifestParseError, ConfigError)):
        return ExitCodes.FILE_ERROR
    return ExitCodes.INPUT_ERROR


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main", target=args.COMMAND)
        )

    try:
        if args.COMMAND == "prepare-input":
            print(run_prepare_input(args))
        elif args.COMMAND == "composer-args":
            print("\n".join(run_composer_args(args)))
        elif args.COMMAND == "php-version":
            print(run_php_version(args))
        else:
            settings = load_settings(args.CONFIG, token=args.TOKEN)
            if args.COMMAND == "fork":
                run_fork(args, settings)
            else:
                print("\n".join(run_describe(args, settings)))
    except ComposerForkError as exc:
        logger.error("%s, aborting", exc)
        sys.exit(exit_code_for(exc).value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
