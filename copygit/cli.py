"""The copygit command line."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Callable, Sequence

from .daemon_commands import run_daemon_status, run_daemon_stop
from .health import run_health
from .models import CopygitError
from .provider_commands import run_config_add_provider, run_config_remove_provider
from .repo_commands import run_remove

VERSION = "0.1.0-dev"

log = logging.getLogger("copygit")


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _configure_logging(json_output: bool, verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    if quiet:
        level = logging.ERROR
    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("time=%(asctime)s level=%(levelname)s msg=%(message)s")
        )
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _show_help(parser: argparse.ArgumentParser) -> Callable[[argparse.Namespace], None]:
    def handler(_args: argparse.Namespace) -> None:
        parser.print_help()

    return handler


def _add_config_commands(sub: argparse._SubParsersAction) -> None:
    config = sub.add_parser(
        "config",
        help="Manage global configuration",
        description="Add, edit, or view global provider configurations.",
    )
    config.set_defaults(handler=_show_help(config))
    config_sub = config.add_subparsers(dest="config_command", metavar="<subcommand>")

    add = config_sub.add_parser(
        "add-provider",
        help="Add a provider configuration",
        description=(
            "Add a new Git provider to the global configuration. "
            "Type can be: github | gitlab | gitea | generic. "
            "AuthMethod can be: ssh | https | token (default: https)"
        ),
    )
    add.add_argument("name")
    add.add_argument("type")
    add.add_argument("base_url", metavar="base-url")
    add.set_defaults(
        handler=lambda a: run_config_add_provider(a.name, a.type, a.base_url)
    )

    remove = config_sub.add_parser(
        "remove-provider", help="Remove a provider configuration"
    )
    remove.add_argument("name")
    remove.set_defaults(handler=lambda a: run_config_remove_provider(a.name))


def _add_daemon_commands(sub: argparse._SubParsersAction) -> None:
    daemon = sub.add_parser("daemon", help="Manage the background sync daemon")
    daemon.set_defaults(handler=_show_help(daemon))
    daemon_sub = daemon.add_subparsers(dest="daemon_command", metavar="<subcommand>")

    stop = daemon_sub.add_parser("stop", help="Stop the background sync daemon")
    stop.set_defaults(handler=lambda _a: run_daemon_stop())

    status = daemon_sub.add_parser("status", help="Show daemon status")
    status.set_defaults(handler=lambda _a: run_daemon_status())


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every copygit command."""
    parser = argparse.ArgumentParser(
        prog="copygit",
        description=(
            "CopyGit automatically syncs your Git repositories across "
            "multiple providers (GitHub, GitLab, Gitea)."
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"copygit version {VERSION}"
    )
    parser.add_argument("-c", "--config", default="", help="Override config file path")
    parser.add_argument(
        "-j", "--json", action="store_true", help="Machine-readable JSON output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug-level logging"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress non-error output"
    )
    parser.set_defaults(handler=_show_help(parser))

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    _add_config_commands(sub)
    _add_daemon_commands(sub)

    health = sub.add_parser(
        "health",
        help="Check connectivity to all configured providers",
        description="Verify that all configured providers are reachable.",
    )
    health.add_argument("--output", default="text", help="Output format: text|json")
    health.set_defaults(handler=lambda a: run_health(a.output))

    remove = sub.add_parser(
        "remove",
        help="Unregister a repository",
        description=(
            "Remove a repository from CopyGit's registry. With --clean, "
            "also deletes the .copygit.toml file from the repository."
        ),
    )
    remove.add_argument("repo_path", metavar="repo-path")
    remove.add_argument(
        "--clean",
        action="store_true",
        help="Also remove .copygit.toml from the repository",
    )
    remove.set_defaults(handler=lambda a: run_remove(a.repo_path, a.clean))

    version = sub.add_parser("version", help="Show version information")
    version.set_defaults(handler=lambda _a: print(f"copygit version {VERSION}"))

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run copygit and return its exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else (0 if exc.code is None else 1)

    _configure_logging(args.json, args.verbose, args.quiet)
    if args.config:
        os.environ["COPYGIT_CONFIG"] = args.config

    try:
        args.handler(args)
    except (CopygitError, OSError, ValueError, EOFError) as exc:
        log.error("fatal error: %s", exc)
        return 1
    return 0