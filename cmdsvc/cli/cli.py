#!/usr/bin/env python3
"""
cmdsvc CLI - run configured commands as supervised subprocesses.

Usage:
    cmdsvc run -c /etc/cmdsvc/commands.yaml
    cmdsvc check -c /etc/cmdsvc/commands.yaml
    cmdsvc --version
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

import cmdsvc
from cmdsvc.config import ServiceConfig, default_config_path
from cmdsvc.core import EXIT_FAILURE, EXIT_SUCCESS, StopSignal
from cmdsvc.exceptions import CmdSvcError, ConfigError, format_cause_chain
from cmdsvc.host import ShutdownManager
from cmdsvc.log import Logger, LoggerFactory, create_root_lg, log_exception_chain
from cmdsvc.service import CommandService


def _get_build_info() -> dict[str, Any]:
    """Get build info from the installed package."""
    try:
        from cmdsvc import _build_info  # type: ignore[attr-defined]
    except ImportError:
        return {"commit": None, "modified": None}
    return {
        "commit": getattr(_build_info, "COMMIT_SHORT", "") or None,
        "modified": getattr(_build_info, "MODIFIED", None),
    }


def version_string() -> str:
    """Human-readable version, with the build commit when known."""
    build = _get_build_info()
    if build["commit"]:
        dirty = "*" if build["modified"] else ""
        return f"cmdsvc {cmdsvc.__version__} ({build['commit']}{dirty})"
    return f"cmdsvc {cmdsvc.__version__}"


def _add_config_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="config file (default: <program>.yaml next to the program)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with the run and check subcommands."""
    parser = argparse.ArgumentParser(
        prog="cmdsvc",
        description="Run shell commands as supervised subprocesses until stopped",
    )
    parser.add_argument("--version", action="version", version=version_string())
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    run = subparsers.add_parser("run", help="run the configured commands")
    _add_config_arg(run)
    run.add_argument("--log-level", help="override logging.level")
    run.add_argument("--log-file", help="override logging.file ('auto' allowed)")
    run.add_argument(
        "--no-colors",
        dest="colors",
        action="store_false",
        default=None,
        help="disable colored console output",
    )

    check = subparsers.add_parser("check", help="validate the config and list commands")
    _add_config_arg(check)
    return parser


def _resolve_config(path: Path | None) -> ServiceConfig:
    return ServiceConfig.load(path if path is not None else default_config_path())


def _create_logger(config: ServiceConfig, args: argparse.Namespace) -> Logger:
    log_config = config.log_config()
    if args.log_file:
        log_file = args.log_file
        if log_file == "auto":
            log_file = config.log_file_path(log_file)
        log_config = log_config.with_overrides(file=str(log_file))
    log_config = log_config.with_overrides(level=args.log_level, colors=args.colors)
    return LoggerFactory.create_root(log_config)


def _startup_failure(error: CmdSvcError, args: argparse.Namespace) -> int:
    colors = args.colors if args.colors is not None else True
    lg = create_root_lg("info", colors=colors)
    log_exception_chain(lg, error)
    return EXIT_FAILURE


def run_command(args: argparse.Namespace) -> int:
    """
    Load the config, run the service and return the aggregate exit code.

    Startup failures (config or logging errors) are logged with their cause
    chain and return 1.
    """
    try:
        config = _resolve_config(args.config)
        lg = _create_logger(config, args)
    except CmdSvcError as e:
        return _startup_failure(e, args)

    lg.info("loaded config", extra={"path": config.path, "commands": len(config.cmds)})
    stop = StopSignal()
    with ShutdownManager(stop, lg) as shutdown:
        result = CommandService.from_config(config, lg).run(stop)

    if shutdown.is_shutting_down():
        lg.debug(
            "stopped by signal", extra={"code": shutdown.get_signal_return_code()}
        )
    return result.exit_code


def check_command(args: argparse.Namespace, console: Console | None = None) -> int:
    """Validate the config and print the resolved commands."""
    console = console or Console()
    try:
        config = _resolve_config(args.config)
    except ConfigError as e:
        for line in format_cause_chain(e):
            console.print(line, style="red", markup=False, highlight=False)
        return EXIT_FAILURE

    table = Table(title=str(config.path))
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Command")
    table.add_column("argv", style="dim")
    for idx, cmd in enumerate(config.cmds):
        argv = " ".join([*config.shell, repr(cmd)])
        table.add_row(str(idx), cmd, argv)
    console.print(table)

    log_file = config.log_file_path()
    console.print(
        f"poll_interval={config.poll_interval}s "
        f"kill_timeout={config.kill_timeout}s "
        f"log_file={log_file or '-'}",
        markup=False,
        highlight=False,
    )
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the cmdsvc CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return run_command(args)
    if args.command == "check":
        return check_command(args)

    parser.print_help()
    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
