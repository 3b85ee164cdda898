# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review for correctness and security.

"""
Command-line interface for WebCheck.

This module contains the main entry point and command-line argument handling.
"""

import argparse
import logging
import os
import re
import sys
import threading
from typing import Any, Dict, List, Mapping, Optional

from webcheck import __version__
from webcheck.checker import CheckLoop
from webcheck.config import CheckSettings, _coerce_field, load_config, parse_duration
from webcheck.dumper import DumpError, cleanup_worker
from webcheck.prober import HttpProber
from webcheck.ui_render import RenderError, StatusLineRenderer

logger = logging.getLogger(__name__)

_LOG_LEVELS: Dict[str, int] = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "FATAL": logging.CRITICAL,
    "CRITICAL": logging.CRITICAL,
    "PANIC": logging.CRITICAL,
}


def _configure_logging(log_level: str) -> None:
    """Configure logging handlers for CLI execution (stderr, away from the status line)."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    logging.basicConfig(
        level=_LOG_LEVELS.get(log_level.upper(), logging.INFO),
        format="%(levelname)s: %(message)s",
        handlers=handlers,
        force=True,
    )


# Hardcoded defaults for config-overridable fields.
# Applied after environment and config merging for any field still set to None.
_HARDCODED_DEFAULTS: Dict[str, Any] = {
    "interval": 1.0,
    "timeout": 30.0,
    "url": "",
    "match": ".*",
    "log_dir": "/tmp/resp-log/",
    "log_retention": 24 * 3600.0,
    "no_log": False,
    "log_level": "info",
}

# Environment variables consulted for fields not set on the command line
_ENV_VARS: Dict[str, str] = {
    "interval": "INTERVAL",
    "timeout": "TIMEOUT",
    "url": "URL",
    "match": "MATCH",
    "log_dir": "LOG_DIR",
    "log_retention": "LOG_RETENTION",
    "no_log": "NO_LOG",
    "log_level": "LOG_LEVEL",
}


def _apply_config_to_args(args: argparse.Namespace, config: Mapping[str, Any]) -> None:
    """
    Overlay config values onto a parsed argument namespace.

    Only fields that are still ``None`` (i.e. not explicitly set on the CLI)
    are updated.

    Args:
        args: Namespace returned by ``argparse.ArgumentParser.parse_args()``.
        config: Dictionary of already coerced values.
    """
    for key, value in config.items():
        if hasattr(args, key) and getattr(args, key) is None:
            setattr(args, key, value)


def _read_env_config(environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Collect settings from environment variables.

    Raises:
        ValueError: If a variable holds an invalid value.
    """
    result: Dict[str, Any] = {}
    for field, env_name in _ENV_VARS.items():
        raw_value = environ.get(env_name)
        if raw_value is None or raw_value == "":
            continue
        try:
            result[field] = _coerce_field(field, raw_value)
        except ValueError as exc:
            raise ValueError(f"Invalid value in environment variable {env_name}: {raw_value!r}") from exc
    return result


def _duration_arg(value: str) -> float:
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="webcheck",
        description="WebCheck - Periodically check a URL for status code and content",
        epilog="Durations accept Go-style values such as 500ms, 1s or 1h30m, or plain seconds. "
        "Every option can also be set through its environment variable (e.g. LOG_DIR) "
        "or in ~/.webcheck.conf.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=_duration_arg,
        default=None,
        help="Check interval (default: 1s)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=_duration_arg,
        default=None,
        help="Timeout for the request (default: 30s)",
    )
    parser.add_argument(
        "-u",
        "--url",
        type=str,
        default=None,
        help="URL to query",
    )
    parser.add_argument(
        "-m",
        "--match",
        type=str,
        default=None,
        help="RegExp to match the response body against to validate it (default: .*)",
    )
    parser.add_argument(
        "-l",
        "--log-dir",
        type=str,
        default=None,
        help="Directory to log non-matched requests to (default: /tmp/resp-log/)",
    )
    parser.add_argument(
        "--log-retention",
        type=_duration_arg,
        default=None,
        help="When to clean up files from log-dir (default: 24h)",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        default=None,
        help="Disable response body logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (trace, debug, info, warn, error, fatal, panic) (default: info)",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Prints current version and exits",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        default=False,
        help="Skip loading ~/.webcheck.conf config file",
    )
    return parser


def handle_options(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Values missing on the command line are taken from the environment, then
    from the config file, then from the hardcoded defaults. The compiled
    body matcher is stored as ``args.matcher``.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version:
        return args

    try:
        _apply_config_to_args(args, _read_env_config(os.environ if environ is None else environ))
        if not args.no_config:
            _apply_config_to_args(args, load_config())
    except ValueError as exc:
        parser.error(str(exc))

    for field, default in _HARDCODED_DEFAULTS.items():
        if getattr(args, field, None) is None:
            setattr(args, field, default)

    if not args.url:
        parser.error("--url is required (or set URL).")
    if args.interval <= 0:
        parser.error("--interval must be a positive duration.")
    if args.timeout <= 0:
        parser.error("--timeout must be a positive duration.")
    if args.log_retention <= 0:
        parser.error("--log-retention must be a positive duration.")
    if args.log_level.upper() not in _LOG_LEVELS:
        parser.error(f"--log-level: unknown level '{args.log_level}' (use trace, debug, info, warn, error, fatal, panic).")
    try:
        args.matcher = re.compile(args.match)
    except re.error as exc:
        parser.error(f"--match: invalid regular expression: {exc}")
    return args


def build_settings(args: argparse.Namespace) -> CheckSettings:
    """Freeze validated arguments into the settings used at runtime."""
    return CheckSettings(
        url=args.url,
        interval=args.interval,
        timeout=args.timeout,
        matcher=args.matcher,
        log_dir=args.log_dir,
        log_retention=args.log_retention,
        disable_log=bool(args.no_log),
        log_level=args.log_level.upper(),
    )


def run(settings: CheckSettings) -> int:
    """
    Run the check loop until interrupted.

    Returns:
        Process exit status (1 after a fatal dump or render error)
    """
    _configure_logging(settings.log_level)
    logger.debug("Checking %s every %ss (timeout %ss)", settings.url, settings.interval, settings.timeout)

    stop_event = threading.Event()
    cleanup_thread = threading.Thread(
        target=cleanup_worker,
        args=(settings.log_dir, settings.log_retention, stop_event),
        daemon=True,
    )
    cleanup_thread.start()

    prober = HttpProber(settings.url, settings.timeout, settings.matcher)
    loop = CheckLoop(settings, prober, StatusLineRenderer(sys.stdout))
    exit_code = 0
    try:
        loop.run(stop_event)
    except KeyboardInterrupt:
        pass
    except DumpError as exc:
        logger.critical("logging request: %s", exc)
        exit_code = 1
    except RenderError as exc:
        logger.critical("displaying status: %s", exc)
        exit_code = 1
    finally:
        stop_event.set()
        cleanup_thread.join(timeout=1.0)
        prober.close()
        try:
            sys.stdout.write("\n")
            sys.stdout.flush()
        except (OSError, ValueError) as exc:
            logger.debug("Could not end the status line: %s", exc)
    return exit_code


def main(argv: Optional[List[str]] = None) -> None:
    """Main entrypoint for the CLI - parses arguments and runs the application."""
    args = handle_options(argv)
    if args.version:
        print(f"webcheck {__version__}")
        sys.exit(0)
    exit_code = run(build_settings(args))
    if exit_code:
        sys.exit(exit_code)
