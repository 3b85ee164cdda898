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
Response dumping and log-directory cleanup for WebCheck.

Failed responses are written to uniquely named files in the log directory.
A background worker removes files older than the configured retention.
"""

import logging
import os
import tempfile
import threading
import time
from typing import Optional

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 10.0
LOG_FOLDER_PERMS = 0o750
DUMP_FILE_PREFIX = "resp"


class DumpError(RuntimeError):
    """Raised when a response cannot be written to the log directory."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


def dump_response(raw: bytes, directory: str) -> str:
    """
    Write a captured response to a new file in the log directory.

    Args:
        raw: Serialized headers and body
        directory: Log directory (created if missing)

    Returns:
        Path of the written file

    Raises:
        DumpError: If the directory or the file cannot be created or written
    """
    try:
        os.makedirs(directory, mode=LOG_FOLDER_PERMS, exist_ok=True)
    except OSError as exc:
        raise DumpError(f"creating log folder: {exc}", directory) from exc

    try:
        fd, path = tempfile.mkstemp(prefix=DUMP_FILE_PREFIX, dir=directory)
    except OSError as exc:
        raise DumpError(f"creating log file: {exc}", directory) from exc

    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(raw)
    except OSError as exc:
        raise DumpError(f"writing response to {path}: {exc}", path) from exc

    logger.debug("Dumped %d bytes of response to %s", len(raw), path)
    return path


def cleanup_log_files(directory: str, retention: float, now: Optional[float] = None) -> int:
    """
    Remove files in the log directory older than the retention period.

    A missing directory is not an error. Files that cannot be removed are
    logged and skipped.

    Args:
        directory: Log directory to scan (recursively)
        retention: Maximum file age in seconds
        now: Reference time (uses time.time() if not provided)

    Returns:
        Number of files removed
    """
    if not os.path.isdir(directory):
        return 0
    if now is None:
        now = time.time()

    def _log_walk_error(exc: OSError) -> None:
        logger.error("cleaning up logs: %s", exc)

    removed = 0
    for root, _dirs, files in os.walk(directory, onerror=_log_walk_error):
        for name in files:
            path = os.path.join(root, name)
            try:
                if now - os.path.getmtime(path) > retention:
                    os.remove(path)
                    removed += 1
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Could not remove expired log file %s: %s", path, exc)
    if removed:
        logger.debug("Removed %d expired file(s) from %s", removed, directory)
    return removed


def cleanup_worker(
    directory: str,
    retention: float,
    stop_event: threading.Event,
    interval: float = CLEANUP_INTERVAL_SECONDS,
) -> None:
    """Worker thread removing expired log files until the stop event is set."""
    while not stop_event.wait(interval):
        cleanup_log_files(directory, retention)
