#!/usr/bin/env python3
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
# Review required for correctness, security, and licensing.

"""
WebCheck UI Rendering Module

This module turns a CheckResult into a single status line and redraws that
line in place. Redrawing erases the previous line with a carriage return,
a run of spaces as long as the previous line and another carriage return.
Outputs that do not interpret carriage returns simply show one line per
update.
"""

import sys
from datetime import datetime
from typing import Optional, TextIO

from webcheck.result import CheckResult

TIMESTAMP_FORMAT = "%a, %d %b %Y %H:%M:%S %Z"


class RenderError(RuntimeError):
    """Raised when the status line cannot be written to the output stream."""


# ============================================================================
# Formatting Functions
# ============================================================================


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp in RFC 1123 style (e.g. "Mon, 02 Jan 2006 15:04:05 UTC")."""
    return moment.strftime(TIMESTAMP_FORMAT).strip()


def format_status_line(result: CheckResult) -> str:
    """
    Build the status line for a check result.

    Args:
        result: The result to describe

    Returns:
        Line like "[<timestamp>] (OKAY) <message> (<min>/<median>/<max>)",
        followed by " (Resp: <path>)" when a response was dumped
    """
    line = (
        f"[{format_timestamp(result.started_at)}] ({result.status.code}) "
        f"{result.message} ({result.duration_summary()})"
    )
    if result.dump_file:
        line += f" (Resp: {result.dump_file})"
    return line


# ============================================================================
# Terminal Utilities
# ============================================================================


class StatusLineRenderer:
    """Writes status lines to a stream, overwriting the previous one in place."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.last_line_length = 0

    def render(self, result: CheckResult) -> str:
        """Format the result, display it and return the displayed line."""
        line = format_status_line(result)
        self.display(line)
        return line

    def display(self, line: str) -> None:
        """
        Erase the previously displayed line and write the new one.

        Raises:
            RenderError: If writing to the stream fails
        """
        try:
            if self.last_line_length > 0:
                self.stream.write("\r" + " " * self.last_line_length + "\r")
            self.stream.write(line)
            self.stream.flush()
        except (OSError, ValueError) as exc:
            raise RenderError(f"printing status: {exc}") from exc
        self.last_line_length = len(line.encode("utf-8"))

    def break_line(self) -> None:
        """
        Move to a fresh line, keeping the previous status visible above it.

        Raises:
            RenderError: If writing to the stream fails
        """
        try:
            self.stream.write("\n")
            self.stream.flush()
        except (OSError, ValueError) as exc:
            raise RenderError(f"separating status: {exc}") from exc
        self.last_line_length = 0
