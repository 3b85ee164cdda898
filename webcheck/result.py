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
Check results for WebCheck.

A CheckResult describes one ongoing outcome of the check: the status, the
human-readable message and the history of request durations seen while the
outcome stayed the same. Two results with the same status and message are
considered equal so successive identical checks can be merged.
"""

import threading
from datetime import datetime
from enum import Enum
from typing import Optional

from webcheck.history import HISTORY_CAPACITY, DurationHistory
from webcheck.stats import format_duration_summary

PLACEHOLDER_MESSAGE = "Uninitialized"


class CheckStatus(Enum):
    """Status of a check outcome."""

    UNKNOWN = 0
    OK = 1
    FAILED = 2

    @property
    def code(self) -> str:
        """Four letter code shown in the status line."""
        if self is CheckStatus.UNKNOWN:
            return "UNKN"
        if self is CheckStatus.OK:
            return "OKAY"
        if self is CheckStatus.FAILED:
            return "FAIL"
        raise ValueError(f"Unhandled check status: {self!r}")

    def __str__(self) -> str:
        return self.code


class CheckResult:
    """
    Outcome of one or more consecutive checks with the same status and message.

    Attributes:
        status: Outcome status
        message: Human-readable outcome description
        started_at: When this outcome was first observed (aware, local time)
        dump_file: Path of the dumped response, empty unless set by the driver
        durations: History of request durations for this outcome
    """

    def __init__(
        self,
        status: CheckStatus,
        message: str,
        durations: DurationHistory,
        started_at: Optional[datetime] = None,
    ) -> None:
        self.status = status
        self.message = message
        self.durations = durations
        self.started_at = started_at if started_at is not None else datetime.now().astimezone()
        self.dump_file = ""
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        status: CheckStatus,
        message: str,
        duration: float,
        capacity: int = HISTORY_CAPACITY,
    ) -> "CheckResult":
        """
        Create a result with a fresh history holding a single duration.

        Args:
            status: Outcome status
            message: Outcome description
            duration: Request duration in seconds
            capacity: Size of the duration history

        Returns:
            New CheckResult stamped with the current time
        """
        history = DurationHistory(capacity)
        history.push(duration)
        return cls(status, message, history)

    @classmethod
    def placeholder(cls) -> "CheckResult":
        """Create the bootstrap result used before the first real check."""
        return cls.create(CheckStatus.UNKNOWN, PLACEHOLDER_MESSAGE, 0.0)

    def add_duration(self, duration: float) -> None:
        """Merge a duration from an identical outcome into this result."""
        with self._lock:
            self.durations.push(duration)

    def equals(self, other: "CheckResult") -> bool:
        """Return True when both results describe the same outcome (durations and times ignored)."""
        return self.status == other.status and self.message == other.message

    def duration_summary(self) -> str:
        """Return the "min/median/max" summary of the recorded durations."""
        with self._lock:
            return format_duration_summary(self.durations.all())

    def __repr__(self) -> str:
        return f"CheckResult(status={self.status.name}, message={self.message!r}, samples={len(self.durations)})"
