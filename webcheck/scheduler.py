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
Scheduler module for WebCheck.

This module provides a TickScheduler that computes when the next check
should run for a fixed interval. Checks never overlap: a check that runs
longer than the interval delays the next tick instead of queueing a burst
of catch-up ticks.
"""

import time
from typing import Optional


class TickScheduler:
    """
    Fixed-interval tick scheduler.

    The first tick fires at the start time; each following tick fires one
    interval after the previous one.
    """

    def __init__(self, interval: float = 1.0) -> None:
        """
        Initialize the TickScheduler.

        Args:
            interval: Time in seconds between consecutive checks (default: 1.0)

        Raises:
            ValueError: If interval is not positive
        """
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.interval = interval
        self.start_time: Optional[float] = None
        self.last_tick_time: Optional[float] = None
        self.tick_count = 0

    def next_tick_time(self, current_time: Optional[float] = None) -> float:
        """
        Compute when the next tick should fire.

        Args:
            current_time: The current monotonic time (uses time.monotonic() if not provided)

        Returns:
            Monotonic time of the next tick
        """
        if current_time is None:
            current_time = time.monotonic()

        if self.start_time is None:
            self.start_time = current_time

        if self.last_tick_time is None:
            return self.start_time

        next_time = self.last_tick_time + self.interval
        # A tick that overran the interval re-anchors on the current time
        # so missed ticks are dropped rather than fired back to back.
        if next_time < current_time:
            next_time = current_time
        return next_time

    def mark_tick(self, tick_time: Optional[float] = None) -> None:
        """
        Record that a tick fired.

        Args:
            tick_time: The time the tick fired (uses time.monotonic() if not provided)
        """
        if tick_time is None:
            tick_time = time.monotonic()
        if self.start_time is None:
            self.start_time = tick_time
        self.last_tick_time = tick_time
        self.tick_count += 1

