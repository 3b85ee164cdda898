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
Duration history for WebCheck.

This module provides a fixed-capacity ring buffer of request durations.
Once the buffer is full, every new sample overwrites the oldest one.
"""

import threading
from typing import List

# Number of durations kept per check result
HISTORY_CAPACITY = 300


class EmptyHistoryError(LookupError):
    """Raised when reading the current sample of a history that has none."""


class DurationHistory:
    """
    Fixed-capacity ring of elapsed-time samples (seconds).

    All operations hold an internal lock so a single writer and any number
    of readers can share one history.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        """
        Initialize an empty history.

        Args:
            capacity: Maximum number of samples retained (must be >= 1)

        Raises:
            ValueError: If capacity is lower than 1
        """
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._store: List[float] = []
        self._cursor = -1
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        """Maximum number of samples retained."""
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def push(self, duration: float) -> None:
        """
        Record a new sample, overwriting the oldest one once the ring is full.

        Args:
            duration: Elapsed time in seconds
        """
        with self._lock:
            next_index = self._cursor + 1
            if next_index == self._capacity:
                next_index = 0

            if next_index == len(self._store):
                self._store.append(duration)
            else:
                self._store[next_index] = duration
            self._cursor = next_index

    def current(self) -> float:
        """
        Return the most recently pushed sample.

        Raises:
            EmptyHistoryError: If nothing has been pushed yet
        """
        with self._lock:
            if self._cursor < 0:
                raise EmptyHistoryError("No duration has been recorded yet")
            return self._store[self._cursor]

    def all(self) -> List[float]:
        """Return a copy of all retained samples (storage order, not insertion order)."""
        with self._lock:
            return list(self._store)
