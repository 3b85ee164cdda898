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
Statistics computation for WebCheck.

This module provides functions for summarizing request durations and
formatting them the same way Go's time.Duration prints itself.
"""

import math
import statistics
from typing import Callable, Sequence, Tuple

MICROSECONDS_PER_SECOND = 1_000_000


def round_to_microseconds(seconds: float) -> int:
    """
    Round a duration to whole microseconds, halves away from zero.

    Args:
        seconds: Duration in seconds

    Returns:
        Duration as an integer number of microseconds
    """
    scaled = seconds * MICROSECONDS_PER_SECOND
    if scaled < 0:
        return -int(math.floor(-scaled + 0.5))
    return int(math.floor(scaled + 0.5))


def _format_fraction(value: int, digits: int) -> str:
    if value == 0:
        return ""
    return "." + f"{value:0{digits}d}".rstrip("0")


def format_duration(seconds: float) -> str:
    """
    Format a duration as a compact string like "15ms", "1.5s" or "1m2.5s".

    The value is rounded to microsecond precision first.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    micros = round_to_microseconds(seconds)
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1000:
        return f"{sign}{micros}µs"
    if micros < MICROSECONDS_PER_SECOND:
        return f"{sign}{micros // 1000}{_format_fraction(micros % 1000, 3)}ms"

    whole_seconds, fraction = divmod(micros, MICROSECONDS_PER_SECOND)
    hours, remainder = divmod(whole_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    text = f"{secs}{_format_fraction(fraction, 6)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{text}"
    if minutes:
        return f"{sign}{minutes}m{text}"
    return f"{sign}{text}"


def _safe_stat(func: Callable[[Sequence[float]], float], samples: Sequence[float]) -> float:
    try:
        return float(func(samples))
    except (ValueError, TypeError, statistics.StatisticsError):
        return 0.0


def summarize_durations(samples: Sequence[float]) -> Tuple[float, float, float]:
    """
    Compute min, median and max of the given samples.

    Any figure that cannot be computed (e.g. on an empty sequence) is 0.0.

    Args:
        samples: Durations in seconds

    Returns:
        Tuple of (min, median, max) in seconds
    """
    return (
        _safe_stat(min, samples),
        _safe_stat(statistics.median, samples),
        _safe_stat(max, samples),
    )


def format_duration_summary(samples: Sequence[float]) -> str:
    """Format samples as "min/median/max", e.g. "10ms/20ms/30ms"."""
    return "/".join(format_duration(value) for value in summarize_durations(samples))
