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
Check loop for WebCheck.

Each tick probes the target, merges the outcome into the current result
when it is unchanged or replaces the result when it changed, and redraws
the status line.
"""

import logging
import threading
import time
from typing import Callable, Optional

from webcheck.config import CheckSettings
from webcheck.dumper import dump_response
from webcheck.prober import ProbeOutcome
from webcheck.result import CheckResult, CheckStatus
from webcheck.scheduler import TickScheduler
from webcheck.ui_render import StatusLineRenderer

logger = logging.getLogger(__name__)

Prober = Callable[[bool], ProbeOutcome]
Dumper = Callable[[bytes, str], str]


class CheckLoop:
    """
    Drives periodic checks of a single URL.

    Probe failures arrive as FAILED outcomes and never stop the loop. Dump and
    render errors (DumpError, RenderError) propagate to the caller.
    """

    def __init__(
        self,
        settings: CheckSettings,
        prober: Prober,
        renderer: Optional[StatusLineRenderer] = None,
        dumper: Dumper = dump_response,
    ) -> None:
        self.settings = settings
        self.prober = prober
        self.renderer = renderer if renderer is not None else StatusLineRenderer()
        self.dumper = dumper
        self.scheduler = TickScheduler(settings.interval)
        self.current = CheckResult.placeholder()

    def tick(self) -> bool:
        """
        Run one check and update the display.

        Returns:
            True when the outcome changed (a new result was started)
        """
        outcome = self.prober(self.settings.capture_body)
        result = CheckResult.create(outcome.status, outcome.message, outcome.duration)

        changed = not result.equals(self.current)
        if changed:
            self.renderer.break_line()
            self.current = result
            logger.debug("Outcome changed to %s: %s", result.status.code, result.message)

            if result.status is CheckStatus.FAILED and outcome.raw_body is not None:
                result.dump_file = self.dumper(outcome.raw_body, self.settings.log_dir)
        else:
            self.current.add_duration(outcome.duration)

        self.renderer.render(self.current)
        return changed

    def run(self, stop_event: threading.Event, max_ticks: int = 0) -> None:
        """
        Tick at the configured interval until the stop event is set.

        Args:
            stop_event: Event ending the loop
            max_ticks: Stop after this many ticks (0 for infinite)
        """
        while not stop_event.is_set():
            if max_ticks > 0 and self.scheduler.tick_count >= max_ticks:
                break
            now = time.monotonic()
            tick_at = self.scheduler.next_tick_time(now)
            if stop_event.wait(max(0.0, tick_at - now)):
                break
            self.scheduler.mark_tick(tick_at)
            self.tick()
