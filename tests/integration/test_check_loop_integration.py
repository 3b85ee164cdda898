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
End-to-end tests for WebCheck.

A real HttpProber (served by httpx.MockTransport), the real dumper writing
to a temporary directory and a renderer writing to a string buffer are
wired into a CheckLoop. The prober clock is patched so durations are exact.
"""

import io
import os
import re
import sys
import tempfile
import unittest
from unittest.mock import patch

import httpx

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from webcheck.checker import CheckLoop  # noqa: E402
from webcheck.config import CheckSettings  # noqa: E402
from webcheck.prober import HttpProber  # noqa: E402
from webcheck.result import CheckStatus  # noqa: E402
from webcheck.ui_render import StatusLineRenderer  # noqa: E402

URL = "http://example.com/status"


class FakeClock:
    """Stands in for the time module; only moves when advanced."""

    def __init__(self):
        self.now = 100.0

    def perf_counter(self):
        return self.now


class TestStatusTransitions(unittest.TestCase):
    """OK, OK, then 503: merge, then transition with a dump file."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.log_dir = os.path.join(self._tmp.name, "resp-log")
        self.responses = [
            httpx.Response(200, text="all systems operational"),
            httpx.Response(200, text="all systems operational"),
            httpx.Response(503, headers={"Retry-After": "30"}, text="maintenance"),
        ]
        self.latencies = [0.015, 0.025, 0.005]
        self.clock = FakeClock()

    def _make_loop(self, disable_log=False):
        settings = CheckSettings(
            url=URL,
            interval=1.0,
            timeout=5.0,
            matcher=re.compile("operational"),
            log_dir=self.log_dir,
            log_retention=3600.0,
            disable_log=disable_log,
        )
        client = httpx.Client(transport=httpx.MockTransport(self._respond))
        prober = HttpProber(URL, settings.timeout, settings.matcher, client=client)
        self.addCleanup(prober.close)
        self.stream = io.StringIO()
        return CheckLoop(settings, prober, StatusLineRenderer(self.stream))

    def _respond(self, request):
        # Each response takes its latency on the fake clock
        self.clock.now += self.latencies.pop(0)
        return self.responses.pop(0)

    def _fake_clock(self):
        return self.clock

    def test_full_scenario(self):
        loop = self._make_loop()
        with patch("webcheck.prober.time", self._fake_clock()):
            self.assertTrue(loop.tick())
            first_output = self.stream.getvalue()
            self.assertTrue(first_output.startswith("\n["))
            self.assertTrue(first_output.endswith("(OKAY) Status was 200 and text matched (15ms/15ms/15ms)"))

            self.assertFalse(loop.tick())
            second_output = self.stream.getvalue()[len(first_output):]
            self.assertNotIn("\n", second_output)
            self.assertTrue(second_output.startswith("\r"))
            self.assertTrue(second_output.endswith("(OKAY) Status was 200 and text matched (15ms/20ms/25ms)"))

            self.assertTrue(loop.tick())

        third_output = self.stream.getvalue()[len(first_output) + len(second_output):]
        self.assertTrue(third_output.startswith("\n["))
        self.assertEqual(loop.current.status, CheckStatus.FAILED)
        self.assertEqual(loop.current.message, "Status code was != 2xx: 503")
        self.assertEqual(len(loop.current.durations), 1)
        self.assertAlmostEqual(loop.current.durations.current(), 0.005)

        dump_file = loop.current.dump_file
        self.assertTrue(dump_file)
        self.assertTrue(third_output.endswith(f"(FAIL) Status code was != 2xx: 503 (5ms/5ms/5ms) (Resp: {dump_file})"))
        with open(dump_file, "rb") as fh:
            content = fh.read()
        self.assertIn(b"Retry-After: 30\r\n", content)
        self.assertTrue(content.endswith(b"\r\n\nmaintenance"))

    def test_scenario_without_logging(self):
        loop = self._make_loop(disable_log=True)
        with patch("webcheck.prober.time", self._fake_clock()):
            for _ in range(3):
                loop.tick()
        self.assertEqual(loop.current.status, CheckStatus.FAILED)
        self.assertEqual(loop.current.dump_file, "")
        self.assertNotIn("Resp:", self.stream.getvalue())
        self.assertFalse(os.path.exists(self.log_dir))


if __name__ == "__main__":
    unittest.main()
