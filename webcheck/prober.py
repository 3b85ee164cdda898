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
HTTP probing for WebCheck.

This module performs the GET request against the monitored URL and turns
whatever happens into a ProbeOutcome. Network errors, timeouts, bad status
codes and non-matching bodies all become FAILED outcomes; nothing raised by
httpx escapes from probe().
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from webcheck.result import CheckStatus
from webcheck.stats import format_duration

logger = logging.getLogger(__name__)


@dataclass
class ProbeOutcome:
    """Raw outcome of one probe."""

    status: CheckStatus
    message: str
    duration: float
    raw_body: Optional[bytes] = None


def _canonical_header_name(name: bytes) -> bytes:
    return b"-".join(part[:1].upper() + part[1:].lower() for part in name.split(b"-"))


def serialize_response(response: httpx.Response, body: bytes) -> bytes:
    """
    Serialize response headers and body for dumping.

    Headers are written one per line as "Name: value\\r\\n", with canonical
    names (e.g. "Content-Type") in sorted order, followed by a newline and the
    raw body. Repeated headers keep the order they were received in.
    """
    headers = sorted(
        ((_canonical_header_name(name), value) for name, value in response.headers.raw),
        key=lambda item: item[0],
    )
    header_block = b"".join(name + b": " + value + b"\r\n" for name, value in headers)
    return header_block + b"\n" + body


def _describe_error(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def _read_until(response: httpx.Response, deadline: float) -> Optional[bytes]:
    """
    Read the response body chunk by chunk, giving up at the deadline.

    Returns:
        The body, or None when the deadline passed before it was complete
    """
    timeouts = response.request.extensions.get("timeout")
    chunks = []
    body = response.iter_bytes()
    while True:
        remaining = deadline - time.perf_counter()
        if remaining <= 0:
            return None
        if isinstance(timeouts, dict):
            # The next socket read waits at most until the deadline
            timeouts["read"] = remaining
        chunk = next(body, None)
        if chunk is None:
            return b"".join(chunks)
        chunks.append(chunk)


def probe(
    url: str,
    timeout: float,
    matcher: "re.Pattern[str]",
    capture_body: bool = False,
    client: Optional[httpx.Client] = None,
) -> ProbeOutcome:
    """
    Query the URL once and validate the response.

    Args:
        url: URL to query
        timeout: Deadline in seconds for the whole request, body included
        matcher: Compiled regular expression searched in the response body
        capture_body: Whether to capture headers and body in the outcome
        client: Optional httpx client to reuse (a temporary one is created otherwise)

    Returns:
        ProbeOutcome describing the check. The duration covers the time until
        the response headers were received.
    """
    if client is None:
        with httpx.Client(follow_redirects=True) as temp_client:
            return probe(url, timeout, matcher, capture_body, temp_client)

    captured: Optional[bytes] = b"" if capture_body else None
    timed_out = f"HTTP request failed: request timed out after {format_duration(timeout)}"

    start = time.perf_counter()
    deadline = start + timeout
    try:
        request = client.build_request("GET", url, timeout=timeout)
        response = client.send(request, stream=True)
    except httpx.TimeoutException:
        return ProbeOutcome(CheckStatus.FAILED, timed_out, time.perf_counter() - start, captured)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return ProbeOutcome(
            CheckStatus.FAILED,
            f"HTTP request failed: {_describe_error(exc)}",
            time.perf_counter() - start,
            captured,
        )
    duration = time.perf_counter() - start

    try:
        try:
            body = _read_until(response, deadline)
        except httpx.TimeoutException:
            body = None
        except httpx.HTTPError as exc:
            logger.debug("Reading response body from %s failed: %s", url, exc)
            return ProbeOutcome(CheckStatus.FAILED, "Was not able to read response body", duration, captured)
    finally:
        response.close()

    if body is None:
        logger.debug("Request to %s exceeded its %ss deadline", url, timeout)
        return ProbeOutcome(CheckStatus.FAILED, timed_out, duration, captured)

    if capture_body:
        captured = serialize_response(response, body)

    if not 200 <= response.status_code <= 299:
        return ProbeOutcome(
            CheckStatus.FAILED,
            f"Status code was != 2xx: {response.status_code}",
            duration,
            captured,
        )

    text = body.decode(response.encoding or "utf-8", errors="replace")
    if matcher.search(text) is None:
        return ProbeOutcome(CheckStatus.FAILED, "Response body does not match regexp", duration, captured)

    return ProbeOutcome(
        CheckStatus.OK,
        f"Status was {response.status_code} and text matched",
        duration,
        captured,
    )


class HttpProber:
    """Probes one URL repeatedly over a shared httpx client."""

    def __init__(
        self,
        url: str,
        timeout: float,
        matcher: "re.Pattern[str]",
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.matcher = matcher
        self.client = client if client is not None else httpx.Client(follow_redirects=True)

    def __call__(self, capture_body: bool = False) -> ProbeOutcome:
        outcome = probe(self.url, self.timeout, self.matcher, capture_body, self.client)
        logger.debug("Probe of %s: %s %s (%.3fs)", self.url, outcome.status.code, outcome.message, outcome.duration)
        return outcome

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()
