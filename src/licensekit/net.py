# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Async HTTP helpers: pooled client and retry with backoff.

The listed-license catalog is the only thing licensekit fetches over
the network.  All requests go through :func:`http_client` and
:func:`request_with_retry` so that pool size, timeouts and the retry
policy are decided in one place.

Retry policy::

    attempt 0 ──► transport error or 429/5xx? ──► sleep(base * 2**n + jitter) ──► attempt n+1
                  │
                  └─ otherwise ──► return response

The final attempt's response is returned even if it is retryable;
callers decide what a non-200 status means.  If the final attempt
fails at the transport level, that :class:`httpx.TransportError` is
raised.

Usage::

    from licensekit.net import http_client, request_with_retry

    async with http_client(timeout=10.0) as client:
        resp = await request_with_retry(client, 'GET', url, max_retries=2)
        resp.raise_for_status()
"""

from __future__ import annotations

import asyncio
import os
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Final

import httpx

from licensekit.logging import get_logger

__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'MAX_RETRIES',
    'RETRY_BACKOFF_BASE',
    'RETRY_JITTER_MAX',
    'RETRYABLE_STATUS_CODES',
    'http_client',
    'request_with_retry',
]

log = get_logger('licensekit.net')

# ── Constants ────────────────────────────────────────────────────────

#: Default maximum number of pooled connections.
DEFAULT_POOL_SIZE: Final[int] = 10

#: Default per-request timeout in seconds.
DEFAULT_TIMEOUT: Final[float] = 30.0

#: Default number of retries after the first attempt.
MAX_RETRIES: Final[int] = 3

#: Base delay in seconds; doubled on every retry.
RETRY_BACKOFF_BASE: Final[float] = 0.5

#: Upper bound in seconds of the random delay added to each backoff.
RETRY_JITTER_MAX: Final[float] = 0.5

#: Status codes worth retrying.
RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

_USER_AGENT: Final[str] = 'licensekit'


def _default_headers() -> dict[str, str]:
    headers = {'User-Agent': _USER_AGENT, 'Accept': 'application/json'}
    token = os.environ.get('LICENSEKIT_HTTP_TOKEN', '')
    if token:
        headers['Authorization'] = f'Bearer {token}'
    return headers


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield a pooled :class:`httpx.AsyncClient` that follows redirects.

    Args:
        pool_size: Maximum number of concurrent connections.
        timeout: Per-request timeout in seconds.
        headers: Extra headers merged over the defaults.
    """
    limits = httpx.Limits(max_connections=pool_size, max_keepalive_connections=pool_size)
    merged = {**_default_headers(), **(headers or {})}
    async with httpx.AsyncClient(
        limits=limits,
        timeout=httpx.Timeout(timeout),
        headers=merged,
        follow_redirects=True,
    ) as client:
        yield client


def _backoff_delay(attempt: int, base: float) -> float:
    return base * (2**attempt) + random.uniform(0, RETRY_JITTER_MAX)  # noqa: S311


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int = MAX_RETRIES,
    backoff_base: float = RETRY_BACKOFF_BASE,
    headers: dict[str, str] | None = None,
    **kwargs: Any,  # noqa: ANN401
) -> httpx.Response:
    """Send a request, retrying transport errors and retryable statuses.

    Args:
        client: The client to send with.
        method: HTTP method.
        url: Request URL.
        max_retries: Retries after the first attempt.
        backoff_base: Base delay in seconds for exponential backoff.
        headers: Per-request headers.
        **kwargs: Passed through to :meth:`httpx.AsyncClient.request`.

    Returns:
        The last response received.

    Raises:
        httpx.TransportError: If every attempt failed at the transport level.
    """
    retries = max(max_retries, 0)
    for attempt in range(retries + 1):
        last = attempt == retries
        try:
            response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            if last:
                raise
            log.debug('request_retry', url=url, attempt=attempt + 1, error=str(exc))
        else:
            if last or response.status_code not in RETRYABLE_STATUS_CODES:
                return response
            log.debug('request_retry', url=url, attempt=attempt + 1, status=response.status_code)
        await asyncio.sleep(_backoff_delay(attempt, backoff_base))
    # The last pass always returns or raises.
    raise AssertionError('unreachable')  # pragma: no cover
