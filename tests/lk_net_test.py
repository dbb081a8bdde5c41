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

"""Tests for licensekit.net."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TypeVar
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from licensekit import net
from licensekit.net import (
    RETRY_JITTER_MAX,
    RETRYABLE_STATUS_CODES,
    http_client,
    request_with_retry,
)

_T = TypeVar('_T')

_URL = 'https://spdx.example/licenses.json'


def _run(coro: Coroutine[object, object, _T]) -> _T:
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def _resp(status: int) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    return resp


# ── Retry ────────────────────────────────────────────────────────────────


class TestRequestWithRetry:
    """Tests for request_with_retry()."""

    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_success_first_try(self, mock_sleep: AsyncMock) -> None:
        """A 200 on the first attempt returns immediately."""
        client = AsyncMock()
        client.request = AsyncMock(return_value=_resp(200))
        resp = _run(request_with_retry(client, 'GET', _URL))
        assert resp.status_code == 200
        assert client.request.await_count == 1
        mock_sleep.assert_not_awaited()

    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_retries_retryable_status(self, mock_sleep: AsyncMock) -> None:
        """503 then 200 retries once."""
        client = AsyncMock()
        client.request = AsyncMock(side_effect=[_resp(503), _resp(200)])
        resp = _run(request_with_retry(client, 'GET', _URL, max_retries=3))
        assert resp.status_code == 200
        assert client.request.await_count == 2
        assert mock_sleep.await_count == 1

    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_returns_last_retryable_response(self, mock_sleep: AsyncMock) -> None:
        """When retries run out the final response is returned as-is."""
        client = AsyncMock()
        client.request = AsyncMock(return_value=_resp(429))
        resp = _run(request_with_retry(client, 'GET', _URL, max_retries=2))
        assert resp.status_code == 429
        assert client.request.await_count == 3
        assert mock_sleep.await_count == 2

    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_non_retryable_status_returned(self, mock_sleep: AsyncMock) -> None:
        """A 404 is not retried."""
        client = AsyncMock()
        client.request = AsyncMock(return_value=_resp(404))
        resp = _run(request_with_retry(client, 'GET', _URL))
        assert resp.status_code == 404
        assert client.request.await_count == 1

    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_transport_error_then_success(self, mock_sleep: AsyncMock) -> None:
        """Transport errors are retried."""
        client = AsyncMock()
        client.request = AsyncMock(side_effect=[httpx.ConnectError('refused'), _resp(200)])
        resp = _run(request_with_retry(client, 'GET', _URL))
        assert resp.status_code == 200

    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_transport_error_exhausted(self, mock_sleep: AsyncMock) -> None:
        """The last transport error is raised."""
        client = AsyncMock()
        client.request = AsyncMock(side_effect=httpx.ReadTimeout('slow'))
        with pytest.raises(httpx.ReadTimeout):
            _run(request_with_retry(client, 'GET', _URL, max_retries=1))
        assert client.request.await_count == 2

    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_negative_retries_means_one_attempt(self, mock_sleep: AsyncMock) -> None:
        """A negative retry count still makes one attempt."""
        client = AsyncMock()
        client.request = AsyncMock(return_value=_resp(500))
        resp = _run(request_with_retry(client, 'GET', _URL, max_retries=-5))
        assert resp.status_code == 500
        assert client.request.await_count == 1

    @patch('licensekit.net.random.uniform', return_value=0.0)
    @patch('licensekit.net.asyncio.sleep', new_callable=AsyncMock)
    def test_backoff_doubles(self, mock_sleep: AsyncMock, mock_uniform: MagicMock) -> None:
        """Delays grow as base * 2**attempt."""
        client = AsyncMock()
        client.request = AsyncMock(return_value=_resp(502))
        _run(request_with_retry(client, 'GET', _URL, max_retries=3, backoff_base=1.0))
        delays = [c.args[0] for c in mock_sleep.await_args_list]
        assert delays == [1.0, 2.0, 4.0]
        mock_uniform.assert_called_with(0, RETRY_JITTER_MAX)

    def test_retryable_codes(self) -> None:
        """Rate limiting and gateway errors are retryable; client errors are not."""
        assert {429, 502, 503} <= RETRYABLE_STATUS_CODES
        assert 404 not in RETRYABLE_STATUS_CODES


# ── Client ───────────────────────────────────────────────────────────────


class TestHttpClient:
    """Tests for http_client()."""

    def test_default_headers(self) -> None:
        """The client sends a User-Agent and follows redirects."""

        async def check() -> None:
            async with http_client(timeout=5.0) as client:
                assert client.headers['User-Agent'] == 'licensekit'
                assert client.follow_redirects is True

        with patch.dict('os.environ', {}, clear=True):
            _run(check())

    def test_token_header(self) -> None:
        """LICENSEKIT_HTTP_TOKEN becomes a bearer token."""
        with patch.dict('os.environ', {'LICENSEKIT_HTTP_TOKEN': 'tok-12345678'}, clear=True):
            headers = net._default_headers()
        assert headers['Authorization'] == 'Bearer tok-12345678'

    def test_extra_headers_override(self) -> None:
        """Caller headers win over the defaults."""

        async def check() -> None:
            async with http_client(headers={'Accept': 'text/plain'}) as client:
                assert client.headers['Accept'] == 'text/plain'

        _run(check())
