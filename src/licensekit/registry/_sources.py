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

"""Where a :class:`~licensekit.registry.LicenseCatalog` comes from.

Sources (tried in order by :func:`build_catalog_source`)::

    ┌──────────────────────┐  failure   ┌──────────────────────────────┐
    │ RemoteCatalogSource  │ ─────────► │ DirectoryCatalogSource       │
    │ spdx.org JSON, httpx │  (logged)  │ (local_licenses_dir), else   │
    └──────────────────────┘            │ BundledCatalogSource         │
                                        └──────────────────────────────┘

With ``only_use_local_licenses`` the remote source is skipped entirely.

Failures that trigger the fallback: transport errors, non-2xx
responses, undecodable JSON, and payloads that fail schema validation.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import importlib.resources
import json
from pathlib import Path
from typing import Any, Final, Protocol

import httpx

from licensekit.config import RegistryConfig
from licensekit.errors import CatalogFormatError
from licensekit.logging import get_logger
from licensekit.net import DEFAULT_TIMEOUT, MAX_RETRIES, http_client, request_with_retry
from licensekit.registry._catalog import LicenseCatalog

__all__ = [
    'BundledCatalogSource',
    'CatalogSource',
    'DirectoryCatalogSource',
    'FallbackCatalogSource',
    'RemoteCatalogSource',
    'build_catalog_source',
]

log = get_logger('licensekit.registry.sources')

_LICENSES_FILE: Final[str] = 'licenses.json'
_EXCEPTIONS_FILE: Final[str] = 'exceptions.json'

# Errors a primary source may raise that mean "use the fallback".
_FALLBACK_ERRORS: Final[tuple[type[BaseException], ...]] = (
    httpx.HTTPError,
    OSError,
    ValueError,
    CatalogFormatError,
)


class CatalogSource(Protocol):
    """Anything that can produce a :class:`LicenseCatalog`."""

    @property
    def name(self) -> str:
        """Human-readable description used in log events."""
        ...

    def load(self) -> LicenseCatalog:
        """Load and validate the catalog."""
        ...


class RemoteCatalogSource:
    """Fetch ``licenses.json`` and ``exceptions.json`` over HTTPS.

    Args:
        licenses_url: URL of ``licenses.json``.
        exceptions_url: URL of ``exceptions.json``.
        timeout: Per-request timeout in seconds.
        max_retries: Retries after the first attempt.
    """

    def __init__(
        self,
        licenses_url: str,
        exceptions_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
    ) -> None:
        self.licenses_url = licenses_url
        self.exceptions_url = exceptions_url
        self.timeout = timeout
        self.max_retries = max_retries

    @property
    def name(self) -> str:
        return self.licenses_url

    async def _fetch_json(self, client: httpx.AsyncClient, url: str) -> Any:  # noqa: ANN401
        resp = await request_with_retry(client, 'GET', url, max_retries=self.max_retries)
        resp.raise_for_status()
        return resp.json()

    async def load_async(self) -> LicenseCatalog:
        """Fetch both payloads concurrently and build the catalog."""
        async with http_client(pool_size=2, timeout=self.timeout) as client:
            licenses, exceptions = await asyncio.gather(
                self._fetch_json(client, self.licenses_url),
                self._fetch_json(client, self.exceptions_url),
            )
        return LicenseCatalog.from_payloads(licenses, exceptions, source=self.licenses_url)

    def load(self) -> LicenseCatalog:
        """Blocking wrapper around :meth:`load_async`.

        Inside a running event loop the fetch runs on its own loop in a
        worker thread, so synchronous callers such as the parser work
        from async code too.  Prefer :meth:`load_async` there.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.load_async())
        with concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix='licensekit-catalog') as pool:
            return pool.submit(lambda: asyncio.run(self.load_async())).result()


class DirectoryCatalogSource:
    """Read ``licenses.json`` and ``exceptions.json`` from a local directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    @property
    def name(self) -> str:
        return str(self.directory)

    def load(self) -> LicenseCatalog:
        """Read and validate both files."""
        licenses = json.loads((self.directory / _LICENSES_FILE).read_text(encoding='utf-8'))
        exceptions = json.loads((self.directory / _EXCEPTIONS_FILE).read_text(encoding='utf-8'))
        return LicenseCatalog.from_payloads(licenses, exceptions, source=str(self.directory))


class BundledCatalogSource:
    """The snapshot shipped inside the ``licensekit`` package (``licensekit/data``)."""

    @property
    def name(self) -> str:
        return 'bundled'

    def load(self) -> LicenseCatalog:
        """Read and validate the packaged snapshot."""
        data_dir = importlib.resources.files('licensekit') / 'data'
        licenses = json.loads((data_dir / _LICENSES_FILE).read_text(encoding='utf-8'))
        exceptions = json.loads((data_dir / _EXCEPTIONS_FILE).read_text(encoding='utf-8'))
        return LicenseCatalog.from_payloads(licenses, exceptions, source=self.name)


class FallbackCatalogSource:
    """Try *primary*; on failure log ``catalog_fallback`` and load *fallback*.

    Errors from the fallback itself propagate.
    """

    def __init__(self, primary: CatalogSource, fallback: CatalogSource) -> None:
        self.primary = primary
        self.fallback = fallback

    @property
    def name(self) -> str:
        return f'{self.primary.name} (fallback: {self.fallback.name})'

    def load(self) -> LicenseCatalog:
        """Load from the primary source, or from the fallback if it fails."""
        try:
            return self.primary.load()
        except _FALLBACK_ERRORS as exc:
            log.warning(
                'catalog_fallback',
                source=self.primary.name,
                fallback=self.fallback.name,
                error=str(exc) or type(exc).__name__,
            )
        return self.fallback.load()


def build_catalog_source(config: RegistryConfig) -> CatalogSource:
    """Return the source chain described by *config*."""
    local: CatalogSource
    if config.local_licenses_dir is not None:
        local = DirectoryCatalogSource(config.local_licenses_dir)
    else:
        local = BundledCatalogSource()
    if config.only_use_local_licenses:
        return local
    remote = RemoteCatalogSource(
        config.licenses_url,
        config.exceptions_url,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )
    return FallbackCatalogSource(remote, local)
