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

"""The listed-license registry.

:class:`ListedLicenseRegistry` answers the parser's questions ("is
``mit`` a listed license id?", "give me the canonical ``MIT``") from a
:class:`~licensekit.registry.LicenseCatalog` that it loads lazily from a
:class:`~licensekit.registry.CatalogSource`.

Locking::

    lookups               shared (read) side
    first load / reload   exclusive (write) side
    reset                 exclusive (write) side

A new catalog is always built completely before it is swapped in under
the write lock, so readers see either the old index or the new one.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import TypeVar

from licensekit.config import RegistryConfig, load_config
from licensekit.errors import RegistryError, UnknownLicenseIdError
from licensekit.license_info import LicenseException, ListedLicense
from licensekit.logging import get_logger
from licensekit.registry._catalog import LicenseCatalog
from licensekit.registry._rwlock import ReadWriteLock
from licensekit.registry._sources import CatalogSource, RemoteCatalogSource, build_catalog_source

__all__ = [
    'ListedLicenseRegistry',
    'get_default_registry',
    'reset_default_registry',
]

log = get_logger('licensekit.registry')

_T = TypeVar('_T')


class ListedLicenseRegistry:
    """Lazily populated, thread-safe index of listed licenses and exceptions.

    Args:
        config: Registry settings.  Ignored when *source* is given,
            except as the record returned by :attr:`config`.
        source: Explicit catalog source.  Defaults to the chain built by
            :func:`~licensekit.registry.build_catalog_source`.
    """

    def __init__(
        self,
        config: RegistryConfig | None = None,
        *,
        source: CatalogSource | None = None,
    ) -> None:
        self._config = config or RegistryConfig()
        self._source = source if source is not None else build_catalog_source(self._config)
        self._lock = ReadWriteLock()
        self._catalog: LicenseCatalog | None = None
        # Resolved nodes, keyed by canonical id.  Filled under the read
        # lock; setdefault keeps the first node if two readers race.
        self._licenses: dict[str, ListedLicense] = {}
        self._exceptions: dict[str, LicenseException] = {}

    @property
    def config(self) -> RegistryConfig:
        """The configuration this registry was built with."""
        return self._config

    @property
    def source(self) -> CatalogSource:
        """The catalog source used for population."""
        return self._source

    # ── Population ──────────────────────────────────────────────────

    def _install(self, catalog: LicenseCatalog) -> None:
        """Swap in *catalog*; caller holds the write lock."""
        self._catalog = catalog
        self._licenses.clear()
        self._exceptions.clear()
        log.info(
            'catalog_loaded',
            version=catalog.version,
            source=catalog.source,
            licenses=len(catalog.license_entries),
            exceptions=len(catalog.exception_entries),
        )

    def _populate(self) -> None:
        with self._lock.write_locked():
            if self._catalog is None:
                self._install(self._source.load())

    def _read(self, fn: Callable[[LicenseCatalog], _T]) -> _T:
        """Run *fn* against the current catalog under the read lock, loading it first if needed."""
        while True:
            with self._lock.read_locked():
                catalog = self._catalog
                if catalog is not None:
                    return fn(catalog)
            self._populate()

    def _swap(self, catalog: LicenseCatalog) -> None:
        with self._lock.write_locked():
            self._install(catalog)

    def reload(self) -> None:
        """Load a fresh catalog from the source and swap it in."""
        self._swap(self._source.load())

    async def reload_async(self) -> None:
        """Like :meth:`reload`, usable from inside a running event loop.

        The write lock is taken on a worker thread so that readers
        holding it never block the loop.
        """
        if isinstance(self._source, RemoteCatalogSource):
            catalog = await self._source.load_async()
        else:
            catalog = await asyncio.to_thread(self._source.load)
        await asyncio.to_thread(self._swap, catalog)

    def reset(self) -> None:
        """Drop the catalog and all cached nodes; the next lookup reloads."""
        with self._lock.write_locked():
            self._catalog = None
            self._licenses.clear()
            self._exceptions.clear()
        log.debug('catalog_reset')

    @property
    def is_loaded(self) -> bool:
        """``True`` once a catalog has been installed (and not reset)."""
        with self._lock.read_locked():
            return self._catalog is not None

    # ── Licenses ────────────────────────────────────────────────────

    def is_listed_license_id(self, license_id: str) -> bool:
        """Return ``True`` if *license_id* is listed (case-insensitive)."""
        return self._read(lambda c: c.canonical_license_id(license_id) is not None)

    def canonical_license_id(self, license_id: str) -> str | None:
        """Return the listed spelling of *license_id*, or ``None``."""
        return self._read(lambda c: c.canonical_license_id(license_id))

    def resolve_listed_license(self, license_id: str) -> ListedLicense:
        """Return the canonical :class:`ListedLicense` for *license_id*.

        Raises:
            UnknownLicenseIdError: If *license_id* is not listed.
            RegistryError: If the index lists the id but has no entry
                for it.
        """
        return self._read(lambda c: self._resolve_license(c, license_id))

    def _resolve_license(self, catalog: LicenseCatalog, license_id: str) -> ListedLicense:
        canonical = catalog.canonical_license_id(license_id)
        if canonical is None:
            raise UnknownLicenseIdError(license_id)
        cached = self._licenses.get(canonical)
        if cached is not None:
            return cached
        entry = catalog.license_entries.get(canonical)
        if entry is None:
            raise RegistryError(f'Listed license {canonical!r} is indexed but has no entry in {catalog.source}')
        return self._licenses.setdefault(canonical, catalog.build_license(entry))

    def listed_license_ids(self) -> list[str]:
        """Return every listed license id, sorted case-insensitively."""
        return self._read(lambda c: sorted(c.license_entries, key=str.lower))

    # ── Exceptions ──────────────────────────────────────────────────

    def is_listed_exception_id(self, exception_id: str) -> bool:
        """Return ``True`` if *exception_id* is a listed exception (case-insensitive)."""
        return self._read(lambda c: c.canonical_exception_id(exception_id) is not None)

    def resolve_listed_exception(self, exception_id: str) -> LicenseException:
        """Return the canonical :class:`LicenseException` for *exception_id*.

        Raises:
            UnknownLicenseIdError: If *exception_id* is not listed.
            RegistryError: If the index lists the id but has no entry
                for it.
        """
        return self._read(lambda c: self._resolve_exception(c, exception_id))

    def _resolve_exception(self, catalog: LicenseCatalog, exception_id: str) -> LicenseException:
        canonical = catalog.canonical_exception_id(exception_id)
        if canonical is None:
            raise UnknownLicenseIdError(exception_id, 'exception')
        cached = self._exceptions.get(canonical)
        if cached is not None:
            return cached
        entry = catalog.exception_entries.get(canonical)
        if entry is None:
            raise RegistryError(f'Listed exception {canonical!r} is indexed but has no entry in {catalog.source}')
        return self._exceptions.setdefault(canonical, catalog.build_exception(entry))

    def listed_exception_ids(self) -> list[str]:
        """Return every listed exception id, sorted case-insensitively."""
        return self._read(lambda c: sorted(c.exception_entries, key=str.lower))

    @property
    def license_list_version(self) -> str:
        """The ``licenseListVersion`` of the loaded catalog."""
        return self._read(lambda c: c.version)


# ── Process-wide default ──────────────────────────────────────────────

_default_registry: ListedLicenseRegistry | None = None
_default_lock = threading.Lock()


def get_default_registry() -> ListedLicenseRegistry:
    """Return the process-wide registry, creating it from :func:`~licensekit.config.load_config`.

    Library code should prefer passing an explicit registry; this is a
    convenience for scripts and the CLI.
    """
    global _default_registry  # noqa: PLW0603
    with _default_lock:
        if _default_registry is None:
            _default_registry = ListedLicenseRegistry(load_config())
        return _default_registry


def reset_default_registry(registry: ListedLicenseRegistry | None = None) -> None:
    """Replace the process-wide registry (``None`` means rebuild on next use)."""
    global _default_registry  # noqa: PLW0603
    with _default_lock:
        _default_registry = registry
