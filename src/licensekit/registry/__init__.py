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

"""Listed-license registry: catalog, sources and the thread-safe lookup index.

Usage::

    from licensekit.registry import ListedLicenseRegistry

    registry = ListedLicenseRegistry()  # spdx.org, falling back to the bundled snapshot
    registry.is_listed_license_id('apache-2.0')  # True
    registry.resolve_listed_license('apache-2.0').id  # 'Apache-2.0'
"""

from licensekit.registry._catalog import (
    EXCEPTIONS_SCHEMA,
    LICENSES_SCHEMA,
    LicenseCatalog,
    validate_payload,
)
from licensekit.registry._registry import (
    ListedLicenseRegistry,
    get_default_registry,
    reset_default_registry,
)
from licensekit.registry._rwlock import ReadWriteLock
from licensekit.registry._sources import (
    BundledCatalogSource,
    CatalogSource,
    DirectoryCatalogSource,
    FallbackCatalogSource,
    RemoteCatalogSource,
    build_catalog_source,
)

__all__ = [
    'EXCEPTIONS_SCHEMA',
    'LICENSES_SCHEMA',
    'BundledCatalogSource',
    'CatalogSource',
    'DirectoryCatalogSource',
    'FallbackCatalogSource',
    'LicenseCatalog',
    'ListedLicenseRegistry',
    'ReadWriteLock',
    'RemoteCatalogSource',
    'build_catalog_source',
    'get_default_registry',
    'reset_default_registry',
    'validate_payload',
]
