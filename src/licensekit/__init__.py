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

"""licensekit: SPDX license expressions, listed-license registry and extracted-license bookkeeping.

Usage::

    from licensekit import LicenseDocument, ListedLicenseRegistry, parse

    registry = ListedLicenseRegistry()
    expr = parse('(MIT OR Apache-2.0) AND GPL-2.0+ WITH Autoconf-exception-2.0', registry)
    print(expr)

    doc = LicenseDocument('https://example.com/spdx/doc-1')
    custom = doc.add_new_extracted_license('All rights reserved.')
    doc.parse(f'MIT AND {custom.id}', registry)
"""

from licensekit._types import ParseErrorKind
from licensekit.document import LicenseDocument
from licensekit.errors import (
    CatalogFormatError,
    ConfigError,
    DuplicateExtractedLicenseIdError,
    InvalidLicenseIdError,
    LicenseKitError,
    LicenseParseError,
    RegistryError,
    UnknownLicenseIdError,
)
from licensekit.license_info import (
    AnyLicenseInfo,
    ConjunctiveLicenseSet,
    DisjunctiveLicenseSet,
    ExtractedLicenseInfo,
    LicenseException,
    ListedLicense,
    NoAssertionLicense,
    NoneLicense,
    OrLaterOperator,
    WithExceptionOperator,
)
from licensekit.registry import ListedLicenseRegistry, get_default_registry
from licensekit.spdx_expr import ParseResult, is_valid, license_ids, parse, tokenize, try_parse

__version__ = '0.1.0'

__all__ = [
    'AnyLicenseInfo',
    'CatalogFormatError',
    'ConfigError',
    'ConjunctiveLicenseSet',
    'DisjunctiveLicenseSet',
    'DuplicateExtractedLicenseIdError',
    'ExtractedLicenseInfo',
    'InvalidLicenseIdError',
    'LicenseDocument',
    'LicenseException',
    'LicenseKitError',
    'LicenseParseError',
    'ListedLicense',
    'ListedLicenseRegistry',
    'NoAssertionLicense',
    'NoneLicense',
    'OrLaterOperator',
    'ParseErrorKind',
    'ParseResult',
    'RegistryError',
    'UnknownLicenseIdError',
    'WithExceptionOperator',
    'get_default_registry',
    'is_valid',
    'license_ids',
    'parse',
    'tokenize',
    'try_parse',
]
