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

"""Listed-license catalog: an immutable snapshot of the SPDX license list.

A catalog is built from the two JSON documents published by the SPDX
project (``licenses.json`` and ``exceptions.json``, see
https://github.com/spdx/license-list-data).  Only the fields licensekit
uses are read::

    licenses.json                       exceptions.json
    ├── licenseListVersion              ├── licenseListVersion
    └── licenses[]                      └── exceptions[]
        ├── licenseId                       ├── licenseExceptionId
        ├── name                            ├── name
        ├── seeAlso[]                       ├── seeAlso[]
        ├── isOsiApproved                   └── isDeprecatedLicenseId
        └── isDeprecatedLicenseId

Both payloads are validated with ``jsonschema`` before use (the shared
id and ``seeAlso`` definitions are resolved through a ``referencing``
registry); a payload that does not match raises :class:`~licensekit.errors.CatalogFormatError`.

Lookups are case-insensitive: ``index`` maps lowercased ids to the
canonical spelling, and ``entries`` maps canonical ids to the raw JSON
entry.  The two are kept separately, so an index hit with no entry is
a consistency fault rather than an unknown id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

import jsonschema
import referencing

from licensekit.errors import CatalogFormatError
from licensekit.license_info import LicenseException, ListedLicense

__all__ = [
    'EXCEPTIONS_SCHEMA',
    'LICENSES_SCHEMA',
    'LicenseCatalog',
    'validate_payload',
]

# Shared definitions, resolved through a ``referencing.Registry``.
_COMMON_ID: Final[str] = 'urn:licensekit:spdx-list-common'
_COMMON_SCHEMA: Final[dict[str, Any]] = {
    '$schema': 'https://json-schema.org/draft/2020-12/schema',
    '$id': _COMMON_ID,
    '$defs': {
        'spdxId': {'type': 'string', 'pattern': r'^[A-Za-z0-9.\-+]+$'},
        'seeAlso': {'type': 'array', 'items': {'type': 'string'}},
        'version': {'type': 'string', 'minLength': 1},
    },
}

_SCHEMA_REGISTRY: Final[referencing.Registry] = referencing.Registry().with_resource(  # type: ignore[type-arg]
    _COMMON_ID,
    referencing.Resource.from_contents(_COMMON_SCHEMA),
)


def _ref(name: str) -> dict[str, str]:
    return {'$ref': f'{_COMMON_ID}#/$defs/{name}'}


#: JSON Schema for the subset of ``licenses.json`` licensekit reads.
LICENSES_SCHEMA: Final[dict[str, Any]] = {
    '$schema': 'https://json-schema.org/draft/2020-12/schema',
    'type': 'object',
    'required': ['licenseListVersion', 'licenses'],
    'properties': {
        'licenseListVersion': _ref('version'),
        'releaseDate': {'type': 'string'},
        'licenses': {
            'type': 'array',
            'items': {
                'type': 'object',
                'required': ['licenseId', 'name'],
                'properties': {
                    'licenseId': _ref('spdxId'),
                    'name': {'type': 'string'},
                    'seeAlso': _ref('seeAlso'),
                    'isOsiApproved': {'type': 'boolean'},
                    'isDeprecatedLicenseId': {'type': 'boolean'},
                },
            },
        },
    },
}

#: JSON Schema for the subset of ``exceptions.json`` licensekit reads.
EXCEPTIONS_SCHEMA: Final[dict[str, Any]] = {
    '$schema': 'https://json-schema.org/draft/2020-12/schema',
    'type': 'object',
    'required': ['licenseListVersion', 'exceptions'],
    'properties': {
        'licenseListVersion': _ref('version'),
        'releaseDate': {'type': 'string'},
        'exceptions': {
            'type': 'array',
            'items': {
                'type': 'object',
                'required': ['licenseExceptionId', 'name'],
                'properties': {
                    'licenseExceptionId': _ref('spdxId'),
                    'name': {'type': 'string'},
                    'seeAlso': _ref('seeAlso'),
                    'isDeprecatedLicenseId': {'type': 'boolean'},
                },
            },
        },
    },
}


def validate_payload(payload: Any, schema: dict[str, Any], source: str) -> None:  # noqa: ANN401
    """Validate a decoded JSON payload against *schema*.

    Args:
        payload: The decoded JSON document.
        schema: One of :data:`LICENSES_SCHEMA` / :data:`EXCEPTIONS_SCHEMA`.
        source: URL or path the payload came from, for error messages.

    Raises:
        CatalogFormatError: Listing every violation found.
    """
    validator = jsonschema.Draft202012Validator(schema, registry=_SCHEMA_REGISTRY)
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.absolute_path))
    if errors:
        raise CatalogFormatError(
            source,
            [f'{".".join(str(p) for p in e.absolute_path) or "(root)"}: {e.message}' for e in errors],
        )


@dataclass(frozen=True)
class LicenseCatalog:
    """An immutable, indexed snapshot of the listed licenses and exceptions.

    Attributes:
        version: The ``licenseListVersion`` of the license payload.
        source: Human-readable origin (URL, path or ``"bundled"``).
        license_index: Lowercased license id to canonical id.
        license_entries: Canonical license id to raw JSON entry.
        exception_index: Lowercased exception id to canonical id.
        exception_entries: Canonical exception id to raw JSON entry.
    """

    version: str
    source: str
    license_index: dict[str, str] = field(default_factory=dict)
    license_entries: dict[str, dict[str, Any]] = field(default_factory=dict)
    exception_index: dict[str, str] = field(default_factory=dict)
    exception_entries: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_payloads(
        cls,
        licenses: Any,  # noqa: ANN401
        exceptions: Any,  # noqa: ANN401
        *,
        source: str,
    ) -> LicenseCatalog:
        """Validate and index decoded ``licenses.json`` / ``exceptions.json`` documents.

        Raises:
            CatalogFormatError: If either payload fails validation.
        """
        validate_payload(licenses, LICENSES_SCHEMA, f'{source} (licenses)')
        validate_payload(exceptions, EXCEPTIONS_SCHEMA, f'{source} (exceptions)')
        license_entries = {entry['licenseId']: entry for entry in licenses['licenses']}
        exception_entries = {entry['licenseExceptionId']: entry for entry in exceptions['exceptions']}
        return cls(
            version=licenses['licenseListVersion'],
            source=source,
            license_index={lid.lower(): lid for lid in license_entries},
            license_entries=license_entries,
            exception_index={eid.lower(): eid for eid in exception_entries},
            exception_entries=exception_entries,
        )

    def canonical_license_id(self, license_id: str) -> str | None:
        """Return the canonical spelling of a listed license id, or ``None``."""
        return self.license_index.get(license_id.lower())

    def canonical_exception_id(self, exception_id: str) -> str | None:
        """Return the canonical spelling of a listed exception id, or ``None``."""
        return self.exception_index.get(exception_id.lower())

    @staticmethod
    def build_license(entry: dict[str, Any]) -> ListedLicense:
        """Turn a raw ``licenses.json`` entry into a :class:`ListedLicense`."""
        return ListedLicense(
            id=entry['licenseId'],
            name=entry.get('name'),
            see_also=tuple(entry.get('seeAlso', ())),
            osi_approved=bool(entry.get('isOsiApproved', False)),
            deprecated=bool(entry.get('isDeprecatedLicenseId', False)),
        )

    @staticmethod
    def build_exception(entry: dict[str, Any]) -> LicenseException:
        """Turn a raw ``exceptions.json`` entry into a :class:`LicenseException`."""
        return LicenseException(
            id=entry['licenseExceptionId'],
            name=entry.get('name'),
            see_also=tuple(entry.get('seeAlso', ())),
            deprecated=bool(entry.get('isDeprecatedLicenseId', False)),
        )
