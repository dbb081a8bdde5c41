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

"""Exception hierarchy for licensekit.

All errors raised by the library derive from :class:`LicenseKitError`::

    LicenseKitError
    ├── LicenseParseError           malformed license expression
    ├── RegistryError               listed-license index is inconsistent
    │   └── UnknownLicenseIdError   id is not on the list
    ├── CatalogFormatError          catalog payload failed validation
    ├── DuplicateExtractedLicenseIdError
    ├── InvalidLicenseIdError
    └── ConfigError

Unknown identifiers inside an expression are never an error: they
become extracted-license references.
"""

from __future__ import annotations

from licensekit._types import ParseErrorKind

__all__ = [
    'CatalogFormatError',
    'ConfigError',
    'DuplicateExtractedLicenseIdError',
    'InvalidLicenseIdError',
    'LicenseKitError',
    'LicenseParseError',
    'RegistryError',
    'UnknownLicenseIdError',
]


class LicenseKitError(Exception):
    """Base class for every error raised by licensekit."""


class LicenseParseError(LicenseKitError, ValueError):
    """Raised when a license expression is structurally invalid.

    Attributes:
        kind: The :class:`ParseErrorKind` of the failure.
        expression: The original expression string.
        detail: Human-readable description of the problem.
        token: The offending token, if one can be singled out.
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        expression: str,
        detail: str,
        *,
        token: str | None = None,
    ) -> None:
        """Initialize with the error kind, expression text and detail message."""
        self.kind = kind
        self.expression = expression
        self.detail = detail
        self.token = token
        message = f'invalid license expression {expression!r}: {detail}'
        if token is not None:
            message += f' (at {token!r})'
        super().__init__(message)


class RegistryError(LicenseKitError):
    """Raised when the listed-license registry cannot satisfy a lookup.

    A plain :class:`RegistryError` signals a consistency fault: the
    index claims an id is listed but no entry can be produced for it.
    """


class UnknownLicenseIdError(RegistryError, KeyError):
    """Raised when resolving an id that is not on the listed catalog.

    Attributes:
        license_id: The id that was looked up.
    """

    def __init__(self, license_id: str, what: str = 'license') -> None:
        """Initialize with the id that could not be found."""
        self.license_id = license_id
        super().__init__(f'{license_id!r} is not a listed {what} id')

    def __str__(self) -> str:
        """Return the message without ``KeyError``'s repr quoting."""
        return str(self.args[0])


class CatalogFormatError(LicenseKitError):
    """Raised when a license catalog payload fails validation.

    Attributes:
        source: Where the payload came from (URL or path).
        errors: List of human-readable error strings.
    """

    def __init__(self, source: str, errors: list[str]) -> None:
        """Initialize with the payload source and its validation errors."""
        self.source = source
        self.errors = errors
        bullet_list = '\n'.join(f'  - {e}' for e in errors)
        super().__init__(f'License catalog {source} has {len(errors)} validation error(s):\n{bullet_list}')


class DuplicateExtractedLicenseIdError(LicenseKitError):
    """Raised when an extracted-license id is re-registered with different text.

    The existing and new text are never merged or overwritten.

    Attributes:
        license_id: The conflicting ``LicenseRef-`` id.
        existing_text: Text already registered under the id.
        new_text: Text that was rejected.
    """

    def __init__(self, license_id: str, existing_text: str | None, new_text: str | None) -> None:
        """Initialize with the conflicting id and both texts."""
        self.license_id = license_id
        self.existing_text = existing_text
        self.new_text = new_text
        super().__init__(f'Extracted license {license_id!r} is already registered with different text')


class InvalidLicenseIdError(LicenseKitError, ValueError):
    """Raised when an id is empty or contains whitespace."""


class ConfigError(LicenseKitError):
    """Raised when licensekit configuration is invalid."""
