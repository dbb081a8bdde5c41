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

r"""Per-document container for extracted licenses and element ids.

A :class:`LicenseDocument` owns the extracted licenses (``LicenseRef-N``)
of one SPDX document and hands out fresh ids that never collide with
ids already present in its backing :class:`~licensekit.store.PropertyStore`.

Id allocation::

    open document ──► scan every subject id and every property value
                      record the N of each  LicenseRef-N / SPDXRef-N
                      (non-numeric suffixes are ignored)

    allocate      ──► under the allocator's lock:
                      n = next counter value, counter += 1
                      skip n if it was recorded, already issued, or the
                      id is otherwise in use; else return Prefix-n

Counters start at 1 and fill gaps, so a document holding
``LicenseRef-1`` and ``LicenseRef-3`` allocates ``LicenseRef-2``,
``LicenseRef-4``, ``LicenseRef-5``.

Usage::

    from licensekit.document import LicenseDocument
    from licensekit.registry import ListedLicenseRegistry

    doc = LicenseDocument('https://example.com/spdx/doc-1')
    ref = doc.add_new_extracted_license('Permission is granted to ...')
    node = doc.parse(f'MIT AND {ref.id}', ListedLicenseRegistry())
    doc.set_license_property('SPDXRef-1', 'licenseConcluded', node)
    doc.save()
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Iterable
from typing import Final

from licensekit.errors import DuplicateExtractedLicenseIdError, InvalidLicenseIdError
from licensekit.license_info import AnyLicenseInfo, ExtractedLicenseInfo
from licensekit.logging import get_logger
from licensekit.spdx_expr import LicenseRegistry, parse, tokenize
from licensekit.store import MemoryPropertyStore, PropertyStore
from licensekit.text import is_license_text_equivalent

__all__ = [
    'DOCUMENT_ID',
    'ELEMENT_ID_PREFIX',
    'EXTRACTED_LICENSE_ID_PREFIX',
    'EXTRACTED_LICENSE_TYPE',
    'LicenseDocument',
]

log = get_logger('licensekit.document')

#: Prefix of document-local extracted license ids.
EXTRACTED_LICENSE_ID_PREFIX: Final[str] = 'LicenseRef'

#: Prefix of element ids.
ELEMENT_ID_PREFIX: Final[str] = 'SPDXRef'

#: Element id of the document itself.
DOCUMENT_ID: Final[str] = 'SPDXRef-DOCUMENT'

#: ``type`` property value marking an extracted-license subject.
EXTRACTED_LICENSE_TYPE: Final[str] = 'ExtractedLicensingInfo'

# Property names used when persisting extracted licenses.
_PROP_TYPE: Final[str] = 'type'
_PROP_TEXT: Final[str] = 'extractedText'
_PROP_NAME: Final[str] = 'name'
_PROP_COMMENT: Final[str] = 'comment'
_PROP_SEE_ALSO: Final[str] = 'seeAlso'

_WHITESPACE_RE: Final[re.Pattern[str]] = re.compile(r'\s')


class _IdAllocator:
    """Mints ``<prefix>-<n>`` ids, skipping numbers that are already taken."""

    def __init__(self, prefix: str, in_use: Callable[[str], bool]) -> None:
        self._prefix = prefix
        self._pattern = re.compile(rf'^{re.escape(prefix)}-(\d+)$')
        self._in_use = in_use
        self._taken: set[int] = set()
        self._next = 1
        self._lock = threading.Lock()

    def observe(self, ident: str) -> None:
        """Record *ident* if it has this allocator's numeric form."""
        match = self._pattern.match(ident)
        if match:
            with self._lock:
                self._taken.add(int(match.group(1)))

    def allocate(self) -> str:
        """Return the next free id."""
        with self._lock:
            while True:
                number = self._next
                self._next += 1
                candidate = f'{self._prefix}-{number}'
                if number in self._taken or self._in_use(candidate):
                    continue
                self._taken.add(number)
                return candidate


class LicenseDocument:
    """Extracted licenses and id allocation for one document.

    Args:
        namespace: Document namespace URI.  Ignored when *store* is
            given (the store's namespace is used).
        store: Backing store.  Existing extracted licenses and ids are
            read from it on construction.  Defaults to an empty
            :class:`~licensekit.store.MemoryPropertyStore`.
    """

    def __init__(self, namespace: str = '', *, store: PropertyStore | None = None) -> None:
        self._store: PropertyStore = store if store is not None else MemoryPropertyStore(namespace)
        self._lock = threading.RLock()
        # Keyed by lowercased id; ids compare case-insensitively.
        self._extracted: dict[str, ExtractedLicenseInfo] = {}
        self._license_ids = _IdAllocator(EXTRACTED_LICENSE_ID_PREFIX, self._license_id_in_use)
        self._element_ids = _IdAllocator(ELEMENT_ID_PREFIX, self._store.has_subject)
        self._scan_store()

    @property
    def namespace(self) -> str:
        """The document namespace URI."""
        return self._store.namespace

    @property
    def store(self) -> PropertyStore:
        """The backing property store."""
        return self._store

    # ── Loading ─────────────────────────────────────────────────────

    def _observe(self, ident: str) -> None:
        self._license_ids.observe(ident)
        self._element_ids.observe(ident)

    def _scan_store(self) -> None:
        """Record every id already in the store and load its extracted licenses."""
        loaded = 0
        for subject in self._store.subjects():
            self._observe(subject)
            for prop in self._store.properties(subject):
                for value in self._store.get_values(subject, prop):
                    for token in tokenize(value):
                        self._observe(token)
            if EXTRACTED_LICENSE_TYPE in self._store.get_values(subject, _PROP_TYPE):
                self._extracted[subject.lower()] = self._read_extracted(subject)
                loaded += 1
        if loaded:
            log.debug('extracted_licenses_loaded', namespace=self.namespace, count=loaded)

    def _read_extracted(self, subject: str) -> ExtractedLicenseInfo:
        def first(prop: str) -> str | None:
            values = self._store.get_values(subject, prop)
            return values[0] if values else None

        return ExtractedLicenseInfo(
            id=subject,
            text=first(_PROP_TEXT),
            name=first(_PROP_NAME),
            comment=first(_PROP_COMMENT),
            see_also=tuple(self._store.get_values(subject, _PROP_SEE_ALSO)),
        )

    def _license_id_in_use(self, license_id: str) -> bool:
        return license_id.lower() in self._extracted or self._store.has_subject(license_id)

    # ── Extracted licenses ──────────────────────────────────────────

    def extracted_license_exists(self, license_id: str) -> bool:
        """Return ``True`` if *license_id* is registered (case-insensitive)."""
        with self._lock:
            return license_id.lower() in self._extracted

    def get_extracted_license(self, license_id: str) -> ExtractedLicenseInfo:
        """Return the extracted license registered under *license_id*.

        Raises:
            KeyError: If no such license is registered.
        """
        with self._lock:
            return self._extracted[license_id.lower()]

    def extracted_licenses(self) -> list[ExtractedLicenseInfo]:
        """Return every registered extracted license, sorted by id."""
        with self._lock:
            return sorted(self._extracted.values(), key=lambda info: info.id)

    def get_or_create_extracted_license(self, license_id: str) -> ExtractedLicenseInfo:
        """Return the extracted license for *license_id*, registering a text-less one if absent.

        Idempotent, and never advances the id counter.
        """
        _check_id(license_id)
        with self._lock:
            existing = self._extracted.get(license_id.lower())
            if existing is not None:
                return existing
            info = ExtractedLicenseInfo(license_id)
            self._extracted[license_id.lower()] = info
        self._license_ids.observe(license_id)
        return info

    def add_extracted_license(self, info: ExtractedLicenseInfo) -> ExtractedLicenseInfo:
        """Register *info* and return the license now held under its id.

        - Unknown id: *info* is registered.
        - Known id without text: *info* replaces the placeholder.
        - Known id with equivalent text (or *info* has none): the
          existing license is kept and returned.

        Raises:
            DuplicateExtractedLicenseIdError: If the id is already
                registered with materially different text.
            InvalidLicenseIdError: If the id is empty or contains
                whitespace.
        """
        _check_id(info.id)
        key = info.id.lower()
        with self._lock:
            existing = self._extracted.get(key)
            if existing is None or existing.text is None:
                self._extracted[key] = info
            elif info.text is not None and not is_license_text_equivalent(existing.text, info.text):
                raise DuplicateExtractedLicenseIdError(info.id, existing.text, info.text)
            else:
                return existing
        self._license_ids.observe(info.id)
        return info

    def add_extracted_licenses(self, infos: Iterable[ExtractedLicenseInfo]) -> list[ExtractedLicenseInfo]:
        """Register several licenses with :meth:`add_extracted_license`."""
        return [self.add_extracted_license(info) for info in infos]

    def add_new_extracted_license(
        self,
        text: str,
        *,
        name: str | None = None,
        comment: str | None = None,
        see_also: Iterable[str] = (),
    ) -> ExtractedLicenseInfo:
        """Register *text* under a freshly allocated ``LicenseRef-N`` id."""
        info = ExtractedLicenseInfo(
            id=self.next_free_extracted_license_id(),
            text=text,
            name=name,
            comment=comment,
            see_also=tuple(see_also),
        )
        return self.add_extracted_license(info)

    def find_equivalent_extracted_license(self, text: str) -> ExtractedLicenseInfo | None:
        """Return a registered license whose text is equivalent to *text*, if any."""
        with self._lock:
            candidates = list(self._extracted.values())
        for info in sorted(candidates, key=lambda i: i.id):
            if info.text is not None and is_license_text_equivalent(info.text, text):
                return info
        return None

    # ── Id allocation ───────────────────────────────────────────────

    def next_free_extracted_license_id(self) -> str:
        """Return an unused ``LicenseRef-N`` id and reserve it."""
        return self._license_ids.allocate()

    def next_free_element_id(self) -> str:
        """Return an unused ``SPDXRef-N`` element id and reserve it."""
        return self._element_ids.allocate()

    # ── Expressions on subjects ─────────────────────────────────────

    def parse(self, expression: str, registry: LicenseRegistry) -> AnyLicenseInfo:
        """Parse *expression*, resolving unknown ids to this document's extracted licenses."""
        return parse(expression, registry, document=self)

    def set_license_property(self, subject: str, prop: str, node: AnyLicenseInfo) -> None:
        """Store the rendered form of *node* as *prop* on *subject*."""
        rendered = str(node)
        self._store.set_values(subject, prop, [rendered])
        self._observe(subject)
        for token in tokenize(rendered):
            self._observe(token)

    def get_license_property(self, subject: str, prop: str, registry: LicenseRegistry) -> AnyLicenseInfo | None:
        """Parse the expression stored as *prop* on *subject* (``None`` if unset)."""
        values = self._store.get_values(subject, prop)
        if not values:
            return None
        return self.parse(values[0], registry)

    # ── Persistence ─────────────────────────────────────────────────

    def save(self) -> None:
        """Write every extracted license back to the store."""
        for info in self.extracted_licenses():
            self._store.set_values(info.id, _PROP_TYPE, [EXTRACTED_LICENSE_TYPE])
            self._store.set_values(info.id, _PROP_TEXT, [info.text] if info.text is not None else [])
            self._store.set_values(info.id, _PROP_NAME, [info.name] if info.name else [])
            self._store.set_values(info.id, _PROP_COMMENT, [info.comment] if info.comment else [])
            self._store.set_values(info.id, _PROP_SEE_ALSO, list(info.see_also))


def _check_id(license_id: str) -> None:
    if not license_id or _WHITESPACE_RE.search(license_id):
        raise InvalidLicenseIdError(f'Invalid extracted license id: {license_id!r}')
