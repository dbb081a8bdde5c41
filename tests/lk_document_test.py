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

"""Tests for licensekit.document: extracted licenses and id allocation."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from licensekit.document import (
    DOCUMENT_ID,
    EXTRACTED_LICENSE_TYPE,
    LicenseDocument,
)
from licensekit.errors import DuplicateExtractedLicenseIdError, InvalidLicenseIdError
from licensekit.license_info import ConjunctiveLicenseSet, ExtractedLicenseInfo, ListedLicense
from licensekit.registry import BundledCatalogSource, ListedLicenseRegistry
from licensekit.store import MemoryPropertyStore

REGISTRY = ListedLicenseRegistry(source=BundledCatalogSource())


def _store_with(*subjects: str) -> MemoryPropertyStore:
    return MemoryPropertyStore(
        'https://example.com/doc',
        {s: {'type': [EXTRACTED_LICENSE_TYPE], 'extractedText': [f'Text of {s}']} for s in subjects},
    )


# ── Registration ─────────────────────────────────────────────────────────


class TestGetOrCreate:
    """Tests for get_or_create_extracted_license()."""

    def test_idempotent(self) -> None:
        """Repeated calls return the same object."""
        doc = LicenseDocument()
        first = doc.get_or_create_extracted_license('LicenseRef-7')
        assert doc.get_or_create_extracted_license('LicenseRef-7') is first
        assert doc.get_or_create_extracted_license('licenseref-7') is first
        assert first.text is None

    def test_does_not_advance_counter(self) -> None:
        """Creating LicenseRef-7 leaves LicenseRef-1 free."""
        doc = LicenseDocument()
        doc.get_or_create_extracted_license('LicenseRef-7')
        assert doc.next_free_extracted_license_id() == 'LicenseRef-1'

    def test_created_id_is_never_allocated(self) -> None:
        """An id created by reference is skipped by the allocator."""
        doc = LicenseDocument()
        doc.get_or_create_extracted_license('LicenseRef-2')
        assert [doc.next_free_extracted_license_id() for _ in range(3)] == [
            'LicenseRef-1',
            'LicenseRef-3',
            'LicenseRef-4',
        ]

    @pytest.mark.parametrize('bad_id', ['', 'LicenseRef 1', 'LicenseRef-\t1'])
    def test_rejects_invalid_id(self, bad_id: str) -> None:
        """Empty ids and ids with whitespace are rejected."""
        doc = LicenseDocument()
        with pytest.raises(InvalidLicenseIdError):
            doc.get_or_create_extracted_license(bad_id)


class TestAddExtractedLicense:
    """Tests for add_extracted_license()."""

    def test_registers_new(self) -> None:
        """A new id is registered and returned."""
        doc = LicenseDocument()
        info = ExtractedLicenseInfo('LicenseRef-a', text='Custom terms.')
        assert doc.add_extracted_license(info) is info
        assert doc.extracted_license_exists('LICENSEREF-A')
        assert doc.get_extracted_license('licenseref-a') is info

    def test_replaces_placeholder(self) -> None:
        """Text arriving for a referenced id replaces the placeholder."""
        doc = LicenseDocument()
        doc.get_or_create_extracted_license('LicenseRef-5')
        full = ExtractedLicenseInfo('LicenseRef-5', text='Now with text.', name='Five')
        assert doc.add_extracted_license(full) is full
        assert doc.get_extracted_license('LicenseRef-5').text == 'Now with text.'

    def test_conflicting_text_raises(self) -> None:
        """Different text under an existing id is rejected, not merged."""
        doc = LicenseDocument()
        doc.add_extracted_license(ExtractedLicenseInfo('LicenseRef-1', text='Original terms.'))
        with pytest.raises(DuplicateExtractedLicenseIdError) as exc_info:
            doc.add_extracted_license(ExtractedLicenseInfo('licenseref-1', text='Other terms.'))
        assert exc_info.value.existing_text == 'Original terms.'
        assert exc_info.value.new_text == 'Other terms.'
        assert doc.get_extracted_license('LicenseRef-1').text == 'Original terms.'

    def test_equivalent_text_is_accepted(self) -> None:
        """Re-registering equivalent text keeps the existing entry."""
        doc = LicenseDocument()
        original = doc.add_extracted_license(ExtractedLicenseInfo('LicenseRef-1', text='Line one\nLine two\n'))
        again = doc.add_extracted_license(ExtractedLicenseInfo('LicenseRef-1', text='Line one\r\nLine two\r\n'))
        assert again is original

    def test_textless_info_keeps_existing(self) -> None:
        """A text-less registration does not clobber existing text."""
        doc = LicenseDocument()
        original = doc.add_extracted_license(ExtractedLicenseInfo('LicenseRef-1', text='Terms.'))
        assert doc.add_extracted_license(ExtractedLicenseInfo('LicenseRef-1')) is original

    def test_add_many(self) -> None:
        """add_extracted_licenses registers each one."""
        doc = LicenseDocument()
        infos = [ExtractedLicenseInfo(f'LicenseRef-x{i}', text=str(i)) for i in range(3)]
        assert doc.add_extracted_licenses(infos) == infos
        assert [i.id for i in doc.extracted_licenses()] == ['LicenseRef-x0', 'LicenseRef-x1', 'LicenseRef-x2']

    def test_get_missing_raises(self) -> None:
        """Looking up an unknown id raises KeyError."""
        with pytest.raises(KeyError):
            LicenseDocument().get_extracted_license('LicenseRef-404')


class TestAddNewExtractedLicense:
    """Tests for add_new_extracted_license() and find_equivalent_extracted_license()."""

    def test_allocates_fresh_ids(self) -> None:
        """Each new text gets the next free id."""
        doc = LicenseDocument()
        a = doc.add_new_extracted_license('First.', name='A', see_also=['https://example.com/a'])
        b = doc.add_new_extracted_license('Second.')
        assert (a.id, b.id) == ('LicenseRef-1', 'LicenseRef-2')
        assert a.name == 'A'
        assert a.see_also == ('https://example.com/a',)

    def test_find_equivalent(self) -> None:
        """An equivalent text is found regardless of layout."""
        doc = LicenseDocument()
        doc.add_new_extracted_license('Use  freely.\nNo warranty.')
        found = doc.find_equivalent_extracted_license('Use freely. No warranty.')
        assert found is not None
        assert found.id == 'LicenseRef-1'
        assert doc.find_equivalent_extracted_license('Something else.') is None


# ── Id allocation ────────────────────────────────────────────────────────


class TestIdAllocation:
    """Tests for next_free_extracted_license_id() and next_free_element_id()."""

    def test_fills_gaps_and_skips_taken(self) -> None:
        """With LicenseRef-1 and -3 present, allocation yields 2, 4, 5."""
        doc = LicenseDocument(store=_store_with('LicenseRef-1', 'LicenseRef-3'))
        assert [doc.next_free_extracted_license_id() for _ in range(3)] == [
            'LicenseRef-2',
            'LicenseRef-4',
            'LicenseRef-5',
        ]

    def test_ids_in_property_values_are_taken(self) -> None:
        """Ids that only appear inside stored expressions are skipped."""
        store = MemoryPropertyStore('urn:doc', {'SPDXRef-1': {'licenseConcluded': ['(MIT AND LicenseRef-2)']}})
        doc = LicenseDocument(store=store)
        assert doc.next_free_extracted_license_id() == 'LicenseRef-1'
        assert doc.next_free_extracted_license_id() == 'LicenseRef-3'
        assert doc.next_free_element_id() == 'SPDXRef-2'

    def test_non_numeric_suffixes_ignored(self) -> None:
        """SPDXRef-DOCUMENT and LicenseRef-custom do not affect numbering."""
        store = MemoryPropertyStore('urn:doc', {DOCUMENT_ID: {'name': ['doc']}})
        doc = LicenseDocument(store=store)
        doc.get_or_create_extracted_license('LicenseRef-custom')
        assert doc.next_free_element_id() == 'SPDXRef-1'
        assert doc.next_free_extracted_license_id() == 'LicenseRef-1'

    def test_subjects_added_later_are_skipped(self) -> None:
        """Ids written to the store after opening are still avoided."""
        store = MemoryPropertyStore('urn:doc')
        doc = LicenseDocument(store=store)
        store.set_values('SPDXRef-1', 'name', ['pkg'])
        assert doc.next_free_element_id() == 'SPDXRef-2'

    def test_never_reissues(self) -> None:
        """Allocated ids are never handed out twice."""
        doc = LicenseDocument()
        ids = [doc.next_free_extracted_license_id() for _ in range(5)]
        assert len(set(ids)) == 5

    def test_concurrent_allocation_is_unique(self) -> None:
        """Threads allocating at once never collide."""
        doc = LicenseDocument()
        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(lambda _: doc.next_free_extracted_license_id(), range(200)))
        assert len(set(ids)) == 200

    def test_concurrent_add_new_is_unique(self) -> None:
        """Concurrent add_new_extracted_license calls get distinct ids."""
        doc = LicenseDocument()
        with ThreadPoolExecutor(max_workers=8) as pool:
            infos = list(pool.map(lambda i: doc.add_new_extracted_license(f'Text {i}'), range(50)))
        assert len({i.id for i in infos}) == 50
        assert len(doc.extracted_licenses()) == 50


# ── Expressions and persistence ──────────────────────────────────────────


class TestExpressions:
    """Tests for parse(), set_license_property() and get_license_property()."""

    def test_parse_registers_references(self) -> None:
        """Referenced ids become placeholders and are skipped by allocation."""
        doc = LicenseDocument()
        node = doc.parse('MIT AND LicenseRef-3', REGISTRY)
        assert isinstance(node, ConjunctiveLicenseSet)
        assert doc.extracted_license_exists('LicenseRef-3')
        assert [doc.add_new_extracted_license(t).id for t in ('a', 'b', 'c')] == [
            'LicenseRef-1',
            'LicenseRef-2',
            'LicenseRef-4',
        ]

    def test_property_round_trip(self) -> None:
        """A stored expression parses back to an equal node."""
        doc = LicenseDocument()
        ref = doc.add_new_extracted_license('Custom terms.')
        node = doc.parse(f'(MIT OR Apache-2.0) AND {ref.id}', REGISTRY)
        doc.set_license_property('SPDXRef-1', 'licenseConcluded', node)
        assert doc.get_license_property('SPDXRef-1', 'licenseConcluded', REGISTRY) == node
        assert doc.get_license_property('SPDXRef-1', 'licenseDeclared', REGISTRY) is None
        assert doc.next_free_element_id() == 'SPDXRef-2'

    def test_property_ids_reserved(self) -> None:
        """Ids in a stored expression are reserved for this document."""
        doc = LicenseDocument()
        doc.set_license_property('SPDXRef-1', 'licenseConcluded', ExtractedLicenseInfo('LicenseRef-1'))
        assert doc.next_free_extracted_license_id() == 'LicenseRef-2'


class TestPersistence:
    """Tests for save() and reopening a store."""

    def test_save_and_reopen(self) -> None:
        """Saved extracted licenses are loaded by a new document."""
        store = MemoryPropertyStore('urn:doc')
        doc = LicenseDocument(store=store)
        ref = doc.add_new_extracted_license(
            'Custom terms.',
            name='Custom',
            comment='found in vendor/',
            see_also=['https://example.com/license'],
        )
        doc.set_license_property('SPDXRef-1', 'licenseConcluded', doc.parse(f'MIT AND {ref.id}', REGISTRY))
        doc.save()

        reopened = LicenseDocument(store=store)
        loaded = reopened.get_extracted_license(ref.id)
        assert loaded.text == 'Custom terms.'
        assert loaded.name == 'Custom'
        assert loaded.comment == 'found in vendor/'
        assert loaded.see_also == ('https://example.com/license',)
        assert reopened.next_free_extracted_license_id() == 'LicenseRef-2'
        assert reopened.next_free_element_id() == 'SPDXRef-2'

    def test_placeholder_saved_without_text(self) -> None:
        """A referenced but text-less license is persisted as a bare subject."""
        store = MemoryPropertyStore('urn:doc')
        doc = LicenseDocument(store=store)
        doc.get_or_create_extracted_license('LicenseRef-9')
        doc.save()
        assert store.get_values('LicenseRef-9', 'type') == [EXTRACTED_LICENSE_TYPE]
        assert store.get_values('LicenseRef-9', 'extractedText') == []
        assert LicenseDocument(store=store).get_extracted_license('LicenseRef-9').text is None

    def test_json_round_trip(self, tmp_path: Path) -> None:
        """A document survives dump/load of its store."""
        store = MemoryPropertyStore('urn:doc')
        doc = LicenseDocument(store=store)
        doc.add_new_extracted_license('Custom terms.')
        doc.save()
        path = tmp_path / 'doc.json'
        store.dump(path)

        reopened = LicenseDocument(store=MemoryPropertyStore.load(path))
        assert reopened.namespace == 'urn:doc'
        assert [i.id for i in reopened.extracted_licenses()] == ['LicenseRef-1']
        node = reopened.parse('LicenseRef-1 OR MIT', REGISTRY)
        assert ListedLicense('MIT') in node.flattened_members()  # type: ignore[union-attr]
        assert reopened.get_extracted_license('LicenseRef-1').text == 'Custom terms.'
