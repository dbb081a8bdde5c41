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

"""Tests for licensekit.store."""

from __future__ import annotations

from pathlib import Path

import pytest
from licensekit.store import MemoryPropertyStore


class TestMemoryPropertyStore:
    """Tests for MemoryPropertyStore."""

    def test_set_and_get(self) -> None:
        """Values round-trip through set_values/get_values."""
        store = MemoryPropertyStore('https://example.com/doc')
        store.set_values('SPDXRef-1', 'licenseConcluded', ['MIT'])
        assert store.get_values('SPDXRef-1', 'licenseConcluded') == ['MIT']
        assert store.has_subject('SPDXRef-1')
        assert store.subjects() == ['SPDXRef-1']
        assert store.properties('SPDXRef-1') == ['licenseConcluded']
        assert store.namespace == 'https://example.com/doc'

    def test_unset_values_are_empty(self) -> None:
        """Missing subjects and properties read as empty."""
        store = MemoryPropertyStore()
        assert store.get_values('SPDXRef-9', 'name') == []
        assert store.properties('SPDXRef-9') == []
        assert not store.has_subject('SPDXRef-9')

    def test_empty_values_remove_property(self) -> None:
        """Setting no values removes the property and an emptied subject."""
        store = MemoryPropertyStore()
        store.set_values('LicenseRef-1', 'name', ['Custom'])
        store.set_values('LicenseRef-1', 'name', [])
        assert not store.has_subject('LicenseRef-1')
        assert store.subjects() == []

    def test_returned_lists_are_copies(self) -> None:
        """Mutating a returned list does not change the store."""
        store = MemoryPropertyStore()
        store.set_values('SPDXRef-1', 'seeAlso', ['a'])
        store.get_values('SPDXRef-1', 'seeAlso').append('b')
        assert store.get_values('SPDXRef-1', 'seeAlso') == ['a']

    def test_dump_and_load(self, tmp_path: Path) -> None:
        """dump() and load() preserve namespace and contents."""
        store = MemoryPropertyStore('urn:doc', {'LicenseRef-1': {'extractedText': ['Custom terms.']}})
        path = tmp_path / 'doc.json'
        store.dump(path)
        loaded = MemoryPropertyStore.load(path)
        assert loaded.to_dict() == store.to_dict()
        assert loaded.namespace == 'urn:doc'

    @pytest.mark.parametrize(
        'data',
        [
            {'subjects': []},
            {'subjects': {'SPDXRef-1': 'MIT'}},
            {'subjects': {'SPDXRef-1': {'name': 'x'}}},
        ],
    )
    def test_from_dict_rejects_bad_shape(self, data: dict[str, object]) -> None:
        """Malformed snapshots raise ValueError."""
        with pytest.raises(ValueError):
            MemoryPropertyStore.from_dict(data)
