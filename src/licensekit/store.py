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

"""Backing property store for license documents.

A document is a set of *subjects* (element ids such as
``SPDXRef-DOCUMENT``, ``SPDXRef-3`` or ``LicenseRef-1``), each with
string-valued properties.  :class:`LicenseDocument` only needs the
small surface in :class:`PropertyStore`; :class:`MemoryPropertyStore`
implements it in memory and can dump itself to JSON.

JSON layout::

    {
      "namespace": "https://example.com/spdx/doc-1",
      "subjects": {
        "LicenseRef-1": {"type": ["ExtractedLicensingInfo"], "extractedText": ["..."]},
        "SPDXRef-2": {"licenseConcluded": ["(MIT AND LicenseRef-1)"]}
      }
    }
"""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

__all__ = [
    'MemoryPropertyStore',
    'PropertyStore',
]


class PropertyStore(Protocol):
    """Minimal subject/property storage a document needs."""

    @property
    def namespace(self) -> str:
        """The document namespace URI."""
        ...

    def subjects(self) -> list[str]:
        """Return every subject id in the store."""
        ...

    def has_subject(self, subject: str) -> bool:
        """Return ``True`` if *subject* has at least one property."""
        ...

    def properties(self, subject: str) -> list[str]:
        """Return the property names set on *subject*."""
        ...

    def get_values(self, subject: str, prop: str) -> list[str]:
        """Return the values of *prop* on *subject* (empty if unset)."""
        ...

    def set_values(self, subject: str, prop: str, values: Sequence[str]) -> None:
        """Replace the values of *prop* on *subject*."""
        ...


class MemoryPropertyStore:
    """Thread-safe in-memory :class:`PropertyStore`.

    Args:
        namespace: The document namespace URI.
        subjects: Optional initial contents, ``{subject: {prop: [values]}}``.
    """

    def __init__(
        self,
        namespace: str = '',
        subjects: dict[str, dict[str, list[str]]] | None = None,
    ) -> None:
        self._namespace = namespace
        self._data: dict[str, dict[str, list[str]]] = {
            subject: {prop: list(values) for prop, values in props.items()} for subject, props in (subjects or {}).items()
        }
        self._lock = threading.Lock()

    @property
    def namespace(self) -> str:
        return self._namespace

    def subjects(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def has_subject(self, subject: str) -> bool:
        with self._lock:
            return bool(self._data.get(subject))

    def properties(self, subject: str) -> list[str]:
        with self._lock:
            return list(self._data.get(subject, {}))

    def get_values(self, subject: str, prop: str) -> list[str]:
        with self._lock:
            return list(self._data.get(subject, {}).get(prop, ()))

    def set_values(self, subject: str, prop: str, values: Sequence[str]) -> None:
        with self._lock:
            props = self._data.setdefault(subject, {})
            if values:
                props[prop] = list(values)
            else:
                props.pop(prop, None)
                if not props:
                    del self._data[subject]

    # ── Serialization ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible snapshot of the store."""
        with self._lock:
            return {
                'namespace': self._namespace,
                'subjects': {s: {p: list(v) for p, v in props.items()} for s, props in self._data.items()},
            }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryPropertyStore:
        """Rebuild a store from :meth:`to_dict` output.

        Raises:
            ValueError: If *data* does not have the expected shape.
        """
        subjects = data.get('subjects', {})
        if not isinstance(subjects, dict):
            raise ValueError('"subjects" must be an object')
        for subject, props in subjects.items():
            if not isinstance(props, dict) or not all(isinstance(v, list) for v in props.values()):
                raise ValueError(f'Subject {subject!r} must map property names to lists')
        return cls(str(data.get('namespace', '')), subjects)

    def dump(self, path: Path) -> None:
        """Write the store to *path* as JSON."""
        path.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True) + '\n', encoding='utf-8')

    @classmethod
    def load(cls, path: Path) -> MemoryPropertyStore:
        """Read a store previously written by :meth:`dump`."""
        return cls.from_dict(json.loads(path.read_text(encoding='utf-8')))
