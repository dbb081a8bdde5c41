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

"""License information AST and its set algebra.

Every parsed license expression is a tree of the node types below.
:data:`AnyLicenseInfo` is the closed union of all of them; code that
walks a tree dispatches with ``isinstance`` and treats an unknown node
as a programming error.

Key Concepts (ELI5)::

    ┌───────────────────────┬───────────────────────────────────────────┐
    │ Node                   │ Plain-English                             │
    ├───────────────────────┼───────────────────────────────────────────┤
    │ ListedLicense          │ A license on the canonical SPDX list.    │
    │ ExtractedLicenseInfo   │ License text found in the artifact that  │
    │                        │ is not on the list (``LicenseRef-N``).   │
    │ ConjunctiveLicenseSet  │ AND: all members apply.                  │
    │ DisjunctiveLicenseSet  │ OR: pick any one member.                 │
    │ OrLaterOperator        │ ``X+``: version stated or any later.     │
    │ WithExceptionOperator  │ ``X WITH E``: license plus exception.    │
    │ NoneLicense            │ ``NONE``: no license applies.            │
    │ NoAssertionLicense     │ ``NOASSERTION``: nothing was asserted.   │
    └───────────────────────┴───────────────────────────────────────────┘

Equality vs. equivalence::

    ==            strict.  Simple licenses compare ids; sets compare
                  their flattened members as sets, ignoring order.
    equivalent()  loose.  Extracted licenses compare normalized text
                  and ignore ids; everything else recurses with
                  equivalence.

Sets are persistent values.  Nested sets of the same kind are flattened
when a set is constructed, and :meth:`ConjunctiveLicenseSet.with_member`
returns a new set instead of mutating the receiver.

Usage::

    from licensekit.license_info import ConjunctiveLicenseSet, ListedLicense, conjoin

    mit = ListedLicense('MIT', name='MIT License')
    apache = ListedLicense('Apache-2.0')
    both = conjoin(mit, apache)
    assert both == ConjunctiveLicenseSet((apache, mit))
    assert str(conjoin(both, ListedLicense('ISC'))).count(' AND ') == 2
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import ClassVar

from licensekit._types import NOASSERTION_VALUE, NONE_VALUE
from licensekit.text import is_license_text_equivalent

__all__ = [
    'AnyLicenseInfo',
    'ConjunctiveLicenseSet',
    'DisjunctiveLicenseSet',
    'ExtractedLicenseInfo',
    'LicenseException',
    'ListedLicense',
    'NoAssertionLicense',
    'NoneLicense',
    'OrLaterOperator',
    'SimpleLicensingInfo',
    'WithExceptionOperator',
    'conjoin',
    'disjoin',
    'is_simple_license',
]


# ---------------------------------------------------------------------------
# Exceptions (the WITH operand)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class LicenseException:
    """A named exception that relaxes the terms of a license.

    Equality is by id.  Equivalence compares the normalized text plus
    the name, comment and see-also list.

    Attributes:
        id: The exception identifier (e.g. ``"Classpath-exception-2.0"``).
        name: Human-readable name.
        text: Full exception text.
        comment: Free-form comment.
        example: Example usage text.
        see_also: Reference URLs.
        deprecated: Whether the id is deprecated on the listed catalog.
    """

    id: str
    name: str | None = None
    text: str | None = None
    comment: str | None = None
    example: str | None = None
    see_also: tuple[str, ...] = ()
    deprecated: bool = False

    def __eq__(self, other: object) -> bool:
        """Compare exceptions by id."""
        if not isinstance(other, LicenseException):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash consistent with id equality."""
        return hash(('exception', self.id))

    def __str__(self) -> str:
        """Return the exception id."""
        return self.id

    def equivalent(self, other: object) -> bool:
        """Return ``True`` if *other* carries the same exception terms."""
        if not isinstance(other, LicenseException):
            return False
        if self is other:
            return True
        return (
            is_license_text_equivalent(self.text, other.text)
            and (self.name or '') == (other.name or '')
            and (self.comment or '') == (other.comment or '')
            and sorted(self.see_also) == sorted(other.see_also)
        )

    def verify(self) -> list[str]:
        """Return a list of problems with this exception (empty if none)."""
        problems: list[str] = []
        if not self.id:
            problems.append('License exception is missing an id')
        return problems


# ---------------------------------------------------------------------------
# Simple licenses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class ListedLicense:
    """A license from the canonical SPDX license list.

    Ids compare case-insensitively; :class:`licensekit.registry.ListedLicenseRegistry`
    always hands out the canonical spelling.

    Attributes:
        id: The SPDX short identifier (e.g. ``"Apache-2.0"``).
        name: Full license name.
        see_also: Reference URLs.
        osi_approved: Whether the OSI has approved the license.
        deprecated: Whether the id is deprecated on the listed catalog.
        text: Full license text, when known.
        comment: Free-form comment.
    """

    id: str
    name: str | None = None
    see_also: tuple[str, ...] = ()
    osi_approved: bool = False
    deprecated: bool = False
    text: str | None = None
    comment: str | None = None

    def __eq__(self, other: object) -> bool:
        """Compare listed licenses by id, ignoring case."""
        if not isinstance(other, ListedLicense):
            return NotImplemented
        return self.id.lower() == other.id.lower()

    def __hash__(self) -> int:
        """Hash consistent with case-insensitive id equality."""
        return hash(('listed', self.id.lower()))

    def __str__(self) -> str:
        """Return the license id."""
        return self.id

    def equivalent(self, other: object) -> bool:
        """Listed licenses are equivalent when their ids match."""
        return isinstance(other, ListedLicense) and self == other

    def verify(self) -> list[str]:
        """Return a list of problems with this license (empty if none)."""
        return [] if self.id else ['Listed license is missing an id']


@dataclass(frozen=True, eq=False)
class ExtractedLicenseInfo:
    """License text found in the analyzed material but not on the list.

    Equality is by id, ignoring case.  Equivalence ignores the id and
    compares normalized text, which is how duplicate extracted texts
    are detected.

    Attributes:
        id: Document-local reference id (e.g. ``"LicenseRef-3"``).
        text: The extracted license text; ``None`` for a reference whose
            text has not been registered yet.
        name: Optional human-readable name.
        comment: Optional comment.
        see_also: Reference URLs.
    """

    id: str
    text: str | None = None
    name: str | None = None
    comment: str | None = None
    see_also: tuple[str, ...] = ()

    def __eq__(self, other: object) -> bool:
        """Compare extracted licenses by id, ignoring case."""
        if not isinstance(other, ExtractedLicenseInfo):
            return NotImplemented
        return self.id.lower() == other.id.lower()

    def __hash__(self) -> int:
        """Hash consistent with case-insensitive id equality."""
        return hash(('extracted', self.id.lower()))

    def __str__(self) -> str:
        """Return the reference id."""
        return self.id

    def equivalent(self, other: object) -> bool:
        """Return ``True`` if *other* has equivalent license text.

        Two text-less placeholders are only equivalent when they share
        an id.
        """
        if not isinstance(other, ExtractedLicenseInfo):
            return False
        if self.text is None and other.text is None:
            return self == other
        return is_license_text_equivalent(self.text, other.text)

    def verify(self) -> list[str]:
        """Return a list of problems with this license (empty if none)."""
        problems: list[str] = []
        if not self.id:
            problems.append('Extracted license is missing an id')
        if not self.text:
            problems.append(f'Extracted license {self.id!r} is missing its text')
        return problems


SimpleLicensingInfo = ListedLicense | ExtractedLicenseInfo


def is_simple_license(node: object) -> bool:
    """Return ``True`` if *node* is a listed or extracted license."""
    return isinstance(node, (ListedLicense, ExtractedLicenseInfo))


# ---------------------------------------------------------------------------
# Sentinels
# ---------------------------------------------------------------------------


class _Sentinel:
    """Base for value-less sentinels: every instance of a subclass is equal."""

    __slots__ = ()

    _token: ClassVar[str] = ''

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(('sentinel', self._token))

    def __repr__(self) -> str:
        return f'{type(self).__name__}()'

    def __str__(self) -> str:
        return self._token

    def equivalent(self, other: object) -> bool:
        """Sentinels are equivalent exactly when equal."""
        return self == other

    def verify(self) -> list[str]:
        """Sentinels are always valid."""
        return []


class NoneLicense(_Sentinel):
    """The ``NONE`` sentinel: no license applies."""

    __slots__ = ()

    _token = NONE_VALUE


class NoAssertionLicense(_Sentinel):
    """The ``NOASSERTION`` sentinel: no license information was asserted."""

    __slots__ = ()

    _token = NOASSERTION_VALUE


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrLaterOperator:
    """``license+``: the stated version of a license or any later one.

    Attributes:
        license: The wrapped simple license.

    Raises:
        TypeError: If *license* is not a listed or extracted license.
    """

    license: SimpleLicensingInfo

    def __post_init__(self) -> None:
        """Reject operands other than simple licenses."""
        if not is_simple_license(self.license):
            raise TypeError(f'OrLaterOperator requires a simple license, got {type(self.license).__name__}')

    def __str__(self) -> str:
        """Return ``license+``."""
        return f'{self.license}+'

    def equivalent(self, other: object) -> bool:
        """Return ``True`` if *other* is an or-later of an equivalent license."""
        return isinstance(other, OrLaterOperator) and self.license.equivalent(other.license)

    def verify(self) -> list[str]:
        """Return the wrapped license's problems."""
        return self.license.verify()


@dataclass(frozen=True)
class WithExceptionOperator:
    """``license WITH exception``.

    Attributes:
        license: A simple license or an :class:`OrLaterOperator`.
        exception: The exception that applies.

    Raises:
        TypeError: If *license* is a set, a sentinel or another
            ``WITH`` operator.
    """

    license: SimpleLicensingInfo | OrLaterOperator
    exception: LicenseException

    def __post_init__(self) -> None:
        """Reject operands that cannot carry an exception."""
        if not (is_simple_license(self.license) or isinstance(self.license, OrLaterOperator)):
            raise TypeError(
                f'WithExceptionOperator requires a simple license or or-later operator, '
                f'got {type(self.license).__name__}'
            )

    def __str__(self) -> str:
        """Return ``license WITH exception``."""
        return f'{self.license} WITH {self.exception}'

    def equivalent(self, other: object) -> bool:
        """Return ``True`` if both sides are equivalent."""
        if not isinstance(other, WithExceptionOperator):
            return False
        return self.license.equivalent(other.license) and self.exception.equivalent(other.exception)

    def verify(self) -> list[str]:
        """Return the problems of the license and the exception."""
        return [*self.license.verify(), *self.exception.verify()]


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class _LicenseSet:
    """Shared behaviour of :class:`ConjunctiveLicenseSet` and :class:`DisjunctiveLicenseSet`.

    ``members`` keeps every operand in construction order (so rendering
    is stable), but equality and hashing treat it as a set.
    """

    members: tuple[AnyLicenseInfo, ...] = field(default=())

    _operator: ClassVar[str] = ''

    def __post_init__(self) -> None:
        """Flatten nested sets of the same kind into this one."""
        object.__setattr__(self, 'members', tuple(self._flatten(self.members)))

    def _flatten(self, members: Iterable[AnyLicenseInfo]) -> Iterator[AnyLicenseInfo]:
        for member in members:
            if type(member) is type(self):
                yield from self._flatten(member.members)  # type: ignore[attr-defined]
            else:
                yield member

    def flattened_members(self) -> frozenset[AnyLicenseInfo]:
        """Return the distinct members, with same-kind nesting removed."""
        return frozenset(self._flatten(self.members))

    def with_member(self, member: AnyLicenseInfo) -> _LicenseSet:
        """Return a new set of the same kind with *member* added."""
        return type(self)((*self.members, member))

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[AnyLicenseInfo]:
        return iter(self.members)

    def __eq__(self, other: object) -> bool:
        """Compare flattened member sets; order and duplicates are irrelevant."""
        if type(other) is not type(self):
            return NotImplemented if not isinstance(other, _LicenseSet) else False
        return self.flattened_members() == other.flattened_members()  # type: ignore[union-attr]

    def __hash__(self) -> int:
        return hash((self._operator, self.flattened_members()))

    def __str__(self) -> str:
        """Return ``(A <OP> B <OP> ...)``."""
        joiner = f' {self._operator} '
        return '(' + joiner.join(str(m) for m in self.members) + ')'

    def equivalent(self, other: object) -> bool:
        """Every member must have an equivalent counterpart on the other side."""
        if type(other) is not type(self):
            return False
        mine = self.flattened_members()
        theirs = other.flattened_members()  # type: ignore[union-attr]
        return all(any(m.equivalent(t) for t in theirs) for m in mine) and all(
            any(t.equivalent(m) for m in mine) for t in theirs
        )

    def verify(self) -> list[str]:
        """Return the problems of every member."""
        problems: list[str] = []
        if not self.members:
            problems.append(f'{self._operator} license set has no members')
        for member in self.members:
            problems.extend(member.verify())
        return problems


@dataclass(frozen=True, eq=False)
class ConjunctiveLicenseSet(_LicenseSet):
    """``A AND B AND ...``: every member applies."""

    _operator: ClassVar[str] = 'AND'


@dataclass(frozen=True, eq=False)
class DisjunctiveLicenseSet(_LicenseSet):
    """``A OR B OR ...``: any one member may be chosen."""

    _operator: ClassVar[str] = 'OR'


# Union of all AST node types.
AnyLicenseInfo = (
    ListedLicense
    | ExtractedLicenseInfo
    | ConjunctiveLicenseSet
    | DisjunctiveLicenseSet
    | OrLaterOperator
    | WithExceptionOperator
    | NoneLicense
    | NoAssertionLicense
)


def conjoin(left: AnyLicenseInfo, right: AnyLicenseInfo) -> ConjunctiveLicenseSet:
    """Combine two operands with AND.

    If *left* is already a conjunctive set, *right* joins it (as a new
    set) so that ``A AND B AND C`` stays one level deep.
    """
    if isinstance(left, ConjunctiveLicenseSet):
        return left.with_member(right)  # type: ignore[return-value]
    return ConjunctiveLicenseSet((left, right))


def disjoin(left: AnyLicenseInfo, right: AnyLicenseInfo) -> DisjunctiveLicenseSet:
    """Combine two operands with OR, flattening like :func:`conjoin`."""
    if isinstance(left, DisjunctiveLicenseSet):
        return left.with_member(right)  # type: ignore[return-value]
    return DisjunctiveLicenseSet((left, right))
