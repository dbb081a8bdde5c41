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

r"""License text normalization and equivalence.

Two license texts are *equivalent* when they differ only in layout or
typography: line endings, runs of whitespace, curly vs. straight
quotes, em/en dashes vs. hyphens, non-breaking spaces, and ``http://``
vs. ``https://`` links.  Comparison stays case-sensitive.

A missing text (``None``) is equivalent to the empty string.

Usage::

    from licensekit.text import is_license_text_equivalent

    is_license_text_equivalent('Line one\r\nLine two', 'Line one\nLine two')  # True
    is_license_text_equivalent('“AS IS”', '"AS IS"')  # True
    is_license_text_equivalent('MIT', 'mit')  # False
"""

from __future__ import annotations

import re
from typing import Final

__all__ = [
    'is_license_text_equivalent',
    'normalize_license_text',
]

# Applied in order; double single-quotes become a double quote only
# after the single quotes themselves have been normalized.
_REPLACEMENTS: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile('[‘’‛‚`]'), "'"),
    (re.compile(r'http://'), 'https://'),
    (re.compile("''"), '"'),
    (re.compile('[“”‟„]'), '"'),
    (re.compile('\u00a0'), ' '),
    (re.compile('[—–]'), '-'),
    (re.compile('\u2028'), '\n'),
)

_WHITESPACE_RE: Final[re.Pattern[str]] = re.compile(r'\s+')


def normalize_license_text(text: str | None) -> str:
    """Return *text* with typography and whitespace canonicalized.

    Args:
        text: Raw license text, or ``None``.

    Returns:
        The normalized text.  ``None`` normalizes to ``''``.
    """
    if not text:
        return ''
    result = text
    for pattern, replacement in _REPLACEMENTS:
        result = pattern.sub(replacement, result)
    return _WHITESPACE_RE.sub(' ', result).strip()


def is_license_text_equivalent(a: str | None, b: str | None) -> bool:
    """Return ``True`` if two license texts are equivalent after normalization."""
    if a == b:
        return True
    return normalize_license_text(a) == normalize_license_text(b)
