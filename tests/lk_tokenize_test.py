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

"""Tests for the license expression tokenizer."""

from __future__ import annotations

import pytest
from licensekit._types import TokenKind, classify_token
from licensekit.spdx_expr import tokenize

# ── Splitting ────────────────────────────────────────────────────────────


class TestTokenize:
    """Tests for tokenize()."""

    def test_single_id(self) -> None:
        """A bare id is one token."""
        assert tokenize('MIT') == ['MIT']

    def test_splits_on_whitespace(self) -> None:
        """Whitespace separates tokens."""
        assert tokenize('MIT OR Apache-2.0') == ['MIT', 'OR', 'Apache-2.0']

    def test_collapses_mixed_whitespace(self) -> None:
        """Tabs, newlines and runs of spaces all separate tokens."""
        assert tokenize('  MIT\tAND\n\nISC  ') == ['MIT', 'AND', 'ISC']

    def test_peels_parentheses_and_plus(self) -> None:
        """Parentheses and a trailing plus become their own tokens."""
        assert tokenize('(MIT OR GPL-2.0+)') == ['(', 'MIT', 'OR', 'GPL-2.0', '+', ')']

    def test_nested_opens_without_space(self) -> None:
        """Several leading parentheses are peeled one by one."""
        assert tokenize('((Apache-2.0))') == ['(', '(', 'Apache-2.0', ')', ')']

    def test_plus_before_close(self) -> None:
        """A plus followed by a close paren splits into three tokens."""
        assert tokenize('(LGPL-2.1+)') == ['(', 'LGPL-2.1', '+', ')']

    def test_spaced_plus(self) -> None:
        """A free-standing plus is already a token."""
        assert tokenize('GPL-2.0 +') == ['GPL-2.0', '+']

    def test_lone_parens(self) -> None:
        """Lone parentheses are kept as-is."""
        assert tokenize('( MIT )') == ['(', 'MIT', ')']

    def test_empty_parens(self) -> None:
        """Empty parentheses split into an open and a close."""
        assert tokenize('()') == ['(', ')']

    def test_empty_and_blank(self) -> None:
        """Empty and whitespace-only input yields no tokens."""
        assert tokenize('') == []
        assert tokenize(' \t\n ') == []

    def test_internal_plus_is_kept(self) -> None:
        """A plus inside an id is not split off."""
        assert tokenize('Foo+Bar') == ['Foo+Bar']

    def test_no_token_contains_whitespace(self) -> None:
        """No token ever carries whitespace."""
        tokens = tokenize(' ( MIT\tAND (ISC OR\nGPL-2.0+ WITH  Classpath-exception-2.0 ) ) ')
        assert all(not any(c.isspace() for c in t) for t in tokens)
        assert '' not in tokens

    def test_never_raises_on_garbage(self) -> None:
        """Malformed input still tokenizes."""
        assert tokenize(')) AND ((') == [')', ')', 'AND', '(', '(']


# ── Classification ───────────────────────────────────────────────────────


class TestClassifyToken:
    """Tests for classify_token()."""

    @pytest.mark.parametrize(
        ('token', 'kind'),
        [
            ('(', TokenKind.LPAREN),
            (')', TokenKind.RPAREN),
            ('+', TokenKind.PLUS),
            ('AND', TokenKind.AND),
            ('and', TokenKind.AND),
            ('OR', TokenKind.OR),
            ('or', TokenKind.OR),
            ('WITH', TokenKind.WITH),
            ('with', TokenKind.WITH),
        ],
    )
    def test_operators(self, token: str, kind: TokenKind) -> None:
        """Operators are recognized in all-upper and all-lower case."""
        assert classify_token(token) is kind

    @pytest.mark.parametrize('token', ['And', 'oR', 'With', 'MIT', 'LicenseRef-1', 'NONE'])
    def test_identifiers(self, token: str) -> None:
        """Mixed-case operators and everything else are identifiers."""
        assert classify_token(token) is TokenKind.IDENTIFIER
