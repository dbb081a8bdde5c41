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

"""Shared leaf-level types used across licensekit.

This module must have **zero** imports from other ``licensekit``
modules to avoid circular-import chains.  It is safe to import
from any module in the project.
"""

from __future__ import annotations

import enum
from typing import Final

__all__ = [
    'NOASSERTION_VALUE',
    'NONE_VALUE',
    'ParseErrorKind',
    'TokenKind',
    'classify_token',
]

#: Whole-expression sentinel meaning "no assertion was made".
NOASSERTION_VALUE: Final[str] = 'NOASSERTION'

#: Whole-expression sentinel meaning "no license applies".
NONE_VALUE: Final[str] = 'NONE'


class TokenKind(enum.Enum):
    """Lexical category of a license-expression token."""

    LPAREN = '('
    RPAREN = ')'
    PLUS = '+'
    AND = 'AND'
    OR = 'OR'
    WITH = 'WITH'
    IDENTIFIER = 'IDENTIFIER'


# Operator words are accepted all-upper or all-lower, never mixed case.
_KEYWORDS: Final[dict[str, TokenKind]] = {
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '+': TokenKind.PLUS,
    'AND': TokenKind.AND,
    'and': TokenKind.AND,
    'OR': TokenKind.OR,
    'or': TokenKind.OR,
    'WITH': TokenKind.WITH,
    'with': TokenKind.WITH,
}


def classify_token(token: str) -> TokenKind:
    """Return the :class:`TokenKind` of a single token string."""
    return _KEYWORDS.get(token, TokenKind.IDENTIFIER)


class ParseErrorKind(str, enum.Enum):
    """Reportable categories of structural parse failure.

    Every failure raised by the expression parser carries exactly one
    of these so that callers can branch on the kind instead of
    matching message text.
    """

    EMPTY_EXPRESSION = 'empty-expression'
    UNMATCHED_PARENTHESIS = 'unmatched-parenthesis'
    EMPTY_PARENTHESES = 'empty-parentheses'
    OR_LATER_INELIGIBLE = 'or-later-ineligible'
    MISSING_EXCEPTION = 'missing-exception'
    WITH_INELIGIBLE = 'with-ineligible'
    MISSING_OPERAND = 'missing-operand'
    EXTRA_TOKENS = 'extra-tokens'
