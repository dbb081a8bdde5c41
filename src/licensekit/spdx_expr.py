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

r"""SPDX license expression tokenizer and parser.

Turns a license expression string into an :data:`~licensekit.license_info.AnyLicenseInfo`
tree, resolving identifiers against a :class:`LicenseRegistry` and,
optionally, a document that owns extracted (``LicenseRef-``) licenses.

Operator precedence (tightest to loosest)::

    +  >  WITH  >  AND  >  OR

Case rules:
    - Operators: all-upper or all-lower (AND/and, OR/or, WITH/with)
    - Listed license and exception ids: case-insensitive, rendered in
      their canonical spelling
    - ``NONE`` / ``NOASSERTION``: exact upper case; they become the
      sentinel nodes wherever they appear, never extracted licenses

Algorithm (shunting-yard)::

    tokens ──► operands / operators stacks ──► single AST node

    (            parse the bracketed slice recursively, push the result
    identifier   resolve via the registry, push ListedLicense or
                 ExtractedLicenseInfo
    + AND OR     reduce while the stacked operator binds at least as
                 tightly, then push
    WITH         reduce a pending +, then take the next token as the
                 exception and push WithExceptionOperator at once

Unknown identifiers are not errors: they become extracted-license
references.

Usage::

    from licensekit.registry import ListedLicenseRegistry
    from licensekit.spdx_expr import parse

    registry = ListedLicenseRegistry()
    expr = parse('(MIT OR Apache-2.0) AND GPL-2.0+ WITH Autoconf-exception-2.0', registry)
    print(expr)  # ((MIT OR Apache-2.0) AND GPL-2.0+ WITH Autoconf-exception-2.0)

    ids = license_ids(expr)
    assert ids == {'MIT', 'Apache-2.0', 'GPL-2.0'}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Protocol

from licensekit._types import NOASSERTION_VALUE, NONE_VALUE, ParseErrorKind, TokenKind, classify_token
from licensekit.errors import LicenseParseError
from licensekit.license_info import (
    AnyLicenseInfo,
    ConjunctiveLicenseSet,
    DisjunctiveLicenseSet,
    ExtractedLicenseInfo,
    LicenseException,
    ListedLicense,
    NoAssertionLicense,
    NoneLicense,
    OrLaterOperator,
    WithExceptionOperator,
    conjoin,
    disjoin,
    is_simple_license,
)

__all__ = [
    'ExtractedLicenseContainer',
    'LicenseRegistry',
    'ParseResult',
    'is_valid',
    'license_ids',
    'parse',
    'tokenize',
    'try_parse',
]


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------


class LicenseRegistry(Protocol):
    """Lookups the parser needs from a listed-license registry."""

    def is_listed_license_id(self, license_id: str) -> bool:
        """Return ``True`` if *license_id* is on the listed catalog."""
        ...

    def resolve_listed_license(self, license_id: str) -> ListedLicense:
        """Return the canonical listed license for *license_id*."""
        ...

    def is_listed_exception_id(self, exception_id: str) -> bool:
        """Return ``True`` if *exception_id* is a listed exception."""
        ...

    def resolve_listed_exception(self, exception_id: str) -> LicenseException:
        """Return the canonical listed exception for *exception_id*."""
        ...


class ExtractedLicenseContainer(Protocol):
    """The document-scoped owner of extracted licenses."""

    def get_or_create_extracted_license(self, license_id: str) -> ExtractedLicenseInfo:
        """Return the extracted license with *license_id*, creating it if needed."""
        ...


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def _split_fragment(fragment: str, out: list[str]) -> None:
    """Peel parentheses and a trailing ``+`` off one whitespace-free fragment."""
    if not fragment:
        return
    if len(fragment) > 1 and fragment.startswith('('):
        out.append('(')
        _split_fragment(fragment[1:], out)
    elif len(fragment) > 1 and fragment.endswith(')'):
        _split_fragment(fragment[:-1], out)
        out.append(')')
    elif len(fragment) > 1 and fragment.endswith('+'):
        _split_fragment(fragment[:-1], out)
        out.append('+')
    else:
        out.append(fragment)


def tokenize(expression: str) -> list[str]:
    """Split a license expression into tokens.

    Splits on whitespace, then peels a leading ``(``, a trailing ``)``
    or a trailing ``+`` off each fragment, recursively.  Never fails:
    malformed input is reported by :func:`parse`.

    Args:
        expression: The raw expression string.

    Returns:
        The token strings, in order.

    Examples::

        >>> tokenize('(MIT OR GPL-2.0+)')
        ['(', 'MIT', 'OR', 'GPL-2.0', '+', ')']

        >>> tokenize('((Apache-2.0))')
        ['(', '(', 'Apache-2.0', ')', ')']
    """
    tokens: list[str] = []
    for fragment in expression.split():
        _split_fragment(fragment, tokens)
    return tokens


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

# Binding strength of operators that wait on the operator stack.  WITH
# sits between + and AND but is reduced as soon as it is read.
_PRECEDENCE: Final[dict[TokenKind, int]] = {
    TokenKind.PLUS: 4,
    TokenKind.WITH: 3,
    TokenKind.AND: 2,
    TokenKind.OR: 1,
}


class _Parser:
    """Shunting-yard evaluator over a token list."""

    def __init__(
        self,
        expression: str,
        tokens: list[str],
        registry: LicenseRegistry,
        document: ExtractedLicenseContainer | None,
    ) -> None:
        self._expression = expression
        self._tokens = tokens
        self._registry = registry
        self._document = document

    def _error(self, kind: ParseErrorKind, detail: str, token: str | None = None) -> LicenseParseError:
        return LicenseParseError(kind, self._expression, detail, token=token)

    def _find_matching_paren(self, start: int, end: int) -> int:
        """Return the index of the ``)`` that closes the ``(`` at *start*."""
        depth = 0
        for i in range(start, end):
            kind = classify_token(self._tokens[i])
            if kind is TokenKind.LPAREN:
                depth += 1
            elif kind is TokenKind.RPAREN:
                depth -= 1
                if depth == 0:
                    return i
        raise self._error(ParseErrorKind.UNMATCHED_PARENTHESIS, 'missing closing parenthesis', '(')

    def _resolve_license(self, token: str) -> AnyLicenseInfo:
        # Sentinels never become extracted licenses; str() renders them bare.
        if token == NONE_VALUE:
            return NoneLicense()
        if token == NOASSERTION_VALUE:
            return NoAssertionLicense()
        if self._registry.is_listed_license_id(token):
            return self._registry.resolve_listed_license(token)
        if self._document is not None:
            return self._document.get_or_create_extracted_license(token)
        return ExtractedLicenseInfo(token)

    def _resolve_exception(self, token: str) -> LicenseException:
        if self._registry.is_listed_exception_id(token):
            return self._registry.resolve_listed_exception(token)
        return LicenseException(token)

    def _evaluate(self, operator: TokenKind, operands: list[AnyLicenseInfo]) -> None:
        """Reduce *operands* with one operator popped off the operator stack."""
        if operator is TokenKind.PLUS:
            if not operands:
                raise self._error(ParseErrorKind.MISSING_OPERAND, '"+" has no license to apply to', '+')
            operand = operands.pop()
            if not is_simple_license(operand):
                raise self._error(
                    ParseErrorKind.OR_LATER_INELIGIBLE,
                    f'"+" can only follow a simple license, not {operand}',
                    '+',
                )
            operands.append(OrLaterOperator(operand))  # type: ignore[arg-type]
            return
        if len(operands) < 2:
            raise self._error(
                ParseErrorKind.MISSING_OPERAND,
                f'{operator.value} is missing an operand',
                operator.value,
            )
        right = operands.pop()
        left = operands.pop()
        if operator is TokenKind.AND:
            operands.append(conjoin(left, right))
        else:
            operands.append(disjoin(left, right))

    def parse_range(self, start: int, end: int) -> AnyLicenseInfo:
        """Parse ``tokens[start:end]`` into a single node."""
        operands: list[AnyLicenseInfo] = []
        operators: list[TokenKind] = []
        # True when the previous token completed an operand.
        after_operand = False
        # True when the previous token was a WITH exception id.
        after_exception = False
        i = start
        while i < end:
            token = self._tokens[i]
            kind = classify_token(token)

            if kind is TokenKind.LPAREN:
                if after_operand:
                    raise self._error(ParseErrorKind.EXTRA_TOKENS, 'expected an operator', token)
                close = self._find_matching_paren(i, end)
                if close == i + 1:
                    raise self._error(ParseErrorKind.EMPTY_PARENTHESES, 'empty parentheses', '()')
                operands.append(self.parse_range(i + 1, close))
                after_operand, after_exception = True, False
                i = close + 1
                continue

            if kind is TokenKind.RPAREN:
                raise self._error(ParseErrorKind.UNMATCHED_PARENTHESIS, 'unexpected closing parenthesis', token)

            if kind is TokenKind.IDENTIFIER:
                if after_operand:
                    raise self._error(ParseErrorKind.EXTRA_TOKENS, 'expected an operator', token)
                operands.append(self._resolve_license(token))
                after_operand, after_exception = True, False
                i += 1
                continue

            if kind is TokenKind.PLUS:
                if after_exception:
                    raise self._error(
                        ParseErrorKind.OR_LATER_INELIGIBLE,
                        '"+" cannot follow a WITH exception',
                        token,
                    )
                if not after_operand:
                    raise self._error(ParseErrorKind.MISSING_OPERAND, '"+" has no license to apply to', token)
                while operators and _PRECEDENCE[operators[-1]] >= _PRECEDENCE[kind]:
                    self._evaluate(operators.pop(), operands)
                operators.append(kind)
                i += 1
                continue

            if kind is TokenKind.WITH:
                if not after_operand:
                    raise self._error(ParseErrorKind.MISSING_OPERAND, 'WITH has no license to apply to', token)
                # X+ WITH Y binds as (X+) WITH Y.
                if operators and operators[-1] is TokenKind.PLUS:
                    self._evaluate(operators.pop(), operands)
                if i + 1 >= end or classify_token(self._tokens[i + 1]) is not TokenKind.IDENTIFIER:
                    raise self._error(ParseErrorKind.MISSING_EXCEPTION, 'WITH must be followed by an exception id', token)
                license_node = operands.pop()
                if not (is_simple_license(license_node) or isinstance(license_node, OrLaterOperator)):
                    raise self._error(
                        ParseErrorKind.WITH_INELIGIBLE,
                        f'WITH can only follow a simple license or "+", not {license_node}',
                        token,
                    )
                exception = self._resolve_exception(self._tokens[i + 1])
                operands.append(WithExceptionOperator(license_node, exception))  # type: ignore[arg-type]
                after_operand, after_exception = True, True
                i += 2
                continue

            # AND / OR
            if not after_operand:
                raise self._error(ParseErrorKind.MISSING_OPERAND, f'{kind.value} is missing its left operand', token)
            while operators and _PRECEDENCE[operators[-1]] >= _PRECEDENCE[kind]:
                self._evaluate(operators.pop(), operands)
            operators.append(kind)
            after_operand, after_exception = False, False
            i += 1

        if not after_operand:
            raise self._error(ParseErrorKind.MISSING_OPERAND, 'expression ends without an operand')
        while operators:
            self._evaluate(operators.pop(), operands)
        if len(operands) != 1:
            raise self._error(ParseErrorKind.EXTRA_TOKENS, f'expected one expression, found {len(operands)}')
        return operands[0]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse(
    expression: str,
    registry: LicenseRegistry,
    *,
    document: ExtractedLicenseContainer | None = None,
) -> AnyLicenseInfo:
    """Parse a license expression into an AST.

    Args:
        expression: An SPDX license expression string
            (e.g. ``"MIT OR Apache-2.0"``).
        registry: Registry used to recognize listed licenses and
            exceptions.
        document: Owner of extracted licenses.  Unknown identifiers are
            obtained from it with ``get_or_create_extracted_license``;
            without a document they become detached
            :class:`~licensekit.license_info.ExtractedLicenseInfo` nodes.

    Returns:
        The root node of the parsed expression.

    Raises:
        LicenseParseError: If the expression is structurally invalid.
            The ``kind`` attribute tells which rule was broken.
        RegistryError: If the registry is inconsistent.

    Examples::

        >>> parse('MIT', registry)
        ListedLicense(id='MIT', ...)

        >>> str(parse('mit and Apache-2.0', registry))
        '(MIT AND Apache-2.0)'

        >>> parse('NOASSERTION', registry)
        NoAssertionLicense()
    """
    tokens = tokenize(expression)
    if not tokens:
        raise LicenseParseError(ParseErrorKind.EMPTY_EXPRESSION, expression, 'empty expression')
    if len(tokens) == 1:
        if tokens[0] == NONE_VALUE:
            return NoneLicense()
        if tokens[0] == NOASSERTION_VALUE:
            return NoAssertionLicense()
    return _Parser(expression, tokens, registry, document).parse_range(0, len(tokens))


@dataclass(frozen=True)
class ParseResult:
    """Outcome of :func:`try_parse`: exactly one of ``value`` / ``error`` is set.

    Attributes:
        value: The parsed AST, on success.
        error: The parse failure, otherwise.
    """

    value: AnyLicenseInfo | None = None
    error: LicenseParseError | None = None

    @property
    def ok(self) -> bool:
        """``True`` if parsing succeeded."""
        return self.error is None

    def unwrap(self) -> AnyLicenseInfo:
        """Return the parsed value or raise the stored error."""
        if self.error is not None:
            raise self.error
        assert self.value is not None  # noqa: S101
        return self.value


def try_parse(
    expression: str,
    registry: LicenseRegistry,
    *,
    document: ExtractedLicenseContainer | None = None,
) -> ParseResult:
    """Parse *expression*, returning the failure instead of raising it.

    Only :class:`~licensekit.errors.LicenseParseError` is captured;
    registry faults still propagate.
    """
    try:
        return ParseResult(value=parse(expression, registry, document=document))
    except LicenseParseError as exc:
        return ParseResult(error=exc)


def is_valid(expression: str, registry: LicenseRegistry) -> bool:
    """Return ``True`` if *expression* parses without error."""
    return try_parse(expression, registry).ok


def license_ids(node: AnyLicenseInfo) -> set[str]:
    """Collect all license identifier strings from an AST.

    Exception ids and sentinels are not included.  ``+`` suffixes are
    dropped.

    Args:
        node: The root of a parsed license expression.

    Returns:
        A set of license identifier strings.

    Examples::

        >>> license_ids(parse('MIT OR Apache-2.0', registry))
        {'MIT', 'Apache-2.0'}

        >>> license_ids(parse('GPL-2.0+ WITH Bison-exception-2.2', registry))
        {'GPL-2.0'}
    """
    ids: set[str] = set()
    _collect_ids(node, ids)
    return ids


def _collect_ids(node: AnyLicenseInfo, acc: set[str]) -> None:
    """Recursively collect license IDs into *acc*."""
    if isinstance(node, (ListedLicense, ExtractedLicenseInfo)):
        acc.add(node.id)
    elif isinstance(node, OrLaterOperator):
        _collect_ids(node.license, acc)
    elif isinstance(node, WithExceptionOperator):
        _collect_ids(node.license, acc)
    elif isinstance(node, (ConjunctiveLicenseSet, DisjunctiveLicenseSet)):
        for member in node.members:
            _collect_ids(member, acc)
    elif isinstance(node, (NoneLicense, NoAssertionLicense)):
        pass
    else:
        raise TypeError(f'Unknown license node type: {type(node).__name__}')
