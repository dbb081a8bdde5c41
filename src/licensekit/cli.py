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

"""``licensekit`` command line.

Subcommands::

    licensekit parse EXPR [--json]     canonical form and tree of EXPR
    licensekit ids EXPR                license ids referenced by EXPR
    licensekit catalog [--ids]         listed catalog version and counts

Global options::

    --config PATH   TOML config file (see licensekit.config)
    --offline       never fetch the catalog; use local data only
    --verbose / --quiet / --json-log

Exit status: 0 on success, 1 if the expression does not parse, 2 for
usage or configuration errors.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from licensekit.config import load_config
from licensekit.errors import ConfigError, LicenseParseError
from licensekit.license_info import (
    AnyLicenseInfo,
    ConjunctiveLicenseSet,
    DisjunctiveLicenseSet,
    ExtractedLicenseInfo,
    ListedLicense,
    NoAssertionLicense,
    NoneLicense,
    OrLaterOperator,
    WithExceptionOperator,
)
from licensekit.logging import configure_logging, get_logger
from licensekit.registry import ListedLicenseRegistry
from licensekit.spdx_expr import license_ids, parse

__all__ = ['main', 'node_to_dict']

log = get_logger('licensekit.cli')

EXIT_OK = 0
EXIT_PARSE_ERROR = 1
EXIT_USAGE = 2


def node_to_dict(node: AnyLicenseInfo) -> dict[str, Any]:
    """Return a JSON-compatible description of *node*."""
    if isinstance(node, ListedLicense):
        return {'type': 'listed', 'id': node.id, 'name': node.name, 'deprecated': node.deprecated}
    if isinstance(node, ExtractedLicenseInfo):
        return {'type': 'extracted', 'id': node.id}
    if isinstance(node, OrLaterOperator):
        return {'type': 'or-later', 'license': node_to_dict(node.license)}
    if isinstance(node, WithExceptionOperator):
        return {
            'type': 'with',
            'license': node_to_dict(node.license),
            'exception': {'id': node.exception.id, 'name': node.exception.name},
        }
    if isinstance(node, ConjunctiveLicenseSet):
        return {'type': 'and', 'members': [node_to_dict(m) for m in node.members]}
    if isinstance(node, DisjunctiveLicenseSet):
        return {'type': 'or', 'members': [node_to_dict(m) for m in node.members]}
    if isinstance(node, NoneLicense):
        return {'type': 'none'}
    if isinstance(node, NoAssertionLicense):
        return {'type': 'noassertion'}
    raise TypeError(f'Unknown license node type: {type(node).__name__}')


def _label(node: AnyLicenseInfo) -> str:
    if isinstance(node, ListedLicense):
        suffix = ' [yellow](deprecated)[/]' if node.deprecated else ''
        return f'[bold green]{node.id}[/] [dim]listed[/]{suffix}'
    if isinstance(node, ExtractedLicenseInfo):
        return f'[bold cyan]{node.id}[/] [dim]extracted[/]'
    if isinstance(node, OrLaterOperator):
        return '[magenta]+[/] [dim]or later[/]'
    if isinstance(node, WithExceptionOperator):
        return f'[magenta]WITH[/] {node.exception.id}'
    if isinstance(node, ConjunctiveLicenseSet):
        return '[magenta]AND[/]'
    if isinstance(node, DisjunctiveLicenseSet):
        return '[magenta]OR[/]'
    return f'[bold]{node}[/]'


def _build_tree(node: AnyLicenseInfo, tree: Tree) -> None:
    branch = tree.add(_label(node))
    if isinstance(node, (OrLaterOperator, WithExceptionOperator)):
        _build_tree(node.license, branch)
    elif isinstance(node, (ConjunctiveLicenseSet, DisjunctiveLicenseSet)):
        for member in node.members:
            _build_tree(member, branch)


def _cmd_parse(args: argparse.Namespace, registry: ListedLicenseRegistry, console: Console) -> int:
    node = parse(args.expression, registry)
    if args.json:
        payload = {'expression': str(node), 'tree': node_to_dict(node)}
        console.print_json(json.dumps(payload))
        return EXIT_OK
    console.print(str(node), markup=False, highlight=False)
    tree = Tree('[dim]expression[/]')
    _build_tree(node, tree)
    console.print(tree)
    return EXIT_OK


def _cmd_ids(args: argparse.Namespace, registry: ListedLicenseRegistry, console: Console) -> int:
    node = parse(args.expression, registry)
    for license_id in sorted(license_ids(node), key=str.lower):
        console.print(license_id, markup=False, highlight=False)
    return EXIT_OK


def _cmd_catalog(args: argparse.Namespace, registry: ListedLicenseRegistry, console: Console) -> int:
    licenses = registry.listed_license_ids()
    exceptions = registry.listed_exception_ids()
    if args.ids:
        for license_id in licenses:
            console.print(license_id, markup=False, highlight=False)
        return EXIT_OK
    console.print(f'License list version: [bold]{registry.license_list_version}[/]')
    console.print(f'Listed licenses:      {len(licenses)}')
    console.print(f'Listed exceptions:    {len(exceptions)}')
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='licensekit',
        description='Parse and inspect SPDX license expressions.',
    )
    parser.add_argument('--config', type=Path, default=None, help='TOML config file.')
    parser.add_argument('--offline', action='store_true', help='Use local license data only.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Emit logs as JSON lines.')

    sub = parser.add_subparsers(dest='command', required=True)

    p_parse = sub.add_parser('parse', help='Parse an expression and show its canonical form.')
    p_parse.add_argument('expression', help='License expression, e.g. "MIT OR Apache-2.0".')
    p_parse.add_argument('--json', action='store_true', help='Print the tree as JSON.')
    p_parse.set_defaults(handler=_cmd_parse)

    p_ids = sub.add_parser('ids', help='List the license ids an expression references.')
    p_ids.add_argument('expression', help='License expression.')
    p_ids.set_defaults(handler=_cmd_ids)

    p_catalog = sub.add_parser('catalog', help='Show the listed license catalog.')
    p_catalog.add_argument('--ids', action='store_true', help='Print every listed license id.')
    p_catalog.set_defaults(handler=_cmd_catalog)

    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    console: Console | None = None,
    registry: ListedLicenseRegistry | None = None,
) -> int:
    """Run the CLI and return its exit status.

    Args:
        argv: Arguments, excluding the program name.  Defaults to
            ``sys.argv[1:]``.
        console: Rich :class:`Console` for output.  When ``None``, a
            default ``Console()`` is created (auto-detects TTY).
        registry: Registry to use instead of one built from the config.
    """
    args = _build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)
    if console is None:
        console = Console()
    err_console = Console(stderr=True)

    if registry is None:
        try:
            config = load_config(args.config)
        except ConfigError as exc:
            err_console.print(f'[bold red]error[/]: {escape(str(exc))}')
            return EXIT_USAGE
        if args.offline:
            config = replace(config, only_use_local_licenses=True)
        registry = ListedLicenseRegistry(config)

    try:
        return args.handler(args, registry, console)
    except LicenseParseError as exc:
        log.debug('parse_failed', kind=exc.kind.value, expression=exc.expression)
        err_console.print(f'[bold red]error\\[{exc.kind.value}][/]: {escape(exc.detail)}')
        err_console.print(f'  [cyan]-->[/] {escape(exc.expression)}', highlight=False)
        return EXIT_PARSE_ERROR


if __name__ == '__main__':
    sys.exit(main())
