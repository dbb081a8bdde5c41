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

"""Structured logging for licensekit.

Library modules only ever call :func:`get_logger` and emit snake_case
events with keyword context::

    log = get_logger('licensekit.registry')
    log.warning('catalog_fallback', primary='remote', error='timed out')

The ``licensekit`` CLI (or any application embedding the library) calls
:func:`configure_logging` once at startup.  Output always goes to stderr
so that ``licensekit parse --json MIT | jq`` sees clean stdout.

Processor chain::

    contextvars ─► level ─► logger name ─► timestamp ─► stack info
        ─► shorten_long_values ─► redact_sensitive_values ─► renderer

``shorten_long_values`` keeps whole license texts out of log lines.
``redact_sensitive_values`` removes the HTTP token used for catalog
mirrors and any ``user:password@`` in a catalog URL.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import Any, Final

import structlog

__all__ = [
    'configure_logging',
    'get_logger',
    'redact_sensitive_values',
    'shorten_long_values',
]

_REDACTED: Final[str] = '[REDACTED]'

# Env vars whose values must never reach a log line.
_SENSITIVE_ENV_VARS: Final[tuple[str, ...]] = (
    'LICENSEKIT_HTTP_TOKEN',
    'GITHUB_TOKEN',
    'GH_TOKEN',
)

# Shorter values are too likely to occur by accident in ordinary text.
_MIN_SECRET_LENGTH: Final[int] = 8

# String values longer than this are cut down by shorten_long_values.
_MAX_VALUE_CHARS: Final[int] = 200

_URL_CREDENTIALS_RE: Final[re.Pattern[str]] = re.compile(
    r'(?P<scheme>[a-zA-Z][a-zA-Z0-9+.\-]*://)[^/@\s:]+:[^/@\s]+@',
)


def _build_secret_values() -> frozenset[str]:
    """Collect the current non-empty values of the sensitive env vars."""
    return frozenset(v for v in (os.environ.get(name, '') for name in _SENSITIVE_ENV_VARS) if v)


class _Scrubber:
    """Replaces secrets and URL credentials in strings."""

    def __init__(self) -> None:
        self.enabled = True
        self.secrets: frozenset[str] = frozenset()

    def refresh(self, enabled: bool) -> None:
        self.enabled = enabled
        self.secrets = _build_secret_values() if enabled else frozenset()

    def scrub(self, value: object) -> object:
        if not isinstance(value, str):
            return value
        result = _URL_CREDENTIALS_RE.sub(rf'\g<scheme>{_REDACTED}@', value)
        for secret in self.secrets:
            if len(secret) >= _MIN_SECRET_LENGTH:
                result = result.replace(secret, _REDACTED)
        return result


# Refreshed by configure_logging().
_scrubber = _Scrubber()


def redact_sensitive_values(
    logger: Any,  # noqa: ANN401
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor: scrub secrets from every string field.

    Returns *event_dict* itself when redaction is disabled.
    """
    if not _scrubber.enabled:
        return event_dict
    return {k: _scrubber.scrub(v) for k, v in event_dict.items()}


def shorten_long_values(
    logger: Any,  # noqa: ANN401
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor: truncate long string fields (license texts).

    The ``event`` name itself is never shortened.
    """
    for key, value in event_dict.items():
        if key != 'event' and isinstance(value, str) and len(value) > _MAX_VALUE_CHARS:
            event_dict[key] = f'{value[:_MAX_VALUE_CHARS]}... ({len(value)} chars)'
    return event_dict


def _level_for(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    redact_secrets: bool = True,
) -> None:
    """Route structlog through the stdlib root logger on stderr.

    Safe to call more than once; the last call wins.

    Args:
        verbose: Emit debug events.
        quiet: Emit only warnings and errors.  Takes precedence over
            *verbose*.
        json_log: Render one JSON object per line instead of the
            console format.
        redact_secrets: Scrub tokens and URL credentials.  Forced off
            when ``LICENSEKIT_REDACT_SECRETS=0``.
    """
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=_level_for(verbose=verbose, quiet=quiet),
        force=True,
    )

    _scrubber.refresh(redact_secrets and os.environ.get('LICENSEKIT_REDACT_SECRETS', '1') != '0')

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            shorten_long_values,
            redact_sensitive_values,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'licensekit') -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named *name* (``licensekit.<module>`` by convention)."""
    return structlog.get_logger(name)
