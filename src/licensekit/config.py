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

"""Registry configuration.

Settings are resolved in this order (later wins)::

    defaults  ──►  [registry] table of a TOML file  ──►  LICENSEKIT_* env vars

Example ``licensekit.toml``::

    [registry]
    only_use_local_licenses = true
    local_licenses_dir = "third_party/license-list-data/json"
    timeout = 10.0
    max_retries = 2

Environment variables::

    LICENSEKIT_CONFIG                   path of the TOML file
    LICENSEKIT_ONLY_USE_LOCAL_LICENSES  true/false/1/0/yes/no
    LICENSEKIT_LOCAL_LICENSES_DIR       directory with licenses.json
    LICENSEKIT_LICENSES_URL             remote licenses.json
    LICENSEKIT_EXCEPTIONS_URL           remote exceptions.json
    LICENSEKIT_TIMEOUT                  seconds, float
    LICENSEKIT_MAX_RETRIES              int

A relative ``local_licenses_dir`` in a TOML file is resolved against the
directory containing that file.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Final

from licensekit.errors import ConfigError
from licensekit.net import DEFAULT_TIMEOUT, MAX_RETRIES

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

__all__ = [
    'CONFIG_ENV_VAR',
    'SPDX_EXCEPTIONS_URL',
    'SPDX_LICENSES_URL',
    'RegistryConfig',
    'load_config',
]

#: Hosted SPDX license list, JSON format.
SPDX_LICENSES_URL: Final[str] = 'https://spdx.org/licenses/licenses.json'

#: Hosted SPDX exception list, JSON format.
SPDX_EXCEPTIONS_URL: Final[str] = 'https://spdx.org/licenses/exceptions.json'

#: Env var naming the TOML config file.
CONFIG_ENV_VAR: Final[str] = 'LICENSEKIT_CONFIG'

_ENV_PREFIX: Final[str] = 'LICENSEKIT_'

_TRUE_VALUES: Final[frozenset[str]] = frozenset({'1', 'true', 'yes', 'on'})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({'0', 'false', 'no', 'off'})


@dataclass(frozen=True)
class RegistryConfig:
    """How the listed-license registry populates itself.

    Attributes:
        only_use_local_licenses: Never touch the network; read the
            catalog from ``local_licenses_dir`` or the bundled snapshot.
        local_licenses_dir: Directory holding ``licenses.json`` and
            ``exceptions.json``.  Used instead of the bundled snapshot
            as the fallback (or, in local-only mode, the only) source.
        licenses_url: Remote ``licenses.json``.
        exceptions_url: Remote ``exceptions.json``.
        timeout: Per-request timeout in seconds.
        max_retries: Retries after the first attempt of each request.
    """

    only_use_local_licenses: bool = False
    local_licenses_dir: Path | None = None
    licenses_url: str = SPDX_LICENSES_URL
    exceptions_url: str = SPDX_EXCEPTIONS_URL
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = MAX_RETRIES


_FIELD_NAMES: Final[frozenset[str]] = frozenset(f.name for f in fields(RegistryConfig))


def _coerce_bool(key: str, value: Any) -> bool:  # noqa: ANN401
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ConfigError(f'registry.{key} must be a boolean, got {value!r}')


def _coerce_float(key: str, value: Any) -> float:  # noqa: ANN401
    if isinstance(value, bool):
        raise ConfigError(f'registry.{key} must be a number, got {value!r}')
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f'registry.{key} must be a number, got {value!r}') from None
    if result <= 0:
        raise ConfigError(f'registry.{key} must be positive, got {value!r}')
    return result


def _coerce_int(key: str, value: Any) -> int:  # noqa: ANN401
    if isinstance(value, bool) or isinstance(value, float):
        raise ConfigError(f'registry.{key} must be an integer, got {value!r}')
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f'registry.{key} must be an integer, got {value!r}') from None
    if result < 0:
        raise ConfigError(f'registry.{key} must not be negative, got {value!r}')
    return result


def _coerce_url(key: str, value: Any) -> str:  # noqa: ANN401
    if not isinstance(value, str) or not value.startswith(('https://', 'http://')):
        raise ConfigError(f'registry.{key} must be an http(s) URL, got {value!r}')
    return value


def _coerce(key: str, value: Any, base_dir: Path | None) -> Any:  # noqa: ANN401
    if key == 'only_use_local_licenses':
        return _coerce_bool(key, value)
    if key == 'timeout':
        return _coerce_float(key, value)
    if key == 'max_retries':
        return _coerce_int(key, value)
    if key in ('licenses_url', 'exceptions_url'):
        return _coerce_url(key, value)
    if key == 'local_licenses_dir':
        if not isinstance(value, str) or not value:
            raise ConfigError(f'registry.{key} must be a non-empty string, got {value!r}')
        path = Path(value).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path
    raise ConfigError(f'Unknown key registry.{key}')  # pragma: no cover


def _parse_registry_table(table: Any, base_dir: Path | None) -> dict[str, Any]:  # noqa: ANN401
    if not isinstance(table, dict):
        raise ConfigError('[registry] must be a table')
    unknown = sorted(set(table) - _FIELD_NAMES)
    if unknown:
        raise ConfigError(f'Unknown key(s) in [registry]: {", ".join(unknown)}')
    return {key: _coerce(key, value, base_dir) for key, value in table.items()}


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open('rb') as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f'Config file not found: {path}') from None
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f'Invalid TOML in {path}: {exc}') from exc
    return data


def load_config(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> RegistryConfig:
    """Resolve a :class:`RegistryConfig` from defaults, a TOML file and the environment.

    Args:
        path: TOML file to read.  Defaults to ``$LICENSEKIT_CONFIG``;
            when neither is set no file is read.
        environ: Environment mapping.  Defaults to :data:`os.environ`.

    Returns:
        The resolved configuration.

    Raises:
        ConfigError: If the file is missing or malformed, or a value has
            the wrong type.
    """
    env = os.environ if environ is None else environ
    if path is None and env.get(CONFIG_ENV_VAR):
        path = Path(env[CONFIG_ENV_VAR])

    overrides: dict[str, Any] = {}
    if path is not None:
        data = _read_toml(path)
        if 'registry' in data:
            overrides.update(_parse_registry_table(data['registry'], path.resolve().parent))

    for name in sorted(_FIELD_NAMES):
        raw = env.get(f'{_ENV_PREFIX}{name.upper()}')
        if raw is not None and raw != '':
            overrides[name] = _coerce(name, raw, None)

    return replace(RegistryConfig(), **overrides)
