# Alias Manager - A tool for creating and managing shell aliases.
# Copyright (C) 2025 Heston Hamilton
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Configuration loading for the alias manager."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, MutableMapping, Optional, Tuple

import yaml

DEFAULT_CONFIG_FILENAMES = ("config.yaml", "config.yml", "config.json")
DEFAULT_ALIAS_FILE = "~/.bash_aliases"
ENV_PREFIX = "ALIAS_MANAGER_"
TRANSPORTS = ("stdio", "http", "sse", "streamable-http")


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""


@dataclass(slots=True)
class Config:
    """Runtime configuration for the alias manager."""

    alias_file: Path = Path(DEFAULT_ALIAS_FILE).expanduser()
    transport: str = "stdio"
    http_host: str = "127.0.0.1"
    http_port: int = 3921
    http_path: str = "/mcp"

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        cli_overrides: Optional[Mapping[str, Any]] = None,
    ) -> "Config":
        """Load configuration using precedence: CLI → env → file → defaults."""

        base_dir = Path.cwd() if cwd is None else cwd

        raw_config = _default_dict()

        file_config, resolved_config_path = _load_from_file(config_path=config_path, base_dir=base_dir)
        raw_config.update(file_config)
        config_dir = resolved_config_path.parent if resolved_config_path is not None else base_dir

        raw_config.update(_load_from_env(env if env is not None else os.environ))
        if cli_overrides:
            raw_config.update(cli_overrides)

        return _build_config(raw_config, config_dir=config_dir.resolve())


def _default_dict() -> Dict[str, Any]:
    return {
        "alias_file": DEFAULT_ALIAS_FILE,
        "transport": "stdio",
        "http_host": "127.0.0.1",
        "http_port": 3921,
        "http_path": "/mcp",
    }


def _load_from_file(*, config_path: Optional[Path], base_dir: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
    candidate_paths: Iterable[Path]
    explicit = config_path is not None
    if config_path:
        candidate_paths = (config_path,)
    else:
        candidate_paths = (base_dir / name for name in DEFAULT_CONFIG_FILENAMES)

    for path in candidate_paths:
        expanded = path.expanduser()
        if not expanded.exists():
            continue
        try:
            absolute = expanded.resolve()
            return _read_config_file(expanded), absolute
        except Exception as exc:  # pragma: no cover - sanity guard
            raise ConfigError(f"Failed to read config file {expanded}") from exc

    if explicit:
        missing = config_path.expanduser()
        raise ConfigError(f"Config file {missing} not found")

    return {}, None


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read YAML or JSON configuration."""
    text = path.read_text(encoding="utf-8")

    if path.suffix.lower() in {".yaml", ".yml", ""}:
        return _ensure_mapping(yaml.safe_load(text) or {}, path)

    if path.suffix.lower() == ".json":
        import json

        return _ensure_mapping(json.loads(text), path)

    raise ConfigError(f"Unsupported config extension: {path.suffix}")


def _ensure_mapping(value: Any, path: Path) -> Dict[str, Any]:
    if not isinstance(value, MutableMapping):
        raise ConfigError(f"Config file {path} must contain a mapping at top level")
    return dict(value)


def _load_from_env(env: Mapping[str, str]) -> Dict[str, Any]:
    results: Dict[str, Any] = {}

    for key, target in _env_key_map().items():
        if key not in env:
            continue
        results[target] = _parse_env_value(target, env[key])

    return results


def _env_key_map() -> Dict[str, str]:
    return {
        f"{ENV_PREFIX}ALIAS_FILE": "alias_file",
        f"{ENV_PREFIX}TRANSPORT": "transport",
        f"{ENV_PREFIX}HTTP_HOST": "http_host",
        f"{ENV_PREFIX}HTTP_PORT": "http_port",
        f"{ENV_PREFIX}HTTP_PATH": "http_path",
    }


def _parse_env_value(target: str, raw: str) -> Any:
    if target == "http_port":
        try:
            return int(raw)
        except ValueError as exc:
            raise ConfigError("HTTP port must be an integer") from exc

    return raw


def _resolve_path(value: str, *, base_dir: Path) -> Path:
    expanded = Path(value).expanduser()
    candidate = expanded if expanded.is_absolute() else base_dir / expanded
    try:
        return candidate.resolve(strict=False)
    except OSError:
        return candidate


def _build_config(raw: Dict[str, Any], *, config_dir: Path) -> Config:
    alias_file_raw = raw.get("alias_file") or DEFAULT_ALIAS_FILE
    if not isinstance(alias_file_raw, (str, os.PathLike)):
        raise ConfigError("alias_file must be a single path")
    alias_file = _resolve_path(str(alias_file_raw), base_dir=config_dir)

    transport = str(raw.get("transport", "stdio")).lower()
    if transport not in TRANSPORTS:
        raise ConfigError(f"Unsupported transport {transport!r}; expected one of {', '.join(TRANSPORTS)}")

    http_host = str(raw.get("http_host", "127.0.0.1"))
    try:
        http_port = int(raw.get("http_port", 3921))
    except (TypeError, ValueError) as exc:
        raise ConfigError("HTTP port must be an integer") from exc
    http_path = str(raw.get("http_path", "/mcp"))
    if not http_path.startswith("/"):
        http_path = f"/{http_path}"

    return Config(
        alias_file=alias_file,
        transport=transport,
        http_host=http_host,
        http_port=http_port,
        http_path=http_path,
    )
