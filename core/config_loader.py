"""Shared helpers for locating and loading layered ``.env`` configuration."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from dotenv import dotenv_values


ENV_FILE_NAMES: tuple[str, ...] = (".env", ".env.local")
"""Environment file names read from each directory, lowest precedence first."""


def load_env_file(path: Path) -> Dict[str, str]:
    """Load the key/value pairs declared in the dotenv file at ``path``.

    Keys declared without a value are skipped. Variable expansion is disabled
    so values are returned exactly as written.
    """

    values = dotenv_values(path, interpolate=False, encoding="utf-8")
    return {key: value for key, value in values.items() if value is not None}


def layered_env_files(directories: Sequence[Path], *, names: Iterable[str] = ENV_FILE_NAMES) -> List[Path]:
    """Return candidate env files for ``directories`` in merge order.

    Every name is tried in every directory, so for two directories and the
    default names the order is ``d1/.env``, ``d1/.env.local``, ``d2/.env``,
    ``d2/.env.local``.
    """

    file_names = tuple(names)
    return [directory / name for directory in directories for name in file_names]


def merge_mappings(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge two mapping objects."""

    result: Dict[str, Any] = dict(base)
    for key, value in overlay.items():
        existing = result.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            result[key] = merge_mappings(existing, value)
        else:
            result[key] = value
    return result


def load_layered_env(paths: Iterable[Path]) -> Dict[str, str]:
    """Merge the env files at ``paths``; later files override earlier ones.

    Paths that do not point to a regular file contribute nothing.
    """

    merged: Dict[str, str] = {}
    for path in paths:
        if not path.is_file():
            continue
        merged = merge_mappings(merged, load_env_file(path))
    return merged


__all__ = [
    "ENV_FILE_NAMES",
    "layered_env_files",
    "load_env_file",
    "load_layered_env",
    "merge_mappings",
]
