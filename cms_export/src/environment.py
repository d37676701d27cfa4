"""
Layered ``.env`` resolution.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from core.config_loader import layered_env_files, load_layered_env

from .console import Console

LIBRARY_ROOT = Path(__file__).resolve().parents[2]
"""Directory that contains the installed ``cms_export`` package."""


def env_file_sources(working_dir: Path, library_root: Path = LIBRARY_ROOT) -> List[Path]:
    """Candidate env files, lowest precedence first.

    Library-level files come before the working directory's so a shared
    default can be overridden per invocation.
    """
    return layered_env_files([Path(library_root), Path(working_dir)])


def resolve_environment(
    working_dir: Path,
    library_root: Path = LIBRARY_ROOT,
    console: Console | None = None,
) -> Dict[str, str]:
    """Merge the library and working-directory env files into one mapping.

    Missing files contribute nothing. Parse errors raised by python-dotenv
    are not caught here.
    """
    sources = env_file_sources(working_dir, library_root)
    if console:
        for source in sources:
            state = "reading" if source.is_file() else "not found"
            console.debug(f"Environment file {source}: {state}")
    return load_layered_env(sources)
