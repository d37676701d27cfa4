"""Command line entry point for the export tool."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional
import sys

from .console import Console
from .engine import ContentfulCliEngine, EnvironmentLookup, ExportEngine, ManagementApiClient
from .environment import LIBRARY_ROOT, resolve_environment
from .errors import ExportError
from .materialize import materialize
from .options import build_export_options
from .settings import resolve_settings


def main(
    argv: Iterable[str] | None = None,
    *,
    working_dir: Optional[Path] = None,
    library_root: Path = LIBRARY_ROOT,
    lookup: Optional[EnvironmentLookup] = None,
    engine: Optional[ExportEngine] = None,
    console: Optional[Console] = None,
) -> int:
    """Run one export and return the process exit status.

    Every stage raises :class:`ExportError` on failure; this is the only
    place where such an error becomes a message and a non-zero status.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    workspace = Path(working_dir) if working_dir is not None else Path.cwd()
    if console is None:
        console = Console("debug" if "--verbose" in args else "info")

    try:
        environment = resolve_environment(workspace, library_root, console)
        settings = resolve_settings(workspace, args, environment)
        console.debug(f"Resolved settings: {settings.to_mapping()}")

        options = build_export_options(
            settings,
            lookup or ManagementApiClient(console=console),
            console,
        )
        materialize(
            options,
            settings,
            engine or ContentfulCliEngine(console=console),
            console,
        )
    except ExportError as e:
        console.error(str(e))
        return 1
    except KeyboardInterrupt:
        console.error("Interrupted")
        return 1

    return 0
