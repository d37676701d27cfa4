"""Running the export and shaping its output as a folder or a ZIP archive."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os
import zipfile

from core.archive import ArchiveArtifact, ArchiveManager

from .cleanup import DELETE_FOLDER_DELAY, DeferredCleanup
from .console import Console
from .engine import ExportEngine
from .errors import ArchiveConsistencyError, ArchiveError
from .options import ExportOptions
from .settings import ResolvedSettings


@dataclass
class MaterializedOutput:
    content_path: Path
    log_file: Path
    archive: Optional[Path] = None
    cleanup: Optional[DeferredCleanup] = None


def _report_completion(console: Console, saved_at: str, log_file: str) -> None:
    console.info("Export completed")
    console.info("File Saved at:")
    console.info(saved_at)
    console.info("Log file (if present) at:")
    console.info(log_file)


def materialize(
    options: ExportOptions,
    settings: ResolvedSettings,
    engine: ExportEngine,
    console: Console,
    *,
    archive_manager: Optional[ArchiveManager] = None,
    cleanup_delay: Optional[float] = None,
) -> MaterializedOutput:
    """Run ``engine`` and present its output.

    Without compression the engine's folder is the final artifact. With
    compression the folder's contents are zipped to ``<root>/<run>.zip`` and
    the folder is removed later by a :class:`DeferredCleanup` that the caller
    does not wait for.
    """

    engine.run(options)

    if not settings.should_compress_folder:
        _report_completion(console, options.content_path, options.error_log_file)
        return MaterializedOutput(
            content_path=Path(options.content_path),
            log_file=Path(options.error_log_file),
        )

    export_folder = settings.export_folder
    if not os.path.isdir(export_folder):
        raise ArchiveConsistencyError(
            f"Export reported success but its folder {export_folder} is missing; "
            "nothing to compress"
        )

    console.info("Assets exported. Creating the ZIP File")
    manager = archive_manager or ArchiveManager(console)
    target = Path(settings.archive_path)
    try:
        manager.create_archive(
            artifact=ArchiveArtifact(source_dir=Path(export_folder), label=settings.default_export_name),
            target_path=target,
        )
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise ArchiveError(f"Error happens during ZIP file compression: {exc}") from exc

    log_file = Path(f"{settings.root_destination_folder}{settings.log_file_name}")

    console.info("Deleting temporary destination folder...")
    delay = DELETE_FOLDER_DELAY if cleanup_delay is None else cleanup_delay
    cleanup = DeferredCleanup(export_folder, delay=delay, console=console).start()

    _report_completion(console, str(target), str(log_file))
    return MaterializedOutput(
        content_path=target,
        log_file=log_file,
        archive=target,
        cleanup=cleanup,
    )
