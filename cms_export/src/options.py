"""Translation of resolved settings into export engine options."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict
import os

from .console import Console
from .engine import EnvironmentLookup
from .errors import DestinationError, EnvironmentNotFoundError
from .settings import ResolvedSettings


@dataclass(frozen=True, slots=True)
class ExportOptions:
    """Options handed to the export engine, in the engine's vocabulary."""

    space_id: str
    environment_id: str
    management_token: str
    export_dir: str
    content_file: str
    error_log_file: str
    include_drafts: bool
    include_archived: bool
    download_assets: bool
    use_verbose_renderer: bool
    max_allowed_limit: int
    save_file: bool = True

    @property
    def content_path(self) -> str:
        return os.path.join(self.export_dir, self.content_file)

    def to_engine_config(self) -> Dict[str, Any]:
        return {
            "spaceId": self.space_id,
            "environmentId": self.environment_id,
            "managementToken": self.management_token,
            "exportDir": self.export_dir,
            "contentFile": self.content_file,
            "saveFile": self.save_file,
            "includeDrafts": self.include_drafts,
            "includeArchived": self.include_archived,
            "downloadAssets": self.download_assets,
            "errorLogFile": self.error_log_file,
            "useVerboseRenderer": self.use_verbose_renderer,
            "maxAllowedLimit": self.max_allowed_limit,
        }


def log_file_path(settings: ResolvedSettings) -> str:
    """Where the engine writes its error log.

    A compressed run deletes the per-run sub-folder, so its log lives in the
    root destination folder instead.
    """
    directory = settings.root_destination_folder if settings.should_compress_folder else settings.export_folder
    return f"{directory}{settings.log_file_name}"


def build_export_options(
    settings: ResolvedSettings,
    lookup: EnvironmentLookup,
    console: Console,
) -> ExportOptions:
    """Verify the target environment, create the run folder and build options.

    Nothing is written to disk when the environment lookup fails.
    """

    if not lookup.environment_exists(
        settings.management_token,
        settings.space_id,
        settings.environment_id,
    ):
        raise EnvironmentNotFoundError(settings.environment_id)

    export_dir = settings.export_folder
    try:
        os.makedirs(export_dir, exist_ok=True)
    except OSError as exc:
        raise DestinationError(f"Unable to create export folder {export_dir}: {exc.strerror}") from exc

    console.info(
        f'Export of space-id "{settings.space_id}" and environment-id "{settings.environment_id}" started...'
    )
    console.info(f"Using destination folder: {export_dir}")

    return ExportOptions(
        space_id=settings.space_id,
        environment_id=settings.environment_id,
        management_token=settings.management_token,
        export_dir=export_dir,
        content_file=settings.content_file_name,
        error_log_file=log_file_path(settings),
        include_drafts=settings.include_drafts,
        include_archived=settings.include_drafts,
        download_assets=settings.include_assets,
        use_verbose_renderer=settings.is_verbose,
        max_allowed_limit=settings.max_entries,
    )
