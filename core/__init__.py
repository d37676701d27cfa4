"""Shared core utilities for the export tooling."""

from .archive import ArchiveArtifact, ArchiveConsole, ArchiveManager
from .command_runner import (
    CommandError,
    CommandResult,
    CommandRunner,
    RecordedCommand,
    RecordingCommandRunner,
    SubprocessCommandRunner,
)
from .config_loader import (
    ENV_FILE_NAMES,
    layered_env_files,
    load_env_file,
    load_layered_env,
    merge_mappings,
)

__all__ = [
    "ArchiveConsole",
    "ArchiveManager",
    "ArchiveArtifact",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "ENV_FILE_NAMES",
    "layered_env_files",
    "load_env_file",
    "load_layered_env",
    "merge_mappings",
]
