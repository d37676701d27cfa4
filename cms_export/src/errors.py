"""Errors raised by the export pipeline.

Every failure that should end the run with exit status ``1`` derives from
:class:`ExportError`; the command line entry point reports it and exits.
"""
from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for terminal export failures."""


class ConfigurationError(ExportError):
    """Conflicting, missing or malformed options."""


class DestinationError(ExportError):
    """Destination folder is missing, inaccessible or the filesystem root."""


class EnvironmentNotFoundError(ExportError):
    """The target environment could not be confirmed to exist."""

    def __init__(self, environment_id: str):
        super().__init__(
            f"Unable to retrieve Destination environment '{environment_id}'!\n"
            "Could also be that the management token or space-id are invalid."
        )
        self.environment_id = environment_id


class ExportEngineError(ExportError):
    """The external export engine reported a failure."""


class ArchiveConsistencyError(ExportError):
    """The export reported success but its output folder is missing."""


class ArchiveError(ExportError):
    """The archive could not be written."""


__all__ = [
    "ArchiveConsistencyError",
    "ArchiveError",
    "ConfigurationError",
    "DestinationError",
    "EnvironmentNotFoundError",
    "ExportEngineError",
    "ExportError",
]
