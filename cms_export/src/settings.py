"""Settings resolution for a single export run.

Every scalar setting is taken from the first source that provides it:

1. an explicit command line flag,
2. the merged ``.env`` mapping (``CMS_*`` keys),
3. the built-in default.

Boolean settings are switched on (or, for drafts, off) by the presence of a
flag; there is no flag that restores a default explicitly.
"""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence
import os

from .errors import ConfigurationError, DestinationError

ENV_SPACE_ID = "CMS_SPACE_ID"
ENV_MANAGEMENT_TOKEN = "CMS_MANAGEMENT_TOKEN"
ENV_MAX_ALLOWED_LIMIT = "CMS_MAX_ALLOWED_LIMIT"
ENV_EXPORT_DIR = "CMS_EXPORT_DIR"

EXPORT_NAME_TIME_FORMAT = "%Y-%m-%d-%H-%M-%S"


@dataclass(frozen=True, slots=True)
class SettingsDefaults:
    space_id: str = "placeholder-space-id"
    management_token: str = "placeholder-management-token"
    max_entries: int = 100
    export_dir: str = "export"
    include_drafts: bool = True
    include_assets: bool = False
    is_verbose: bool = False
    should_compress_folder: bool = False


DEFAULTS = SettingsDefaults()


@dataclass(frozen=True, slots=True)
class ResolvedSettings:
    """Immutable configuration shared by every later stage of a run."""

    space_id: str
    environment_id: str
    management_token: str
    max_entries: int
    root_destination_folder: str
    default_export_name: str
    include_drafts: bool
    include_assets: bool
    is_verbose: bool
    should_compress_folder: bool

    @property
    def export_folder(self) -> str:
        """Per-run sub-folder populated by the export engine."""
        return f"{self.root_destination_folder}{self.default_export_name}{os.sep}"

    @property
    def content_file_name(self) -> str:
        return f"{self.default_export_name}.json"

    @property
    def log_file_name(self) -> str:
        return f"{self.default_export_name}.log"

    @property
    def archive_path(self) -> str:
        return f"{self.root_destination_folder}{self.default_export_name}.zip"

    def to_mapping(self) -> Dict[str, Any]:
        """Printable view of the settings with the token masked."""
        token = self.management_token
        masked = f"{token[:4]}{'*' * max(len(token) - 4, 0)}" if token else ""
        return {
            "space_id": self.space_id,
            "environment_id": self.environment_id,
            "management_token": masked,
            "max_entries": self.max_entries,
            "root_destination_folder": self.root_destination_folder,
            "default_export_name": self.default_export_name,
            "include_drafts": self.include_drafts,
            "include_assets": self.include_assets,
            "is_verbose": self.is_verbose,
            "should_compress_folder": self.should_compress_folder,
        }


class _ArgumentParser(ArgumentParser):
    """Argument parser that reports usage problems as configuration errors."""

    def error(self, message: str):  # type: ignore[override]
        raise ConfigurationError(message)


def _build_parser() -> ArgumentParser:
    parser = _ArgumentParser(
        prog="cms-export",
        description="Export the content of a CMS space environment",
        allow_abbrev=False,
    )
    parser.add_argument("--from", dest="from_environment", metavar="ID", help="Environment to export")
    parser.add_argument("--environment-id", dest="environment_id", metavar="ID", help="Environment to export (alias of --from)")
    parser.add_argument("--space-id", dest="space_id", metavar="ID", help=f"Space to export (default: ${ENV_SPACE_ID})")
    parser.add_argument("--management-token", dest="management_token", metavar="TOKEN", help=f"Management API token (default: ${ENV_MANAGEMENT_TOKEN})")
    parser.add_argument("--mt", dest="mt", metavar="TOKEN", help="Short form of --management-token")
    parser.add_argument("--only-published", action="store_true", help="Skip draft and archived entries")
    parser.add_argument("--download-assets", action="store_true", help="Download asset files alongside the content")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--compress", action="store_true", help="Produce a single ZIP archive instead of a folder")
    parser.add_argument("--export-dir", dest="export_dir", metavar="PATH", help="Existing destination folder (never created)")
    parser.add_argument(
        "--max-allowed-limit",
        dest="max_allowed_limit",
        metavar="N",
        help=f"Page size used when fetching entries (default: ${ENV_MAX_ALLOWED_LIMIT} or {DEFAULTS.max_entries})",
    )
    return parser


def parse_arguments(argv: Sequence[str]) -> Namespace:
    return _build_parser().parse_args(list(argv))


def _parse_positive_int(value: str, *, source: str) -> int:
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{source} must be a positive integer, got '{value}'") from None
    if number <= 0:
        raise ConfigurationError(f"{source} must be a positive integer, got '{value}'")
    return number


def validate_arguments(args: Namespace) -> None:
    """Reject conflicting or missing flags. Performs no I/O."""

    if args.from_environment is not None and args.environment_id is not None:
        raise ConfigurationError("Only one of the two options '--environment-id' or '--from' can be specified")

    selected = args.from_environment if args.from_environment is not None else args.environment_id
    if not selected or not selected.strip():
        raise ConfigurationError("An environment-id should be specified")

    if args.management_token is not None and args.mt is not None:
        raise ConfigurationError("Only one of the two options '--management-token' or '--mt' can be specified")

    for flag, value in (
        ("--space-id", args.space_id),
        ("--management-token", args.management_token),
        ("--mt", args.mt),
    ):
        if value is not None and not value.strip():
            raise ConfigurationError(f"Option '{flag}' requires a non-empty value")

    if args.max_allowed_limit is not None:
        _parse_positive_int(args.max_allowed_limit, source="--max-allowed-limit")


def _first_value(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate is not None and candidate != "":
            return candidate
    return None


def normalize_folder(path: str) -> str:
    """Return ``path`` with trailing separators collapsed to one ``os.sep``."""

    separators = os.sep + (os.altsep or "")
    return path.rstrip(separators) + os.sep


def resolve_destination_folder(working_dir: Path, explicit: str | None, configured: str) -> str:
    """Return the root destination folder for the run.

    ``explicit`` comes from ``--export-dir`` and must already exist. Otherwise
    ``configured`` is taken relative to ``working_dir`` and created (one level
    only) when missing. The filesystem root is never accepted.
    """

    candidate = explicit if explicit is not None else configured
    if not os.path.isabs(candidate):
        candidate = os.path.join(str(working_dir), candidate)

    folder = normalize_folder(candidate)
    if Path(folder) == Path(Path(folder).anchor):
        raise DestinationError(f"Destination folder does not exist or not accessible! ({folder})")

    if explicit is None and not os.path.exists(folder):
        try:
            os.mkdir(folder)
        except OSError as exc:
            raise DestinationError(
                f"Destination folder does not exist or not accessible! ({folder}: {exc.strerror})"
            ) from exc

    if not os.path.isdir(folder) or not os.access(folder, os.W_OK):
        raise DestinationError(f"Destination folder does not exist or not accessible! ({folder})")

    return folder


def build_export_name(space_id: str, environment_id: str, moment: datetime) -> str:
    """Run name shared by the sub-folder, content file, log file and archive."""
    return f"{moment.strftime(EXPORT_NAME_TIME_FORMAT)}-{space_id}-{environment_id}"


def resolve_settings(
    working_dir: Path,
    argv: Sequence[str],
    environment: Mapping[str, str],
    *,
    defaults: SettingsDefaults = DEFAULTS,
    now: datetime | None = None,
) -> ResolvedSettings:
    """Build the settings for one run.

    Flags are validated before anything touches the filesystem. The only side
    effect is creating the default destination folder when it is missing.
    """

    args = parse_arguments(argv)
    validate_arguments(args)

    environment_id = args.from_environment if args.from_environment is not None else args.environment_id
    space_id = _first_value(args.space_id, environment.get(ENV_SPACE_ID), defaults.space_id) or ""
    cli_token = args.management_token if args.management_token is not None else args.mt
    management_token = _first_value(cli_token, environment.get(ENV_MANAGEMENT_TOKEN), defaults.management_token) or ""

    if args.max_allowed_limit is not None:
        max_entries = _parse_positive_int(args.max_allowed_limit, source="--max-allowed-limit")
    elif _first_value(environment.get(ENV_MAX_ALLOWED_LIMIT)) is not None:
        max_entries = _parse_positive_int(environment[ENV_MAX_ALLOWED_LIMIT], source=ENV_MAX_ALLOWED_LIMIT)
    else:
        max_entries = defaults.max_entries

    root_destination_folder = resolve_destination_folder(
        working_dir,
        args.export_dir,
        _first_value(environment.get(ENV_EXPORT_DIR), defaults.export_dir) or defaults.export_dir,
    )

    moment = now if now is not None else datetime.now()

    return ResolvedSettings(
        space_id=space_id,
        environment_id=environment_id,
        management_token=management_token,
        max_entries=max_entries,
        root_destination_folder=root_destination_folder,
        default_export_name=build_export_name(space_id, environment_id, moment),
        include_drafts=False if args.only_published else defaults.include_drafts,
        include_assets=True if args.download_assets else defaults.include_assets,
        is_verbose=True if args.verbose else defaults.is_verbose,
        should_compress_folder=True if args.compress else defaults.should_compress_folder,
    )


__all__ = [
    "DEFAULTS",
    "ENV_EXPORT_DIR",
    "ENV_MANAGEMENT_TOKEN",
    "ENV_MAX_ALLOWED_LIMIT",
    "ENV_SPACE_ID",
    "EXPORT_NAME_TIME_FORMAT",
    "ResolvedSettings",
    "SettingsDefaults",
    "build_export_name",
    "normalize_folder",
    "parse_arguments",
    "resolve_destination_folder",
    "resolve_settings",
    "validate_arguments",
]
