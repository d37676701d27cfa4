"""Archive helpers shared by the export tooling."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable
import os
import zipfile

_SUFFIX_FORMATS: list[tuple[str, str]] = [
    (".zip", "zip"),
]


@runtime_checkable
class ArchiveConsole(Protocol):
    """Minimal console interface required by :class:`ArchiveManager`."""

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def debug(self, message: str) -> None:
        ...


@dataclass(slots=True)
class ArchiveArtifact:
    """Description of filesystem content to package into an archive."""

    source_dir: Path
    label: str | None = None


class ArchiveManager:
    """Create compressed archives from directories."""

    def __init__(self, console: ArchiveConsole) -> None:
        self._console = console

    def create_archive(
        self,
        *,
        artifact: ArchiveArtifact,
        target_path: Path | str,
        overwrite: bool = True,
    ) -> Path:
        """Create an archive for *artifact* at *target_path*.

        Parameters
        ----------
        artifact:
            Data describing the directory to archive. Only the directory's
            contents are stored; the directory itself is not an archive entry.
        target_path:
            Exact path (including filename) for the archive that should be created.
        overwrite:
            When ``False`` and the target already exists, a :class:`FileExistsError`
            is raised instead of replacing the file.

        The archive is fully written and closed when this method returns.
        """

        target = Path(target_path).expanduser()
        source_dir = Path(artifact.source_dir).expanduser()

        if not source_dir.is_dir():
            raise FileNotFoundError(
                f"Archive source directory '{source_dir}' does not exist")

        archive_format = self._resolve_archive_format(target=target)

        if target.exists() and not overwrite:
            raise FileExistsError(f"Archive target '{target}' already exists")

        label = artifact.label or source_dir.name
        self._console.debug(f"Archiving {label} to {target}")

        if archive_format == "zip":
            return self._make_zip_archive(target_path=target, source_dir=source_dir)

        raise RuntimeError(f"Unsupported archive format '{archive_format}'")

    def _resolve_archive_format(self, *, target: Path) -> str:
        filename = target.name.lower()
        for suffix, fmt in sorted(
            _SUFFIX_FORMATS, key=lambda item: len(
                item[0]), reverse=True):
            if filename.endswith(suffix):
                return fmt

        raise ValueError(
            f"Unable to determine archive format from target path '{target}'. "
            "Supported suffixes: " + ", ".join(suffix for suffix, _ in _SUFFIX_FORMATS)
        )

    def _make_zip_archive(
        self,
        *,
        target_path: Path,
        source_dir: Path,
    ) -> Path:
        target_path.parent.mkdir(parents=True, exist_ok=True)

        with zipfile.ZipFile(
            target_path,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=9,
            allowZip64=True,
            strict_timestamps=False,
        ) as archive:
            root_dir_path = Path(source_dir)
            for dirpath, dirnames, filenames in os.walk(
                    source_dir, topdown=True):
                dirnames.sort()
                filenames.sort()

                current_dir = Path(dirpath)
                relative_dir = current_dir.relative_to(root_dir_path)

                if relative_dir != Path(".") and not filenames and not dirnames:
                    archive.writestr(f"{relative_dir.as_posix()}/", b"")
                    continue

                for filename in filenames:
                    file_path = current_dir / filename
                    if relative_dir != Path("."):
                        arcname_path = relative_dir / filename
                    else:
                        arcname_path = Path(filename)

                    archive.write(file_path, arcname_path.as_posix())

        return target_path


__all__ = [
    "ArchiveArtifact",
    "ArchiveConsole",
    "ArchiveManager",
]
