"""Utilities for executing external commands."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Sequence
import os
import shlex
import subprocess


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str
    streamed: bool = False


class CommandError(RuntimeError):
    """Raised when a command fails."""

    def __init__(self, result: CommandResult):
        message = f"Command failed with exit code {result.returncode}: {' '.join(map(shlex.quote, result.command))}"
        if result.streamed:
            message = f"{message}\nstdout/stderr already streamed above."
        else:
            details = result.stderr.strip() or result.stdout.strip()
            if details:
                message = f"{message}\n{details}"
        super().__init__(message)
        self.result = result


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        stream: bool = False,
    ) -> CommandResult:
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return " ".join(shlex.quote(part) for part in command)


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`.

    A command that cannot be started is reported as a :class:`CommandError`
    with the status a shell would use: 126 when it is not executable, 127
    otherwise.
    """

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def _finalize(self, result: CommandResult, *, check: bool) -> CommandResult:
        if check and result.returncode != 0:
            raise CommandError(result)
        return result

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        stream: bool = False,
    ) -> CommandResult:
        merged_env = self._merge_environment(env)
        try:
            process = subprocess.run(
                list(command),
                cwd=str(cwd) if cwd else None,
                env=merged_env,
                capture_output=not stream,
                text=True,
                check=False,
            )
        except OSError as exc:
            return self._finalize(
                CommandResult(
                    command=command,
                    returncode=126 if isinstance(exc, PermissionError) else 127,
                    stdout="",
                    stderr=f"{command[0]}: {exc.strerror or exc}",
                ),
                check=check,
            )

        return self._finalize(
            CommandResult(
                command=command,
                returncode=process.returncode,
                stdout=process.stdout or "",
                stderr=process.stderr or "",
                streamed=stream,
            ),
            check=check,
        )


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str]
    stream: bool


@dataclass
class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    ``on_run`` is invoked with each recorded command before the result is
    produced, which lets callers emulate the files a real command would write.
    """

    returncode: int = 0
    on_run: Callable[[RecordedCommand], None] | None = None
    commands: List[RecordedCommand] = field(default_factory=list)

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        stream: bool = False,
    ) -> CommandResult:
        record = RecordedCommand(
            command=list(command),
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env else {},
            stream=stream,
        )
        self.commands.append(record)
        if self.on_run is not None:
            self.on_run(record)

        result = CommandResult(
            command=command,
            returncode=self.returncode,
            stdout="",
            stderr="",
            streamed=stream,
        )
        if check and result.returncode != 0:
            raise CommandError(result)
        return result

    def iter_formatted(self) -> Iterable[str]:
        for record in self.commands:
            yield self.format_command(record.command)


__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
]
