"""External collaborators: environment lookup and the export engine."""
from __future__ import annotations

import http.client
import json
import tempfile
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

from core.command_runner import CommandError, CommandRunner, SubprocessCommandRunner

from .console import Console
from .errors import ExportEngineError

if TYPE_CHECKING:
    from .options import ExportOptions

MANAGEMENT_API_URL = "https://api.contentful.com"


class EnvironmentLookup(Protocol):
    def environment_exists(
        self, management_token: str, space_id: str, environment_id: str
    ) -> bool: ...


class ExportEngine(Protocol):
    def run(self, options: "ExportOptions") -> None: ...


class ManagementApiClient:
    """Minimal Content Management API client used for the pre-flight check."""

    def __init__(
        self,
        base_url: str = MANAGEMENT_API_URL,
        timeout: Optional[float] = 30.0,
        console: Optional[Console] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.console = console

    def _make_request(self, url: str, token: str) -> Any:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "User-Agent": "cms-export-tool",
        }
        req = urllib.request.Request(url, headers=headers, method="GET")
        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read().decode())

    def environment_url(self, space_id: str, environment_id: str) -> str:
        space = urllib.parse.quote(space_id, safe="")
        environment = urllib.parse.quote(environment_id, safe="")
        return f"{self.base_url}/spaces/{space}/environments/{environment}"

    def environment_exists(
        self, management_token: str, space_id: str, environment_id: str
    ) -> bool:
        """Return ``True`` when the environment can be read with the token.

        An unknown environment, an unknown space and a rejected token all look
        the same from here, so every failure is reported as ``False``.
        """
        url = self.environment_url(space_id, environment_id)
        try:
            self._make_request(url, management_token)
        except urllib.error.HTTPError as e:
            if self.console:
                self.console.debug(f"Environment lookup failed with HTTP {e.code}: {url}")
            return False
        except (OSError, http.client.HTTPException, ValueError) as e:
            if self.console:
                self.console.debug(f"Environment lookup failed: {e}")
            return False

        return True


class ContentfulCliEngine:
    """Export engine backed by the ``contentful space export`` command.

    The options are written to a temporary JSON config file next to the
    export folder and removed once the command has finished.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        executable: str = "contentful",
        console: Optional[Console] = None,
    ) -> None:
        self.runner = runner or SubprocessCommandRunner()
        self.executable = executable
        self.console = console

    def build_command(self, config_path: Path) -> list[str]:
        return [self.executable, "space", "export", "--config", str(config_path)]

    def _write_config(self, config: Dict[str, Any], directory: Path) -> Path:
        with tempfile.NamedTemporaryFile(
            "w",
            dir=directory,
            prefix=".export-config-",
            suffix=".json",
            delete=False,
            encoding="utf-8",
        ) as handle:
            json.dump(config, handle, indent=2)
            return Path(handle.name)

    def run(self, options: "ExportOptions") -> None:
        export_dir = Path(options.export_dir)
        try:
            config_path = self._write_config(options.to_engine_config(), export_dir.parent)
        except OSError as e:
            raise ExportEngineError(f"Unable to write export configuration: {e}") from e

        command = self.build_command(config_path)
        if self.console:
            self.console.debug(f"Running: {self.runner.format_command(command)}")
        try:
            self.runner.run(command, cwd=export_dir.parent, stream=True)
        except CommandError as e:
            raise ExportEngineError(str(e)) from e
        finally:
            config_path.unlink(missing_ok=True)
