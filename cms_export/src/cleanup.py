"""
Deferred removal of the per-run export folder.
"""
from __future__ import annotations

import shutil
import threading
from pathlib import Path
from typing import Optional

from .console import Console

DELETE_FOLDER_DELAY = 5.0
"""Seconds to wait before removing a folder that has just been archived."""


class DeferredCleanup:
    """Best-effort recursive removal of ``folder`` after ``delay`` seconds.

    The removal runs on a non-daemon timer thread: the interpreter does not
    exit until it has fired or been cancelled. Failures are reported at debug
    level and kept on :attr:`error`; they never propagate.
    """

    def __init__(
        self,
        folder: Path | str,
        delay: float = DELETE_FOLDER_DELAY,
        console: Optional[Console] = None,
    ) -> None:
        self.folder = Path(folder)
        self.delay = delay
        self.console = console
        self.error: Optional[OSError] = None
        self._finished = threading.Event()
        self._started = False
        self._timer = threading.Timer(delay, self._remove)
        self._timer.daemon = False
        self._timer.name = f"cleanup-{self.folder.name}"

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def start(self) -> "DeferredCleanup":
        self._started = True
        self._timer.start()
        return self

    def cancel(self) -> None:
        """Skip the removal if it has not fired yet."""
        self._timer.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the removal has run; return whether it did."""
        if self._started:
            self._timer.join(timeout)
        return self.finished

    def _remove(self) -> None:
        try:
            shutil.rmtree(self.folder)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.error = e
            if self.console:
                self.console.debug(f"Could not delete temporary folder {self.folder}: {e}")
        finally:
            self._finished.set()
