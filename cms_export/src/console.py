"""
Console output for the export tool.
"""
import sys

from core.archive import ArchiveConsole


class Console(ArchiveConsole):
    """Prefixed status output with a configurable log level.

    Levels: none < error < info < debug
    Info and debug lines go to stdout, error lines to stderr. The prefixes are
    stable so that log scrapers can tell the streams apart.
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    INFO_PREFIX = "##/INFO: "
    DEBUG_PREFIX = "##/DEBUG: "
    ERROR_PREFIX = "@@/ERROR: "

    def __init__(self, level: str = "info"):
        self.level_name = level
        self.level = self.LEVELS.get(level, self.LEVELS["info"])

    def info(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"{self.INFO_PREFIX}{message}", flush=True)

    def error(self, message: str) -> None:
        if self.level >= self.LEVELS["error"]:
            for line in str(message).splitlines() or [""]:
                print(f"{self.ERROR_PREFIX}{line}", file=sys.stderr, flush=True)

    def debug(self, message: str) -> None:
        if self.level >= self.LEVELS["debug"]:
            print(f"{self.DEBUG_PREFIX}{message}", flush=True)
