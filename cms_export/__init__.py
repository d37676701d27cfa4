"""Layered-configuration export of a CMS space environment."""
from __future__ import annotations

from .src.cli import main

__all__ = ["main"]
