"""Core services shared by the pkgsmith build tools."""

from __future__ import annotations

from pkgsmith.core.logging_manager import LoggingManager, get_logger

__all__ = ["LoggingManager", "get_logger"]
