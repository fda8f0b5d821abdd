"""Packager implementations.

Modules:
    base: Packager base class and pipeline states
    mac_pkg: macOS product package (.pkg) packager
    mac_dmg: Disk image wrapping for macOS packages
"""

from __future__ import annotations

from pkgsmith.build.packagers.base import Packager, PipelineState
from pkgsmith.build.packagers.mac_dmg import DiskImageWrapper, HdiutilDiskImageWrapper
from pkgsmith.build.packagers.mac_pkg import MacPkgPackager

__all__ = [
    "DiskImageWrapper",
    "HdiutilDiskImageWrapper",
    "MacPkgPackager",
    "Packager",
    "PipelineState",
]
