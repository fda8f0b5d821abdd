"""Build system for pkgsmith.

This package contains the tools that turn a populated install tree into a
native installer artifact.

Modules:
    config: Project, packager and logging configuration models
    context: Per-run build context
    identifier: Package identifier resolution
    resources: Resource staging and template rendering
    distribution: Distribution file generation
    packagers: Packager implementations
    cli: Command-line interface for the build system
    utils: Filesystem and process helpers
"""

from __future__ import annotations

from pkgsmith.build.config import PackagerConfig, ProjectMetadata, Settings, load_settings
from pkgsmith.build.context import BuildContext
from pkgsmith.build.packagers import MacPkgPackager, Packager, PipelineState

__all__ = [
    "BuildContext",
    "MacPkgPackager",
    "PackagerConfig",
    "Packager",
    "PipelineState",
    "ProjectMetadata",
    "Settings",
    "load_settings",
]
