"""Per-run build context shared by the stages of a packager."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from typing import Optional

from pkgsmith.build.config import PackagerConfig, ProjectMetadata
from pkgsmith.build.identifier import resolve_identifier


@dataclass
class BuildContext:
    """State owned by one packager run.

    The context is read-only once created; the only derived value is the
    package identifier, computed on first access and reused afterwards.

    Attributes:
        project: Metadata of the project being packaged
        config: Packager options
        staging_dir: Scratch directory for this packager, rebuilt on every run
    """

    project: ProjectMetadata
    config: PackagerConfig
    staging_dir: pathlib.Path
    _identifier: Optional[str] = field(default=None, init=False, repr=False)

    @property
    def identifier(self) -> str:
        if self._identifier is None:
            self._identifier = resolve_identifier(
                self.project.mac_pkg_identifier,
                self.project.maintainer,
                self.project.name,
            )
        return self._identifier

    @property
    def package_dir(self) -> pathlib.Path:
        return self.config.package_dir.expanduser().resolve()

    @property
    def version_label(self) -> str:
        """``<version>-<iteration>``, the version part of artifact names."""
        return f"{self.project.build_version}-{self.project.build_iteration}"
