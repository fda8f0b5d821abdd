"""Disk image wrapping for macOS product packages."""

from __future__ import annotations

import pathlib
import shutil
from typing import Callable, Optional, Protocol, runtime_checkable

from pkgsmith.build.context import BuildContext
from pkgsmith.build.utils import execute, purge_directory
from pkgsmith.core.logging_manager import get_logger
from pkgsmith.utils.exceptions import FilesystemError


@runtime_checkable
class DiskImageWrapper(Protocol):
    """Something that can wrap a finished artifact into a disk image."""

    def wrap(self, artifact_path: pathlib.Path, context: BuildContext) -> pathlib.Path:
        """Wrap ``artifact_path`` and return the path of the disk image."""
        ...


class HdiutilDiskImageWrapper:
    """Builds a compressed ``.dmg`` holding the product package with ``hdiutil``.

    The image is written next to the package, named
    ``<project>-<version>-<iteration>.dmg``.
    """

    NAME = "mac_dmg"

    def __init__(
            self,
            runner: Optional[Callable[..., str]] = None,
            image_format: str = "UDZO",
    ) -> None:
        self._runner = runner
        self.image_format = image_format
        self.logger = get_logger(f"pkgsmith.packagers.{self.NAME}")

    def dmg_name(self, context: BuildContext) -> str:
        return f"{context.project.name}-{context.version_label}.dmg"

    def source_dir(self, context: BuildContext) -> pathlib.Path:
        """Directory whose contents become the volume contents."""
        root = (context.config.package_tmp / self.NAME).expanduser().resolve()
        return root / context.project.name

    def wrap(self, artifact_path: pathlib.Path, context: BuildContext) -> pathlib.Path:
        artifact_path = pathlib.Path(artifact_path)
        source = purge_directory(self.source_dir(context))
        try:
            shutil.copy2(artifact_path, source / artifact_path.name)
        except OSError as e:
            raise FilesystemError(
                f"Failed to stage package for disk image: {e}", path=str(artifact_path)
            ) from e

        dmg_path = context.package_dir / self.dmg_name(context)
        self.logger.info("Creating disk image", artifact=str(artifact_path), dmg=str(dmg_path))
        runner = self._runner or execute
        runner(
            [
                "hdiutil",
                "create",
                "-volname",
                context.project.friendly_name or context.project.name,
                "-srcfolder",
                str(source),
                "-ov",
                "-format",
                self.image_format,
                str(dmg_path),
            ],
            cwd=source.parent,
            logger=self.logger,
        )
        return dmg_path

