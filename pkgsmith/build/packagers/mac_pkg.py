"""Packager for macOS product packages (``.pkg``).

macOS packages are built in two stages. The install tree is first wrapped
into a single "component" package with ``pkgbuild``. That component is then
wrapped into a "product" package with ``productbuild``; only the product
package carries the installer branding (background image, welcome text and
license). Optionally the product package is put into a disk image.
"""

from __future__ import annotations

import pathlib
from typing import List, Optional

from pkgsmith.build.config import PackagerConfig, ProjectMetadata
from pkgsmith.build.distribution import (
    BACKGROUND_FILE,
    LICENSE_FILE,
    WELCOME_FILE,
    component_pkg_name,
    generate_distribution,
)
from pkgsmith.build.packagers.base import Packager, PipelineState
from pkgsmith.build.packagers.mac_dmg import DiskImageWrapper, HdiutilDiskImageWrapper
from pkgsmith.build.resources import (
    TemplateVariables,
    find_resource,
    render_templates,
)
from pkgsmith.build.utils import copy_directory, execute, purge_directory
from pkgsmith.utils.exceptions import MissingResourceError

TEMPLATE_RESOURCES = ("license.html.erb", "welcome.html.erb")


class MacPkgPackager(Packager):
    """Builds a branded macOS product package from a populated install tree.

    Attributes:
        dmg_wrapper: Disk image capability used when ``build_dmg`` is set
        dmg_path: Path of the disk image, once one has been built
    """

    NAME = "mac_pkg"

    def __init__(
            self,
            project: ProjectMetadata,
            config: PackagerConfig,
            dmg_wrapper: Optional[DiskImageWrapper] = None,
    ) -> None:
        super().__init__(project, config)
        if dmg_wrapper is None and config.build_dmg:
            dmg_wrapper = HdiutilDiskImageWrapper()
        self.dmg_wrapper = dmg_wrapper
        self.dmg_path: Optional[pathlib.Path] = None

    @property
    def package_name(self) -> str:
        return f"{self.project.name}-{self.context.version_label}.pkg"

    @property
    def final_pkg(self) -> pathlib.Path:
        """The full path where the product package was/will be written."""
        return self.context.package_dir / self.package_name

    @property
    def identifier(self) -> str:
        return self.context.identifier

    @property
    def component_pkg(self) -> str:
        return component_pkg_name(self.project.name)

    @property
    def component_pkg_path(self) -> pathlib.Path:
        return self.staging_dir / self.component_pkg

    @property
    def distribution_file(self) -> pathlib.Path:
        return self.staging_dir / "Distribution"

    @property
    def resources_path(self) -> pathlib.Path:
        return self.project.resources_path.expanduser().resolve()

    @property
    def staging_resources_path(self) -> pathlib.Path:
        return self.staging_dir / "Resources"

    def validate(self) -> None:
        """Check that the branding resources exist.

        Raises:
            MissingResourceError: Naming the first resource that is absent
        """
        resources = self.resources_path
        if find_resource(resources, BACKGROUND_FILE, allow_template=False) is None:
            raise MissingResourceError(BACKGROUND_FILE, str(resources))
        for name in (LICENSE_FILE, WELCOME_FILE):
            if find_resource(resources, name) is None:
                raise MissingResourceError(name, str(resources))

    def setup(self) -> None:
        purge_directory(self.staging_dir)
        purge_directory(self.context.package_dir)
        purge_directory(self.staging_resources_path)
        copy_directory(self.resources_path, self.staging_resources_path)

        rendered = render_templates(
            self.staging_resources_path,
            TEMPLATE_RESOURCES,
            TemplateVariables.from_project(self.project),
        )
        for path in rendered:
            self.logger.debug("Rendered resource template", resource=path.name)

    def build(self) -> pathlib.Path:
        self.build_component_pkg()
        self.transition(PipelineState.COMPONENT_BUILT)
        self.write_distribution()
        self.transition(PipelineState.MANIFEST_WRITTEN)
        artifact = self.build_product_pkg()
        self.transition(PipelineState.PRODUCT_BUILT)

        if self.config.build_dmg and self.dmg_wrapper is not None:
            self.dmg_path = self.dmg_wrapper.wrap(artifact, self.context)
            self.transition(PipelineState.IMAGE_WRAPPED)

        return artifact

    def clean(self) -> None:
        # The staging directory is kept for inspection and purged by the next run
        pass

    def component_pkg_command(self) -> List[str]:
        install_path = str(self.project.install_path)
        command = [
            "pkgbuild",
            "--identifier",
            self.identifier,
            "--version",
            self.project.build_version,
        ]
        if self.project.package_scripts_path:
            command.extend(["--scripts", str(self.project.package_scripts_path)])
        command.extend(
            [
                "--root",
                install_path,
                "--install-location",
                install_path,
                str(self.component_pkg_path),
            ]
        )
        return command

    def product_pkg_command(self) -> List[str]:
        command = [
            "productbuild",
            "--distribution",
            str(self.distribution_file),
            "--resources",
            str(self.staging_resources_path),
        ]
        if self.config.sign_pkg and self.config.signing_identity:
            command.extend(["--sign", self.config.signing_identity])
        command.append(str(self.final_pkg))
        return command

    def build_component_pkg(self) -> pathlib.Path:
        """Build the intermediate component package.

        It can be installed on its own but carries none of the installer UI
        customization.
        """
        execute(self.component_pkg_command(), cwd=self.staging_dir, logger=self.logger)
        return self.component_pkg_path

    def write_distribution(self) -> pathlib.Path:
        path = generate_distribution(self.context, self.distribution_file)
        self.logger.debug("Wrote distribution file", path=str(path))
        return path

    def build_product_pkg(self) -> pathlib.Path:
        """Build the product package, the artifact shipped to end users."""
        execute(self.product_pkg_command(), cwd=self.staging_dir, logger=self.logger)
        return self.final_pkg
