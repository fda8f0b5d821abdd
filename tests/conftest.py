"""Pytest configuration and fixtures for pkgsmith tests."""

import pathlib
from typing import Dict, List, Optional
from unittest import mock

import pytest

from pkgsmith.build.config import PackagerConfig, ProjectMetadata
from pkgsmith.utils.exceptions import SubprocessFailureError

WELCOME_TEMPLATE = (
    "<html><body>\n"
    "<h1>Welcome to <%= project.friendly_name %></h1>\n"
    "<p>Version <%= project.build_version %>-<%= project.build_iteration %>,"
    " maintained by <%= project.maintainer %>.</p>\n"
    "</body></html>\n"
)

LICENSE_HTML = "<html><body><pre>Apache License 2.0 &copy; Acme</pre></body></html>\n"


class FakeExecutor:
    """Stand-in for ``execute`` that records commands and creates their outputs.

    The last argument of every packaging tool invocation is its output file,
    which is created with a small payload naming the tool.
    """

    def __init__(self, fail_tool: Optional[str] = None, returncode: int = 1) -> None:
        self.fail_tool = fail_tool
        self.returncode = returncode
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []

    def __call__(self, command, cwd=None, logger=None) -> str:
        command = [str(arg) for arg in command]
        self.calls.append(command)
        self.cwds.append(str(cwd) if cwd else None)

        tool = command[0]
        if tool == self.fail_tool:
            raise SubprocessFailureError(tool, self.returncode, output="simulated failure")

        output = pathlib.Path(command[-1])
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(f"{tool} output\n".encode("utf-8"))
        return ""

    def tools(self) -> List[str]:
        return [call[0] for call in self.calls]

    def call_for(self, tool: str) -> List[str]:
        for call in self.calls:
            if call[0] == tool:
                return call
        raise AssertionError(f"{tool} was not invoked")


@pytest.fixture
def resources_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Resource directory with a background, a static license and a welcome template."""
    resources = tmp_path / "resources"
    resources.mkdir()
    (resources / "background.png").write_bytes(b"\x89PNG\r\n\x1a\nfake-image")
    (resources / "license.html").write_text(LICENSE_HTML, encoding="utf-8")
    (resources / "welcome.html.erb").write_text(WELCOME_TEMPLATE, encoding="utf-8")
    return resources


@pytest.fixture
def install_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    install = tmp_path / "opt" / "acme"
    (install / "bin").mkdir(parents=True)
    (install / "bin" / "acme").write_text("#!/bin/sh\necho acme\n", encoding="utf-8")
    return install


@pytest.fixture
def scripts_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    scripts = tmp_path / "package-scripts"
    scripts.mkdir()
    (scripts / "postinstall").write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    return scripts


@pytest.fixture
def project(resources_dir, install_dir, scripts_dir) -> ProjectMetadata:
    return ProjectMetadata(
        name="acme",
        friendly_name="Acme Agent",
        build_version="2.1.0",
        build_iteration=1,
        maintainer="Chef-Software, Inc.",
        install_path=install_dir,
        package_scripts_path=scripts_dir,
        resources_path=resources_dir,
    )


@pytest.fixture
def packager_config(tmp_path: pathlib.Path) -> PackagerConfig:
    return PackagerConfig(
        package_dir=tmp_path / "pkg",
        package_tmp=tmp_path / "pkg-tmp",
    )


@pytest.fixture
def fake_execute():
    """Patch the command runner used by the packagers."""
    executor = FakeExecutor()
    with mock.patch("pkgsmith.build.packagers.mac_pkg.execute", executor), \
            mock.patch("pkgsmith.build.packagers.mac_dmg.execute", executor):
        yield executor


@pytest.fixture
def settings_data(project, packager_config) -> Dict:
    """A settings document equivalent to the ``project``/``packager_config`` fixtures."""
    return {
        "project": {
            "name": project.name,
            "friendly_name": project.friendly_name,
            "build_version": project.build_version,
            "build_iteration": project.build_iteration,
            "maintainer": project.maintainer,
            "install_path": str(project.install_path),
            "package_scripts_path": str(project.package_scripts_path),
            "resources_path": str(project.resources_path),
        },
        "packager": {
            "package_dir": str(packager_config.package_dir),
            "package_tmp": str(packager_config.package_tmp),
        },
        "logging": {"level": "debug", "format": "text"},
    }
