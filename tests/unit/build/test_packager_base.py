"""Unit tests for the packager base class and its state machine."""

import pathlib

import pytest

from pkgsmith.build.packagers.base import Packager, PipelineState
from pkgsmith.utils.exceptions import FilesystemError, PipelineStateError


class RecordingPackager(Packager):
    """Packager that records the phases it runs."""

    NAME = "recording"

    def __init__(self, project, config, fail_in=None):
        super().__init__(project, config)
        self.phases = []
        self.fail_in = fail_in

    @property
    def package_name(self):
        return f"{self.project.name}.tar"

    def _phase(self, name):
        self.phases.append(name)
        if name == self.fail_in:
            raise FilesystemError(f"{name} failed", path="/nowhere")

    def validate(self):
        self._phase("validate")

    def setup(self):
        self._phase("setup")

    def build(self):
        self._phase("build")
        self.transition(PipelineState.COMPONENT_BUILT)
        self.transition(PipelineState.MANIFEST_WRITTEN)
        self.transition(PipelineState.PRODUCT_BUILT)
        return pathlib.Path("/artifacts") / self.package_name

    def clean(self):
        self._phase("clean")


def test_run_executes_phases_in_order(project, packager_config):
    packager = RecordingPackager(project, packager_config)

    assert packager.run() == pathlib.Path("/artifacts/acme.tar")
    assert packager.phases == ["validate", "setup", "build", "clean"]
    assert packager.state == PipelineState.DONE
    assert packager.staging_dir.name == "recording"


@pytest.mark.parametrize("phase", ["validate", "setup", "build", "clean"])
def test_failure_aborts_and_reraises(project, packager_config, phase):
    packager = RecordingPackager(project, packager_config, fail_in=phase)

    with pytest.raises(FilesystemError):
        packager.run()

    assert packager.phases[-1] == phase
    assert packager.state == PipelineState.ABORTED
    assert packager.status()["state"] == "aborted"


def test_transition_cannot_go_backwards(project, packager_config):
    packager = RecordingPackager(project, packager_config)
    packager.transition(PipelineState.VALIDATED)
    packager.transition(PipelineState.STAGED)

    with pytest.raises(PipelineStateError):
        packager.transition(PipelineState.VALIDATED)
    with pytest.raises(PipelineStateError):
        packager.transition(PipelineState.STAGED)


def test_transition_cannot_skip_required_states(project, packager_config):
    packager = RecordingPackager(project, packager_config)
    packager.transition(PipelineState.VALIDATED)

    with pytest.raises(PipelineStateError) as exc_info:
        packager.transition(PipelineState.MANIFEST_WRITTEN)

    assert exc_info.value.current == "validated"
    assert exc_info.value.requested == "manifest_written"


def test_image_wrapped_is_optional(project, packager_config):
    packager = RecordingPackager(project, packager_config)
    for state in (
        PipelineState.VALIDATED,
        PipelineState.STAGED,
        PipelineState.COMPONENT_BUILT,
        PipelineState.MANIFEST_WRITTEN,
        PipelineState.PRODUCT_BUILT,
        PipelineState.DONE,
    ):
        packager.transition(state)

    assert PipelineState.IMAGE_WRAPPED not in packager.history


def test_for_settings(settings_data):
    from pkgsmith.build.config import Settings

    settings = Settings.from_dict(settings_data)
    packager = RecordingPackager.for_settings(settings, fail_in="build")

    assert packager.project.name == "acme"
    assert packager.fail_in == "build"
