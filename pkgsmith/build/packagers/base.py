"""Base class for packagers.

A packager turns a populated install tree into one distributable artifact.
Every packager runs the same four phases, ``validate``, ``setup``, ``build``
and ``clean``, and tracks its progress through :class:`PipelineState`.
"""

from __future__ import annotations

import abc
import enum
import pathlib
from typing import Any, Dict, List

from pkgsmith.build.config import PackagerConfig, ProjectMetadata
from pkgsmith.build.context import BuildContext
from pkgsmith.core.logging_manager import get_logger
from pkgsmith.utils.exceptions import PipelineStateError


class PipelineState(str, enum.Enum):
    """States of a packager run, in the order they are reached."""

    PENDING = "pending"
    VALIDATED = "validated"
    STAGED = "staged"
    COMPONENT_BUILT = "component_built"
    MANIFEST_WRITTEN = "manifest_written"
    PRODUCT_BUILT = "product_built"
    IMAGE_WRAPPED = "image_wrapped"
    DONE = "done"
    ABORTED = "aborted"


_ORDER = [state for state in PipelineState if state is not PipelineState.ABORTED]

# States a run may pass over without entering
_OPTIONAL_STATES = {PipelineState.IMAGE_WRAPPED}


class Packager(abc.ABC):
    """Base class for all packagers.

    Subclasses implement the four phases and call :meth:`transition` as they
    reach each state. A packager instance runs at most once; a failed run must
    be repeated with a new instance.

    Attributes:
        NAME: Short name of the packager, also the staging directory name
        context: Build context for this run
        state: Current pipeline state
        history: States entered so far, in order
    """

    NAME = "base"

    def __init__(self, project: ProjectMetadata, config: PackagerConfig) -> None:
        staging_dir = (config.package_tmp / self.NAME).expanduser().resolve()
        self.context = BuildContext(project=project, config=config, staging_dir=staging_dir)
        self.state = PipelineState.PENDING
        self.history: List[PipelineState] = []
        self.logger = get_logger(f"pkgsmith.packagers.{self.NAME}").bind(
            packager=self.NAME, project=project.name
        )

    @property
    def project(self) -> ProjectMetadata:
        return self.context.project

    @property
    def config(self) -> PackagerConfig:
        return self.context.config

    @property
    def staging_dir(self) -> pathlib.Path:
        return self.context.staging_dir

    @property
    @abc.abstractmethod
    def package_name(self) -> str:
        """File name of the artifact this packager produces."""

    @abc.abstractmethod
    def validate(self) -> None:
        """Check inputs before anything on disk is modified."""

    @abc.abstractmethod
    def setup(self) -> None:
        """Prepare the staging area."""

    @abc.abstractmethod
    def build(self) -> pathlib.Path:
        """Produce the artifact and return its path."""

    def clean(self) -> None:
        """Remove intermediate files after a successful build."""

    def transition(self, state: PipelineState) -> None:
        """Move the run forward to ``state``.

        Raises:
            PipelineStateError: If ``state`` is not the next state of the run
        """
        if self.state in (PipelineState.ABORTED, PipelineState.DONE):
            raise PipelineStateError(
                f"Packager run already finished in state {self.state.value}",
                current=self.state.value,
                requested=state.value,
            )

        if state is not PipelineState.ABORTED:
            current = _ORDER.index(self.state)
            requested = _ORDER.index(state)
            skipped = _ORDER[current + 1:requested]
            if requested <= current or any(s not in _OPTIONAL_STATES for s in skipped):
                raise PipelineStateError(
                    f"Illegal transition from {self.state.value} to {state.value}",
                    current=self.state.value,
                    requested=state.value,
                )

        self.state = state
        self.history.append(state)
        self.logger.info("Packager state changed", state=state.value)

    def run(self) -> pathlib.Path:
        """Run validate, setup, build and clean in order.

        Returns:
            Path to the produced artifact

        Raises:
            PkgsmithError: Whatever the failing phase raised; the run is
                marked aborted first
        """
        if self.state is not PipelineState.PENDING:
            raise PipelineStateError(
                f"Packager has already run (state {self.state.value})",
                current=self.state.value,
                requested=PipelineState.VALIDATED.value,
            )

        self.logger.info(
            "Starting packager",
            version=self.project.build_version,
            iteration=str(self.project.build_iteration),
        )

        try:
            self.validate()
            self.transition(PipelineState.VALIDATED)
            self.setup()
            self.transition(PipelineState.STAGED)
            artifact = self.build()
            self.clean()
            self.transition(PipelineState.DONE)
        except Exception as e:
            self.logger.error("Packager failed", state=self.state.value, error=str(e))
            self.state = PipelineState.ABORTED
            self.history.append(PipelineState.ABORTED)
            raise

        self.logger.info("Packager finished", artifact=str(artifact))
        return artifact

    def status(self) -> Dict[str, Any]:
        return {
            "packager": self.NAME,
            "state": self.state.value,
            "history": [s.value for s in self.history],
        }

    @classmethod
    def for_settings(cls, settings: Any, **kwargs: Any) -> Packager:
        """Create a packager from a loaded :class:`~pkgsmith.build.config.Settings`."""
        return cls(settings.project, settings.packager, **kwargs)
