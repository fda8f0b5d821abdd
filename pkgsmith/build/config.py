"""Build configuration for pkgsmith packagers.

This module contains the configuration models that describe the project being
packaged, the packager options, and logging. They are plain pydantic models
passed explicitly into the packagers; nothing here is process-global.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from pkgsmith.utils.exceptions import ConfigurationError


class ProjectMetadata(BaseModel):
    """Metadata of the project being packaged.

    Attributes:
        name: Short project name, used in file names
        friendly_name: Human-readable name shown by the installer
        build_version: Version string of the build
        build_iteration: Package iteration, bumped for rebuilds of one version
        maintainer: Maintainer of the project
        homepage: Project homepage, available to resource templates
        license: License name, available to resource templates
        install_path: Fully populated install root; also the install location on the target
        package_scripts_path: Directory holding preinstall/postinstall scripts
        resources_path: Directory holding the installer branding resources
        mac_pkg_identifier: Explicit package identifier overriding the derived one
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    friendly_name: Optional[str] = None
    build_version: str
    build_iteration: Union[int, str] = 1
    maintainer: str
    homepage: Optional[str] = None
    license: str = "Unspecified"
    install_path: pathlib.Path
    package_scripts_path: Optional[pathlib.Path] = None
    resources_path: pathlib.Path
    mac_pkg_identifier: Optional[str] = None

    @field_validator("name", "build_version", "maintainer")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("build_iteration")
    @classmethod
    def validate_iteration(cls, v: Union[int, str]) -> Union[int, str]:
        if isinstance(v, int) and v < 1:
            raise ValueError("build iteration must be at least 1")
        if isinstance(v, str) and not v.strip():
            raise ValueError("build iteration must not be empty")
        return v

    @field_validator("mac_pkg_identifier")
    @classmethod
    def validate_identifier(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty identifier override as not set."""
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def default_friendly_name(self) -> "ProjectMetadata":
        if not self.friendly_name:
            self.friendly_name = self.name
        return self


class PackagerConfig(BaseModel):
    """Options shared by the packagers.

    Attributes:
        package_dir: Directory where final artifacts are written
        package_tmp: Root directory for per-packager staging directories
        sign_pkg: Whether to sign the product package
        signing_identity: Identity passed to the product tool when signing
        build_dmg: Whether to wrap the product package in a disk image
    """

    package_dir: pathlib.Path = pathlib.Path("pkg")
    package_tmp: pathlib.Path = pathlib.Path("pkg-tmp")
    sign_pkg: bool = False
    signing_identity: Optional[str] = None
    build_dmg: bool = False

    @model_validator(mode="after")
    def validate_signing(self) -> "PackagerConfig":
        """Require a signing identity when signing is requested."""
        if self.sign_pkg and not (self.signing_identity and self.signing_identity.strip()):
            raise ValueError("sign_pkg is enabled but no signing_identity is configured")
        return self


class LoggingConfig(BaseModel):
    level: str = "info"
    format: str = "json"
    file: Optional[pathlib.Path] = None

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("format must be 'json' or 'text'")
        return v


class Settings(BaseModel):
    """Top-level settings document consumed by the pkgsmith CLI."""

    project: ProjectMetadata
    packager: PackagerConfig = Field(default_factory=PackagerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> Settings:
        """Create Settings from a dictionary.

        Raises:
            ConfigurationError: If the dictionary does not describe valid settings.
        """
        try:
            return cls.model_validate(config_dict)
        except ValidationError as e:
            first = e.errors()[0]
            key = ".".join(str(part) for part in first.get("loc", ()))
            raise ConfigurationError(
                f"Invalid configuration: {key}: {first.get('msg')}",
                config_key=key or None,
                details={"errors": e.errors(include_url=False)},
            ) from e


# Keys holding paths that are resolved against the settings file location
_PATH_KEYS = {
    "project": ("install_path", "package_scripts_path", "resources_path"),
    "packager": ("package_dir", "package_tmp"),
    "logging": ("file",),
}


def _resolve_relative_paths(data: Dict[str, Any], base_dir: pathlib.Path) -> None:
    for section, keys in _PATH_KEYS.items():
        values = data.get(section)
        if not isinstance(values, dict):
            continue
        for key in keys:
            value = values.get(key)
            if value is None or value == "":
                continue
            path = pathlib.Path(value).expanduser()
            if not path.is_absolute():
                path = base_dir / path
            values[key] = path


def load_settings(config_path: Union[str, pathlib.Path]) -> Settings:
    """Load settings from a YAML or JSON file.

    Relative paths inside the file are resolved against the file's directory.

    Args:
        config_path: Path to a ``.yaml``, ``.yml`` or ``.json`` file.

    Returns:
        Settings instance.

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated.
    """
    config_path = pathlib.Path(config_path)
    suffix = config_path.suffix.lower()
    if suffix not in (".yaml", ".yml", ".json"):
        raise ConfigurationError(
            f"Unsupported configuration file type: {config_path.name}",
            path=str(config_path),
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration file: {e}", path=str(config_path)
        ) from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot parse configuration file: {e}", path=str(config_path)
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping", path=str(config_path)
        )

    _resolve_relative_paths(data, config_path.resolve().parent)
    try:
        return Settings.from_dict(data)
    except ConfigurationError as e:
        e.details["path"] = str(config_path)
        raise
