"""Unit tests for settings loading and the configuration models."""

import json
import pathlib

import pytest
import yaml

from pkgsmith.build.config import LoggingConfig, ProjectMetadata, Settings, load_settings
from pkgsmith.build.context import BuildContext
from pkgsmith.utils.exceptions import ConfigurationError


def _project(**overrides):
    values = {
        "name": "acme",
        "build_version": "2.1.0",
        "maintainer": "Acme, Inc.",
        "install_path": "/opt/acme",
        "resources_path": "resources",
    }
    values.update(overrides)
    return ProjectMetadata(**values)


def test_project_defaults():
    project = _project()
    assert project.friendly_name == "acme"
    assert project.build_iteration == 1
    assert project.mac_pkg_identifier is None
    assert project.package_scripts_path is None
    assert isinstance(project.install_path, pathlib.Path)


def test_project_blank_identifier_is_unset():
    assert _project(mac_pkg_identifier="  ").mac_pkg_identifier is None


@pytest.mark.parametrize("field", ["name", "build_version", "maintainer"])
def test_project_rejects_blank_required_values(field):
    with pytest.raises(ValueError):
        _project(**{field: " "})


def test_project_rejects_zero_iteration():
    with pytest.raises(ValueError):
        _project(build_iteration=0)


def test_logging_config_format():
    assert LoggingConfig(format="TEXT").format == "text"
    with pytest.raises(ValueError):
        LoggingConfig(format="xml")


def test_context_caches_identifier(project, packager_config, tmp_path):
    context = BuildContext(project=project, config=packager_config, staging_dir=tmp_path)

    assert context.identifier == "test.chefsoftwareinc.pkg.acme"
    assert context._identifier == "test.chefsoftwareinc.pkg.acme"
    assert context.version_label == "2.1.0-1"


def test_settings_from_dict_invalid():
    with pytest.raises(ConfigurationError) as exc_info:
        Settings.from_dict({"project": {"name": "acme"}})

    assert exc_info.value.config_key.startswith("project.")


def test_load_settings_yaml(settings_data, tmp_path):
    path = tmp_path / "project.yaml"
    path.write_text(yaml.safe_dump(settings_data), encoding="utf-8")

    settings = load_settings(path)

    assert settings.project.name == "acme"
    assert settings.project.friendly_name == "Acme Agent"
    assert settings.packager.package_dir == pathlib.Path(settings_data["packager"]["package_dir"])
    assert settings.logging.format == "text"


def test_load_settings_json(settings_data, tmp_path):
    path = tmp_path / "project.json"
    path.write_text(json.dumps(settings_data), encoding="utf-8")

    assert load_settings(path).project.build_version == "2.1.0"


def test_load_settings_resolves_relative_paths(tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    path = config_dir / "project.yml"
    path.write_text(
        yaml.safe_dump(
            {
                "project": {
                    "name": "acme",
                    "build_version": "1.0.0",
                    "maintainer": "Acme",
                    "install_path": "/opt/acme",
                    "resources_path": "resources/mac_pkg",
                },
                "packager": {"package_dir": "out"},
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.project.install_path == pathlib.Path("/opt/acme")
    assert settings.project.resources_path == config_dir.resolve() / "resources" / "mac_pkg"
    assert settings.packager.package_dir == config_dir.resolve() / "out"
    assert settings.packager.package_tmp == pathlib.Path("pkg-tmp")


def test_load_settings_unsupported_suffix(tmp_path):
    path = tmp_path / "project.toml"
    path.write_text("")
    with pytest.raises(ConfigurationError):
        load_settings(path)


def test_load_settings_missing_file(tmp_path):
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(tmp_path / "missing.yaml")

    assert exc_info.value.details["path"] == str(tmp_path / "missing.yaml")


def test_load_settings_not_a_mapping(tmp_path):
    path = tmp_path / "project.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_settings(path)


def test_load_settings_invalid_yaml(tmp_path):
    path = tmp_path / "project.yaml"
    path.write_text("project: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_settings(path)


def test_load_settings_signing_without_identity(settings_data, tmp_path):
    settings_data["packager"]["sign_pkg"] = True
    path = tmp_path / "project.json"
    path.write_text(json.dumps(settings_data))

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(path)

    assert exc_info.value.details["path"] == str(path)
