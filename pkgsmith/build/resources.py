"""Installer resource staging and template rendering.

Resource directories hold the branding files shown by the installer. Any of
them may be supplied as an ERB-style template (``license.html.erb``), which is
rendered with the project metadata when the resources are staged.
"""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import jinja2

from pkgsmith.build.config import ProjectMetadata
from pkgsmith.build.utils import read_text, remove_file, write_file
from pkgsmith.utils.exceptions import TemplateRenderError

TEMPLATE_SUFFIX = ".erb"

_environment = jinja2.Environment(
    block_start_string="<%",
    block_end_string="%>",
    variable_start_string="<%=",
    variable_end_string="%>",
    comment_start_string="<%#",
    comment_end_string="%>",
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


@dataclass(frozen=True)
class TemplateVariables:
    """Values available to resource templates as ``project.<field>``."""

    name: str
    friendly_name: str
    build_version: str
    build_iteration: str
    maintainer: str
    homepage: str = ""
    license: str = ""

    @classmethod
    def from_project(cls, project: ProjectMetadata) -> TemplateVariables:
        return cls(
            name=project.name,
            friendly_name=project.friendly_name or project.name,
            build_version=project.build_version,
            build_iteration=str(project.build_iteration),
            maintainer=project.maintainer,
            homepage=project.homepage or "",
            license=project.license,
        )


def render_template(
        source: str, variables: TemplateVariables, name: str = "<template>"
) -> str:
    """Render a template string.

    Placeholders use ``<%= project.build_version %>`` syntax; control flow
    uses ``<% if ... %>``/``<% endif %>``.

    Args:
        source: Template text
        variables: Substitution values
        name: Template name used in error messages

    Returns:
        The rendered text

    Raises:
        TemplateRenderError: If the template is malformed or references an
            unknown placeholder
    """
    try:
        template = _environment.from_string(source)
        return template.render(project=variables)
    except jinja2.TemplateSyntaxError as e:
        raise TemplateRenderError(name, f"line {e.lineno}: {e.message}") from e
    except jinja2.UndefinedError as e:
        raise TemplateRenderError(name, str(e)) from e


def rendered_name(template_name: str) -> str:
    """``license.html.erb`` -> ``license.html``."""
    if template_name.endswith(TEMPLATE_SUFFIX):
        return template_name[: -len(TEMPLATE_SUFFIX)]
    return template_name


def render_templates(
        directory: Union[str, pathlib.Path],
        template_names: Iterable[str],
        variables: TemplateVariables,
) -> List[pathlib.Path]:
    """Render the named templates found in ``directory`` in place.

    Each present template is written to its name without the template suffix,
    replacing any static file of that name, and the template itself is
    removed. Templates that are not present are skipped.

    Returns:
        Paths of the rendered files
    """
    directory = pathlib.Path(directory)
    rendered: List[pathlib.Path] = []

    for template_name in template_names:
        template_path = directory / template_name
        if not template_path.is_file():
            continue

        output_path = directory / rendered_name(template_name)
        content = render_template(read_text(template_path), variables, name=template_name)
        mode = template_path.stat().st_mode & 0o777
        write_file(output_path, content, mode=mode)
        if output_path != template_path:
            remove_file(template_path)
        rendered.append(output_path)

    return rendered


def find_resource(
        directory: Union[str, pathlib.Path], name: str, allow_template: bool = True
) -> Optional[pathlib.Path]:
    """Locate a readable resource, optionally accepting its template form.

    Returns:
        Path of the plain file if present, else of ``<name>.erb`` when
        templates are allowed, else None
    """
    directory = pathlib.Path(directory)
    candidates = [directory / name]
    if allow_template:
        candidates.append(directory / f"{name}{TEMPLATE_SUFFIX}")
    for candidate in candidates:
        if candidate.is_file() and os.access(candidate, os.R_OK):
            return candidate
    return None
