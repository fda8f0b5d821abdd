"""Distribution file generation for product packages.

The Distribution file tells ``productbuild`` which component package to wrap
and how to brand the installer UI. Its content depends only on the build
context, so repeated builds with the same inputs produce identical files.
"""

from __future__ import annotations

import pathlib
import xml.etree.ElementTree as ET
from typing import Union

from pkgsmith.build.context import BuildContext
from pkgsmith.build.utils import write_file

BACKGROUND_FILE = "background.png"
WELCOME_FILE = "welcome.html"
LICENSE_FILE = "license.html"

DISTRIBUTION_MODE = 0o600

_XML_DECLARATION = '<?xml version="1.0" standalone="no"?>\n'


def component_pkg_name(project_name: str) -> str:
    """File name of the (only) component package."""
    return f"{project_name}-core.pkg"


def build_distribution(context: BuildContext) -> ET.Element:
    """Build the ``installer-gui-script`` element tree for a context.

    Exactly one component is described: the choices outline is always the
    default choice wrapping a single hidden choice for the component.
    """
    identifier = context.identifier
    project = context.project

    root = ET.Element("installer-gui-script", minSpecVersion="1")

    title = ET.SubElement(root, "title")
    title.text = project.friendly_name

    ET.SubElement(
        root,
        "background",
        file=BACKGROUND_FILE,
        alignment="bottomleft",
        **{"mime-type": "image/png"},
    )
    ET.SubElement(root, "welcome", file=WELCOME_FILE, **{"mime-type": "text/html"})
    ET.SubElement(root, "license", file=LICENSE_FILE, **{"mime-type": "text/html"})

    root.append(ET.Comment(" Generated by productbuild - - synthesize "))
    ET.SubElement(root, "pkg-ref", id=identifier)
    ET.SubElement(root, "options", customize="never", **{"require-scripts": "false"})

    outline = ET.SubElement(root, "choices-outline")
    default_line = ET.SubElement(outline, "line", choice="default")
    ET.SubElement(default_line, "line", choice=identifier)

    ET.SubElement(root, "choice", id="default")
    component_choice = ET.SubElement(root, "choice", id=identifier, visible="false")
    ET.SubElement(component_choice, "pkg-ref", id=identifier)

    pkg_ref = ET.SubElement(
        root,
        "pkg-ref",
        id=identifier,
        version=project.build_version,
        onConclusion="none",
    )
    pkg_ref.text = component_pkg_name(project.name)

    return root


def render_distribution(context: BuildContext) -> str:
    """Serialize the Distribution document for a context."""
    root = build_distribution(context)
    ET.indent(root, space="    ")
    return _XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def generate_distribution(
        context: BuildContext, path: Union[str, pathlib.Path]
) -> pathlib.Path:
    """Write the Distribution file to ``path`` with owner-only permissions.

    Raises:
        FilesystemError: If the file cannot be written
    """
    return write_file(path, render_distribution(context), mode=DISTRIBUTION_MODE)
