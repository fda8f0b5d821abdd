"""Package identifier resolution.

The identifier names the package in the installer receipts database. A project
may set one explicitly; otherwise a stable identifier is derived from the
maintainer and project name.
"""

from __future__ import annotations

import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def sanitize(value: str) -> str:
    """Strip every non-alphanumeric ASCII character and lowercase the rest.

    Args:
        value: Human-readable string such as a maintainer or project name

    Returns:
        Token suitable for use inside a package identifier
    """
    return _NON_ALNUM.sub("", value).lower()


def resolve_identifier(
        explicit_identifier: Optional[str], maintainer: str, project_name: str
) -> str:
    """Return the package identifier for a project.

    Args:
        explicit_identifier: Identifier configured by the project, if any
        maintainer: Project maintainer
        project_name: Project name

    Returns:
        ``explicit_identifier`` when it is non-empty, otherwise
        ``test.<maintainer>.pkg.<name>`` built from the sanitized values.
    """
    if explicit_identifier:
        return explicit_identifier
    return f"test.{sanitize(maintainer)}.pkg.{sanitize(project_name)}"
