"""Utility functions for the pkgsmith build system.

This module contains the filesystem and process helpers the packagers are
built from: directory purging and copying, file writing with explicit modes,
and running external packaging tools.
"""

from __future__ import annotations

import os
import pathlib
import shlex
import shutil
import subprocess
from typing import Any, List, Optional, Sequence, Union

from pkgsmith.core.logging_manager import get_logger
from pkgsmith.utils.exceptions import FilesystemError, SubprocessFailureError

PathLike = Union[str, pathlib.Path]


def purge_directory(path: PathLike) -> pathlib.Path:
    """Delete a directory tree and recreate it empty.

    Safe to call on a path that does not exist yet.

    Args:
        path: Directory to purge

    Returns:
        The purged directory

    Raises:
        FilesystemError: If the directory cannot be removed or created
    """
    path = pathlib.Path(path)
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(
            f"Failed to purge directory: {e.strerror or e}", path=str(path)
        ) from e
    return path


def copy_directory(source: PathLike, destination: PathLike) -> pathlib.Path:
    """Copy the contents of ``source`` into ``destination``.

    File names and permission bits are preserved. Symlinks are followed and
    their targets copied, so the destination holds no links.

    Raises:
        FilesystemError: If the source is not a directory or a copy fails
    """
    source = pathlib.Path(source)
    destination = pathlib.Path(destination)
    if not source.is_dir():
        raise FilesystemError("Source is not a directory", path=str(source))
    try:
        shutil.copytree(source, destination, symlinks=False, dirs_exist_ok=True)
    except OSError as e:
        raise FilesystemError(
            f"Failed to copy {source} to {destination}: {e}", path=str(destination)
        ) from e
    return destination


def write_file(path: PathLike, content: str, mode: int = 0o644) -> pathlib.Path:
    """Write ``content`` to ``path`` and set its permission bits to ``mode``.

    Raises:
        FilesystemError: If the file cannot be written
    """
    path = pathlib.Path(path)
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.chmod(path, mode)
    except OSError as e:
        raise FilesystemError(
            f"Failed to write file: {e.strerror or e}", path=str(path)
        ) from e
    return path


def read_text(path: PathLike) -> str:
    path = pathlib.Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise FilesystemError(
            f"Failed to read file: {e.strerror or e}", path=str(path)
        ) from e


def remove_file(path: PathLike) -> None:
    path = pathlib.Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        raise FilesystemError(
            f"Failed to remove file: {e.strerror or e}", path=str(path)
        ) from e


def format_command(command: Sequence[str]) -> str:
    """Render an argument vector as a copy-pasteable shell line, for logs only."""
    return " ".join(shlex.quote(str(arg)) for arg in command)


def execute(
        command: Sequence[PathLike],
        cwd: Optional[PathLike] = None,
        logger: Optional[Any] = None,
) -> str:
    """Run an external tool and wait for it to exit.

    The command is passed as an argument vector, never through a shell. Output
    (stdout and stderr merged) is streamed to the logger at debug level.

    Args:
        command: Program and arguments
        cwd: Working directory for the tool
        logger: Logger to stream output to

    Returns:
        The tool's combined output

    Raises:
        SubprocessFailureError: If the tool cannot be started or exits non-zero
    """
    log = logger or get_logger(__name__)
    args = [str(arg) for arg in command]
    tool = os.path.basename(args[0])

    log.info("Executing command", tool=tool, command=format_command(args))

    try:
        process = subprocess.Popen(
            args,
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
    except OSError as e:
        log.error("Failed to start command", tool=tool, error=str(e))
        raise SubprocessFailureError(tool, None, output=str(e)) from e

    output_lines: List[str] = []
    with process:
        # Stream output
        for line in process.stdout:
            line = line.rstrip("\n")
            output_lines.append(line)
            log.debug(line, tool=tool)
        returncode = process.wait()

    output = "\n".join(output_lines)
    if returncode != 0:
        log.error("Command failed", tool=tool, returncode=returncode)
        raise SubprocessFailureError(tool, returncode, output=output)

    return output
