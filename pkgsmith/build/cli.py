"""Command-line interface for the pkgsmith build system.

This module provides the ``pkgsmith`` command, which builds installer packages
from a settings file and reports the names the build will produce.
"""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import List, Optional

from pkgsmith.__version__ import __version__
from pkgsmith.build.config import Settings, load_settings
from pkgsmith.build.packagers.mac_pkg import MacPkgPackager
from pkgsmith.core.logging_manager import LoggingManager
from pkgsmith.utils.exceptions import PkgsmithError


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    packager = settings.packager.model_dump()
    if getattr(args, "package_dir", None):
        packager["package_dir"] = pathlib.Path(args.package_dir).resolve()
    if getattr(args, "sign", None):
        packager["sign_pkg"] = True
        packager["signing_identity"] = args.sign
    if getattr(args, "dmg", False):
        packager["build_dmg"] = True

    logging_config = settings.logging.model_dump()
    if getattr(args, "log_level", None):
        logging_config["level"] = args.log_level
    if getattr(args, "log_format", None):
        logging_config["format"] = args.log_format

    return Settings.from_dict(
        {
            "project": settings.project.model_dump(),
            "packager": packager,
            "logging": logging_config,
        }
    )


def build_command(args: argparse.Namespace) -> int:
    """Handle the build command.

    Args:
        args: Command-line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging_manager: Optional[LoggingManager] = None
    try:
        settings = _apply_overrides(load_settings(args.config), args)

        logging_manager = LoggingManager(
            level=settings.logging.level,
            fmt=settings.logging.format,
            file_path=settings.logging.file,
        )
        logging_manager.initialize()

        packager = MacPkgPackager(settings.project, settings.packager)
        artifact = packager.run()

        print(artifact)
        if packager.dmg_path:
            print(packager.dmg_path)
        return 0

    except PkgsmithError as e:
        print(f"Error building package: {e}", file=sys.stderr)
        return 1

    finally:
        if logging_manager:
            logging_manager.shutdown()


def package_name_command(args: argparse.Namespace) -> int:
    """Handle the package-name command."""
    try:
        settings = load_settings(args.config)
        packager = MacPkgPackager(settings.project, settings.packager)
        print(packager.final_pkg)
        return 0

    except PkgsmithError as e:
        print(f"Error reading configuration: {e}", file=sys.stderr)
        return 1


def identifier_command(args: argparse.Namespace) -> int:
    """Handle the identifier command."""
    try:
        settings = load_settings(args.config)
        packager = MacPkgPackager(settings.project, settings.packager)
        print(packager.identifier)
        return 0

    except PkgsmithError as e:
        print(f"Error reading configuration: {e}", file=sys.stderr)
        return 1


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line interface.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    # Create argument parser
    parser = argparse.ArgumentParser(
        prog="pkgsmith",
        description="Build native installer packages",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Add subparsers for commands
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Build command
    build_parser = subparsers.add_parser("build", help="Build the product package")
    build_parser.add_argument("config", help="Settings file (.yaml, .yml or .json)")
    build_parser.add_argument("--package-dir", help="Directory for the final artifacts")
    build_parser.add_argument("--sign", metavar="IDENTITY", help="Sign the package with this identity")
    build_parser.add_argument("--dmg", action="store_true", help="Also build a disk image")
    build_parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (overrides the settings file)",
    )
    build_parser.add_argument(
        "--log-format", choices=["json", "text"], help="Log format (overrides the settings file)"
    )

    # Package name command
    name_parser = subparsers.add_parser(
        "package-name", help="Print the path the product package will be written to"
    )
    name_parser.add_argument("config", help="Settings file (.yaml, .yml or .json)")

    # Identifier command
    identifier_parser = subparsers.add_parser("identifier", help="Print the package identifier")
    identifier_parser.add_argument("config", help="Settings file (.yaml, .yml or .json)")

    # Parse arguments
    args = parser.parse_args(args)

    # Execute command
    if args.command == "build":
        return build_command(args)
    elif args.command == "package-name":
        return package_name_command(args)
    elif args.command == "identifier":
        return identifier_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
