"""
Main CLI for the rn tool.

Converts React Native iOS projects from the Libraries group to CocoaPods.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rnutil import __version__
from rnutil.core.errors import CommandNotFoundError, ReactNativeUtilError
from rnutil.core.utils import log


# =============================================================================
# Argument Parsing
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all subcommands."""

    # Main parser
    parser = argparse.ArgumentParser(
        prog="rn",
        description="React Native project utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  convert     Convert the Libraries group to a CocoaPods Podfile
  update      Refresh the packager build phase after upgrading react-native

Examples:
  rn convert                     # Convert the app in the current directory
  rn convert --no-repo-update    # Skip pod install --repo-update
  rn update                      # Update the Start Packager phase
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file overriding conversion defaults",
    )

    # Subparsers
    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- convert ---
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert the Libraries group to a CocoaPods Podfile",
        description=(
            "Unlink native dependencies, remove the Libraries group from the Xcode project, "
            "generate ios/Podfile, relink and run pod install."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Run from the app root (the directory containing package.json). An interrupted
conversion resumes where it stopped on the next run.

Environment:
  REACT_NATIVE_UTIL_REPO_UPDATE   default for --repo-update (default: true)
        """,
    )
    convert_parser.add_argument(
        "--repo-update",
        dest="repo_update",
        action="store_true",
        default=None,
        help="Pass --repo-update to pod install",
    )
    convert_parser.add_argument(
        "--no-repo-update",
        dest="repo_update",
        action="store_false",
        help="Don't update the podspec repo before pod install",
    )

    # --- update ---
    subparsers.add_parser(
        "update",
        help="Refresh the packager build phase after upgrading react-native",
        description="Compare the Start Packager phase against React.xcodeproj and update it if needed.",
    )

    return parser


# =============================================================================
# Command Dispatch
# =============================================================================


def _make_converter(args: argparse.Namespace):
    from rnutil.convert import ConvertConfig, Converter, load_config_file

    settings = load_config_file(args.config) if args.config else None
    config = ConvertConfig.from_settings(settings, repo_update=getattr(args, "repo_update", None))
    return Converter(config=config)


def cmd_convert(args: argparse.Namespace) -> int:
    return _make_converter(args).convert_to_react_pod()


def cmd_update(args: argparse.Namespace) -> int:
    return _make_converter(args).update_project()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle --no-color
    if args.no_color:
        log.set_color(False)

    # No command specified
    if not args.command:
        parser.print_help()
        return 0

    # Dispatch to command handler
    try:
        if args.command == "convert":
            return cmd_convert(args)

        elif args.command == "update":
            return cmd_update(args)

        else:
            log.error(f"Unknown command: {args.command}")
            return 1

    except KeyboardInterrupt:
        log.warning("\nInterrupted")
        return 130
    except CommandNotFoundError as e:
        log.error(str(e))
        return 127
    except ReactNativeUtilError as e:
        log.error(str(e))
        return 1
    except Exception as e:
        log.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
