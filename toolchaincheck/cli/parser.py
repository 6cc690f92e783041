"""
ToolchainCheck CLI argument parser.

This module implements the command-line interface for ToolchainCheck using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from toolchaincheck import __version__

logger = logging.getLogger(__name__)


class CLI:
    """ToolchainCheck command-line interface."""

    command_map = {
        "check": "toolchaincheck.cli.commands.check",
        "doctor": "toolchaincheck.cli.commands.doctor",
        "table": "toolchaincheck.cli.commands.table",
        "records": "toolchaincheck.cli.commands.records",
    }

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="tccheck",
            description="ToolchainCheck - find a compatible native build toolchain",
            epilog='Use "tccheck COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ToolchainCheck {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./toolchaincheck.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_check_command(subparsers)
        self._add_doctor_command(subparsers)
        self._add_table_command(subparsers)
        self._add_records_command(subparsers)

        return parser

    def _add_check_command(self, subparsers):
        """Add 'check' subcommand."""
        parser = subparsers.add_parser(
            "check",
            help="Check that a compatible toolchain is installed",
            description=(
                "Resolve the toolchain for the current host version. "
                "Exits 0 when a compatible toolchain is installed (or the "
                "platform does not need one), 1 otherwise."
            ),
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Report what each evidence source saw",
        )
        parser.add_argument(
            "--path",
            action="store_true",
            help="Print the toolchain's executable directories on success",
        )

    def _add_doctor_command(self, subparsers):
        """Add 'doctor' subcommand."""
        subparsers.add_parser(
            "doctor",
            help="Diagnose toolchain detection",
            description="Run every evidence source and show what it found",
        )

    def _add_table_command(self, subparsers):
        """Add 'table' subcommand."""
        parser = subparsers.add_parser(
            "table",
            help="Show the compatibility table",
            description="List toolchain releases and the host versions they support",
        )
        parser.add_argument(
            "--host-version",
            metavar="VERSION",
            help="Mark the releases compatible with this host version",
        )

    def _add_records_command(self, subparsers):
        """Add 'records' subcommand with its own sub-commands."""
        parser = subparsers.add_parser(
            "records",
            help="Manage recorded installations",
            description="List, add and remove entries in the installation record file",
        )
        records_subparsers = parser.add_subparsers(
            dest="records_command", metavar="SUBCOMMAND"
        )

        records_subparsers.add_parser("list", help="List recorded installations")

        add_parser = records_subparsers.add_parser(
            "add", help="Record an installation"
        )
        add_parser.add_argument("toolchain_version", metavar="VERSION")
        add_parser.add_argument("path", type=Path, metavar="PATH")
        add_parser.add_argument(
            "--force",
            action="store_true",
            help="Record even if the directory does not contain that version",
        )

        remove_parser = records_subparsers.add_parser(
            "remove", help="Remove a recorded installation"
        )
        remove_parser.add_argument("toolchain_version", metavar="VERSION")

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet/debug flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose or getattr(args, "debug", False):
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        module_name = self.command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            return 1

        return module.run(args)


def main(args: Optional[List[str]] = None):
    """Console script entry point."""
    cli = CLI()
    sys.exit(cli.run(args))


if __name__ == "__main__":
    main()
