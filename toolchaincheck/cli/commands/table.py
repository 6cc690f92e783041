"""Table command - print the compatibility table."""

import logging

from toolchaincheck.cli.utils import load_cli_config, print_error, safe_print
from toolchaincheck.core.exceptions import InvalidVersionError
from toolchaincheck.core.versions import Version
from toolchaincheck.service import build_table

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run table command.

    Args:
        args: Parsed arguments from argparse

    Returns:
        Exit code (0 for success, 1 for an invalid host version)
    """
    config = load_cli_config(args)
    table = build_table(config)

    host = None
    if getattr(args, "host_version", None):
        try:
            host = Version(args.host_version)
        except InvalidVersionError as e:
            print_error(str(e))
            return 1

    recommended = table.most_recent_applicable(host) if host is not None else None

    safe_print(f"{table.product:<10} {config.host.name + ' versions':<24} bin")
    for entry in table:
        marker = ""
        if host is not None and entry.contains(host):
            marker = "  *" if entry.toolchain_version == recommended else "  +"
        span = f"{entry.min_host_version} - {entry.max_host_version}"
        safe_print(
            f"{str(entry.toolchain_version):<10} {span:<24} "
            f"{', '.join(entry.bin_paths)}{marker}"
        )

    if host is not None:
        safe_print(
            f"\n{config.host.name} {host}: install {table.recommendation(host)}"
        )

    return 0
