"""
Records command - manage the installation record file.

Only the JSON record file is writable; Windows registry entries belong to
the toolchain installers and are listed read-only.
"""

import logging
from pathlib import Path

from toolchaincheck.cli.utils import load_cli_config, print_error, safe_print
from toolchaincheck.core.exceptions import InvalidVersionError, RecordError
from toolchaincheck.core.versions import Version
from toolchaincheck.service import build_record_backends
from toolchaincheck.toolchain.installed import InstalledVersionReader
from toolchaincheck.toolchain.records import JsonRecordBackend

logger = logging.getLogger(__name__)


def _record_file_backend(config) -> JsonRecordBackend:
    records_file = config.registry.records_file
    return JsonRecordBackend(Path(records_file) if records_file else None)


def run_list(args) -> int:
    """
    List recorded installations from every backend.

    Returns:
        Exit code (0 for success)
    """
    config = load_cli_config(args)

    total = 0
    for backend in build_record_backends(config):
        try:
            records = backend.records()
        except RecordError as e:
            logger.debug(f"{backend.name} unavailable: {e}")
            continue

        if not records:
            continue

        safe_print(f"{backend.name}:")
        for record in records:
            safe_print(f"  {str(record.version):<8} {record.path}")
        total += len(records)

    if total == 0:
        safe_print("No installations recorded.")
    return 0


def run_add(args) -> int:
    """
    Record an installation in the record file.

    The directory must contain the given version unless ``--force`` is set.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    config = load_cli_config(args)

    try:
        version = Version(args.toolchain_version)
    except InvalidVersionError as e:
        print_error(str(e))
        return 1

    path = Path(args.path).expanduser().resolve()
    reader = InstalledVersionReader(
        product=config.product,
        stamp_file=config.markers.stamp,
        version_file=config.markers.version_file,
    )
    actual = reader.actual_version(path)
    if actual != version and not getattr(args, "force", False):
        found = f"{config.product} {actual}" if actual else f"no {config.product} installation"
        print_error(
            f"{path} contains {found}, not {config.product} {version}",
            "Use --force to record it anyway",
        )
        return 1

    _record_file_backend(config).register(version, path)
    safe_print(f"✅ Recorded {config.product} {version} at {path}")
    return 0


def run_remove(args) -> int:
    """
    Remove an installation from the record file.

    Returns:
        Exit code (0 for success, 1 if no such record)
    """
    config = load_cli_config(args)

    try:
        version = Version(args.toolchain_version)
    except InvalidVersionError as e:
        print_error(str(e))
        return 1

    try:
        _record_file_backend(config).unregister(version)
    except RecordError as e:
        print_error(str(e))
        return 1

    safe_print(f"✅ Removed record for {config.product} {version}")
    return 0


def run(args) -> int:
    """
    Dispatch records sub-commands.

    Args:
        args: Parsed arguments with records_command field

    Returns:
        Exit code from sub-command handler
    """
    handlers = {
        "list": run_list,
        "add": run_add,
        "remove": run_remove,
    }

    handler = handlers.get(getattr(args, "records_command", None))
    if handler is None:
        print_error("No records sub-command specified", "Use: list, add or remove")
        return 1

    return handler(args)
