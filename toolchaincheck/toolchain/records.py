"""
Persistent records of installed toolchains.

Two backends provide ``{path, version}`` records to the registry probe:

- :class:`WindowsRegistryBackend` reads the keys toolchain installers write
  (``HKCU``/``HKLM\\SOFTWARE\\R-core\\Rtools\\<version>\\InstallPath``).
- :class:`JsonRecordBackend` keeps records in a JSON file in the user data
  directory, written under a file lock so concurrent processes never see a
  partial file.

Records are claims made at install time; the installation may have been
deleted or upgraded since.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from filelock import FileLock, Timeout

from toolchaincheck.core.directory import get_records_file
from toolchaincheck.core.exceptions import (
    InvalidVersionError,
    RecordError,
    RecordLockTimeout,
    RecordNotFoundError,
)
from toolchaincheck.core.filesystem import atomic_write
from toolchaincheck.core.versions import Version

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_KEY = "SOFTWARE\\R-core\\Rtools"
DEFAULT_HIVES = ("HKEY_CURRENT_USER", "HKEY_LOCAL_MACHINE")


@dataclass(frozen=True)
class InstallRecord:
    """One recorded installation."""

    path: Path
    version: Version


class RecordBackend(ABC):
    """Source of installation records."""

    name = "records"

    @abstractmethod
    def records(self) -> List[InstallRecord]:
        """
        Enumerate installation records.

        Raises:
            RecordError: If the underlying store cannot be read
        """
        pass


class WindowsRegistryBackend(RecordBackend):
    """
    Installation records from the Windows registry.

    Each subkey of ``key`` is named after a toolchain version and holds an
    ``InstallPath`` value. Hives are tried in order and the first one that
    has the key wins, matching how installers write either per-user or
    machine-wide. The 32-bit registry view is read because the installers
    are 32-bit.
    """

    name = "windows-registry"

    def __init__(
        self,
        key: str = DEFAULT_REGISTRY_KEY,
        hives: Sequence[str] = DEFAULT_HIVES,
        value_name: str = "InstallPath",
    ):
        self.key = key
        self.hives = tuple(hives)
        self.value_name = value_name

    def records(self) -> List[InstallRecord]:
        try:
            import winreg
        except ImportError as e:
            raise RecordError("Windows registry is not available on this platform") from e

        for hive_name in self.hives:
            hive = getattr(winreg, hive_name, None)
            if hive is None:
                logger.debug(f"Unknown registry hive: {hive_name}")
                continue

            try:
                root = winreg.OpenKey(
                    hive, self.key, 0, winreg.KEY_READ | winreg.KEY_WOW64_32KEY
                )
            except OSError:
                logger.debug(f"Registry key not found: {hive_name}\\{self.key}")
                continue

            with root:
                return self._read_versions(winreg, root, hive_name)

        return []

    def _read_versions(self, winreg, root, hive_name: str) -> List[InstallRecord]:
        found = []
        index = 0
        while True:
            try:
                version_name = winreg.EnumKey(root, index)
            except OSError:
                break
            index += 1

            try:
                with winreg.OpenKey(root, version_name) as subkey:
                    install_path, _ = winreg.QueryValueEx(subkey, self.value_name)
            except OSError:
                logger.debug(
                    f"No {self.value_name} for {hive_name}\\{self.key}\\{version_name}"
                )
                continue

            try:
                version = Version(version_name)
            except InvalidVersionError:
                logger.debug(f"Skipping registry key with non-version name: {version_name}")
                continue

            path = Path(os.path.normpath(str(install_path)))
            logger.debug(f"Found {path} for {version_name}")
            found.append(InstallRecord(path=path, version=version))

        return found


class JsonRecordBackend(RecordBackend):
    """
    Installation records kept in a JSON file.

    Example:
        >>> backend = JsonRecordBackend()
        >>> backend.register(Version("4.0"), Path("C:/rtools40"))
        >>> [str(r.version) for r in backend.records()]
        ['4.0']
    """

    name = "record-file"

    def __init__(self, records_path: Optional[Path] = None, lock_timeout: int = 30):
        """
        Initialize backend.

        Args:
            records_path: Path to installations.json (default: user data dir)
            lock_timeout: Timeout in seconds for acquiring file lock
        """
        self.records_path = Path(records_path) if records_path else get_records_file()
        self.lock_path = self.records_path.parent / "lock" / "installations.lock"
        self.lock_timeout = lock_timeout

    def _empty(self) -> dict:
        return {"version": 1, "installations": {}}

    def _load(self) -> dict:
        if not self.records_path.exists():
            return self._empty()

        try:
            with open(self.records_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise RecordError(f"Failed to load installation records: {e}") from e

        if not isinstance(data, dict) or not isinstance(
            data.get("installations"), dict
        ):
            logger.warning(f"Invalid record file format, ignoring: {self.records_path}")
            return self._empty()

        return data

    def _save(self, data: dict):
        try:
            atomic_write(self.records_path, json.dumps(data, indent=2, ensure_ascii=False))
        except OSError as e:
            raise RecordError(f"Failed to save installation records: {e}") from e

    @contextmanager
    def _lock(self):
        """
        Exclusive lock on the record file.

        Raises:
            RecordLockTimeout: If lock cannot be acquired within timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self.lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                yield
        except Timeout as e:
            raise RecordLockTimeout(
                f"Could not acquire record lock within {self.lock_timeout} seconds"
            ) from e

    def records(self) -> List[InstallRecord]:
        if not self.records_path.exists():
            return []

        with self._lock():
            data = self._load()

        found = []
        for version_name, entry in data["installations"].items():
            try:
                version = Version(version_name)
                path = Path(entry["path"])
            except (InvalidVersionError, KeyError, TypeError):
                logger.debug(f"Skipping malformed record: {version_name}")
                continue
            found.append(InstallRecord(path=path, version=version))
        return found

    def register(self, version: Version, path: Path):
        """Record (or replace) the installation of ``version`` at ``path``."""
        with self._lock():
            data = self._load()
            data["installations"][str(version)] = {
                "path": str(Path(path)),
                "registered": datetime.now().isoformat(),
            }
            self._save(data)

        logger.info(f"Registered installation: {version} at {path}")

    def unregister(self, version: Version):
        """
        Remove the record for ``version``.

        Raises:
            RecordNotFoundError: If no record exists for ``version``
        """
        with self._lock():
            data = self._load()
            if str(version) not in data["installations"]:
                raise RecordNotFoundError(str(version))
            del data["installations"][str(version)]
            self._save(data)

        logger.info(f"Unregistered installation: {version}")

    def list_raw(self) -> Dict[str, dict]:
        """Raw record entries keyed by version, including registration time."""
        if not self.records_path.exists():
            return {}
        with self._lock():
            return dict(self._load()["installations"])


__all__ = [
    "InstallRecord",
    "RecordBackend",
    "WindowsRegistryBackend",
    "JsonRecordBackend",
    "DEFAULT_REGISTRY_KEY",
    "DEFAULT_HIVES",
]
