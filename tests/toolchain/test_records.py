"""
Tests for installation record backends.
"""

import json
import sys
import threading
from pathlib import Path
from unittest.mock import patch

import pytest
from filelock import FileLock

from toolchaincheck.core.exceptions import (
    RecordError,
    RecordLockTimeout,
    RecordNotFoundError,
)
from toolchaincheck.core.versions import Version
from toolchaincheck.toolchain.records import (
    InstallRecord,
    JsonRecordBackend,
    WindowsRegistryBackend,
)


class FakeKey:
    def __init__(self, children=None, values=None):
        self.children = children or {}
        self.values = values or {}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeWinreg:
    """Minimal stand-in for the winreg module."""

    HKEY_CURRENT_USER = "HKCU"
    HKEY_LOCAL_MACHINE = "HKLM"
    KEY_READ = 0x20019
    KEY_WOW64_32KEY = 0x0200

    def __init__(self, hives):
        self.hives = hives
        self.opened = []

    def OpenKey(self, parent, sub_key, reserved=0, access=KEY_READ):
        self.opened.append((parent, sub_key, access))
        node = self.hives.get(parent) if isinstance(parent, str) else parent
        if node is None:
            raise OSError("no such hive")
        for part in sub_key.split("\\"):
            if part not in node.children:
                raise FileNotFoundError(sub_key)
            node = node.children[part]
        return node

    def EnumKey(self, key, index):
        names = list(key.children)
        if index >= len(names):
            raise OSError("no more items")
        return names[index]

    def QueryValueEx(self, key, name):
        if name not in key.values:
            raise FileNotFoundError(name)
        return key.values[name], 1


def rtools_key(versions):
    """Build SOFTWARE\\R-core\\Rtools with one subkey per version."""
    rtools = FakeKey(
        {
            version: FakeKey(values={"InstallPath": path} if path else {})
            for version, path in versions.items()
        }
    )
    return FakeKey({"SOFTWARE": FakeKey({"R-core": FakeKey({"Rtools": rtools})})})


class TestWindowsRegistryBackend:
    """Test WindowsRegistryBackend against a fake registry."""

    def _records(self, fake, **kwargs):
        with patch.dict(sys.modules, {"winreg": fake}):
            return WindowsRegistryBackend(**kwargs).records()

    def test_reads_versions(self):
        fake = FakeWinreg({"HKCU": rtools_key({"3.5": "C:\\Rtools", "4.0": "C:\\rtools40"})})
        records = self._records(fake)
        assert [r.version for r in records] == [Version("3.5"), Version("4.0")]
        assert records[1].path == Path("C:\\rtools40")

    def test_reads_32bit_view(self):
        fake = FakeWinreg({"HKCU": rtools_key({"4.0": "C:\\rtools40"})})
        self._records(fake)
        parent, sub_key, access = fake.opened[0]
        assert sub_key == "SOFTWARE\\R-core\\Rtools"
        assert access & FakeWinreg.KEY_WOW64_32KEY

    def test_user_hive_wins(self):
        fake = FakeWinreg(
            {
                "HKCU": rtools_key({"4.0": "C:\\user\\rtools40"}),
                "HKLM": rtools_key({"3.5": "C:\\Rtools"}),
            }
        )
        records = self._records(fake)
        assert [str(r.version) for r in records] == ["4.0"]

    def test_falls_back_to_machine_hive(self):
        fake = FakeWinreg({"HKCU": FakeKey(), "HKLM": rtools_key({"3.5": "C:\\Rtools"})})
        records = self._records(fake)
        assert [str(r.version) for r in records] == ["3.5"]

    def test_no_key(self):
        fake = FakeWinreg({"HKCU": FakeKey(), "HKLM": FakeKey()})
        assert self._records(fake) == []

    def test_skips_missing_install_path(self):
        fake = FakeWinreg({"HKCU": rtools_key({"3.5": None, "4.0": "C:\\rtools40"})})
        assert [str(r.version) for r in self._records(fake)] == ["4.0"]

    def test_skips_non_version_subkeys(self):
        fake = FakeWinreg({"HKCU": rtools_key({"current": "C:\\x", "4.0": "C:\\rtools40"})})
        assert [str(r.version) for r in self._records(fake)] == ["4.0"]

    def test_unknown_hive_skipped(self):
        fake = FakeWinreg({"HKLM": rtools_key({"4.0": "C:\\rtools40"})})
        records = self._records(fake, hives=["HKEY_NOPE", "HKEY_LOCAL_MACHINE"])
        assert len(records) == 1

    def test_unavailable_platform(self):
        """Test a missing winreg module is a RecordError."""
        with patch.dict(sys.modules, {"winreg": None}):
            with pytest.raises(RecordError):
                WindowsRegistryBackend().records()


class TestJsonRecordBackend:
    """Test JsonRecordBackend."""

    def test_paths(self, records_file):
        backend = JsonRecordBackend(records_file)
        assert backend.records_path == records_file
        assert backend.lock_path == records_file.parent / "lock" / "installations.lock"

    def test_default_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TOOLCHAINCHECK_HOME", str(tmp_path))
        assert JsonRecordBackend().records_path == tmp_path / "installations.json"

    def test_missing_file_is_empty(self, records_file):
        backend = JsonRecordBackend(records_file)
        assert backend.records() == []
        assert backend.list_raw() == {}
        assert not records_file.exists()

    def test_register_and_read(self, records_file, tmp_path):
        backend = JsonRecordBackend(records_file)
        backend.register(Version("4.0"), tmp_path / "rtools40")

        assert backend.records() == [InstallRecord(tmp_path / "rtools40", Version("4.0"))]

        data = json.loads(records_file.read_text())
        assert data["version"] == 1
        assert data["installations"]["4.0"]["path"] == str(tmp_path / "rtools40")
        assert "registered" in data["installations"]["4.0"]

    def test_register_replaces(self, records_file, tmp_path):
        backend = JsonRecordBackend(records_file)
        backend.register(Version("4.0"), tmp_path / "old")
        backend.register(Version("4.0"), tmp_path / "new")
        assert [r.path for r in backend.records()] == [tmp_path / "new"]

    def test_unregister(self, records_file, tmp_path):
        backend = JsonRecordBackend(records_file)
        backend.register(Version("3.5"), tmp_path / "Rtools")
        backend.register(Version("4.0"), tmp_path / "rtools40")

        backend.unregister(Version("3.5"))

        assert [str(r.version) for r in backend.records()] == ["4.0"]

    def test_unregister_missing(self, records_file):
        backend = JsonRecordBackend(records_file)
        with pytest.raises(RecordNotFoundError) as exc_info:
            backend.unregister(Version("4.0"))
        assert exc_info.value.version == "4.0"

    def test_corrupt_file(self, records_file):
        records_file.parent.mkdir(parents=True)
        records_file.write_text("{not json")
        with pytest.raises(RecordError, match="Failed to load"):
            JsonRecordBackend(records_file).records()

    def test_wrong_structure_ignored(self, records_file):
        records_file.parent.mkdir(parents=True)
        records_file.write_text(json.dumps({"installations": []}))
        assert JsonRecordBackend(records_file).records() == []

    def test_malformed_entries_skipped(self, records_file):
        records_file.parent.mkdir(parents=True)
        records_file.write_text(
            json.dumps(
                {
                    "version": 1,
                    "installations": {
                        "not-a-version": {"path": "/x"},
                        "3.5": {},
                        "4.0": {"path": "/opt/rtools40"},
                    },
                }
            )
        )
        records = JsonRecordBackend(records_file).records()
        assert records == [InstallRecord(Path("/opt/rtools40"), Version("4.0"))]

    def test_lock_timeout(self, records_file, tmp_path):
        backend = JsonRecordBackend(records_file, lock_timeout=0.1)
        backend.lock_path.parent.mkdir(parents=True)

        held = threading.Event()
        release = threading.Event()

        def hold_lock():
            with FileLock(backend.lock_path):
                held.set()
                release.wait(5)

        holder = threading.Thread(target=hold_lock)
        holder.start()
        try:
            held.wait(5)
            with pytest.raises(RecordLockTimeout):
                backend.register(Version("4.0"), tmp_path)
        finally:
            release.set()
            holder.join()

    def test_concurrent_registrations(self, records_file, tmp_path):
        """Test registrations from several threads are all kept."""
        backend = JsonRecordBackend(records_file)
        versions = ["3.3", "3.4", "3.5", "4.0"]

        threads = [
            threading.Thread(
                target=backend.register, args=(Version(v), tmp_path / v)
            )
            for v in versions
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(str(r.version) for r in backend.records()) == versions
