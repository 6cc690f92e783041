"""
Tests for the ToolchainService entry point.

These run the real probes against fake installations in tmp_path; only the
platform check and the host version are pinned.
"""

import json
import logging
from pathlib import Path

import pytest

import toolchaincheck
from toolchaincheck.config.parser import HostConfig, RegistryConfig, ToolchainCheckConfig
from toolchaincheck.core.exceptions import ToolchainRequiredError
from toolchaincheck.core.versions import Version
from toolchaincheck.service import (
    ToolchainService,
    build_record_backends,
    build_table,
    get_default_service,
    set_default_service,
)
from toolchaincheck.toolchain.records import JsonRecordBackend, WindowsRegistryBackend
from toolchaincheck.toolchain.resolver import FailureReason
from toolchaincheck.toolchain.sinks import RecordingDiagnosticSink


def make_config(host_version="4.3.1", records_file=None):
    return ToolchainCheckConfig(
        host=HostConfig(version=host_version, config_args=[]),
        registry=RegistryConfig(windows_registry=False, records_file=records_file),
    )


@pytest.fixture
def sink():
    return RecordingDiagnosticSink()


@pytest.fixture
def make_service(records_file, sink):
    def _make(path_dirs=(), host_version="4.3.1", is_target=lambda: True):
        dirs = [Path(d) for d in path_dirs]
        return ToolchainService(
            make_config(host_version, str(records_file)),
            sink=sink,
            search_paths=lambda: dirs,
            is_target=is_target,
        )

    return _make


class TestHasToolchain:
    """Test ToolchainService.has_toolchain."""

    def test_found_on_path(self, make_service, rtools40, sink):
        service = make_service([rtools40 / "usr" / "bin"])
        assert service.has_toolchain()
        assert sink.warnings == []
        assert service.cache.resolved_path == str(rtools40)

    def test_wrong_version_on_path(self, make_service, rtools40, sink):
        """Test Rtools 4.0 under usr/bin is recognized as too new for R 3.6.3."""
        service = make_service([rtools40 / "usr" / "bin"], host_version="3.6.3")

        assert not service.has_toolchain()
        verdict = service.resolve()
        assert verdict.reason == FailureReason.WRONG_VERSION_ON_PATH
        assert verdict.candidate.path == rtools40
        assert verdict.candidate.version == Version("4.0")
        assert "Rtools 4.0 found on the path" in sink.warnings[0]
        assert service.toolchain_path() == []

    def test_not_installed_warns(self, make_service, sink):
        service = make_service()
        assert not service.has_toolchain()
        assert len(sink.warnings) == 1
        assert "is not currently installed" in sink.warnings[0]
        assert "Rtools 4.0" in sink.warnings[0]

    def test_found_in_records(self, make_service, records_file, rtools35):
        JsonRecordBackend(records_file).register(Version("3.5"), rtools35)
        service = make_service(host_version="3.6.3")
        assert service.has_toolchain()
        assert service.resolve().path == rtools35

    def test_cached_until_debug(self, make_service, records_file, rtools40):
        """Test the first answer sticks until a debug call re-probes."""
        service = make_service()
        assert not service.has_toolchain()

        JsonRecordBackend(records_file).register(Version("4.0"), rtools40)

        assert not service.has_toolchain()
        assert service.has_toolchain(debug=True)

    def test_debug_logs_probe_notes(self, records_file, caplog):
        """Test debug=True routes probe notes through the default sink."""
        service = ToolchainService(
            make_config(records_file=str(records_file)),
            search_paths=lambda: [],
            backends=[],
            is_target=lambda: True,
        )

        def probe_notes():
            return [
                r.getMessage()
                for r in caplog.records
                if r.name == "toolchaincheck" and "probe found" in r.getMessage()
            ]

        with caplog.at_level(logging.DEBUG):
            service.has_toolchain()
            assert probe_notes() == []

            service.has_toolchain(debug=True)
            assert "path probe found 0 candidate(s)" in probe_notes()

        assert service.sink.enabled_debug is False

    def test_host_version_unknown(self, tmp_path, records_file, sink):
        """Test a missing host executable gives a failed check, not an exception."""
        config = ToolchainCheckConfig(
            host=HostConfig(command=str(tmp_path / "no-such-R"), config_args=[]),
            registry=RegistryConfig(windows_registry=False, records_file=str(records_file)),
        )
        service = ToolchainService(
            config, sink=sink, search_paths=lambda: [], is_target=lambda: True
        )

        assert not service.has_toolchain()
        assert service.resolve().reason == FailureReason.HOST_VERSION_UNKNOWN
        assert "the R version is unknown" in sink.warnings[0]
        with pytest.raises(ToolchainRequiredError):
            service.require_compatible_toolchain()

    def test_drifted_record(self, make_service, records_file, rtools35, sink):
        JsonRecordBackend(records_file).register(Version("3.4"), rtools35)
        service = make_service(host_version="3.5.0")

        assert not service.has_toolchain()
        assert service.resolve().reason == FailureReason.VERSION_DRIFT
        assert "now that directory contains Rtools 3.5" in sink.warnings[0]

    def test_not_applicable_silent(self, make_service, sink):
        service = make_service(is_target=lambda: False)
        assert not service.has_toolchain()
        assert sink.warnings == []


class TestToolchainPath:
    """Test ToolchainService.toolchain_path."""

    def test_table_bin_paths(self, make_service, rtools40):
        service = make_service([rtools40 / "usr" / "bin"])
        assert service.toolchain_path() == [
            rtools40 / "usr/bin",
            rtools40 / "ucrt64/bin",
        ]

    def test_unversioned(self, make_service, make_installation):
        root = make_installation("mingw", None, stamp=False, bin_dir="bin")
        service = make_service([root / "bin"])
        assert service.toolchain_path() == [root]

    def test_nothing_resolved(self, make_service):
        assert make_service().toolchain_path() == []


class TestRequireCompatibleToolchain:
    """Test ToolchainService.require_compatible_toolchain."""

    def test_passes(self, make_service, rtools40):
        assert make_service([rtools40 / "usr" / "bin"]).require_compatible_toolchain()

    def test_raises(self, make_service):
        with pytest.raises(ToolchainRequiredError) as exc_info:
            make_service().require_compatible_toolchain()
        assert exc_info.value.product == "Rtools"
        assert "Rtools is not installed." in str(exc_info.value)
        assert "Please download and install Rtools 4.0" in exc_info.value.detail

    def test_wrong_version_on_path(self, make_service, rtools35):
        with pytest.raises(ToolchainRequiredError, match="remove the incompatible"):
            make_service([rtools35 / "bin"]).require_compatible_toolchain()

    def test_not_applicable_passes(self, make_service):
        assert make_service(is_target=lambda: False).require_compatible_toolchain()


class TestBuilders:
    """Test profile-driven construction."""

    def test_inline_table(self):
        config = ToolchainCheckConfig(
            product="Tool",
            compatibility=[{"version": "1", "host_min": "1.0", "host_max": "2.0"}],
        )
        table = build_table(config)
        assert table.product == "Tool"
        assert len(table) == 1

    def test_table_file(self, tmp_path):
        table_file = tmp_path / "table.json"
        table_file.write_text(
            json.dumps(
                {"compatibility": [{"version": "2", "host_min": "1", "host_max": "3"}]}
            )
        )
        config = ToolchainCheckConfig(product="Tool", table_file=str(table_file))
        table = build_table(config)
        assert table.product == "Tool"
        assert table.range_for("2") is not None

    def test_builtin_table(self):
        assert len(build_table(ToolchainCheckConfig())) == 13

    def test_backends_registry_first(self, records_file):
        config = ToolchainCheckConfig(registry=RegistryConfig(records_file=str(records_file)))
        backends = build_record_backends(config)
        assert isinstance(backends[0], WindowsRegistryBackend)
        assert isinstance(backends[1], JsonRecordBackend)
        assert backends[1].records_path == records_file

    def test_backends_without_registry(self):
        backends = build_record_backends(make_config())
        assert [type(b) for b in backends] == [JsonRecordBackend]


class TestDefaultService:
    """Test module-level helpers."""

    def test_uses_injected_service(self, make_service, rtools40):
        service = make_service([rtools40 / "usr" / "bin"])
        set_default_service(service)

        assert toolchaincheck.has_toolchain()
        assert toolchaincheck.find_toolchain()
        assert toolchaincheck.setup_toolchain()
        assert toolchaincheck.toolchain_path()[0] == rtools40 / "usr/bin"
        assert toolchaincheck.require_compatible_toolchain()

    def test_lazily_created_once(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        service = get_default_service()
        assert isinstance(service, ToolchainService)
        assert get_default_service() is service

    def test_reads_cwd_config(self, tmp_path, monkeypatch):
        (tmp_path / "toolchaincheck.yaml").write_text("product: Custom\n")
        monkeypatch.chdir(tmp_path)
        assert get_default_service().config.product == "Custom"
