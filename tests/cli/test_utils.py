"""
Tests for shared CLI utilities.
"""

from argparse import Namespace
from unittest.mock import patch

from toolchaincheck.cli.utils import (
    build_service,
    load_cli_config,
    print_error,
    print_warning,
    safe_print,
)
from toolchaincheck.toolchain.sinks import RecordingDiagnosticSink


class TestOutput:
    """Test output helpers."""

    def test_print_error(self, capsys):
        print_error("failed", "details here")
        err = capsys.readouterr().err
        assert "ERROR: failed" in err
        assert "  details here" in err

    def test_print_warning(self, capsys):
        print_warning("careful")
        assert capsys.readouterr().err == "WARNING: careful\n"

    def test_safe_print_falls_back(self, capsys):
        calls = []

        def fake_print(message, file=None):
            calls.append(message)
            if len(calls) == 1:
                raise UnicodeEncodeError("ascii", message, 0, 1, "unsupported")

        with patch("builtins.print", side_effect=fake_print):
            safe_print("✅ ok ❌ bad")

        assert calls[1] == "[OK] ok [ERROR] bad"


class TestServiceConstruction:
    """Test config and service helpers."""

    def test_load_explicit_config(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("product: Custom\n")
        assert load_cli_config(Namespace(config=config_file)).product == "Custom"

    def test_load_default_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_cli_config(Namespace(config=None)).product == "Rtools"

    def test_build_service_uses_sink(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        sink = RecordingDiagnosticSink()
        service = build_service(Namespace(config=None), sink=sink)
        assert service.sink is sink
