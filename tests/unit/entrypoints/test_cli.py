# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Tests for the memalloc CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from memalloc import __version__
from memalloc.adapters.config import settings as settings_module
from memalloc.adapters.config.settings import reload_settings
from memalloc.entrypoints.cli import app

pytestmark = pytest.mark.integration

runner = CliRunner()

DEMO_DIR = Path(__file__).resolve().parents[3] / "demo"

QUIET = ["--log-level", "CRITICAL"]


class TestRunCommand:
    def test_text_report(self, write_request_file) -> None:
        path = write_request_file(
            "100", "REQUEST A 30", "REQUEST B 40", "RELEASE A", "REQUEST C 50", "RELEASE B"
        )

        result = runner.invoke(app, ["run", str(path), *QUIET])

        assert result.exit_code == 0
        assert f"Reading from: {path}" in result.stdout
        assert "REQUEST C 50 KB → FAILED (Insufficient Memory)" in result.stdout
        assert "Block 1: [0-99]  FREE (100 KB)" in result.stdout
        assert "Successful Allocations: 2" in result.stdout
        assert "Failed Allocations:     1" in result.stdout

    def test_json_report(self, write_request_file) -> None:
        path = write_request_file("100", "REQUEST A 30")

        result = runner.invoke(app, ["run", str(path), "--format", "json", *QUIET])

        assert result.exit_code == 0
        document = json.loads(result.stdout)
        assert document["memory_map"][0]["owner"] == "A"
        assert document["statistics"]["allocated"] == 30

    def test_yaml_scenario(self) -> None:
        result = runner.invoke(
            app,
            ["run", str(DEMO_DIR / "scenarios" / "coalesce_chain.yaml"), "-f", "json", *QUIET],
        )

        assert result.exit_code == 0
        document = json.loads(result.stdout)
        assert document["memory_map"] == [
            {"index": 1, "start": 0, "end": 89, "size": 90, "state": "free", "owner": None}
        ]

    def test_lenient_by_default(self, write_request_file) -> None:
        path = write_request_file("100", "REQUEST A lots", "REQUEST B 10")

        result = runner.invoke(app, ["run", str(path), "-f", "json", *QUIET])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["statistics"]["successful_allocations"] == 1

    def test_strict_aborts_on_malformed_line(self, write_request_file) -> None:
        path = write_request_file("100", "REQUEST A lots", "REQUEST B 10")

        result = runner.invoke(app, ["run", str(path), "--strict", *QUIET])

        assert result.exit_code == 1
        assert "size must be an integer" in result.output

    def test_strict_from_settings(self, write_request_file, monkeypatch) -> None:
        monkeypatch.setenv("MEMALLOC_SIM_STRICT_PARSING", "true")
        reload_settings()
        path = write_request_file("100", "DEFRAG")

        result = runner.invoke(app, ["run", str(path), *QUIET])

        assert result.exit_code == 1

    def test_unit_from_settings(self, write_request_file, monkeypatch) -> None:
        monkeypatch.setenv("MEMALLOC_SIM_UNIT", "MB")
        reload_settings()
        path = write_request_file("8", "REQUEST A 2")

        result = runner.invoke(app, ["run", str(path), *QUIET])

        assert result.exit_code == 0
        assert "REQUEST A 2 MB → SUCCESS" in result.stdout

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", str(tmp_path / "missing.txt"), *QUIET])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_bad_header(self, write_request_file) -> None:
        path = write_request_file("plenty")

        result = runner.invoke(app, ["run", str(path), *QUIET])

        assert result.exit_code == 1
        assert "total memory must be an integer" in result.output

    def test_invalid_scenario(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("total_memory: 0\n")

        result = runner.invoke(app, ["run", str(path), *QUIET])

        assert result.exit_code == 1

    def test_check_invariants_flag(self, write_request_file) -> None:
        path = write_request_file("100", "REQUEST A 30", "RELEASE A")

        result = runner.invoke(app, ["run", str(path), "--check-invariants", *QUIET])

        assert result.exit_code == 0

    def test_non_utf8_request_file(self, tmp_path: Path) -> None:
        path = tmp_path / "binary.txt"
        path.write_bytes(b"100\nREQUEST \xff 10\n")

        result = runner.invoke(app, ["run", str(path), *QUIET])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "not a UTF-8 text file" in result.output

    def test_non_utf8_scenario(self, tmp_path: Path) -> None:
        path = tmp_path / "binary.yaml"
        path.write_bytes(b"total_memory: 100\nrequests:\n  - allocate: \xff\n    size: 10\n")

        result = runner.invoke(app, ["run", str(path), *QUIET])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "not a UTF-8 text file" in result.output

    def test_invalid_setting_in_environment(self, write_request_file, monkeypatch) -> None:
        monkeypatch.setattr(settings_module, "_settings", None)
        monkeypatch.setenv("MEMALLOC_LOG_LEVEL", "verbose")
        path = write_request_file("100", "REQUEST A 30")

        result = runner.invoke(app, ["run", str(path)])

        assert result.exit_code == 1
        assert "Error: invalid configuration" in result.output


class TestInfoCommands:
    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_config(self) -> None:
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "Unit: KB" in result.stdout
        assert "Strict parsing: False" in result.stdout
        assert "Level: WARNING" in result.stdout

    def test_config_with_invalid_setting(self, monkeypatch) -> None:
        monkeypatch.setattr(settings_module, "_settings", None)
        monkeypatch.setenv("MEMALLOC_SIM_STRICT_PARSING", "sometimes")

        result = runner.invoke(app, ["config"])

        assert result.exit_code == 1
        assert "Error: invalid configuration" in result.output
