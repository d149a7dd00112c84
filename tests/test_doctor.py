"""Tests for the ``wkg doctor`` command (cli/doctor.py).

wasm-tools detection is mocked — no system dependency, no internet.

Coverage:
* Doctor runs and returns SUCCESS when everything is present.
* A missing wasm-tools is a warning, not a failure.
* Doctor returns GENERAL_ERROR when the Python version check fails.
* Individual check functions return correct tuples.
* CLI routing dispatches to ``run_doctor``.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from wkg.cli import exit_codes
from wkg.infra.wasm_tools import WasmToolsStatus


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _wasm_tools_found() -> WasmToolsStatus:
    return WasmToolsStatus(
        found=True,
        path=Path("/usr/bin/wasm-tools"),
        version_hint="found at /usr/bin/wasm-tools",
        install_commands=(),
    )


def _wasm_tools_missing() -> WasmToolsStatus:
    return WasmToolsStatus(
        found=False,
        path=None,
        version_hint="not found",
        install_commands=("cargo install --locked wasm-tools",),
    )


# ---------------------------------------------------------------------------
# Individual check functions
# ---------------------------------------------------------------------------

class TestPythonVersionCheck:
    def test_returns_tuple(self) -> None:
        from wkg.cli.doctor import _python_version_check

        label, value, status = _python_version_check()
        assert label == "Python"
        assert isinstance(value, str)
        assert "OK" in status


class TestRequestsCheck:
    def test_installed(self) -> None:
        from wkg.cli.doctor import _requests_version_check

        label, _value, status = _requests_version_check()
        assert label == "requests"
        assert "OK" in status

    @patch.dict("sys.modules", {"requests": None})
    def test_not_installed(self) -> None:
        from wkg.cli.doctor import _requests_version_check

        _label, value, status = _requests_version_check()
        assert value == "NOT INSTALLED"
        assert "FAIL" in status


class TestWasmToolsCheck:
    @patch("wkg.cli.doctor.detect_wasm_tools")
    def test_found(self, mock_detect: MagicMock) -> None:
        from wkg.cli.doctor import _wasm_tools_check

        mock_detect.return_value = _wasm_tools_found()
        label, value, status = _wasm_tools_check()
        assert label == "wasm-tools"
        assert value.endswith("wasm-tools")
        assert "OK" in status

    @patch("wkg.cli.doctor.detect_wasm_tools")
    def test_missing(self, mock_detect: MagicMock) -> None:
        from wkg.cli.doctor import _wasm_tools_check

        mock_detect.return_value = _wasm_tools_missing()
        _label, _value, status = _wasm_tools_check()
        assert "WARN" in status


class TestConfigCheck:
    def test_reports_existing_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        from wkg.cli.doctor import _config_check

        path = tmp_path / "config.toml"
        path.write_text('default_registry = "example.com"\n', encoding="utf-8")
        monkeypatch.setenv("WKG_CONFIG_FILE", str(path))

        _label, value, _status = _config_check()
        assert value == str(path)

    def test_defaults_when_absent(self) -> None:
        from wkg.cli.doctor import _config_check

        _label, value, status = _config_check()
        assert value == "none (defaults)"
        assert "OK" in status


class TestOsCheck:
    @patch("wkg.cli.doctor.platform.machine", return_value="arm64")
    @patch("wkg.cli.doctor.platform.release", return_value="23.4.0")
    @patch("wkg.cli.doctor.platform.system", return_value="Darwin")
    def test_darwin_is_displayed_as_macos(
        self,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
    ) -> None:
        from wkg.cli.doctor import _os_check

        _label, value, _status = _os_check()
        assert value == "macOS 23.4.0 (arm64)"


class TestWkgVersionCheck:
    def test_returns_current_version(self) -> None:
        from wkg.cli.doctor import _wkg_version_check
        from wkg.version import __version__

        label, value, status = _wkg_version_check()
        assert label == "wkg"
        assert value == __version__
        assert "OK" in status


# ---------------------------------------------------------------------------
# run_doctor integration
# ---------------------------------------------------------------------------

class TestRunDoctor:
    @patch("wkg.cli.doctor.detect_wasm_tools")
    def test_all_pass_returns_success(self, mock_detect: MagicMock) -> None:
        from wkg.cli.doctor import run_doctor

        mock_detect.return_value = _wasm_tools_found()
        assert run_doctor() == exit_codes.SUCCESS

    @patch("wkg.cli.doctor.detect_wasm_tools")
    def test_wasm_tools_missing_still_succeeds(
        self, mock_detect: MagicMock, capsys: pytest.CaptureFixture[str],
    ) -> None:
        from wkg.cli.doctor import run_doctor

        mock_detect.return_value = _wasm_tools_missing()
        assert run_doctor() == exit_codes.SUCCESS
        assert "cargo install --locked wasm-tools" in capsys.readouterr().err

    @patch("wkg.cli.doctor._python_version_check", return_value=("Python", "3.8.0", "[red]FAIL[/red]"))
    @patch("wkg.cli.doctor.detect_wasm_tools")
    def test_failed_check_returns_error(self, mock_detect: MagicMock, _mock_py: MagicMock) -> None:
        from wkg.cli.doctor import run_doctor

        mock_detect.return_value = _wasm_tools_found()
        assert run_doctor() == exit_codes.GENERAL_ERROR

    @patch("wkg.cli.doctor.detect_wasm_tools")
    @patch.dict("sys.modules", {"rich": None, "rich.table": None, "rich.console": None})
    def test_plain_output_without_rich(
        self,
        mock_detect: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        from wkg.cli.doctor import run_doctor

        mock_detect.return_value = _wasm_tools_found()
        assert run_doctor() == exit_codes.SUCCESS

        err = capsys.readouterr().err
        assert "wkg doctor" in err
        assert "All checks passed." in err
        assert "[green]" not in err


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestDoctorRouting:
    @patch("wkg.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_dispatches(self, mock_run: MagicMock) -> None:
        from wkg.cli.app import main

        assert main(["doctor"]) == exit_codes.SUCCESS
        mock_run.assert_called_once()

    @patch("wkg.cli.doctor.run_doctor", return_value=exit_codes.GENERAL_ERROR)
    def test_doctor_failure_propagates(self, _mock_run: MagicMock) -> None:
        from wkg.cli.app import main

        assert main(["doctor"]) == exit_codes.GENERAL_ERROR
