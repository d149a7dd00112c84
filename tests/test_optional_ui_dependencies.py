"""Regression tests for the optional CLI UI dependency (rich).

These tests verify bootstrap commands are resilient when rich is missing,
and ``get`` fails cleanly only when the progress display is actually
needed.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from wkg.cli import exit_codes
from wkg.cli.app import main
from wkg.exceptions import EnvironmentError


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)
    monkeypatch.setitem(sys.modules, "rich.logging", None)
    monkeypatch.setitem(sys.modules, "rich.table", None)
    monkeypatch.setitem(sys.modules, "rich.progress", None)


def test_help_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_version_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0


def test_doctor_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    code = main(["-v", "doctor"])
    assert code in (exit_codes.SUCCESS, exit_codes.GENERAL_ERROR)


def test_get_errors_cleanly_when_rich_missing(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path,
) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(EnvironmentError, match="rich is not installed"):
        main(["get", "wasi:cli@0.2.0", "-o", f"{tmp_path}/"])
    assert list(tmp_path.iterdir()) == []
