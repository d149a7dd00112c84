"""``wkg doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment satisfies wkg's requirements.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError, version

from wkg.cli import exit_codes
from wkg.cli.console import console
from wkg.infra.config_file import default_config_path
from wkg.infra.wasm_tools import detect_wasm_tools
from wkg.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _requests_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the requests row."""
    try:
        import requests
    except ImportError:
        return "requests", "NOT INSTALLED", "[red]FAIL[/red]"
    return "requests", getattr(requests, "__version__", "unknown"), "[green]OK[/green]"


def _rich_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the rich row."""
    try:
        return "rich", version("rich"), "[green]OK[/green]"
    except PackageNotFoundError:
        return "rich", "NOT INSTALLED", "[yellow]WARN[/yellow]"


def _wasm_tools_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the wasm-tools row."""
    status_obj = detect_wasm_tools()
    if status_obj.found:
        path_str = str(status_obj.path) if status_obj.path else "found"
        return "wasm-tools", path_str, "[green]OK[/green]"
    return "wasm-tools", "not found", "[yellow]WARN[/yellow]"


def _config_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the config-file row."""
    path = default_config_path()
    if path.is_file():
        return "config", str(path), "[green]OK[/green]"
    return "config", "none (defaults)", "[green]OK[/green]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _wkg_version_check() -> tuple[str, str, str]:
    return "wkg", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "WARN" in status:
        return "WARN"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nwkg doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<32} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _wkg_version_check(),
        _python_version_check(),
        _requests_version_check(),
        _rich_check(),
        _wasm_tools_check(),
        _config_check(),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
        from rich.text import Text
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="wkg doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, Text(value), status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    # wasm-tools is only needed to print WIT text.
    wasm_tools = detect_wasm_tools()
    if not wasm_tools.found and wasm_tools.install_commands:
        console.print("[yellow]wasm-tools is not installed; WIT output is unavailable.[/yellow]")
        console.print("Install using one of the following commands:\n")
        for cmd in wasm_tools.install_commands:
            console.print(f"  [bold]{cmd}[/bold]")
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
