"""Infrastructure: ``wasm-tools`` detection and the WIT decoder.

Binary classification happens in pure Python (:mod:`wkg.infra.wasm_binary`);
rendering a WIT package as text is delegated to the canonical printer in
``wasm-tools component wit``, fed through stdin.

Rules
-----
* Detection via :func:`shutil.which` only.
* No permanent PATH modification.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from wkg.core.models import DecodedWasm
from wkg.exceptions import DecodeError, WasmToolsNotFoundError
from wkg.infra.wasm_binary import classify

logger = logging.getLogger(__name__)

WASM_TOOLS: str = "wasm-tools"


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WasmToolsStatus:
    """Result of a ``wasm-tools`` detection probe.

    Attributes
    ----------
    found : bool
        Whether wasm-tools was located on PATH.
    path : Path | None
        Absolute path to the binary, or ``None``.
    version_hint : str
        Human-readable status string (e.g. ``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested shell commands for installing wasm-tools on the current
        platform.  Empty when it is already present.
    """

    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_wasm_tools() -> WasmToolsStatus:
    """Probe the system for a ``wasm-tools`` binary.

    Returns a :class:`WasmToolsStatus` regardless of whether it is
    present — the caller decides whether to abort or merely warn.
    """
    result = shutil.which(WASM_TOOLS)

    if result is not None:
        resolved = Path(result).resolve()
        return WasmToolsStatus(
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return WasmToolsStatus(
        found=False,
        path=None,
        version_hint="not found",
        install_commands=_platform_install_commands(),
    )


def require_wasm_tools() -> Path:
    """Locate wasm-tools or raise :class:`WasmToolsNotFoundError`."""
    status = detect_wasm_tools()
    if not status.found or status.path is None:
        raise WasmToolsNotFoundError(
            "wasm-tools is not installed or not on PATH.",
            hint=_install_hint(status.install_commands),
        )
    return status.path


def _install_hint(commands: tuple[str, ...]) -> str | None:
    if not commands:
        return None
    lines = ["Install wasm-tools using one of:"]
    lines.extend(f"  {cmd}" for cmd in commands)
    return "\n".join(lines)


def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "darwin":
        return (
            "brew install wasm-tools",
            "cargo install --locked wasm-tools",
        )
    if system in ("linux", "windows"):
        return (
            "cargo install --locked wasm-tools",
            "cargo binstall wasm-tools",
        )
    return ("See https://github.com/bytecodealliance/wasm-tools#installation",)


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------

class WasmToolsDecoder:
    """Concrete :class:`ComponentDecoder` using ``wasm-tools`` for printing.

    This class satisfies the :class:`~wkg.core.protocols.ComponentDecoder`
    protocol structurally — no explicit inheritance required.
    """

    def __init__(self, *, timeout: float = 60.0) -> None:
        self._timeout = timeout

    def decode(self, data: bytes) -> DecodedWasm:
        return DecodedWasm(kind=classify(data), data=data)

    def print_wit(self, decoded: DecodedWasm) -> str:
        """Render *decoded* with ``wasm-tools component wit``.

        Raises
        ------
        DecodeError
            When wasm-tools is missing, times out, or rejects the input.
        """
        try:
            executable = require_wasm_tools()
        except WasmToolsNotFoundError as exc:
            raise DecodeError(str(exc), hint=exc.hint) from exc

        command = [str(executable), "component", "wit"]
        logger.debug("running %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                input=decoded.data,
                capture_output=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise DecodeError(f"wasm-tools timed out after {self._timeout}s") from exc
        except OSError as exc:
            raise DecodeError(f"Failed to run wasm-tools: {exc}") from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise DecodeError(
                f"wasm-tools could not print WIT: {stderr or f'exit code {completed.returncode}'}",
            )

        try:
            return completed.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("wasm-tools produced non UTF-8 output") from exc
