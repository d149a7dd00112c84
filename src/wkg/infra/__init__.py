"""Infrastructure layer — external system integration.

This layer wraps all interaction with registries (HTTP), the
``wasm-tools`` executable, and the user's config file.  Every raw
third-party exception must be caught here and re-raised as a
:class:`~wkg.exceptions.WkgError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from wkg.infra.config_file import build_client_config, load_config_file
from wkg.infra.oci_registry import OciRegistryClient
from wkg.infra.wasm_tools import (
    WasmToolsDecoder,
    WasmToolsStatus,
    detect_wasm_tools,
    require_wasm_tools,
)

__all__: list[str] = [
    "OciRegistryClient",
    "WasmToolsDecoder",
    "WasmToolsStatus",
    "build_client_config",
    "detect_wasm_tools",
    "load_config_file",
    "require_wasm_tools",
]
