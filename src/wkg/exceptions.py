"""Custom exception hierarchy for wkg.

All exceptions that cross layer boundaries must inherit from
:class:`WkgError`.  Raw third-party exceptions (e.g. from requests or a
subprocess) must NEVER propagate beyond the infrastructure layer — they
must be caught and re-raised as a typed subclass defined here.

Hierarchy
---------
WkgError
├── InvalidReferenceError
├── NoReleasesFoundError
├── RegistryError
│   └── FetchIncompleteError
├── DecodeError
├── OutputExistsError
├── ArtifactIOError
├── ConfigError
└── EnvironmentError
    └── WasmToolsNotFoundError
"""

from __future__ import annotations


class WkgError(Exception):
    """Base exception for all wkg errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Package reference -----------------------------------------------------

class InvalidReferenceError(WkgError):
    """Raised when a package spec or one of its labels is malformed."""


# --- Registry --------------------------------------------------------------

class NoReleasesFoundError(WkgError):
    """Raised when version resolution leaves no candidate release."""


class RegistryError(WkgError):
    """Raised when the registry fails at the network or protocol level."""


class FetchIncompleteError(RegistryError):
    """Raised when the content stream ends before the full artifact arrived."""


# --- Content ---------------------------------------------------------------

class DecodeError(WkgError):
    """Raised when package content cannot be decoded as WebAssembly."""


# --- Output ----------------------------------------------------------------

class OutputExistsError(WkgError):
    """Raised when the destination exists and overwriting was not requested."""


class ArtifactIOError(WkgError):
    """Raised on filesystem failures while staging or committing an artifact."""


# --- Configuration ---------------------------------------------------------

class ConfigError(WkgError):
    """Raised when the client configuration file cannot be loaded."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(WkgError):
    """Raised when a required runtime dependency is not available."""


class WasmToolsNotFoundError(EnvironmentError):
    """Raised when the ``wasm-tools`` executable cannot be located on PATH."""
