"""Domain models for wkg.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and validated construction.  They carry zero
I/O and must remain pure across the entire lifecycle.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from semver import Version


# ---------------------------------------------------------------------------
# Package identity
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PackageRef:
    """A version-independent package identity, e.g. ``wasi:http``.

    Build instances through :meth:`parse`; direct construction still
    validates both labels so an invalid reference can never exist.
    """

    namespace: str
    """Kebab-case namespace label (e.g. ``wasi``)."""

    name: str
    """Kebab-case package name label (e.g. ``http``)."""

    def __post_init__(self) -> None:
        from wkg.core.package_ref import validate_label

        validate_label(self.namespace)
        validate_label(self.name)

    @classmethod
    def parse(cls, text: str) -> PackageRef:
        from wkg.core.package_ref import parse_package_ref

        return parse_package_ref(text)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.name}"


@dataclass(frozen=True, slots=True)
class PackageSpec:
    """A package reference plus an optional explicit version."""

    package: PackageRef
    version: Version | None = None

    @classmethod
    def parse(cls, text: str) -> PackageSpec:
        from wkg.core.package_ref import parse_package_spec

        return parse_package_spec(text)

    def __str__(self) -> str:
        if self.version is None:
            return str(self.package)
        return f"{self.package}@{self.version}"


# ---------------------------------------------------------------------------
# Registry releases
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ReleaseInfo:
    """One known release of a package as listed by the registry."""

    version: Version
    yanked: bool = False


@dataclass(frozen=True, slots=True)
class Release:
    """A resolved release plus the registry details needed to fetch it."""

    version: Version

    content_digest: str
    """Content address of the package bytes (e.g. ``sha256:…``)."""

    size: int | None = None
    """Expected content length in bytes, or ``None`` if unknown."""

    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    """Registry-specific metadata (repository, media type, …)."""


# ---------------------------------------------------------------------------
# Output format and destination
# ---------------------------------------------------------------------------

class Format(str, Enum):
    """Requested or effective output format.

    ``AUTO`` is a resolution request; the publisher only ever sees the
    outcome of the decision, expressed as decoded text or raw bytes.
    """

    AUTO = "auto"
    WASM = "wasm"
    WIT = "wit"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class OutputTarget:
    """Where the artifact should land."""

    directory_mode: bool
    """``True`` when the user path ends with a separator."""

    path: Path

    @classmethod
    def from_user_path(cls, text: str | os.PathLike[str]) -> OutputTarget:
        raw = os.fspath(text)
        separators = tuple(sep for sep in ("/", os.sep, os.altsep) if sep)
        return cls(directory_mode=raw.endswith(separators), path=Path(raw))

    @property
    def staging_dir(self) -> Path:
        """Directory that holds the temp file and the final artifact."""
        if self.directory_mode:
            return self.path
        return self.path.parent


# ---------------------------------------------------------------------------
# Decoded content
# ---------------------------------------------------------------------------

class DecodedKind(str, Enum):
    """Kind of WebAssembly artifact found by the decoder."""

    WIT_PACKAGE = "wit-package"
    COMPONENT = "component"
    MODULE = "module"


@dataclass(frozen=True, slots=True)
class DecodedWasm:
    """Outcome of a successful decode."""

    kind: DecodedKind
    data: bytes = field(repr=False)
    """The bytes that were decoded, kept for the printer."""

    @property
    def is_wit_package(self) -> bool:
        return self.kind is DecodedKind.WIT_PACKAGE
