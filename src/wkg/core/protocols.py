"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from semver import Version

from wkg.core.models import DecodedWasm, PackageRef, Release, ReleaseInfo


class RegistryClient(Protocol):
    """Contract for package registry backends.

    Any object that implements these three methods with the correct
    signatures satisfies this protocol structurally (no explicit
    inheritance required).  Implementations must map all
    backend-specific exceptions to
    :class:`~wkg.exceptions.WkgError` subclasses.
    """

    def list_all_versions(self, package: PackageRef) -> list[ReleaseInfo]:
        """Return every known release of *package*, yanked ones included.

        Raises
        ------
        RegistryError
            When the registry cannot be reached or answers unexpectedly.
        """
        ...  # pragma: no cover

    def get_release(self, package: PackageRef, version: Version) -> Release:
        """Return fetch details for *package* at *version*.

        Raises
        ------
        RegistryError
            When the release does not exist or cannot be described.
        """
        ...  # pragma: no cover

    def stream_content(self, package: PackageRef, release: Release) -> Iterator[bytes]:
        """Return a lazy, non-restartable iterator of content chunks.

        Raises
        ------
        FetchIncompleteError
            When the stream ends before the full content was produced.
        """
        ...  # pragma: no cover


class ComponentDecoder(Protocol):
    """Contract for WebAssembly decoding backends."""

    def decode(self, data: bytes) -> DecodedWasm:
        """Classify *data* as a WIT package, a component, or a core module.

        Raises
        ------
        DecodeError
            When *data* is not a decodable WebAssembly binary.
        """
        ...  # pragma: no cover

    def print_wit(self, decoded: DecodedWasm) -> str:
        """Render a decoded WIT package as canonical WIT text.

        Raises
        ------
        DecodeError
            When the package cannot be rendered.
        """
        ...  # pragma: no cover
