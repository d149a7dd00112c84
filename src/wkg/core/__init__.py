"""Core / service layer — the fetch-resolve-decode-persist pipeline.

Rules
-----
* No ``print()`` calls; user-facing lines go through injected callables.
* No network I/O — registries and decoders are reached via protocols.
* Filesystem access is confined to the fetch and publish stages.
* No imports from ``cli`` or ``infra``.
"""

from wkg.core.config import ClientConfig
from wkg.core.fetcher import ArtifactFetcher, TempArtifact
from wkg.core.get_service import GetService
from wkg.core.models import (
    DecodedKind,
    DecodedWasm,
    Format,
    OutputTarget,
    PackageRef,
    PackageSpec,
    Release,
    ReleaseInfo,
)
from wkg.core.protocols import ComponentDecoder, RegistryClient
from wkg.core.version_resolver import VersionResolver

__all__: list[str] = [
    "ArtifactFetcher",
    "ClientConfig",
    "ComponentDecoder",
    "DecodedKind",
    "DecodedWasm",
    "Format",
    "GetService",
    "OutputTarget",
    "PackageRef",
    "PackageSpec",
    "RegistryClient",
    "Release",
    "ReleaseInfo",
    "TempArtifact",
    "VersionResolver",
]
