"""Shared pytest fixtures and configuration for the wkg test suite.

Guidelines
----------
* No internet access in any test.
* Registries and decoders are faked at the protocol boundary.
* ``wasm-tools`` is never executed; ``shutil.which`` / ``subprocess`` are mocked.
* Filesystem effects are confined to ``tmp_path``.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from semver import Version

from wkg.core.models import DecodedKind, DecodedWasm, PackageRef, Release, ReleaseInfo
from wkg.exceptions import DecodeError

WASM_MODULE_HEADER = b"\x00asm\x01\x00\x00\x00"
WASM_COMPONENT_HEADER = b"\x00asm\x0d\x00\x01\x00"


def section(section_id: int, payload: bytes = b"\x00") -> bytes:
    """Encode one top-level section (payloads stay below 128 bytes)."""
    assert len(payload) < 0x80
    return bytes([section_id, len(payload)]) + payload


def wit_package_bytes() -> bytes:
    return WASM_COMPONENT_HEADER + section(0, b"\x03abc") + section(7) + section(11)


def component_bytes() -> bytes:
    return WASM_COMPONENT_HEADER + section(1) + section(10) + section(11)


class FakeRegistryClient:
    """In-memory :class:`RegistryClient` recording every call."""

    def __init__(
        self,
        releases: list[ReleaseInfo] | None = None,
        chunks: list[bytes] | None = None,
        *,
        fail_after: int | None = None,
        error: Exception | None = None,
    ) -> None:
        self.releases = releases if releases is not None else [ReleaseInfo(Version.parse("1.0.0"))]
        self.chunks = chunks if chunks is not None else [b"\x00asm", b"\x01\x00\x00\x00"]
        self.fail_after = fail_after
        self.error = error or ConnectionError("connection reset")
        self.calls: list[str] = []

    def list_all_versions(self, package: PackageRef) -> list[ReleaseInfo]:
        self.calls.append("list_all_versions")
        return list(self.releases)

    def get_release(self, package: PackageRef, version: Version) -> Release:
        self.calls.append("get_release")
        return Release(
            version=version,
            content_digest="sha256:fake",
            size=sum(len(chunk) for chunk in self.chunks),
        )

    def stream_content(self, package: PackageRef, release: Release) -> Iterator[bytes]:
        self.calls.append("stream_content")
        for index, chunk in enumerate(self.chunks):
            if self.fail_after is not None and index >= self.fail_after:
                raise self.error
            yield chunk


class FakeDecoder:
    """:class:`ComponentDecoder` returning a fixed kind and text."""

    def __init__(
        self,
        kind: DecodedKind = DecodedKind.WIT_PACKAGE,
        *,
        text: str = "package wasi:cli@0.2.0;\n",
        error: DecodeError | None = None,
    ) -> None:
        self.kind = kind
        self.text = text
        self.error = error
        self.decoded: list[bytes] = []

    def decode(self, data: bytes) -> DecodedWasm:
        self.decoded.append(data)
        if self.error is not None:
            raise self.error
        return DecodedWasm(kind=self.kind, data=data)

    def print_wit(self, decoded: DecodedWasm) -> str:
        return self.text


@pytest.fixture()
def wasi_cli() -> PackageRef:
    return PackageRef.parse("wasi:cli")


@pytest.fixture()
def fake_client() -> FakeRegistryClient:
    return FakeRegistryClient()


@pytest.fixture()
def fake_decoder() -> FakeDecoder:
    return FakeDecoder()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> None:
    """Keep the user's config file and log level out of every test."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("WKG_CONFIG_FILE", str(config_dir / "config.toml"))
    monkeypatch.delenv("WKG_LOG", raising=False)
