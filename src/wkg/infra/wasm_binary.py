"""Pure inspection of WebAssembly binaries.

Only the preamble and the top-level section headers are read; section
contents are skipped.  That is enough to tell a core module from a
component, and a plain component from an encoded WIT package.

Preamble
--------
``\\0asm`` followed by a little-endian ``u16`` version and ``u16`` layer.
Layer ``0`` is a core module, layer ``1`` a component.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from wkg.core.models import DecodedKind
from wkg.exceptions import DecodeError

WASM_MAGIC: bytes = b"\x00asm"

LAYER_MODULE: int = 0
LAYER_COMPONENT: int = 1

# Component-model section ids.
SECTION_CUSTOM: int = 0
SECTION_TYPE: int = 7
SECTION_EXPORT: int = 11

# An encoded WIT package describes types and exports them, nothing else.
_WIT_PACKAGE_SECTIONS: frozenset[int] = frozenset({SECTION_CUSTOM, SECTION_TYPE, SECTION_EXPORT})


@dataclass(frozen=True, slots=True)
class WasmHeader:
    version: int
    layer: int


def read_header(data: bytes) -> WasmHeader:
    """Parse the 8-byte preamble or raise :class:`DecodeError`."""
    if len(data) < 8 or data[:4] != WASM_MAGIC:
        raise DecodeError("input is not a WebAssembly binary (bad magic number)")
    version, layer = struct.unpack_from("<HH", data, 4)
    if layer not in (LAYER_MODULE, LAYER_COMPONENT):
        raise DecodeError(f"unknown WebAssembly binary layer {layer}")
    return WasmHeader(version=version, layer=layer)


def read_leb128_u32(data: bytes, offset: int) -> tuple[int, int]:
    """Decode an unsigned LEB128 ``u32`` at *offset*.

    Returns ``(value, next_offset)``.
    """
    result = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise DecodeError("unexpected end of input while reading a LEB128 integer")
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
        if shift >= 35:
            raise DecodeError("LEB128 integer is too large")
    if result > 0xFFFFFFFF:
        raise DecodeError("LEB128 integer is too large")
    return result, offset


def section_ids(data: bytes) -> list[int]:
    """Return the ids of all top-level sections, in order."""
    ids: list[int] = []
    offset = 8
    while offset < len(data):
        section_id = data[offset]
        size, offset = read_leb128_u32(data, offset + 1)
        end = offset + size
        if end > len(data):
            raise DecodeError(
                f"section {section_id} extends past the end of the input",
            )
        ids.append(section_id)
        offset = end
    return ids


def classify(data: bytes) -> DecodedKind:
    """Classify *data* as a core module, a component, or a WIT package.

    Raises
    ------
    DecodeError
        When *data* is not a well-formed WebAssembly binary.
    """
    header = read_header(data)
    ids = section_ids(data)
    if header.layer == LAYER_MODULE:
        return DecodedKind.MODULE
    if SECTION_EXPORT in ids and set(ids) <= _WIT_PACKAGE_SECTIONS:
        return DecodedKind.WIT_PACKAGE
    return DecodedKind.COMPONENT
