"""Output format selection and optional WIT decoding.

Precedence
----------
1. An explicit ``wasm`` or ``wit`` request is honoured outright.
2. ``auto`` adopts a recognized ``.wasm`` / ``.wit`` file extension.
3. Otherwise the staged bytes are sniffed with the component decoder.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from wkg.core.fetcher import TempArtifact
from wkg.core.models import Format, OutputTarget
from wkg.core.protocols import ComponentDecoder
from wkg.exceptions import DecodeError

logger = logging.getLogger(__name__)

_EXTENSION_FORMATS: dict[str, Format] = {
    ".wasm": Format.WASM,
    ".wit": Format.WIT,
}


def decide_format(
    requested: Format,
    target: OutputTarget,
    *,
    notify: Callable[[str], None] | None = None,
) -> Format:
    """Return the format implied by *requested* and the output file name.

    The result is still ``AUTO`` when the decision has to wait for
    content sniffing.  Directory targets are never read for an
    extension: ``out.wit/`` names a directory, so the file name is
    generated later from the decoded content.
    """
    if requested is not Format.AUTO or target.directory_mode:
        return requested

    suffix = target.path.suffix
    if not suffix:
        return Format.AUTO

    logger.debug("inferring output format from file extension %r", suffix)
    inferred = _EXTENSION_FORMATS.get(suffix)
    if inferred is None:
        if notify is not None:
            notify(f"Couldn't infer output format from file name {target.path.name!r}")
        return Format.AUTO
    return inferred


def maybe_decode(
    artifact: TempArtifact,
    fmt: Format,
    decoder: ComponentDecoder,
    *,
    notify: Callable[[str], None] | None = None,
) -> str | None:
    """Return printed WIT text when the artifact should be written as text.

    Raises
    ------
    DecodeError
        Only when *fmt* is ``WIT``; in ``AUTO`` mode failures degrade to
        raw binary output with an advisory message.
    """
    if fmt is Format.WASM:
        return None

    try:
        decoded = decoder.decode(artifact.read_all())
        logger.debug("decoded artifact kind: %s", decoded.kind.value)
        if not decoded.is_wit_package:
            return None
        return decoder.print_wit(decoded)
    except DecodeError as exc:
        logger.debug("decode failed: %s", exc)
        if fmt is Format.WIT:
            raise
        if notify is not None:
            notify(f"Failed to detect package content type: {exc}")
        return None
