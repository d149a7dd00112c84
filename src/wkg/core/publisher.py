"""Output publishing — name the destination and commit the artifact."""

from __future__ import annotations

import logging
from pathlib import Path

from semver import Version

from wkg.core.fetcher import TempArtifact
from wkg.core.models import OutputTarget, PackageRef
from wkg.exceptions import OutputExistsError

logger = logging.getLogger(__name__)


def final_path(
    target: OutputTarget,
    package: PackageRef,
    version: Version,
    *,
    decoded: bool,
) -> Path:
    """Return the file the artifact will be written to.

    Directory targets get ``{namespace}_{name}@{version}.{wit|wasm}``.
    """
    if not target.directory_mode:
        return target.path
    ext = "wit" if decoded else "wasm"
    return target.path / f"{package.namespace}_{package.name}@{version}.{ext}"


def publish(
    artifact: TempArtifact,
    text: str | None,
    target: OutputTarget,
    package: PackageRef,
    version: Version,
    *,
    overwrite: bool = False,
) -> Path:
    """Commit *artifact* (or *text*, when decoded) to its final path.

    Both cases stage the full content in the temp file and rename it
    into place, so the destination shows either the old file or the
    complete new one.

    Raises
    ------
    OutputExistsError
        When the destination exists and *overwrite* is ``False``.
    ArtifactIOError
        When staging or renaming fails.
    """
    destination = final_path(target, package, version, decoded=text is not None)

    # The existence check and the rename are two steps; concurrent runs
    # against one path are not coordinated.
    if destination.exists() and not overwrite:
        raise OutputExistsError(
            f"'{destination}' already exists",
            hint="You can use '--overwrite' to overwrite it.",
        )

    if text is not None:
        logger.debug("writing WIT text to %s", destination)
        artifact.replace_content(text.encode("utf-8"))
    return artifact.commit(destination)
