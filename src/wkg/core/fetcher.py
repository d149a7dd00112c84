"""Artifact fetching — stream package bytes into a staged temp file.

The temp file is created inside the destination directory so that the
final publish is a same-volume rename.  It is the only thing the
pipeline ever writes partially; the output path is untouched until
:meth:`TempArtifact.commit`.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

from wkg.core.models import PackageRef, Release
from wkg.core.protocols import RegistryClient
from wkg.exceptions import ArtifactIOError, FetchIncompleteError, WkgError

logger = logging.getLogger(__name__)

TEMP_PREFIX: str = ".wkg-get"
"""Prefix marking staged files in the destination directory."""


class TempArtifact:
    """An open, seekable temp file owned by a single pipeline run.

    Use as a context manager: leaving the block without a successful
    :meth:`commit` closes and removes the temp file.
    """

    def __init__(self, file: IO[bytes], path: Path) -> None:
        self._file = file
        self.path: Path = path
        self._committed: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> TempArtifact:
        return self

    def __exit__(self, *_args: object) -> None:
        self.discard()

    # ------------------------------------------------------------------
    # Content access
    # ------------------------------------------------------------------

    @property
    def file(self) -> IO[bytes]:
        return self._file

    def rewind(self) -> None:
        self._file.seek(0)

    def read_all(self) -> bytes:
        self.rewind()
        return self._file.read()

    def replace_content(self, data: bytes) -> None:
        """Swap the staged bytes for *data* (e.g. rendered WIT text)."""
        try:
            self.rewind()
            self._file.truncate()
            self._file.write(data)
            self._file.flush()
        except OSError as exc:
            raise ArtifactIOError(f"Failed to write temp file {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def commit(self, destination: Path) -> Path:
        """Atomically rename the staged file to *destination*.

        The temp file is private while staged; it is given the usual
        umask-derived mode before it becomes visible.
        """
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()
            os.chmod(self.path, _default_file_mode())
            os.replace(self.path, destination)
        except OSError as exc:
            raise ArtifactIOError(
                f"Failed to persist artifact to {destination}: {exc}",
            ) from exc
        self._committed = True
        logger.debug("committed %s -> %s", self.path, destination)
        return destination

    def discard(self) -> None:
        """Close and remove the temp file unless it was committed (idempotent)."""
        if not self._file.closed:
            self._file.close()
        if not self._committed:
            try:
                self.path.unlink()
            except FileNotFoundError:
                pass
            else:
                logger.debug("removed temp file %s", self.path)
            self._committed = True


def _default_file_mode() -> int:
    """Return the mode a plainly created file gets under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class ArtifactFetcher:
    """Stream release content from a registry into a :class:`TempArtifact`.

    Parameters
    ----------
    client:
        Any object satisfying the :class:`RegistryClient` protocol.
    """

    def __init__(self, client: RegistryClient) -> None:
        self._client: RegistryClient = client

    def fetch(
        self,
        package: PackageRef,
        release: Release,
        directory: Path,
        *,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> TempArtifact:
        """Download *release* of *package* into a temp file in *directory*.

        Progress dicts passed to *progress_callback* carry ``status``
        (``"downloading"`` or ``"finished"``), ``downloaded_bytes``,
        ``total_bytes`` and ``filename``.

        Raises
        ------
        FetchIncompleteError
            When the content stream fails part-way.
        ArtifactIOError
            When the temp file cannot be created or written.
        """
        try:
            handle = tempfile.NamedTemporaryFile(
                prefix=TEMP_PREFIX,
                dir=directory,
                delete=False,
            )
        except OSError as exc:
            raise ArtifactIOError(
                f"Failed to create temp file in {directory}: {exc}",
                hint="Check that the output directory exists and is writable.",
            ) from exc

        artifact = TempArtifact(handle, Path(handle.name))
        logger.debug("staging %s@%s in %s", package, release.version, artifact.path)

        try:
            self._write_stream(artifact, package, release, progress_callback)
        except BaseException:
            artifact.discard()
            raise
        return artifact

    def _write_stream(
        self,
        artifact: TempArtifact,
        package: PackageRef,
        release: Release,
        progress_callback: Callable[[dict[str, Any]], None] | None,
    ) -> None:
        display_name = f"{package}@{release.version}"
        downloaded = 0
        try:
            for chunk in self._client.stream_content(package, release):
                try:
                    artifact.file.write(chunk)
                except OSError as exc:
                    raise ArtifactIOError(
                        f"Failed to write temp file {artifact.path}: {exc}",
                    ) from exc
                downloaded += len(chunk)
                if progress_callback is not None:
                    progress_callback({
                        "status": "downloading",
                        "downloaded_bytes": downloaded,
                        "total_bytes": release.size,
                        "filename": display_name,
                    })
        except WkgError:
            raise
        except Exception as exc:
            raise FetchIncompleteError(
                f"Content stream for {display_name} ended early: {exc}",
                hint="Re-run the command; the partial download was discarded.",
            ) from exc

        try:
            artifact.file.flush()
        except OSError as exc:
            raise ArtifactIOError(f"Failed to write temp file {artifact.path}: {exc}") from exc

        logger.debug("fetched %d byte(s) for %s", downloaded, display_name)
        if progress_callback is not None:
            progress_callback({"status": "finished", "filename": display_name})
