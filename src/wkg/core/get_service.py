"""Core get service — orchestrates the fetch pipeline.

Stages run strictly in sequence::

    PackageSpec → VersionResolver → ArtifactFetcher
                → decide_format / maybe_decode → publish

Collaborators are injected at construction time.  User-facing output is
limited to the optional *notify* callable; nothing here prints.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from wkg.core.fetcher import ArtifactFetcher
from wkg.core.format_detector import decide_format, maybe_decode
from wkg.core.models import Format, OutputTarget, PackageSpec
from wkg.core.protocols import ComponentDecoder, RegistryClient
from wkg.core.publisher import publish
from wkg.core.version_resolver import VersionResolver
from wkg.exceptions import RegistryError, WkgError

logger = logging.getLogger(__name__)


class GetService:
    """Fetch one package and write it to disk.

    Parameters
    ----------
    client:
        Any object satisfying the :class:`RegistryClient` protocol.
    decoder:
        Any object satisfying the :class:`ComponentDecoder` protocol.
    notify:
        Optional callable receiving status lines for the user.
    """

    def __init__(
        self,
        client: RegistryClient,
        decoder: ComponentDecoder,
        *,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self._client: RegistryClient = client
        self._decoder: ComponentDecoder = decoder
        self._notify = notify
        self._resolver = VersionResolver(client, notify=notify)
        self._fetcher = ArtifactFetcher(client)

    def get(
        self,
        spec: PackageSpec,
        target: OutputTarget,
        *,
        requested_format: Format = Format.AUTO,
        overwrite: bool = False,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> Path:
        """Run the full pipeline and return the path that was written.

        Raises
        ------
        WkgError
            Any stage failure, with context naming the stage.
        """
        package = spec.package
        version = self._resolver.resolve(package, spec.version)

        self._status(f"Getting {package}@{version}...")
        try:
            release = self._client.get_release(package, version)
        except RegistryError as exc:
            raise RegistryError(
                f"Failed to get release details: {exc}",
                hint=exc.hint,
            ) from exc
        except WkgError:
            raise
        except Exception as exc:
            raise RegistryError(f"Failed to get release details: {exc}") from exc
        logger.debug("release: %r", release)

        with self._fetcher.fetch(
            package,
            release,
            target.staging_dir,
            progress_callback=progress_callback,
        ) as artifact:
            fmt = decide_format(requested_format, target, notify=self._notify)
            text = maybe_decode(artifact, fmt, self._decoder, notify=self._notify)
            return publish(
                artifact,
                text,
                target,
                package,
                version,
                overwrite=overwrite,
            )

    def _status(self, message: str) -> None:
        if self._notify is not None:
            self._notify(message)
