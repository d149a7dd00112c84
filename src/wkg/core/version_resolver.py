"""Version resolution — pick the release to fetch.

An explicit version is a no-op; otherwise the latest non-yanked release
wins under semantic-version precedence.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from semver import Version

from wkg.core.models import PackageRef
from wkg.core.protocols import RegistryClient
from wkg.exceptions import NoReleasesFoundError, RegistryError, WkgError

logger = logging.getLogger(__name__)


class VersionResolver:
    """Resolve an optional version against a registry.

    Parameters
    ----------
    client:
        Any object satisfying the :class:`RegistryClient` protocol.
    notify:
        Optional callable receiving advisory status lines.
    """

    def __init__(
        self,
        client: RegistryClient,
        *,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self._client: RegistryClient = client
        self._notify = notify

    def resolve(self, package: PackageRef, explicit_version: Version | None = None) -> Version:
        """Return *explicit_version*, or the latest non-yanked release.

        Raises
        ------
        NoReleasesFoundError
            When every release is yanked or none exist.
        RegistryError
            When the version list cannot be fetched.
        """
        if explicit_version is not None:
            return explicit_version

        if self._notify is not None:
            self._notify("No version specified; fetching version list...")

        try:
            releases = self._client.list_all_versions(package)
        except WkgError:
            raise
        except Exception as exc:
            raise RegistryError(
                f"Failed to list versions of {package}: {exc}",
            ) from exc
        logger.debug("registry listed %d release(s) for %s", len(releases), package)

        candidates = [info.version for info in releases if not info.yanked]
        if not candidates:
            raise NoReleasesFoundError(
                f"No releases found for {package}",
                hint="Every release may have been yanked; pass an explicit @<version>.",
            )
        return max(candidates)
