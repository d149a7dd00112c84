"""OCI-distribution backed implementation of :class:`~wkg.core.protocols.RegistryClient`.

This module is the **only** place in the codebase that talks HTTP.  All
``requests`` exceptions are caught here and re-raised as typed
:class:`~wkg.exceptions.WkgError` subclasses — nothing raw escapes the
infrastructure boundary.

Flow
----
1. Resolve the namespace's registry domain from :class:`ClientConfig`.
2. Discover the backing OCI registry via
   ``https://{domain}/.well-known/wasm-pkg/registry.json``.
3. Map ``namespace:name`` to the repository ``{prefix}{namespace}/{name}``.
4. Use the distribution API (tags, manifests, blobs), exchanging an
   anonymous bearer token when challenged.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

import requests
from semver import Version

from wkg.core.config import ClientConfig
from wkg.core.models import PackageRef, Release, ReleaseInfo
from wkg.exceptions import FetchIncompleteError, RegistryError

logger = logging.getLogger(__name__)

WASM_LAYER_MEDIA_TYPE: str = "application/wasm"

_MANIFEST_ACCEPT: str = ", ".join((
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.docker.distribution.manifest.v2+json",
))

_CHALLENGE_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')


@dataclass(frozen=True, slots=True)
class OciLocation:
    """Where a package lives inside an OCI registry."""

    registry: str
    """Registry host (e.g. ``ghcr.io``)."""

    repository: str
    """Repository path (e.g. ``bytecodealliance/wasm-pkg/wasi/http``)."""

    @property
    def base_url(self) -> str:
        return f"https://{self.registry}/v2/{self.repository}"


class OciRegistryClient:
    """Concrete :class:`RegistryClient` backed by the OCI distribution API.

    Usage::

        client = OciRegistryClient(config)
        releases = client.list_all_versions(PackageRef.parse("wasi:http"))

    This class satisfies the :class:`~wkg.core.protocols.RegistryClient`
    protocol structurally — no explicit inheritance required.  Requests
    are never retried.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        chunk_size: int = 64 * 1024,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._timeout = timeout
        self._chunk_size = chunk_size
        self._prefixes: dict[str, tuple[str, str]] = {}
        self._tokens: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def list_all_versions(self, package: PackageRef) -> list[ReleaseInfo]:
        """List every semver-tagged release of *package*.

        OCI registries have no notion of yanking, so every release is
        reported as available.  Tags that are not semantic versions are
        ignored.
        """
        location = self.locate(package)
        releases: list[ReleaseInfo] = []
        url: str | None = f"{location.base_url}/tags/list"

        while url is not None:
            response = self._get(location, url)
            if response.status_code == 404:
                raise RegistryError(
                    f"Package {package} not found in {location.registry}",
                )
            self._raise_for_status(response, f"list tags for {package}")
            data = self._json(response, f"tag list for {package}")

            for tag in data.get("tags") or []:
                try:
                    releases.append(ReleaseInfo(version=Version.parse(tag)))
                except (ValueError, TypeError):
                    logger.debug("ignoring non-semver tag %r", tag)

            next_link = response.links.get("next", {}).get("url")
            url = urljoin(url, next_link) if next_link else None

        return releases

    def get_release(self, package: PackageRef, version: Version) -> Release:
        """Read the manifest for *version* and pick its wasm layer."""
        location = self.locate(package)
        response = self._get(
            location,
            f"{location.base_url}/manifests/{version}",
            headers={"Accept": _MANIFEST_ACCEPT},
        )
        if response.status_code == 404:
            raise RegistryError(f"Release {package}@{version} not found")
        self._raise_for_status(response, f"fetch manifest for {package}@{version}")
        manifest = self._json(response, f"manifest for {package}@{version}")

        layers = [layer for layer in manifest.get("layers") or [] if isinstance(layer, dict)]
        if not layers:
            raise RegistryError(f"Manifest for {package}@{version} has no layers")
        layer = next(
            (entry for entry in layers if entry.get("mediaType") == WASM_LAYER_MEDIA_TYPE),
            layers[0],
        )

        digest = layer.get("digest")
        if not isinstance(digest, str) or not digest:
            raise RegistryError(f"Manifest for {package}@{version} lacks a layer digest")
        size = layer.get("size")

        return Release(
            version=version,
            content_digest=digest,
            size=size if isinstance(size, int) else None,
            extra={
                "registry": location.registry,
                "repository": location.repository,
                "media_type": layer.get("mediaType"),
            },
        )

    def stream_content(self, package: PackageRef, release: Release) -> Iterator[bytes]:
        """Yield the layer blob in chunks, verifying size and digest at the end."""
        location = self.locate(package)
        response = self._get(
            location,
            f"{location.base_url}/blobs/{release.content_digest}",
            stream=True,
        )
        with response:
            self._raise_for_status(response, f"fetch content for {package}@{release.version}")
            hasher = _digest_hasher(release.content_digest)
            received = 0
            try:
                for chunk in response.iter_content(chunk_size=self._chunk_size):
                    if not chunk:
                        continue
                    received += len(chunk)
                    if hasher is not None:
                        hasher.update(chunk)
                    yield chunk
            except requests.RequestException as exc:
                raise FetchIncompleteError(
                    f"Content stream for {package}@{release.version} failed: {exc}",
                ) from exc

        if release.size is not None and received != release.size:
            raise FetchIncompleteError(
                f"Expected {release.size} bytes for {package}@{release.version}, "
                f"received {received}",
            )
        if hasher is not None:
            actual = f"{release.content_digest.split(':', 1)[0]}:{hasher.hexdigest()}"
            if actual != release.content_digest:
                raise FetchIncompleteError(
                    f"Digest mismatch for {package}@{release.version}: "
                    f"expected {release.content_digest}, got {actual}",
                )

    # ------------------------------------------------------------------
    # Registry discovery
    # ------------------------------------------------------------------

    def locate(self, package: PackageRef) -> OciLocation:
        """Return the OCI registry and repository holding *package*."""
        domain = self._config.registry_for(package.namespace)
        registry, prefix = self._discover(domain)
        return OciLocation(
            registry=registry,
            repository=f"{prefix}{package.namespace}/{package.name}",
        )

    def _discover(self, domain: str) -> tuple[str, str]:
        """Resolve *domain* to ``(oci_registry, namespace_prefix)`` (cached)."""
        if domain in self._prefixes:
            return self._prefixes[domain]

        url = f"https://{domain}/.well-known/wasm-pkg/registry.json"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RegistryError(
                f"Failed to reach registry {domain}: {exc}",
                hint="Check your network connection or the --registry value.",
            ) from exc

        if response.status_code == 404:
            logger.debug("no registry metadata at %s; using it as OCI registry", domain)
            result = (domain, "")
        else:
            self._raise_for_status(response, f"fetch registry metadata for {domain}")
            result = _parse_registry_metadata(domain, self._json(response, "registry metadata"))

        logger.debug("registry %s -> oci %s prefix %r", domain, *result)
        self._prefixes[domain] = result
        return result

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get(
        self,
        location: OciLocation,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        stream: bool = False,
    ) -> requests.Response:
        """GET *url*, answering one bearer-token challenge if needed."""
        request_headers = dict(headers or {})
        token = self._tokens.get(location.repository)
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        response = self._send(url, request_headers, stream)
        if response.status_code == 401 and not token:
            challenge = response.headers.get("WWW-Authenticate", "")
            response.close()
            token = self._fetch_token(location, challenge)
            request_headers["Authorization"] = f"Bearer {token}"
            response = self._send(url, request_headers, stream)
        return response

    def _send(self, url: str, headers: dict[str, str], stream: bool) -> requests.Response:
        try:
            return self._session.get(url, headers=headers, stream=stream, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RegistryError(f"Request to {url} failed: {exc}") from exc

    def _fetch_token(self, location: OciLocation, challenge: str) -> str:
        """Exchange a ``WWW-Authenticate: Bearer …`` challenge for a token."""
        if not challenge.lower().startswith("bearer "):
            raise RegistryError(
                f"Registry {location.registry} requires unsupported authentication",
            )
        params = dict(_CHALLENGE_PARAM_RE.findall(challenge))
        realm = params.pop("realm", None)
        if not realm:
            raise RegistryError(f"Registry {location.registry} sent a challenge without realm")
        params.setdefault("scope", f"repository:{location.repository}:pull")

        try:
            response = self._session.get(realm, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RegistryError(f"Token request to {realm} failed: {exc}") from exc
        self._raise_for_status(response, f"obtain token for {location.repository}")
        data = self._json(response, "token response")

        token = data.get("token") or data.get("access_token")
        if not isinstance(token, str) or not token:
            raise RegistryError(f"Token response from {realm} carried no token")
        self._tokens[location.repository] = token
        return token

    @staticmethod
    def _raise_for_status(response: requests.Response, action: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            hint = None
            if response.status_code in (401, 403):
                hint = "The package may be private or the registry may require credentials."
            raise RegistryError(
                f"Failed to {action}: HTTP {response.status_code}",
                hint=hint,
            ) from exc

    @staticmethod
    def _json(response: requests.Response, what: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise RegistryError(f"Registry returned invalid JSON for {what}") from exc
        if not isinstance(data, dict):
            raise RegistryError(f"Registry returned an unexpected {what}")
        return data


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------

def _parse_registry_metadata(domain: str, data: dict[str, Any]) -> tuple[str, str]:
    """Pull the OCI registry and namespace prefix from ``registry.json``."""
    oci = data.get("oci")
    if isinstance(oci, dict):
        registry = oci.get("registry")
        prefix = oci.get("namespacePrefix")
    else:
        registry = data.get("ociRegistry")
        prefix = data.get("ociNamespacePrefix")

    if not registry:
        preferred = data.get("preferredProtocol")
        raise RegistryError(
            f"Registry {domain} does not offer an OCI endpoint"
            + (f" (preferred protocol: {preferred})" if preferred else ""),
        )
    return str(registry), str(prefix or "")


def _digest_hasher(digest: str) -> Any:
    """Return a hashlib object matching *digest*'s algorithm, if supported."""
    algorithm, sep, _ = digest.partition(":")
    if not sep or algorithm not in ("sha256", "sha512"):
        return None
    return hashlib.new(algorithm)
