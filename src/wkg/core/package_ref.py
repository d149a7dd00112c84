"""Pure parsing of package references and package specs.

Grammar
-------
* ``label``   — lowercase ASCII letters and digits in hyphen-separated
  words (``wasi``, ``http-types``, ``v2``).
* ``package`` — ``<namespace-label>:<name-label>``.
* ``spec``    — ``<package>[@<semver>]``.

Every function here is deterministic and side-effect free.
"""

from __future__ import annotations

import re

from semver import Version

from wkg.core.models import PackageRef, PackageSpec
from wkg.exceptions import InvalidReferenceError

_LABEL_RE = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


def validate_label(label: str) -> str:
    """Return *label* unchanged or raise :class:`InvalidReferenceError`."""
    if not label:
        raise InvalidReferenceError("label must not be empty")
    if _LABEL_RE.fullmatch(label) is None:
        raise InvalidReferenceError(
            f"invalid label {label!r}",
            hint="Labels are kebab-case: lowercase letters and digits "
            "separated by single hyphens.",
        )
    return label


def parse_package_ref(text: str) -> PackageRef:
    """Parse ``namespace:name`` into a :class:`PackageRef`."""
    namespace, sep, name = text.partition(":")
    if not sep:
        raise InvalidReferenceError(
            f"invalid package reference {text!r}: missing expected ':'",
            hint="Use the form <namespace>:<name>, e.g. wasi:http",
        )
    if ":" in name:
        raise InvalidReferenceError(
            f"invalid package reference {text!r}: more than one ':'",
        )
    return PackageRef(namespace=namespace, name=name)


def parse_version(text: str) -> Version:
    try:
        return Version.parse(text)
    except (ValueError, TypeError) as exc:
        raise InvalidReferenceError(
            f"invalid version {text!r}: {exc}",
            hint="Versions follow semantic versioning, e.g. 0.2.0",
        ) from exc


def parse_package_spec(text: str) -> PackageSpec:
    """Parse ``namespace:name[@version]`` into a :class:`PackageSpec`."""
    stripped = text.strip()
    package_text, sep, version_text = stripped.partition("@")
    package = parse_package_ref(package_text)
    if not sep:
        return PackageSpec(package=package)
    return PackageSpec(package=package, version=parse_version(version_text))
