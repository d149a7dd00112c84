"""Registry client configuration.

A :class:`ClientConfig` is built once per invocation and handed to the
registry client by parameter.  Nothing here reads the environment or the
filesystem; see :mod:`wkg.infra.config_file` for loading.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from wkg.exceptions import ConfigError

DEFAULT_REGISTRY: str = "bytecodealliance.org"


@dataclass(slots=True)
class ClientConfig:
    """Default registry plus per-namespace registry overrides."""

    default_registry: str | None = None
    namespace_registries: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ClientConfig:
        """Build a config from a parsed config-file mapping."""
        default = data.get("default_registry")
        if default is not None and not isinstance(default, str):
            raise ConfigError("'default_registry' must be a string")

        raw_namespaces = data.get("namespace_registries", {})
        if not isinstance(raw_namespaces, dict):
            raise ConfigError("'namespace_registries' must be a table")
        namespaces: dict[str, str] = {}
        for namespace, registry in raw_namespaces.items():
            if not isinstance(registry, str):
                raise ConfigError(
                    f"registry for namespace {namespace!r} must be a string",
                )
            namespaces[str(namespace)] = registry

        return cls(default_registry=default, namespace_registries=namespaces)

    def set_default_registry(self, registry: str) -> None:
        self.default_registry = registry

    def set_namespace_registry(self, namespace: str, registry: str) -> None:
        self.namespace_registries[namespace] = registry

    def merge(self, other: ClientConfig) -> None:
        """Overlay *other* on top of this config; its values win."""
        if other.default_registry is not None:
            self.default_registry = other.default_registry
        self.namespace_registries.update(other.namespace_registries)

    def registry_for(self, namespace: str) -> str:
        """Return the registry domain serving *namespace*.

        Raises
        ------
        ConfigError
            When neither an override nor a default registry is set.
        """
        registry = self.namespace_registries.get(namespace) or self.default_registry
        if not registry:
            raise ConfigError(
                f"no registry configured for namespace {namespace!r}",
                hint="Pass --registry <domain> or set default_registry "
                "in the wasm-pkg config file.",
            )
        return registry
