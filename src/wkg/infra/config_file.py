"""Infrastructure: locate and load the wasm-pkg client config file.

The file is TOML::

    default_registry = "example.com"

    [namespace_registries]
    wasi = "bytecodealliance.org"

A missing file is normal and yields ``None``.
"""

from __future__ import annotations

import os
from pathlib import Path

import toml

from wkg.core.config import DEFAULT_REGISTRY, ClientConfig
from wkg.exceptions import ConfigError

CONFIG_ENV_VAR: str = "WKG_CONFIG_FILE"


def default_config_path() -> Path:
    """Return the path of the user's wasm-pkg config file."""
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit).expanduser()
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(config_home) / "wasm-pkg" / "config.toml"


def load_config_file(path: Path | None = None) -> ClientConfig | None:
    """Load *path* (or the default config path) into a :class:`ClientConfig`.

    Raises
    ------
    ConfigError
        When the file exists but cannot be read or parsed.
    """
    config_path = path if path is not None else default_config_path()
    if not config_path.is_file():
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigError(
            f"Invalid config file {config_path}: {exc}",
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Failed to read config file {config_path}: {exc}",
        ) from exc

    return ClientConfig.from_mapping(data)


def build_client_config(
    *,
    namespace: str | None = None,
    registry_override: str | None = None,
    config_path: Path | None = None,
) -> ClientConfig:
    """Assemble the per-invocation config.

    Order: built-in default registry, then the config file, then the
    ``--registry`` override for *namespace*.
    """
    config = ClientConfig()
    config.set_default_registry(DEFAULT_REGISTRY)
    file_config = load_config_file(config_path)
    if file_config is not None:
        config.merge(file_config)
    if registry_override and namespace:
        config.set_namespace_registry(namespace, registry_override)
    return config
