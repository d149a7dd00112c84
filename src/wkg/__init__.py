"""wkg — fetch a single WebAssembly package from a registry.

Writes the package to disk as a binary component or as decoded WIT text,
built with a strict layered architecture.
"""

from wkg.version import __version__

__all__: list[str] = ["__version__"]
