"""Allow ``python -m wkg`` invocation.

Delegates to the CLI error-boundary entry point so that ``python -m wkg``
behaves identically to the ``wkg`` console script.
"""

from __future__ import annotations

from wkg.cli.app import cli

if __name__ == "__main__":
    cli()
