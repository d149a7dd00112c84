"""CLI application entry point and command routing for wkg.

This module is the **sole error boundary** for the entire application.
It catches :class:`~wkg.exceptions.WkgError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* ``print()`` is forbidden outside the CLI layer; the console proxy is used
  for all user-facing output.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys

from wkg.cli import exit_codes
from wkg.cli.console import console
from wkg.cli.logging_setup import configure_logging
from wkg.exceptions import WkgError
from wkg.version import __version__

logger = logging.getLogger(__name__)

_FORMAT_CHOICES: tuple[str, ...] = ("auto", "wasm", "wit")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``wkg get <package-spec>`` — fetch one package
    * ``wkg doctor``             — environment diagnostics
    """
    parser = argparse.ArgumentParser(
        prog="wkg",
        description="Fetch WebAssembly packages from a registry.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    get = subparsers.add_parser("get", help="Get a package.")
    get.add_argument(
        "package_spec",
        metavar="PACKAGE_SPEC",
        help="The package to get, as <namespace>:<name> plus optional "
        "@<version>, e.g. 'wasi:cli' or 'wasi:http@0.2.0'.",
    )
    get.add_argument(
        "-o",
        "--output",
        default="./",
        help="Output path. If this ends with a '/', a filename based on the "
        "package name, version, and format is appended, e.g. "
        "'name-space_name@1.0.0.wasm'. (default: ./)",
    )
    get.add_argument(
        "--format",
        choices=_FORMAT_CHOICES,
        default="auto",
        help="Output format. 'auto' detects the format from the output "
        "filename or package contents. (default: auto)",
    )
    get.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite any existing output file.",
    )
    get.add_argument(
        "--registry",
        metavar="DOMAIN",
        default=None,
        help="The registry domain to use. Overrides configuration file(s).",
    )

    subparsers.add_parser("doctor", help="Check the runtime environment.")
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_get(args: argparse.Namespace) -> int:
    """Dispatch a single-package get.

    Flow:
    1. Parse the package spec.
    2. Build the per-invocation client config (file + ``--registry``).
    3. Instantiate infra collaborators + the core service.
    4. Run the pipeline with Rich progress and report the written path.
    """
    from wkg.cli.progress import RichProgressHook
    from wkg.core.get_service import GetService
    from wkg.core.models import Format, OutputTarget, PackageSpec
    from wkg.infra.config_file import build_client_config
    from wkg.infra.oci_registry import OciRegistryClient
    from wkg.infra.wasm_tools import WasmToolsDecoder

    spec = PackageSpec.parse(args.package_spec)
    config = build_client_config(
        namespace=spec.package.namespace,
        registry_override=args.registry,
    )
    if args.registry:
        logger.debug("overriding registry for namespace %s: %s", spec.package.namespace, args.registry)

    service = GetService(
        OciRegistryClient(config),
        WasmToolsDecoder(),
        notify=console.status,
    )
    target = OutputTarget.from_user_path(args.output)

    with RichProgressHook() as hook:
        written = service.get(
            spec,
            target,
            requested_format=Format(args.format),
            overwrite=args.overwrite,
            progress_callback=hook,
        )

    console.result(f"Wrote '{written}'")
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from wkg.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the wkg CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    configure_logging(args.verbose)
    logger.debug("args: %r", args)

    if args.command == "doctor":
        return _handle_doctor()

    return _handle_get(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except WkgError as exc:
        console.labelled("Error:", "bold red", str(exc))
        if exc.hint:
            console.labelled("Hint:", "yellow", exc.hint)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.labelled(
            "Unexpected error.",
            "bold red",
            f"Please report this issue.\n  {type(exc).__name__}: {exc}",
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
