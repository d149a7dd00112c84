"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from wkg.exceptions import EnvironmentError

_MARKUP_RE = re.compile(r"\[/?[a-z ]+\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True)


def strip_markup(text: str) -> str:
	"""Drop simple Rich markup tags such as ``[bold red]`` and ``[/bold red]``."""
	return _MARKUP_RE.sub("", text)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*(strip_markup(str(obj)) for obj in objects), file=sys.stderr)
			return
		rich_console.print(*objects)

	def status(self, message: str) -> None:
		"""Print a plain status line without markup interpretation."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(message, file=sys.stderr)
			return
		rich_console.print(message, markup=False, highlight=False)

	def labelled(self, label: str, style: str, text: str) -> None:
		"""Print a styled *label* followed by *text*, never parsed as markup."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(label, text, file=sys.stderr)
			return
		from rich.text import Text

		rich_console.print(Text.assemble((label, style), " ", text))

	def result(self, message: str) -> None:
		"""Print the command's outcome line on stdout."""
		print(message, file=sys.stdout)


console = _ConsoleProxy()
