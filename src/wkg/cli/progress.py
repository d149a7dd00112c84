"""Rich-based progress display driven by fetch progress callbacks.

This module bridges the progress dicts emitted by
:class:`~wkg.core.fetcher.ArtifactFetcher` with a Rich
:class:`~rich.progress.Progress` bar.  It is used by the CLI layer — the
core only forwards the raw dicts.

Design
------
* The :class:`RichProgressHook` manages a Rich Progress context.
* :meth:`__call__` is the callback passed to the fetcher via the service.
* Shutdown-safe: if the progress bar is already stopped, calls are
  silently ignored.
* No ``print()`` — Rich handles all rendering.
"""

from __future__ import annotations

from typing import Any

from wkg.cli.console import get_rich_console
from wkg.exceptions import EnvironmentError


class RichProgressHook:
    """Callable progress-hook adapter for Rich.

    Usage::

        with RichProgressHook() as hook:
            service.get(spec, target, progress_callback=hook)
    """

    def __init__(self) -> None:
        try:
            from rich.progress import (
                BarColumn,
                DownloadColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeRemainingColumn,
                TransferSpeedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=get_rich_console(),
            transient=True,
        )
        self._task_id: int | None = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichProgressHook:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the Rich progress display."""
        if not self._started:
            self._progress.start()
            self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Hook callback
    # ------------------------------------------------------------------

    def __call__(self, d: dict[str, Any]) -> None:
        """Fetch progress callback.

        Parameters
        ----------
        d:
            A dict with at least ``"status"`` key: ``"downloading"`` or
            ``"finished"``.
        """
        if not self._started:
            return

        status: str = d.get("status", "")

        if status == "downloading":
            self._handle_downloading(d)
        elif status == "finished":
            self._handle_finished()

    # ------------------------------------------------------------------
    # Internal handlers
    # ------------------------------------------------------------------

    def _handle_downloading(self, d: dict[str, Any]) -> None:
        """Update progress bar with download metrics."""
        total: int | None = _safe_int(d.get("total_bytes"))
        downloaded: int = _safe_int(d.get("downloaded_bytes")) or 0

        if self._task_id is None:
            display_name: str = d.get("filename") or "Downloading"
            if len(display_name) > 50:
                display_name = display_name[:47] + "..."
            self._task_id = self._progress.add_task(display_name, total=total)

        if total is not None:
            self._progress.update(self._task_id, total=total, completed=downloaded)
        else:
            self._progress.update(self._task_id, completed=downloaded)

    def _handle_finished(self) -> None:
        """Mark the current task as complete.

        Registries may omit the blob size; the bar is then closed at
        whatever was received.
        """
        if self._task_id is None:
            return
        task = self._progress.tasks[self._task_id]
        if task.total is None:
            self._progress.update(self._task_id, total=task.completed)
        else:
            self._progress.update(self._task_id, completed=task.total)


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

def _safe_int(value: object) -> int | None:
    """Convert *value* to ``int`` or return ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float, str)):
            return int(value)
        return None
    except (TypeError, ValueError):
        return None
