"""Tests for the Rich progress adapter (cli/progress.py).

The hook is exercised as a plain callback; Rich renders to the captured
stderr stream.
"""

from __future__ import annotations

import importlib.util

import pytest

from wkg.cli.progress import RichProgressHook, _safe_int

requires_rich = pytest.mark.skipif(
    importlib.util.find_spec("rich") is None,
    reason="rich not installed",
)


@requires_rich
class TestRichProgressHook:
    def test_downloading_creates_task(self) -> None:
        with RichProgressHook() as hook:
            hook({
                "status": "downloading",
                "downloaded_bytes": 1024,
                "total_bytes": 10240,
                "filename": "wasi:cli@0.2.0",
            })
            task = hook._progress.tasks[0]
            assert task.description == "wasi:cli@0.2.0"
            assert (task.completed, task.total) == (1024, 10240)

    def test_finished_completes_bar(self) -> None:
        with RichProgressHook() as hook:
            hook({"status": "downloading", "downloaded_bytes": 5000, "total_bytes": 10000})
            hook({"status": "finished"})
            assert hook._progress.tasks[0].completed == 10000

    def test_finished_without_size_closes_at_received(self) -> None:
        with RichProgressHook() as hook:
            hook({"status": "downloading", "downloaded_bytes": 300, "total_bytes": None})
            hook({"status": "finished"})
            task = hook._progress.tasks[0]
            assert (task.completed, task.total) == (300, 300)

    def test_long_names_truncated(self) -> None:
        with RichProgressHook() as hook:
            hook({"status": "downloading", "downloaded_bytes": 1, "filename": "x" * 80})
            assert len(hook._progress.tasks[0].description) == 50

    def test_ignored_before_start(self) -> None:
        hook = RichProgressHook()
        hook({"status": "downloading", "downloaded_bytes": 100})
        assert hook._progress.tasks == []

    def test_stop_is_idempotent(self) -> None:
        hook = RichProgressHook()
        hook.start()
        hook.stop()
        hook.stop()
        assert not hook._started

    def test_unknown_status_no_crash(self) -> None:
        with RichProgressHook() as hook:
            hook({"status": "unknown_event"})
            assert hook._progress.tasks == []


class TestSafeInt:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(5, 5), (5.9, 5), ("12", 12), (None, None), (True, None), ("abc", None), ([1], None)],
    )
    def test_conversion(self, value: object, expected: int | None) -> None:
        assert _safe_int(value) == expected
