"""Tests for watch mode event handling."""

import asyncio
import tempfile
from pathlib import Path

from watchdog.events import DirModifiedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from deptrace.monitor import ReportWatcher


def _watcher(root: Path, regenerate=lambda: True, **kwargs) -> ReportWatcher:
    return ReportWatcher(
        root,
        regenerate,
        report_path=root / "dependency-report.md",
        exclude_dirs=["dist"],
        **kwargs,
    )


def test_should_process_source_files():
    """Source and stylesheet changes are processed."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        watcher = _watcher(root)

        assert watcher._should_process(FileModifiedEvent(str(root / "src" / "a.js")))
        assert watcher._should_process(FileCreatedEvent(str(root / "src" / "theme.less")))
        assert watcher._should_process(FileMovedEvent(str(root / "a.txt"), str(root / "a.tsx")))


def test_should_not_process_other_changes():
    """The report itself, other files, ignored folders and directories are skipped."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        watcher = _watcher(root)

        assert not watcher._should_process(FileModifiedEvent(str(root / "dependency-report.md")))
        assert not watcher._should_process(FileModifiedEvent(str(root / "README.txt")))
        assert not watcher._should_process(FileModifiedEvent(str(root / "node_modules" / "x" / "index.js")))
        assert not watcher._should_process(FileModifiedEvent(str(root / "dist" / "bundle.js")))
        assert not watcher._should_process(DirModifiedEvent(str(root / "src")))


def test_pending_update_is_debounced():
    """An update is taken only after events settle for update_delay."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        watcher = _watcher(root, update_delay=2.0)

        assert not watcher.take_pending()

        watcher.on_any_event(FileModifiedEvent(str(root / "src" / "a.js")))
        assert watcher.pending_update

        last = watcher.last_event_time
        assert not watcher.take_pending(now=last + 1.0)
        assert watcher.take_pending(now=last + 2.5)
        assert not watcher.take_pending(now=last + 5.0)


def test_process_updates_calls_regenerate():
    """A pending update runs the regenerate callback once."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        calls = []

        def regenerate():
            calls.append(True)
            watcher.running = False
            return True

        watcher = _watcher(root, regenerate=regenerate, update_delay=0)
        watcher.pending_update = True
        watcher.running = True

        asyncio.run(watcher.process_updates())

        assert calls == [True]
        assert not watcher.pending_update


def test_process_updates_survives_errors():
    """An exception from regenerate is logged, not raised."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)

        def regenerate():
            watcher.running = False
            raise RuntimeError("boom")

        watcher = _watcher(root, regenerate=regenerate, update_delay=0)
        watcher.pending_update = True
        watcher.running = True

        asyncio.run(watcher.process_updates())

        assert not watcher.running
