"""Directory watch: convert and bulk-load eCAR files as they appear.

A ``watchdog`` observer thread only records paths; conversion and loading
run one file at a time on the thread calling ``serve``. A file is picked up
when it is created in the directory or renamed into it, and is converted
once it has gone ``settle_seconds`` without a further write event, so a
producer still writing the file is not read halfway.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from time import monotonic

from watchdog.events import FileSystemEvent
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ecargraph.config import IngestConfig
from ecargraph.config import WatchConfig
from ecargraph.errors import ConfigError
from ecargraph.errors import EcarGraphError
from ecargraph.filtering import FilterSpec
from ecargraph.graph.loader import BulkLoader
from ecargraph.ingest import ConversionResult
from ecargraph.ingest import convert_file

logger = logging.getLogger(__name__)


class PendingFiles:
    """Paths waiting to settle, in arrival order, with their last write time."""

    def __init__(self) -> None:
        self._changed = threading.Condition()
        self._last_write: dict[Path, float] = {}

    def __len__(self) -> int:
        with self._changed:
            return len(self._last_write)

    def add(self, path: Path) -> None:
        with self._changed:
            self._last_write[path] = monotonic()
            self._changed.notify_all()

    def touch(self, path: Path) -> None:
        """Restart the settle interval of *path* if it is waiting."""
        with self._changed:
            if path in self._last_write:
                self._last_write[path] = monotonic()
                self._changed.notify_all()

    def pop_settled(self, settle: float, timeout: float | None = None) -> Path | None:
        """Remove and return the first path quiet for *settle* seconds."""
        give_up = None if timeout is None else monotonic() + timeout
        with self._changed:
            while True:
                now = monotonic()
                wait = None
                for path, stamp in self._last_write.items():
                    ready_at = stamp + settle
                    if ready_at <= now:
                        del self._last_write[path]
                        return path
                    wait = ready_at - now if wait is None else min(wait, ready_at - now)
                if give_up is not None:
                    if give_up <= now:
                        return None
                    wait = give_up - now if wait is None else min(wait, give_up - now)
                self._changed.wait(wait)


class SourceFileHandler(FileSystemEventHandler):
    """Tracks files with an accepted suffix that appear in the directory."""

    def __init__(self, pending: PendingFiles, suffixes: tuple[str, ...]) -> None:
        super().__init__()
        self._pending = pending
        self._suffixes = suffixes

    def _accepted(self, raw_path: str | bytes) -> Path | None:
        path = os.fsdecode(raw_path)
        if path.endswith(self._suffixes):
            return Path(path)
        return None

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = self._accepted(event.src_path)
        if path is not None:
            logger.info("Queued new source file %s", path)
            self._pending.add(path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = self._accepted(event.dest_path)
        if path is not None:
            logger.info("Queued renamed source file %s", path)
            self._pending.add(path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._pending.touch(Path(os.fsdecode(event.src_path)))

    def on_closed(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._pending.touch(Path(os.fsdecode(event.src_path)))


class DirectoryWatcher:
    """Serializes file events into convert-then-load runs."""

    def __init__(
        self,
        loader: BulkLoader,
        *,
        watch_config: WatchConfig | None = None,
        ingest_config: IngestConfig | None = None,
        filter_spec: FilterSpec | None = None,
        observer_factory: Callable[[], Observer] = Observer,
    ) -> None:
        self.loader = loader
        self.watch_config = watch_config or WatchConfig()
        self.ingest_config = ingest_config or IngestConfig()
        self.filter_spec = filter_spec
        self._observer_factory = observer_factory
        self.pending = PendingFiles()
        self.handler = SourceFileHandler(self.pending, self.watch_config.suffixes)

    @property
    def directory(self) -> Path:
        return Path(self.watch_config.directory or os.getcwd())

    def process(self, path: Path) -> ConversionResult:
        """Convert *path* with a fresh identity tracker, then load the output."""
        result = convert_file(
            path,
            filter_spec=self.filter_spec,
            config=self.ingest_config,
        )
        self.loader.load(result.output_path)
        return result

    def process_next(self, timeout: float | None = None) -> ConversionResult | None:
        """Handle one settled file; ``None`` when idle or the file failed."""
        path = self.pending.pop_settled(self.watch_config.settle_seconds, timeout)
        if path is None:
            return None
        try:
            return self.process(path)
        except EcarGraphError:
            logger.exception("Failed to ingest %s", path)
            return None

    def serve(self, stop: threading.Event, *, poll_interval: float = 0.5) -> None:
        """Watch the directory until *stop* is set."""
        directory = self.directory
        if not directory.is_dir():
            raise ConfigError(f"watch directory does not exist: {directory}")

        observer = self._observer_factory()
        observer.schedule(self.handler, str(directory), recursive=False)
        observer.start()
        logger.info("Watching %s for %s", directory, ", ".join(self.watch_config.suffixes))
        try:
            while not stop.is_set():
                self.process_next(timeout=poll_interval)
        finally:
            observer.stop()
            observer.join()
