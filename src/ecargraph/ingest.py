"""Ingestion driver: stream an eCAR JSON-lines file into an RDF triple file.

Each line goes through parse, filter, validate and emit in turn; the
triples of a record are written as one block as soon as they are built,
so a fatal error never leaves half a record in the output.
"""

from __future__ import annotations

import gzip
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from time import monotonic
from typing import TextIO

from ecargraph.config import IngestConfig
from ecargraph.errors import IngestCancelledError
from ecargraph.errors import IngestIOError
from ecargraph.errors import MalformedInputError
from ecargraph.filtering import FilterSpec
from ecargraph.filtering import matches
from ecargraph.identity import IdentityTracker
from ecargraph.observability import timed
from ecargraph.records import AuditRecord
from ecargraph.records import parse_line
from ecargraph.triples import emit_triples
from ecargraph.triples import render_block

logger = logging.getLogger(__name__)

GZIP_SUFFIX = ".gz"


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one source file."""

    source_path: Path
    output_path: Path
    records_emitted: int


# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------


def _stream_name(stream: object) -> str:
    return str(getattr(stream, "name", "<stream>"))


def open_source(path: str | Path) -> TextIO:
    """Open *path* for reading as text, gunzipping when it ends in ``.gz``."""
    path = Path(path)
    try:
        if path.name.endswith(GZIP_SUFFIX):
            return gzip.open(path, "rt", encoding="utf-8")
        return path.open("r", encoding="utf-8")
    except OSError as exc:
        raise IngestIOError(f"cannot open source ({exc})", path=str(path)) from exc


def _numbered_lines(source: TextIO) -> Iterator[tuple[int, str]]:
    line_no = 0
    while True:
        try:
            line = source.readline()
        except UnicodeDecodeError as exc:
            raise MalformedInputError("not valid UTF-8", line_no=line_no + 1) from exc
        except (OSError, EOFError) as exc:
            raise IngestIOError(
                f"cannot read source ({exc})", path=_stream_name(source)
            ) from exc
        if not line:
            return
        line_no += 1
        yield line_no, line


def _check_cancelled(
    cancel: threading.Event | None, deadline: float | None, line_no: int
) -> None:
    if cancel is not None and cancel.is_set():
        raise IngestCancelledError(f"cancelled before line {line_no}")
    if deadline is not None and monotonic() > deadline:
        raise IngestCancelledError(f"deadline exceeded before line {line_no}")


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def run(
    source: TextIO,
    sink: TextIO,
    filter_spec: FilterSpec | None = None,
    *,
    cancel: threading.Event | None = None,
    deadline: float | None = None,
) -> int:
    """Convert every accepted line of *source* into triples on *sink*.

    Returns the number of records emitted. Both streams are closed on
    return and on error. *deadline* is a ``time.monotonic()`` value.

    *cancel* and *deadline* are checked between lines only: a ``readline``
    that never returns (a FIFO whose writer stalls, for instance) is not
    interrupted. Bound such sources at the producer or close them from
    another thread.
    """
    tracker = IdentityTracker()
    emitted = 0
    try:
        with source, sink:
            for line_no, line in _numbered_lines(source):
                _check_cancelled(cancel, deadline, line_no)
                if not line.strip():
                    continue
                data = parse_line(line, line_no=line_no)
                if not matches(filter_spec, data):
                    continue
                record = AuditRecord.from_mapping(data, line_no=line_no)
                sink.write(render_block(emit_triples(record, tracker)))
                emitted += 1
    except OSError as exc:
        raise IngestIOError(
            f"cannot write triples ({exc})", path=_stream_name(sink)
        ) from exc
    return emitted


def convert_file(
    path: str | Path,
    *,
    filter_spec: FilterSpec | None = None,
    output_path: str | Path | None = None,
    config: IngestConfig | None = None,
    cancel: threading.Event | None = None,
) -> ConversionResult:
    """Convert *path* into ``<path><output_suffix>`` (or *output_path*)."""
    config = config or IngestConfig()
    source_path = Path(path)
    if output_path is None:
        target = source_path.with_name(source_path.name + config.output_suffix)
    else:
        target = Path(output_path)

    source = open_source(source_path)
    try:
        sink = target.open("w", encoding="utf-8", newline="\n")
    except OSError as exc:
        source.close()
        raise IngestIOError(f"cannot open output ({exc})", path=str(target)) from exc

    deadline = None
    if config.timeout_seconds is not None:
        deadline = monotonic() + config.timeout_seconds

    logger.info("Converting %s -> %s", source_path, target)
    with timed("ingest.convert"):
        emitted = run(source, sink, filter_spec, cancel=cancel, deadline=deadline)
    logger.info("Wrote %d records from %s", emitted, source_path)
    return ConversionResult(
        source_path=source_path,
        output_path=target,
        records_emitted=emitted,
    )
