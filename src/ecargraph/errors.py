"""Error taxonomy shared by the conversion pipeline and its collaborators."""

from __future__ import annotations


class EcarGraphError(Exception):
    """Base class for every error raised by ecargraph."""


class ConfigError(EcarGraphError):
    """Invalid startup configuration (filter expression, CLI combination)."""


class MalformedInputError(EcarGraphError):
    """A source line cannot be converted; fatal for the current stream pass."""

    def __init__(self, message: str, *, line_no: int | None = None) -> None:
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no


class FilterEvaluationError(EcarGraphError):
    """A filter predicate could not be evaluated against a record."""


class IngestIOError(EcarGraphError):
    """A source or output file could not be opened, read or written."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class IngestCancelledError(EcarGraphError):
    """A stream pass was cancelled or ran past its deadline."""


class GraphAdminError(EcarGraphError):
    """A schema operation against the graph store failed."""


class LoaderError(EcarGraphError):
    """The external bulk loader could not be run or exited non-zero."""
