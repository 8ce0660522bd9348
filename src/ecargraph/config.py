"""Application configuration dataclasses.

Frozen dataclasses with sensible defaults for each subsystem. Defaults
match a local single-node Dgraph deployment; the CLI overrides them from
flags and environment variables.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GraphConfig:
    """Addresses of the Dgraph cluster."""

    alpha_addr: str = "localhost:9080"
    zero_addr: str = "localhost:6080"


@dataclass(frozen=True)
class LoaderConfig:
    """Settings for the ``dgraph live`` bulk loader invocation."""

    binary: str = "dgraph"
    rdf_format: str = "rdf"
    # Identity map shared across loads so blank nodes coalesce between files
    xidmap: str = "xid_uid"


@dataclass(frozen=True)
class IngestConfig:
    """Tuneable parameters for one conversion pass."""

    output_suffix: str = ".txt"
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class WatchConfig:
    """Directory watch settings."""

    directory: str | None = None
    suffixes: tuple[str, ...] = (".json", ".json.gz")
    # A queued file is converted once no write event arrived for this long
    settle_seconds: float = 1.0
