"""ecargraph: eCAR audit events to RDF triples for Dgraph."""

from ecargraph.errors import ConfigError
from ecargraph.errors import EcarGraphError
from ecargraph.errors import MalformedInputError
from ecargraph.filtering import compile_filter
from ecargraph.filtering import FilterSpec
from ecargraph.identity import IdentityTracker
from ecargraph.ingest import ConversionResult
from ecargraph.ingest import convert_file
from ecargraph.ingest import run
from ecargraph.records import AuditRecord
from ecargraph.triples import emit_triples

__all__ = [
    "AuditRecord",
    "ConfigError",
    "ConversionResult",
    "EcarGraphError",
    "FilterSpec",
    "IdentityTracker",
    "MalformedInputError",
    "compile_filter",
    "convert_file",
    "emit_triples",
    "run",
]
