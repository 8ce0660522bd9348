"""Graph store collaborators: Dgraph schema administration and bulk loading.

Exports are loaded lazily so the loader can be used without importing the
gRPC client stack.
"""

from __future__ import annotations

from importlib import import_module

__all__ = [
    "BulkLoader",
    "ECAR_SCHEMA",
    "GraphAdmin",
]


_EXPORT_TO_MODULE = {
    "BulkLoader": "ecargraph.graph.loader",
    "ECAR_SCHEMA": "ecargraph.graph.schema",
    "GraphAdmin": "ecargraph.graph.schema",
}


def __getattr__(name: str):
    module_name = _EXPORT_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(module_name)
    return getattr(module, name)
