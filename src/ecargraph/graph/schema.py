"""Dgraph schema administration for eCAR v0.3 data.

``GraphAdmin`` wraps a ``pydgraph`` client over gRPC. Only two operations
are exposed: applying the indexed-predicate schema and dropping all data.
Both are idempotent from the caller's point of view.
"""

from __future__ import annotations

import logging

import pydgraph

from ecargraph.config import GraphConfig
from ecargraph.errors import GraphAdminError
from ecargraph.observability import timed

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Schema (eCAR v0.3)
# ---------------------------------------------------------------------------

ECAR_SCHEMA = """
action: [uid] .
actorID: string @index(hash) .
acts_on: [uid] .
dgraph.graphql.schema: string .
object: string @index(exact) .
objectID: string @index(hash) .
action_type: string @index(exact) .
hostname: string @index(exact) .
ppid: string @index(exact) .
timestamp: string .
pid: string @index(exact) .
id: string @index(hash) .
"""


class GraphAdmin:
    """Schema setup and drop-all against a Dgraph alpha.

    Use as a context manager so the gRPC stub is closed::

        with GraphAdmin(GraphConfig()) as admin:
            admin.setup_schema()
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        *,
        client: pydgraph.DgraphClient | None = None,
    ) -> None:
        self.config = config or GraphConfig()
        self._stub: pydgraph.DgraphClientStub | None = None
        if client is None:
            self._stub = pydgraph.DgraphClientStub(self.config.alpha_addr)
            client = pydgraph.DgraphClient(self._stub)
        self._client = client

    def __enter__(self) -> GraphAdmin:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._stub is not None:
            self._stub.close()
            self._stub = None

    def _alter(self, operation: pydgraph.Operation, *, name: str) -> None:
        try:
            with timed(f"graph.{name}"):
                self._client.alter(operation)
        except Exception as exc:
            raise GraphAdminError(
                f"{name} failed on {self.config.alpha_addr}: {exc}"
            ) from exc

    def setup_schema(self) -> None:
        """Apply ``ECAR_SCHEMA``."""
        self._alter(pydgraph.Operation(schema=ECAR_SCHEMA), name="setup")
        logger.info("Applied eCAR schema on %s", self.config.alpha_addr)

    def drop_all(self) -> None:
        """Drop every predicate and all data."""
        self._alter(pydgraph.Operation(drop_all=True), name="drop_all")
        logger.warning("Dropped all data on %s", self.config.alpha_addr)
