"""Root conftest: suite markers and the opt-in Dgraph testcontainer."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

import pytest
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load repository-root .env for test opt-ins (existing env vars stay authoritative).
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

_RUN_DGRAPH_TESTS = os.getenv("ECARGRAPH_RUN_DGRAPH_TESTS") == "1"
_DGRAPH_IMAGE = os.getenv("ECARGRAPH_DGRAPH_IMAGE", "dgraph/standalone:latest")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Attach suite markers from test path.

    - `tests/unit/*` -> `unit`
    - `tests/integration/*` -> `integration`
    """
    root = Path(__file__).resolve().parents[1]
    for item in items:
        item_path = Path(str(item.fspath)).resolve()
        try:
            rel = item_path.relative_to(root)
        except ValueError:
            continue

        parts = rel.parts
        if len(parts) < 2 or parts[0] != "tests":
            continue
        if parts[1] == "unit":
            item.add_marker(pytest.mark.unit)
        elif parts[1] == "integration":
            item.add_marker(pytest.mark.integration)


# ---------------------------------------------------------------------------
# Dgraph
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def dgraph_container():
    """Spin up a Dgraph standalone container and yield its alpha gRPC address.

    Session-scoped and opt-in via ``ECARGRAPH_RUN_DGRAPH_TESTS=1``.
    """
    if not _RUN_DGRAPH_TESTS:
        pytest.skip("set ECARGRAPH_RUN_DGRAPH_TESTS=1 to run Dgraph integration tests")

    import pydgraph
    from testcontainers.core.container import DockerContainer

    container = DockerContainer(_DGRAPH_IMAGE).with_exposed_ports(9080)
    with container as c:
        host = c.get_container_host_ip()
        port = c.get_exposed_port(9080)
        addr = f"{host}:{port}"

        max_attempts = 60
        for attempt in range(max_attempts):
            stub = pydgraph.DgraphClientStub(addr)
            try:
                pydgraph.DgraphClient(stub).txn(read_only=True).query("schema {}")
                break
            except Exception as exc:
                if attempt == max_attempts - 1:
                    raise
                logger.debug(
                    "Dgraph not ready (attempt %d/%d): %s",
                    attempt + 1,
                    max_attempts,
                    exc,
                )
                time.sleep(1)
            finally:
                stub.close()

        yield addr


@pytest.fixture()
def dgraph_client(dgraph_container):
    """Yield a pydgraph client connected to the test container."""
    import pydgraph

    stub = pydgraph.DgraphClientStub(dgraph_container)
    yield pydgraph.DgraphClient(stub)
    stub.close()
