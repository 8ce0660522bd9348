"""Bulk loading of converted triple files with ``dgraph live``."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ecargraph.config import GraphConfig
from ecargraph.config import LoaderConfig
from ecargraph.errors import LoaderError
from ecargraph.observability import timed

logger = logging.getLogger(__name__)


class BulkLoader:
    """Runs the external live loader and relays its output to the log."""

    def __init__(
        self,
        graph_config: GraphConfig | None = None,
        loader_config: LoaderConfig | None = None,
    ) -> None:
        self.graph_config = graph_config or GraphConfig()
        self.loader_config = loader_config or LoaderConfig()

    def command(self, path: str | Path) -> list[str]:
        """Build the loader argv for *path*."""
        cfg = self.loader_config
        return [
            cfg.binary,
            "live",
            "-f",
            str(path),
            f"--format={cfg.rdf_format}",
            f"--xidmap={cfg.xidmap}",
            f"--alpha={self.graph_config.alpha_addr}",
            f"--zero={self.graph_config.zero_addr}",
        ]

    def load(self, path: str | Path) -> int:
        """Load *path* and return the number of output lines relayed.

        Blocks until the loader exits.
        """
        argv = self.command(path)
        logger.info("Loading %s with %s", path, argv[0])
        with timed("loader.live"):
            try:
                proc = subprocess.Popen(
                    argv,
                    stdout=subprocess.PIPE,
                    text=True,
                )
            except OSError as exc:
                raise LoaderError(f"cannot start {argv[0]!r}: {exc}") from exc

            relayed = 0
            with proc:
                for line in proc.stdout or ():
                    logger.info("dgraph live: %s", line.rstrip("\n"))
                    relayed += 1
                returncode = proc.wait()

            if returncode != 0:
                raise LoaderError(
                    f"{argv[0]} live exited with status {returncode} for {path}"
                )
        return relayed
