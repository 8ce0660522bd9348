"""Command-line entry point.

Usage:
    ecargraph --write events.json.gz --only hostname:eq:host-1
    ecargraph --setup --load events.json.gz.txt
    ecargraph --watch --dir /var/log/ecar
"""

from __future__ import annotations

import argparse
import logging
import os
import threading
from pathlib import Path

from dotenv import load_dotenv

from ecargraph.config import GraphConfig
from ecargraph.config import IngestConfig
from ecargraph.config import LoaderConfig
from ecargraph.config import WatchConfig
from ecargraph.errors import ConfigError
from ecargraph.errors import EcarGraphError
from ecargraph.filtering import compile_filter
from ecargraph.ingest import convert_file
from ecargraph.observability import latency_metrics_snapshot

logger = logging.getLogger(__name__)

_SOURCE_SUFFIXES = (".json", ".json.gz")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    defaults = GraphConfig()
    loader_defaults = LoaderConfig()
    parser = argparse.ArgumentParser(
        prog="ecargraph",
        description="Convert eCAR JSON-lines audit events to RDF and load them into Dgraph.",
    )
    parser.add_argument("--write", metavar="PATH", help="convert a .json or .json.gz file to RDF triples")
    parser.add_argument(
        "--only",
        metavar="EXPR",
        help="keep only records matching predicate:search:value",
    )
    parser.add_argument(
        "--load",
        metavar="PATH",
        help="bulk-load a converted triple file, given by its own path (e.g. events.json.txt)",
    )
    parser.add_argument("--watch", action="store_true", help="watch a directory for new files")
    parser.add_argument("--dir", metavar="DIR", help="directory to watch (default: current)")
    parser.add_argument(
        "--url",
        default=os.getenv("ECARGRAPH_ALPHA", defaults.alpha_addr),
        help="Dgraph alpha gRPC address",
    )
    parser.add_argument(
        "--zero",
        default=os.getenv("ECARGRAPH_ZERO", defaults.zero_addr),
        help="Dgraph zero address",
    )
    parser.add_argument("--drop", action="store_true", help="drop all data in Dgraph")
    parser.add_argument("--setup", action="store_true", help="apply the eCAR schema")
    parser.add_argument(
        "--xidmap",
        default=os.getenv("ECARGRAPH_XIDMAP", loader_defaults.xidmap),
        help="identity map directory passed to the live loader",
    )
    parser.add_argument(
        "--dgraph-bin",
        default=os.getenv("ECARGRAPH_DGRAPH_BIN", loader_defaults.binary),
        help="dgraph executable",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="abort a conversion that runs longer than this",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=_LOG_LEVELS,
        help="logging level",
    )
    return parser


def _log_latency_summary() -> None:
    for operation, stats in latency_metrics_snapshot().items():
        logger.info(
            "latency %s count=%d errors=%d avg_ms=%.3f max_ms=%.3f",
            operation,
            stats["count"],
            stats["error_count"],
            stats["avg_ms"],
            stats["max_ms"],
        )


def _run(args: argparse.Namespace) -> int:
    filter_spec = compile_filter(args.only) if args.only is not None else None
    if args.dir and not args.watch:
        raise ConfigError('Must use "--watch" with "--dir"')
    if args.write and not args.write.endswith(_SOURCE_SUFFIXES):
        raise ConfigError(f"--write expects a .json or .json.gz file: {args.write}")

    graph_config = GraphConfig(alpha_addr=args.url, zero_addr=args.zero)
    loader_config = LoaderConfig(binary=args.dgraph_bin, xidmap=args.xidmap)
    ingest_config = IngestConfig(timeout_seconds=args.timeout)

    if args.write:
        result = convert_file(args.write, filter_spec=filter_spec, config=ingest_config)
        logger.info(
            "Wrote %s (%d records)", result.output_path, result.records_emitted
        )

    if args.drop or args.setup:
        from ecargraph.graph.schema import GraphAdmin

        with GraphAdmin(graph_config) as admin:
            if args.drop:
                admin.drop_all()
            if args.setup:
                admin.setup_schema()

    if args.load or args.watch:
        from ecargraph.graph.loader import BulkLoader

        loader = BulkLoader(graph_config, loader_config)
        if args.load:
            loader.load(args.load)
        if args.watch:
            from ecargraph.watch import DirectoryWatcher

            watcher = DirectoryWatcher(
                loader,
                watch_config=WatchConfig(directory=args.dir),
                ingest_config=ingest_config,
                filter_spec=filter_spec,
            )
            try:
                watcher.serve(threading.Event())
            except KeyboardInterrupt:
                logger.info("Stopped watching")
    return 0


def main(argv: list[str] | None = None) -> int:
    # Existing environment variables stay authoritative over .env
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    if not any((args.write, args.load, args.watch, args.drop, args.setup, args.dir)):
        parser.error("nothing to do: pass --write, --load, --watch, --drop or --setup")

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return _run(args)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except EcarGraphError as exc:
        logger.error("%s", exc)
        return 1
    finally:
        _log_latency_summary()
