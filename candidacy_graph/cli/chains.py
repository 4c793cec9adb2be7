#!/usr/bin/env python3
"""Candidacy graph from the command line.

Usage:
    python -m candidacy_graph.cli.chains build --data-dir data
    python -m candidacy_graph.cli.chains chains --max-length 5
    python -m candidacy_graph.cli.chains edges
    python -m candidacy_graph.cli.chains counts

Every command prints the operation payload as JSON. Failures print the error
kind and message to stderr and exit non-zero.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from candidacy_graph.config import DATA_DIR, MAX_CHAIN_LENGTH
from candidacy_graph.data import RecordRepository
from candidacy_graph.graph import CandidacyGraphStore
from candidacy_graph.resources import arango_resource
from candidacy_graph.service import GraphService, OperationResult, VALIDATION_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build and query the candidacy graph")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at INFO level")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Rebuild the graph from a record snapshot")
    build.add_argument("--data-dir", default=DATA_DIR, help=f"Snapshot directory (default: {DATA_DIR})")

    chains = sub.add_parser("chains", help="List interlocking chains")
    chains.add_argument("--max-length", type=int, default=MAX_CHAIN_LENGTH,
                        help=f"Longest chain to look for (default: {MAX_CHAIN_LENGTH})")

    sub.add_parser("edges", help="List every candidacy edge")
    sub.add_parser("counts", help="Count persons and edges")
    sub.add_parser("health", help="Check that the store answers")
    return parser


def run_command(service: GraphService, args: argparse.Namespace) -> OperationResult:
    if args.command == "build":
        try:
            applications, names_by_id = RecordRepository(args.data_dir).load_rebuild_input()
        except FileNotFoundError as e:
            return OperationResult.failure(VALIDATION_ERROR, str(e))
        return service.rebuild_graph(applications, names_by_id)
    if args.command == "chains":
        return service.find_chains(args.max_length)
    if args.command == "edges":
        return service.list_edges()
    if args.command == "counts":
        return service.counts()
    return service.check_health()


def main(argv: Optional[List[str]] = None, service: Optional[GraphService] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if service is None:
        service = GraphService(CandidacyGraphStore(arango_resource))

    result = run_command(service, args)
    if not result.ok:
        print(f"ERROR [{result.error}]: {result.message}", file=sys.stderr)
        return 1

    print(json.dumps(result.payload, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
