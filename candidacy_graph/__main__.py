"""
Startup check: verifies ArangoDB settings, waits for the store to be ready
and creates the candidacy graph schema if it is missing.

Exits 1 when settings are missing and 2 when the store never became ready
or the schema could not be created.
"""
import logging
import sys

from candidacy_graph.config import STORE_BACKOFF_SECONDS, STORE_RETRIES
from candidacy_graph.errors import StoreQueryError, StoreUnavailable
from candidacy_graph.graph import CandidacyGraphStore
from candidacy_graph.resources import arango_resource
from candidacy_graph.service import GraphService
from candidacy_graph.utils.preflight import check_settings_presence


def main() -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    print("Checking ArangoDB settings...")
    ok, errors = check_settings_presence()
    if not ok:
        print("Preflight failed:")
        for e in errors:
            print(f" - {e}")
        return 1

    print(f"Waiting for ArangoDB at {arango_resource.host}:{arango_resource.port}...")
    store = CandidacyGraphStore(arango_resource)
    service = GraphService(store, backoff_factor=STORE_BACKOFF_SECONDS)
    result = service.warm_up(STORE_RETRIES)
    if not result.ok or not result.payload.get("ready"):
        print("ArangoDB: not ready.")
        return 2

    try:
        store.bootstrap()
    except (StoreUnavailable, StoreQueryError) as e:
        print(f"ArangoDB: schema setup failed ({e}).")
        return 2

    counts = service.counts()
    if counts.ok:
        print(f"ArangoDB: ready. {counts.payload['nodeCount']} persons, {counts.payload['edgeCount']} edges.")
    else:
        print(f"ArangoDB: ready, but counting failed ({counts.message}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
