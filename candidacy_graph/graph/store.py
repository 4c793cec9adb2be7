"""Graph Store adapter - sessions, transactions and AQL for the candidacy graph.

Collections:
- persons: Person vertices
- candidate_of: CandidacyEdge edges (persons → persons)

Named Graph: candidacy

Every public method opens its own client session through ArangoDBResource and
closes it on every exit path. Driver and server failures are translated into
the StoreUnavailable / StoreQueryError taxonomy here, so nothing above this
module ever sees a python-arango exception.

Consistency:
    replace_graph runs the reset, the upserts and the count read-back in one
    ArangoDB stream transaction with exclusive locks on both collections.
    Concurrent readers see either the previous graph or the new one, never
    an emptied or half-written graph. Each read below is a single AQL query
    and therefore reads one consistent snapshot.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List

import requests
from arango.exceptions import ArangoError, ArangoServerError, ServerConnectionError

from candidacy_graph.errors import CandidacyGraphError, StoreQueryError, StoreUnavailable
from candidacy_graph.models import (
    CANDIDATE_OF_COLLECTION,
    GRAPH_NAME,
    PERSONS_COLLECTION,
    CandidacyEdge,
    EdgeRow,
    GraphCounts,
    Person,
)
from candidacy_graph.resources.arango import ArangoDBResource

logger = logging.getLogger(__name__)


EDGE_DEFINITIONS = [
    {
        "edge_collection": CANDIDATE_OF_COLLECTION,
        "from_vertex_collections": [PERSONS_COLLECTION],
        "to_vertex_collections": [PERSONS_COLLECTION],
    }
]

RESET_EDGES_AQL = f"FOR e IN {CANDIDATE_OF_COLLECTION} REMOVE e IN {CANDIDATE_OF_COLLECTION}"
RESET_PERSONS_AQL = f"FOR p IN {PERSONS_COLLECTION} REMOVE p IN {PERSONS_COLLECTION}"

# First sight takes the supplied name, later sights refresh it only when non-null
UPSERT_PERSONS_AQL = f"""
FOR doc IN @batch
    UPSERT {{ _key: doc._key }}
    INSERT doc
    UPDATE {{
        full_name: NOT_NULL(doc.full_name, OLD.full_name),
        updated_at: doc.updated_at
    }}
    IN {PERSONS_COLLECTION}
"""

# Priority is overwritten unconditionally, null included
UPSERT_EDGES_AQL = f"""
FOR doc IN @batch
    UPSERT {{ _key: doc._key }}
    INSERT doc
    UPDATE {{
        priority: doc.priority,
        updated_at: doc.updated_at
    }}
    IN {CANDIDATE_OF_COLLECTION}
"""

COUNTS_AQL = f"""
RETURN {{
    nodes: LENGTH({PERSONS_COLLECTION}),
    edges: LENGTH(
        FOR e IN {CANDIDATE_OF_COLLECTION}
            FILTER IS_SAME_COLLECTION("{PERSONS_COLLECTION}", e._from)
            FILTER IS_SAME_COLLECTION("{PERSONS_COLLECTION}", e._to)
            RETURN 1
    )
}}
"""

EDGE_ROWS_AQL = f"""
FOR e IN {CANDIDATE_OF_COLLECTION}
    LET a = DOCUMENT(e._from)
    LET b = DOCUMENT(e._to)
    FILTER a != null AND b != null
    RETURN {{
        from_id: a.user_id,
        from_name: a.full_name,
        to_id: b.user_id,
        to_name: b.full_name,
        priority: e.priority
    }}
"""


# python-arango gives up on unreachable hosts with the builtin ConnectionAbortedError
UNREACHABLE_ERRORS = (
    ServerConnectionError,
    ConnectionError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)

# Database or collection not created yet: reads see an empty graph
DATABASE_NOT_FOUND = 1228
DATA_SOURCE_NOT_FOUND = 1203
MISSING_SCHEMA_ERRORS = {DATABASE_NOT_FOUND, DATA_SOURCE_NOT_FOUND}


@contextmanager
def translate_errors(query_name: str):
    """Map driver/server failures onto the store error taxonomy."""
    try:
        yield
    except CandidacyGraphError:
        raise
    except UNREACHABLE_ERRORS as e:
        logger.warning(f"ArangoDB unreachable during {query_name}: {e}")
        raise StoreUnavailable(f"Graph store unavailable during {query_name}: {e}") from e
    except ArangoServerError as e:
        if getattr(e, "http_code", None) == 503:
            logger.warning(f"ArangoDB not ready during {query_name}: {e}")
            raise StoreUnavailable(f"Graph store not ready during {query_name}: {e}") from e
        logger.error(f"ArangoDB rejected {query_name}: {e}")
        raise StoreQueryError(f"{query_name} failed: {e}", query_name=query_name) from e
    except ArangoError as e:
        logger.error(f"ArangoDB client error during {query_name}: {e}")
        raise StoreQueryError(f"{query_name} failed: {e}", query_name=query_name) from e


def _batches(docs: List[Dict[str, Any]], batch_size: int) -> Iterable[List[Dict[str, Any]]]:
    for i in range(0, len(docs), batch_size):
        yield docs[i:i + batch_size]


class CandidacyGraphStore:
    """Session-oriented access to the `candidacy` graph in ArangoDB.

    Only writes create schema. The first replace_graph (or an explicit
    bootstrap) creates the database, both collections and the named graph;
    read sessions just open the database and treat a missing schema as an
    empty graph.

    Args:
        arango: Connection settings and client factory
        batch_size: Documents per UPSERT query during replace_graph
    """

    def __init__(self, arango: ArangoDBResource, batch_size: int = 5000):
        self.arango = arango
        self.batch_size = batch_size
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    # ==========================================================================
    # Sessions
    # ==========================================================================

    @contextmanager
    def session(self, bootstrap: bool = False):
        """Yield a database handle; close the client after.

        With `bootstrap` the schema is created first (once per store).
        """
        with self.arango.get_client() as client:
            with translate_errors("connect"):
                db = self.arango.get_database(client, create_if_missing=bootstrap and not self._schema_ready)
                if bootstrap:
                    self._ensure_schema_once(db)
            yield db

    def _ensure_schema_once(self, db) -> None:
        with self._schema_lock:
            if self._schema_ready:
                return
            self.ensure_schema(db)
            self._schema_ready = True

    def ensure_schema(self, db) -> None:
        """Create both collections and the named graph if missing. Idempotent."""
        self.arango.get_collection(db, PERSONS_COLLECTION)
        self.arango.get_collection(db, CANDIDATE_OF_COLLECTION, edge=True)
        self.arango.ensure_graph(db, GRAPH_NAME, EDGE_DEFINITIONS)

    def bootstrap(self) -> None:
        """Create the database, collections and named graph if missing."""
        with self.session(bootstrap=True):
            pass

    # ==========================================================================
    # Writes
    # ==========================================================================

    def replace_graph(self, persons: List[Person], edges: List[CandidacyEdge]) -> GraphCounts:
        """Atomically replace the whole graph and return the resulting counts.

        `persons` and `edges` must already be de-duplicated by key. On any
        failure the transaction is aborted and the previous graph stays
        visible.
        """
        person_docs = [p.to_arango_doc() for p in persons]
        edge_docs = [e.to_arango_doc() for e in edges]

        with self.session(bootstrap=True) as db:
            with translate_errors("begin_transaction"):
                txn_db = db.begin_transaction(
                    exclusive=[PERSONS_COLLECTION, CANDIDATE_OF_COLLECTION],
                )
            try:
                with translate_errors("reset_graph"):
                    self.arango.execute_aql(txn_db, RESET_EDGES_AQL)
                    self.arango.execute_aql(txn_db, RESET_PERSONS_AQL)

                with translate_errors("upsert_persons"):
                    for batch in _batches(person_docs, self.batch_size):
                        self.arango.execute_aql(txn_db, UPSERT_PERSONS_AQL, bind_vars={"batch": batch})

                with translate_errors("upsert_edges"):
                    for batch in _batches(edge_docs, self.batch_size):
                        self.arango.execute_aql(txn_db, UPSERT_EDGES_AQL, bind_vars={"batch": batch})

                counts = self._read_counts(txn_db)

                with translate_errors("commit_transaction"):
                    txn_db.commit_transaction()
            except Exception:
                self._abort(txn_db)
                raise

        logger.info(f"Replaced graph: {counts.node_count} persons, {counts.edge_count} edges")
        return counts

    def _abort(self, txn_db) -> None:
        # the original failure is what the caller sees; abort problems are only logged
        try:
            txn_db.abort_transaction()
        except (ArangoError,) + UNREACHABLE_ERRORS as e:
            logger.error(f"Failed to abort rebuild transaction: {e}")

    # ==========================================================================
    # Reads
    # ==========================================================================

    def _read_rows(self, db, query_name: str, query: str) -> List[Dict[str, Any]]:
        with translate_errors(query_name):
            try:
                return list(self.arango.execute_aql(db, query))
            except ArangoServerError as e:
                if getattr(e, "error_code", None) not in MISSING_SCHEMA_ERRORS:
                    raise
                logger.info(f"{query_name}: graph schema not created yet, reading as empty")
                return []

    def counts(self) -> GraphCounts:
        with self.session() as db:
            return self._read_counts(db)

    def _read_counts(self, db) -> GraphCounts:
        rows = self._read_rows(db, "count_graph", COUNTS_AQL)
        row = rows[0] if rows else {}
        return GraphCounts(node_count=row.get("nodes", 0), edge_count=row.get("edges", 0))

    def fetch_edges(self) -> List[EdgeRow]:
        """Every candidacy edge joined with both endpoints, in store order."""
        with self.session() as db:
            rows = self._read_rows(db, "fetch_edges", EDGE_ROWS_AQL)
        return [EdgeRow(**row) for row in rows]

    def ping(self) -> bool:
        """True when the server answers. Raises StoreUnavailable otherwise."""
        with self.arango.get_client() as client:
            with translate_errors("ping"):
                return self.arango.ping(client)
