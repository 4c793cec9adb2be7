"""ArangoDB Resource for Dagster.

Every person is a vertex in `persons` and every application is a directed
`candidate_of` edge between two persons. Schema creation is idempotent and
safe when two processes bootstrap the same database at once.
"""

import os
from contextlib import contextmanager
from typing import Optional, Dict, Any, List
from dagster import ConfigurableResource
from dotenv import load_dotenv
from arango import ArangoClient
from arango.database import StandardDatabase
from arango.collection import StandardCollection
from arango.exceptions import ArangoServerError
from arango.graph import Graph


load_dotenv()

# Default connection settings - overridden by env vars
DEFAULT_HOST = "localhost"
DEFAULT_PORT = "8529"
DEFAULT_USER = "root"
DEFAULT_PASSWORD = ""
DEFAULT_DB = "candidacy_graph"
DEFAULT_REQUEST_TIMEOUT = 60

HTTP_CONFLICT = 409


@contextmanager
def tolerate_duplicate():
    """Treat "duplicate name" (HTTP 409) from a create call as success."""
    try:
        yield
    except ArangoServerError as e:
        if getattr(e, "http_code", None) != HTTP_CONFLICT:
            raise


class ArangoDBResource(ConfigurableResource):
    """
    Dagster resource for ArangoDB connections.

    Settings come from ARANGO_HOST, ARANGO_PORT, ARANGO_USER, ARANGO_PASSWORD
    and ARANGO_DB (defaults: localhost, 8529, root, empty, candidacy_graph).
    """
    
    host: str = os.environ.get("ARANGO_HOST", DEFAULT_HOST)
    """ArangoDB host"""
    
    port: str = os.environ.get("ARANGO_PORT", DEFAULT_PORT)
    """ArangoDB port"""
    
    username: str = os.environ.get("ARANGO_USER", DEFAULT_USER)
    """ArangoDB username"""
    
    password: str = os.environ.get("ARANGO_PASSWORD", DEFAULT_PASSWORD)
    """ArangoDB password"""
    
    database: str = os.environ.get("ARANGO_DB", DEFAULT_DB)
    """ArangoDB database name"""

    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    """Per-request HTTP timeout in seconds"""
    
    @contextmanager
    def get_client(self):
        """ArangoDB client, closed with its HTTP session on every exit path."""
        from arango.http import DefaultHTTPClient

        client = ArangoClient(
            hosts=f"http://{self.host}:{self.port}",
            http_client=DefaultHTTPClient(request_timeout=self.request_timeout),
        )
        try:
            yield client
        finally:
            client.close()
    
    def get_database(
        self,
        client: ArangoClient,
        database_name: Optional[str] = None,
        create_if_missing: bool = False
    ) -> StandardDatabase:
        """
        Open a database handle, optionally creating the database first.

        Without `create_if_missing` no request is sent; a missing database
        only shows up when the first query runs.
        """
        db_name = database_name or self.database

        if create_if_missing:
            sys_db = client.db("_system", username=self.username, password=self.password)
            if not sys_db.has_database(db_name):
                with tolerate_duplicate():
                    sys_db.create_database(db_name)

        return client.db(db_name, username=self.username, password=self.password)

    def get_collection(
        self,
        db: StandardDatabase,
        collection_name: str,
        create_if_missing: bool = True,
        edge: bool = False
    ) -> StandardCollection:
        """Collection handle; a concurrent creator winning the race is fine."""
        if create_if_missing and not db.has_collection(collection_name):
            with tolerate_duplicate():
                db.create_collection(collection_name, edge=edge)

        return db.collection(collection_name)

    def ensure_graph(
        self,
        db: StandardDatabase,
        graph_name: str,
        edge_definitions: List[Dict[str, Any]]
    ) -> Graph:
        """Named graph over `edge_definitions`, created on first use."""
        if not db.has_graph(graph_name):
            with tolerate_duplicate():
                db.create_graph(graph_name, edge_definitions=edge_definitions)

        return db.graph(graph_name)

    def execute_aql(
        self,
        db: StandardDatabase,
        query: str,
        bind_vars: Optional[Dict[str, Any]] = None,
        batch_size: int = 1000
    ):
        """Run AQL on a StandardDatabase or a TransactionDatabase and return the cursor."""
        return db.aql.execute(query, bind_vars=bind_vars or {}, batch_size=batch_size)

    def ping(self, client: ArangoClient) -> bool:
        """
        Check that the server answers with the configured credentials.

        Raises whatever the driver raises when the server is unreachable;
        callers translate that into StoreUnavailable.
        """
        sys_db = client.db("_system", username=self.username, password=self.password)
        return bool(sys_db.version())


# Default resource instance - uses env vars
arango_resource = ArangoDBResource(
    host=os.environ.get("ARANGO_HOST", DEFAULT_HOST),
    port=os.environ.get("ARANGO_PORT", DEFAULT_PORT),
    username=os.environ.get("ARANGO_USER", DEFAULT_USER),
    password=os.environ.get("ARANGO_PASSWORD", DEFAULT_PASSWORD),
    database=os.environ.get("ARANGO_DB", DEFAULT_DB),
)
