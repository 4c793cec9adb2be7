"""Tests for the ArangoDB store adapter, with the driver mocked out."""

from unittest.mock import MagicMock

import pytest
import requests
from arango.exceptions import ArangoServerError, ServerConnectionError

from candidacy_graph.errors import StoreQueryError, StoreUnavailable
from candidacy_graph.graph.store import (
    COUNTS_AQL,
    EDGE_ROWS_AQL,
    RESET_EDGES_AQL,
    RESET_PERSONS_AQL,
    UPSERT_EDGES_AQL,
    UPSERT_PERSONS_AQL,
    CandidacyGraphStore,
    translate_errors,
)
from candidacy_graph.models import CandidacyEdge, Person


def server_error(cls=ArangoServerError, http_code=500, error_code=None):
    """Driver exception without a real HTTP response behind it."""
    error = cls.__new__(cls)
    error.http_code = http_code
    error.error_code = error_code
    return error


def make_arango(rows_by_query=None, fail_on=None, error=None):
    """Mocked ArangoDBResource whose execute_aql answers per query string."""
    rows_by_query = rows_by_query or {}
    arango = MagicMock()
    client = MagicMock()
    db = MagicMock()
    txn_db = MagicMock()
    arango.get_client.return_value.__enter__.return_value = client
    arango.get_database.return_value = db
    db.begin_transaction.return_value = txn_db

    def execute_aql(target, query, bind_vars=None, batch_size=1000):
        if fail_on is not None and query == fail_on:
            raise error if error is not None else server_error()
        return iter(rows_by_query.get(query, []))

    arango.execute_aql.side_effect = execute_aql
    return arango, db, txn_db


def executed_queries(arango):
    return [c.args[1] for c in arango.execute_aql.call_args_list]


# ============================================================================
# replace_graph
# ============================================================================

def test_replace_graph_runs_in_one_committed_transaction():
    arango, db, txn_db = make_arango({COUNTS_AQL: [{"nodes": 2, "edges": 1}]})
    store = CandidacyGraphStore(arango)

    counts = store.replace_graph(
        [Person(user_id="A", full_name="Alice"), Person(user_id="B")],
        [CandidacyEdge(from_user_id="A", to_user_id="B", priority=3)],
    )

    assert (counts.node_count, counts.edge_count) == (2, 1)
    db.begin_transaction.assert_called_once_with(exclusive=["persons", "candidate_of"])
    assert executed_queries(arango) == [
        RESET_EDGES_AQL,
        RESET_PERSONS_AQL,
        UPSERT_PERSONS_AQL,
        UPSERT_EDGES_AQL,
        COUNTS_AQL,
    ]
    # every statement goes through the transaction, not the plain database
    assert all(c.args[0] is txn_db for c in arango.execute_aql.call_args_list)
    txn_db.commit_transaction.assert_called_once()
    txn_db.abort_transaction.assert_not_called()
    arango.get_client.return_value.__exit__.assert_called_once()


def test_replace_graph_writes_arango_documents():
    arango, _, _ = make_arango({COUNTS_AQL: [{"nodes": 2, "edges": 1}]})
    store = CandidacyGraphStore(arango)
    edge = CandidacyEdge(from_user_id="A", to_user_id="B", priority=None)

    store.replace_graph([Person(user_id="A"), Person(user_id="B")], [edge])

    calls = {c.args[1]: c.kwargs.get("bind_vars") for c in arango.execute_aql.call_args_list}
    person_docs = calls[UPSERT_PERSONS_AQL]["batch"]
    edge_docs = calls[UPSERT_EDGES_AQL]["batch"]
    assert [d["user_id"] for d in person_docs] == ["A", "B"]
    assert person_docs[0]["_key"] == Person.make_key("A")
    assert edge_docs[0]["_from"] == f"persons/{Person.make_key('A')}"
    assert edge_docs[0]["_to"] == f"persons/{Person.make_key('B')}"
    assert edge_docs[0]["_key"] == CandidacyEdge.make_key("A", "B")
    assert edge_docs[0]["priority"] is None


def test_replace_graph_batches_upserts():
    arango, _, _ = make_arango()
    store = CandidacyGraphStore(arango, batch_size=2)
    persons = [Person(user_id=f"u{i}") for i in range(5)]

    store.replace_graph(persons, [])

    assert executed_queries(arango).count(UPSERT_PERSONS_AQL) == 3
    assert UPSERT_EDGES_AQL not in executed_queries(arango)


def test_replace_graph_aborts_on_failure():
    arango, _, txn_db = make_arango(fail_on=UPSERT_EDGES_AQL)
    store = CandidacyGraphStore(arango)

    with pytest.raises(StoreQueryError) as exc_info:
        store.replace_graph(
            [Person(user_id="A"), Person(user_id="B")],
            [CandidacyEdge(from_user_id="A", to_user_id="B", priority=1)],
        )

    assert exc_info.value.query_name == "upsert_edges"
    txn_db.abort_transaction.assert_called_once()
    txn_db.commit_transaction.assert_not_called()
    arango.get_client.return_value.__exit__.assert_called_once()


def test_replace_graph_survives_dropped_connection_on_abort():
    dropped = ConnectionAbortedError("Can't connect to host(s) within limit (3)")
    arango, _, txn_db = make_arango(fail_on=UPSERT_EDGES_AQL, error=dropped)
    txn_db.abort_transaction.side_effect = ConnectionAbortedError("Can't connect to host(s) within limit (3)")
    store = CandidacyGraphStore(arango)

    with pytest.raises(StoreUnavailable):
        store.replace_graph(
            [Person(user_id="A"), Person(user_id="B")],
            [CandidacyEdge(from_user_id="A", to_user_id="B", priority=1)],
        )

    txn_db.abort_transaction.assert_called_once()
    arango.get_client.return_value.__exit__.assert_called_once()


def test_replace_graph_unreachable_store():
    arango, db, _ = make_arango()
    arango.get_database.side_effect = requests.exceptions.ConnectionError("refused")
    store = CandidacyGraphStore(arango)

    with pytest.raises(StoreUnavailable):
        store.replace_graph([], [])

    db.begin_transaction.assert_not_called()
    arango.get_client.return_value.__exit__.assert_called_once()


# ============================================================================
# Reads
# ============================================================================

def test_fetch_edges_builds_rows():
    arango, _, _ = make_arango({EDGE_ROWS_AQL: [
        {"from_id": "A", "from_name": "Alice", "to_id": "B", "to_name": None, "priority": 2},
    ]})
    (row,) = CandidacyGraphStore(arango).fetch_edges()
    assert (row.from_label, row.to_label, row.priority) == ("Alice", "B", 2)


def test_counts_of_empty_result():
    arango, _, _ = make_arango()
    counts = CandidacyGraphStore(arango).counts()
    assert (counts.node_count, counts.edge_count) == (0, 0)


def test_reads_do_not_create_schema():
    arango, _, _ = make_arango()
    store = CandidacyGraphStore(arango)

    store.counts()
    store.fetch_edges()

    arango.get_collection.assert_not_called()
    arango.ensure_graph.assert_not_called()
    for c in arango.get_database.call_args_list:
        assert not c.kwargs.get("create_if_missing")


@pytest.mark.parametrize("error_code", [1228, 1203])
def test_reads_of_missing_schema_are_empty(error_code):
    arango, _, _ = make_arango()
    arango.execute_aql.side_effect = server_error(http_code=404, error_code=error_code)
    store = CandidacyGraphStore(arango)

    counts = store.counts()

    assert (counts.node_count, counts.edge_count) == (0, 0)
    assert store.fetch_edges() == []


def test_replace_graph_creates_schema_once():
    arango, db, _ = make_arango()
    store = CandidacyGraphStore(arango)

    store.replace_graph([], [])
    store.replace_graph([], [])

    assert arango.get_collection.call_count == 2
    arango.get_collection.assert_any_call(db, "persons")
    arango.get_collection.assert_any_call(db, "candidate_of", edge=True)
    arango.ensure_graph.assert_called_once()
    assert arango.ensure_graph.call_args.args[1] == "candidacy"
    assert arango.get_database.call_args_list[0].kwargs == {"create_if_missing": True}
    assert arango.get_database.call_args_list[1].kwargs == {"create_if_missing": False}


def test_bootstrap_then_replace_graph_skips_schema():
    arango, _, _ = make_arango()
    store = CandidacyGraphStore(arango)

    store.bootstrap()
    store.replace_graph([], [])

    arango.ensure_graph.assert_called_once()


def test_failed_bootstrap_is_retried():
    arango, _, _ = make_arango()
    arango.ensure_graph.side_effect = [requests.exceptions.ConnectionError("refused"), MagicMock()]
    store = CandidacyGraphStore(arango)

    with pytest.raises(StoreUnavailable):
        store.bootstrap()
    store.bootstrap()

    assert arango.ensure_graph.call_count == 2

def test_ping_translates_connection_errors():
    arango, _, _ = make_arango()
    arango.ping.side_effect = server_error(ServerConnectionError, http_code=None)
    with pytest.raises(StoreUnavailable):
        CandidacyGraphStore(arango).ping()


# ============================================================================
# Error translation
# ============================================================================

@pytest.mark.parametrize("error", [
    requests.exceptions.ConnectionError("refused"),
    requests.exceptions.Timeout("slow"),
    ConnectionAbortedError("Can't connect to host(s) within limit (3)"),
    server_error(http_code=503),
])
def test_transient_errors_become_store_unavailable(error):
    with pytest.raises(StoreUnavailable):
        with translate_errors("count_graph"):
            raise error


def test_server_errors_become_query_errors():
    with pytest.raises(StoreQueryError) as exc_info:
        with translate_errors("fetch_edges"):
            raise server_error(http_code=400)
    assert exc_info.value.query_name == "fetch_edges"


def test_unrelated_errors_pass_through():
    with pytest.raises(KeyError):
        with translate_errors("fetch_edges"):
            raise KeyError("nodes")
