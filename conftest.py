"""
Pytest configuration and shared fixtures.

InMemoryGraphStore mirrors the CandidacyGraphStore surface (replace_graph,
counts, fetch_edges, ping) over plain dicts, so builder, cycle finder,
summary and service tests run without an ArangoDB server.
"""

from typing import Dict, List, Optional, Tuple

import pytest

from candidacy_graph.models import EdgeRow, GraphCounts
from candidacy_graph.service import GraphService


class InMemoryGraphStore:
    def __init__(self):
        self.persons: Dict[str, Optional[str]] = {}
        self.edges: Dict[Tuple[str, str], Optional[float]] = {}
        self.failures: List[Exception] = []
        self.replace_calls = 0

    def fail_with(self, *errors: Exception):
        """Raise these errors, one per call, before behaving normally again."""
        self.failures.extend(errors)

    def _maybe_fail(self):
        if self.failures:
            raise self.failures.pop(0)

    def replace_graph(self, persons, edges) -> GraphCounts:
        self._maybe_fail()
        self.replace_calls += 1
        self.persons = {p.user_id: p.full_name for p in persons}
        self.edges = {(e.from_user_id, e.to_user_id): e.priority for e in edges}
        return self._counts()

    def _counts(self) -> GraphCounts:
        return GraphCounts(node_count=len(self.persons), edge_count=len(self.edges))

    def counts(self) -> GraphCounts:
        self._maybe_fail()
        return self._counts()

    def fetch_edges(self) -> List[EdgeRow]:
        self._maybe_fail()
        return [
            EdgeRow(
                from_id=a,
                from_name=self.persons.get(a),
                to_id=b,
                to_name=self.persons.get(b),
                priority=priority,
            )
            for (a, b), priority in self.edges.items()
        ]

    def ping(self) -> bool:
        self._maybe_fail()
        return True


def app(user_id: str, target_user_id: str, priority=None) -> dict:
    """One application row as the record store returns it."""
    return {"user_id": user_id, "target_user_id": target_user_id, "priority": priority}


@pytest.fixture
def store() -> InMemoryGraphStore:
    return InMemoryGraphStore()


@pytest.fixture
def sleeps() -> List[float]:
    """Delays requested by the retry loop, instead of actually sleeping."""
    return []


@pytest.fixture
def service(store, sleeps) -> GraphService:
    return GraphService(store, retries=3, backoff_factor=0.5, sleep=sleeps.append)
