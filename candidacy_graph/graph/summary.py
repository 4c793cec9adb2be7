"""Summary Projector - flat views of the candidacy graph for reporting.

- list_edges: every candidacy edge with both labels and its priority,
  sorted by (from_label, to_label), ties broken by (from_id, to_id)
- counts: number of persons and candidacy edges

Both are pure reads.
"""

from typing import List

from candidacy_graph.models import EdgeRow, GraphCounts


def sort_edges(rows: List[EdgeRow]) -> List[EdgeRow]:
    return sorted(rows, key=lambda r: (r.from_label, r.to_label, r.from_id, r.to_id))


def list_edges(store) -> List[EdgeRow]:
    return sort_edges(store.fetch_edges())


def counts(store) -> GraphCounts:
    return store.counts()
