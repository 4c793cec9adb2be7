"""Data models for the candidacy graph.

This module defines Pydantic models for the vertices and edges stored in the
`candidacy` graph, plus the input records and read-side projections.

Usage:
    from candidacy_graph.models import Person, CandidacyEdge

    person = Person(user_id="u-1", full_name="Alice Rossi")
    doc = person.to_arango_doc()
"""

from .vertices import (
    Person,
    PERSONS_COLLECTION,
)

from .edges import (
    CandidacyEdge,
    CANDIDATE_OF_COLLECTION,
    GRAPH_NAME,
)

from .records import (
    ApplicationRecord,
    Chain,
    EdgeRow,
    GraphCounts,
)

__all__ = [
    # Vertices (entities)
    "Person",
    "PERSONS_COLLECTION",

    # Edges (relationships)
    "CandidacyEdge",
    "CANDIDATE_OF_COLLECTION",
    "GRAPH_NAME",

    # Input and projections
    "ApplicationRecord",
    "Chain",
    "EdgeRow",
    "GraphCounts",
]
