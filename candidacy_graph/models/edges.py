"""Edge (relationship) models for the candidacy graph.

This module defines the single EDGE model:
- CandidacyEdge: Person → Person ("candidate applied toward target")

ArangoDB Edge Requirements:
- Every edge needs `_from` and `_to` fields
- Format: "{collection_name}/{_key}" (e.g., "persons/abc123")
- Edges are stored in EDGE collections (different from vertex collections)

The edge direction matters for traversal queries:
- OUTBOUND: candidate → target
- INBOUND: target → candidate
"""

from datetime import datetime
from hashlib import sha256
from typing import Optional, Dict, Any, Union

from pydantic import BaseModel, Field, computed_field

from candidacy_graph.models.vertices import Person


CANDIDATE_OF_COLLECTION = "candidate_of"
GRAPH_NAME = "candidacy"


class CandidacyEdge(BaseModel):
    """A candidacy of one person toward another, with its priority.

    There is at most one edge per ordered (candidate, target) pair: the _key
    is derived from the pair, so writing the pair again overwrites the
    priority instead of adding a parallel edge.

    Priority is an opaque ordering key. It may be null.

    Edge Direction: persons/{key(user_id)} → persons/{key(target_user_id)}

    Example:
        {
            "_key": "9a0364b9e99bb480",
            "_from": "persons/1f0e3dad99908345",
            "_to": "persons/70efdf2ec9b08607",
            "priority": 2,
            "updated_at": "2026-01-05T12:00:00"
        }

    Query Example (AQL):
        // Everyone a person applied toward
        FOR v, e IN 1..1 OUTBOUND "persons/1f0e3dad99908345" candidate_of
            RETURN {target: v.user_id, priority: e.priority}
    """

    from_user_id: str = Field(..., min_length=1, description="Candidate user id")
    to_user_id: str = Field(..., min_length=1, description="Target user id")
    priority: Optional[Union[int, float]] = Field(None, description="Rank of the application")
    updated_at: datetime = Field(default_factory=datetime.now)

    @computed_field
    @property
    def key(self) -> str:
        """Generate unique edge key from the ordered pair."""
        return self.make_key(self.from_user_id, self.to_user_id)

    def to_arango_doc(self) -> Dict[str, Any]:
        return {
            "_key": self.key,
            "_from": Person.make_id(self.from_user_id),
            "_to": Person.make_id(self.to_user_id),
            "priority": self.priority,
            "updated_at": self.updated_at.isoformat(),
        }

    @staticmethod
    def make_key(from_user_id: str, to_user_id: str) -> str:
        combined = f"{from_user_id}|{to_user_id}"
        return sha256(combined.encode()).hexdigest()[:16]
