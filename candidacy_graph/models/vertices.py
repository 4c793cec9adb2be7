"""Vertex (node) models for the candidacy graph.

In a graph database:
- **Vertices** are the entities (things with properties)
- **Edges** are the relationships between entities

There is exactly one vertex kind here:
- Person: one user of the matching platform, either as a candidate or a target

ArangoDB Vertex Requirements:
- Every vertex needs a unique `_key` (like a primary key)
- The `_id` is auto-generated as "{collection_name}/{_key}"
- Properties can be any JSON-serializable data
"""

from datetime import datetime
from hashlib import sha256
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, computed_field


PERSONS_COLLECTION = "persons"


class Person(BaseModel):
    """A user that appears on either end of at least one application.

    Persons are never deleted one by one. They disappear only when the whole
    derived graph is reset at the start of a rebuild.

    Key Generation:
        External user ids are not guaranteed to be valid ArangoDB keys, so the
        _key is the first 16 hex chars of SHA256(user_id). The raw id is kept
        in `user_id` and is what every query returns.

    Example:
        {
            "_key": "1f0e3dad99908345",
            "user_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
            "full_name": "Alice Rossi",
            "updated_at": "2026-01-05T12:00:00"
        }
    """

    user_id: str = Field(..., min_length=1, description="Stable external user id")
    full_name: Optional[str] = Field(None, description="Display name, best effort")
    updated_at: datetime = Field(default_factory=datetime.now)

    @computed_field
    @property
    def key(self) -> str:
        """ArangoDB document key."""
        return self.make_key(self.user_id)

    def to_arango_doc(self) -> Dict[str, Any]:
        """Convert to ArangoDB document format."""
        return {
            "_key": self.key,
            "user_id": self.user_id,
            "full_name": self.full_name,
            "updated_at": self.updated_at.isoformat(),
        }

    @staticmethod
    def make_key(user_id: str) -> str:
        """Generate the document key for a user id."""
        return sha256(user_id.encode()).hexdigest()[:16]

    @staticmethod
    def make_id(user_id: str) -> str:
        """Full ArangoDB document id (persons/{key}) for a user id."""
        return f"{PERSONS_COLLECTION}/{Person.make_key(user_id)}"
