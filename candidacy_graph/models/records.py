"""Input and read-side models.

- ApplicationRecord: one row from the application record store (rebuild input)
- EdgeRow: one candidacy edge joined with both endpoints, as read back
- Chain: a closed loop of candidacies, derived on demand and never stored
- GraphCounts: number of persons and candidacy edges in the graph
"""

from typing import List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    computed_field,
)


Priority = Optional[Union[StrictInt, StrictFloat]]


class ApplicationRecord(BaseModel):
    """An application of `user_id` toward `target_user_id`.

    Records come straight from the record store, so unknown columns
    (status, timestamps, ...) are ignored rather than rejected.
    """

    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(..., min_length=1)
    target_user_id: str = Field(..., min_length=1)
    priority: Priority = None


class EdgeRow(BaseModel):
    from_id: str
    from_name: Optional[str] = None
    to_id: str
    to_name: Optional[str] = None
    priority: Priority = None

    @computed_field
    @property
    def from_label(self) -> str:
        return self.from_name or self.from_id

    @computed_field
    @property
    def to_label(self) -> str:
        return self.to_name or self.to_id


class Chain(BaseModel):
    """A simple directed cycle p0 → p1 → ... → p(n-1) → p0.

    `people` holds display labels, `person_ids` the matching user ids in the
    same order. `avg_priority` is None when any edge on the cycle has no
    priority.
    """

    model_config = ConfigDict(populate_by_name=True)

    people: List[str]
    person_ids: List[str]
    length: int
    avg_priority: Optional[float] = Field(None, serialization_alias="avgPriority")


class GraphCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    node_count: int = Field(0, serialization_alias="nodeCount")
    edge_count: int = Field(0, serialization_alias="edgeCount")
