"""Graph Builder - reset the derived graph and repopulate it from applications.

Input is the flat list of application records from the record store plus an
optional `names_by_id` lookup. The whole call is validated before anything is
written: one record without `user_id` or `target_user_id` rejects the call.

Merge semantics (applied in input order):
- Person: on first sight take the looked-up name (possibly None); on later
  sights refresh it only if the lookup supplies a non-null name
- CandidacyEdge: one per ordered (user_id, target_user_id) pair; a later
  record for the same pair overwrites the priority, including with None
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from candidacy_graph.errors import ValidationError
from candidacy_graph.models import ApplicationRecord, CandidacyEdge, GraphCounts, Person

logger = logging.getLogger(__name__)


def validate_applications(applications: Any) -> List[ApplicationRecord]:
    """Parse raw application rows, rejecting the whole list on the first bad row."""
    if not isinstance(applications, list):
        raise ValidationError("`applications` must be a list")

    records = []
    for index, raw in enumerate(applications):
        if isinstance(raw, ApplicationRecord):
            records.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Application #{index} must be an object, got {type(raw).__name__}")
        try:
            records.append(ApplicationRecord.model_validate(dict(raw)))
        except PydanticValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ValidationError(f"Application #{index} is invalid ({fields})") from e
    return records


def validate_names(names_by_id: Any) -> Dict[str, Optional[str]]:
    if names_by_id is None:
        return {}
    if not isinstance(names_by_id, Mapping):
        raise ValidationError("`names_by_id` must be a mapping of user id to name")
    for user_id, name in names_by_id.items():
        if name is not None and not isinstance(name, str):
            raise ValidationError(f"Name for user {user_id!r} must be a string or null")
    return dict(names_by_id)


def merge_applications(
    records: List[ApplicationRecord],
    names_by_id: Mapping[str, Optional[str]],
) -> Tuple[List[Person], List[CandidacyEdge]]:
    """Collapse records into unique persons and unique directed edges.

    Output keeps first-appearance order for both lists.
    """
    persons: Dict[str, Person] = {}
    edges: Dict[Tuple[str, str], CandidacyEdge] = {}

    for record in records:
        for user_id in (record.user_id, record.target_user_id):
            name = names_by_id.get(user_id)
            person = persons.get(user_id)
            if person is None:
                persons[user_id] = Person(user_id=user_id, full_name=name)
            elif name is not None:
                person.full_name = name

        edges[(record.user_id, record.target_user_id)] = CandidacyEdge(
            from_user_id=record.user_id,
            to_user_id=record.target_user_id,
            priority=record.priority,
        )

    return list(persons.values()), list(edges.values())


def rebuild(store, applications: Any, names_by_id: Any = None) -> GraphCounts:
    """Replace the whole candidacy graph with one built from `applications`.

    Args:
        store: CandidacyGraphStore (or anything with the same replace_graph)
        applications: List of application rows or ApplicationRecord objects
        names_by_id: Optional {user_id: full_name} lookup

    Returns:
        GraphCounts read back from the store after the write

    Raises:
        ValidationError: Malformed input; nothing is written
        StoreUnavailable: Store unreachable; nothing is written
        StoreQueryError: Store rejected the write; the transaction is rolled back
    """
    records = validate_applications(applications)
    names = validate_names(names_by_id)
    persons, edges = merge_applications(records, names)

    logger.info(
        f"Rebuilding candidacy graph from {len(records)} applications "
        f"({len(persons)} persons, {len(edges)} distinct edges)"
    )
    return store.replace_graph(persons, edges)
