"""Cycle Finder - interlocking chains of candidacies.

A chain is a simple directed cycle p0 → p1 → ... → p(n-1) → p0 with
2 <= n <= max_length. Self-loops never count as chains.

Enumeration:
    Runs in Python over one edge read (a single consistent snapshot). Persons
    are taken in ascending user-id order and every cycle is rooted at its
    smallest user id, only walking through larger ids, so each rotation of a
    cycle is produced once. Successors are tried in ascending user-id order,
    which makes "first seen" deterministic.

    Worst case is exponential in max_length on dense graphs. The hop bound is
    the only limit applied.

Deduplication:
    The canonical key is the set of display labels, sorted and joined. Two
    different cycles over the same people (e.g. A→B→C→A and A→C→B→A) share a
    key and only the first one found is kept.

Ordering:
    Ascending by length, then in the order chains were first found.
"""

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterator, List, Optional, Sequence

from candidacy_graph.config import MAX_CHAIN_LENGTH, MIN_CHAIN_LENGTH
from candidacy_graph.errors import ValidationError
from candidacy_graph.models import Chain, EdgeRow

logger = logging.getLogger(__name__)

CANONICAL_KEY_SEPARATOR = "|"


def validate_max_length(max_length) -> int:
    if isinstance(max_length, bool) or not isinstance(max_length, int):
        raise ValidationError("`max_length` must be an integer")
    if not MIN_CHAIN_LENGTH <= max_length <= MAX_CHAIN_LENGTH:
        raise ValidationError(
            f"`max_length` must be between {MIN_CHAIN_LENGTH} and {MAX_CHAIN_LENGTH}, got {max_length}"
        )
    return max_length


def average_priority(priorities: Sequence) -> Optional[float]:
    """Mean priority rounded half-up to 2 decimals, or None if any is missing."""
    if not priorities or any(p is None for p in priorities):
        return None
    mean = sum(Decimal(str(p)) for p in priorities) / len(priorities)
    return float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def canonical_key(labels: Sequence[str]) -> str:
    return CANONICAL_KEY_SEPARATOR.join(sorted(labels))


def enumerate_cycles(rows: Sequence[EdgeRow], max_length: int) -> Iterator[List[EdgeRow]]:
    """Yield every simple cycle as its list of edges, starting at its smallest id."""
    adjacency: Dict[str, List[EdgeRow]] = defaultdict(list)
    nodes = set()
    for row in rows:
        nodes.update((row.from_id, row.to_id))
        if row.from_id != row.to_id:
            adjacency[row.from_id].append(row)
    for successors in adjacency.values():
        successors.sort(key=lambda edge: edge.to_id)

    for start in sorted(nodes):
        path: List[EdgeRow] = []
        on_path = {start}

        def walk(node: str) -> Iterator[List[EdgeRow]]:
            for edge in adjacency.get(node, ()):
                target = edge.to_id
                if target == start:
                    if len(path) + 1 >= MIN_CHAIN_LENGTH:
                        yield path + [edge]
                elif target > start and target not in on_path and len(path) + 1 < max_length:
                    path.append(edge)
                    on_path.add(target)
                    yield from walk(target)
                    on_path.discard(target)
                    path.pop()

        yield from walk(start)


def chains_from_edges(rows: Sequence[EdgeRow], max_length: int = MAX_CHAIN_LENGTH) -> List[Chain]:
    """Enumerate, label, deduplicate and order the chains in an edge list."""
    max_length = validate_max_length(max_length)

    labels: Dict[str, str] = {}
    for row in rows:
        labels[row.from_id] = row.from_label
        labels[row.to_id] = row.to_label

    seen = set()
    chains = []
    for cycle in enumerate_cycles(rows, max_length):
        person_ids = [edge.from_id for edge in cycle]
        people = [labels[user_id] for user_id in person_ids]
        key = canonical_key(people)
        if key in seen:
            continue
        seen.add(key)
        chains.append(Chain(
            people=people,
            person_ids=person_ids,
            length=len(cycle),
            avg_priority=average_priority([edge.priority for edge in cycle]),
        ))

    # sort is stable: first-found order survives within a length
    chains.sort(key=lambda chain: chain.length)
    return chains


def find_chains(store, max_length: int = MAX_CHAIN_LENGTH) -> List[Chain]:
    """Read the current graph and return its interlocking chains. Read-only."""
    max_length = validate_max_length(max_length)
    rows = store.fetch_edges()
    chains = chains_from_edges(rows, max_length)
    logger.info(f"Found {len(chains)} chains up to length {max_length} over {len(rows)} edges")
    return chains
