"""Tests for the cycle finder: enumeration, averages, dedup and ordering."""

import pytest

from candidacy_graph.errors import ValidationError
from candidacy_graph.graph.builder import rebuild
from candidacy_graph.graph.chains import (
    average_priority,
    canonical_key,
    chains_from_edges,
    find_chains,
)
from candidacy_graph.models import EdgeRow
from conftest import app


def ring(ids, priority=1):
    """Applications forming the cycle ids[0] → ids[1] → ... → ids[0]."""
    return [app(a, b, priority) for a, b in zip(ids, ids[1:] + ids[:1])]


# ============================================================================
# Average priority
# ============================================================================

def test_average_priority_rounds_half_up():
    assert average_priority([2, 4]) == 3.0
    assert average_priority([1, 2, 2]) == 1.67
    assert average_priority([0.125, 0.125]) == 0.13


def test_average_priority_is_null_when_any_edge_is_null():
    assert average_priority([1, None, 3]) is None


def test_canonical_key_ignores_order():
    assert canonical_key(["Carla", "Alice", "Bruno"]) == canonical_key(["Bruno", "Carla", "Alice"])


# ============================================================================
# Enumeration
# ============================================================================

def test_two_person_chain(store):
    rebuild(store, [app("A", "B", 2), app("B", "A", 4)])
    chains = find_chains(store)
    assert len(chains) == 1
    chain = chains[0]
    assert chain.length == 2
    assert chain.avg_priority == 3.0
    assert sorted(chain.people) == ["A", "B"]


def test_self_loop_is_not_a_chain(store):
    rebuild(store, [app("A", "A", 1)])
    assert find_chains(store) == []


def test_empty_graph_has_no_chains(store):
    rebuild(store, [])
    assert find_chains(store) == []


def test_open_path_is_not_a_chain(store):
    rebuild(store, [app("A", "B", 1), app("B", "C", 1)])
    assert find_chains(store) == []


def test_null_priority_propagates(store):
    rebuild(store, [app("A", "B", 1), app("B", "C"), app("C", "A", 3)])
    (chain,) = find_chains(store)
    assert chain.length == 3
    assert chain.avg_priority is None


def test_each_cycle_is_reported_once_not_per_rotation(store):
    rebuild(store, ring(["A", "B", "C", "D"]))
    chains = find_chains(store)
    assert len(chains) == 1
    assert chains[0].person_ids == ["A", "B", "C", "D"]


def test_chain_uses_names_with_id_fallback(store):
    rebuild(store, [app("u1", "u2", 1), app("u2", "u1", 1)], {"u1": "Alice"})
    (chain,) = find_chains(store)
    assert chain.people == ["Alice", "u2"]
    assert chain.person_ids == ["u1", "u2"]


def test_intermediate_nodes_never_repeat(store):
    # figure eight through A: A→B→A and A→C→A, but no A→B→A→C→A chain
    rebuild(store, [app("A", "B", 1), app("B", "A", 1), app("A", "C", 1), app("C", "A", 1)])
    chains = find_chains(store)
    assert sorted(tuple(c.person_ids) for c in chains) == [("A", "B"), ("A", "C")]


# ============================================================================
# Bounds
# ============================================================================

def test_default_bound_is_ten(store):
    ten = [f"p{i:02d}" for i in range(10)]
    eleven = [f"q{i:02d}" for i in range(11)]
    rebuild(store, ring(ten) + ring(eleven))
    chains = find_chains(store)
    assert [c.length for c in chains] == [10]


def test_max_length_limits_results(store):
    rebuild(store, ring(["A", "B"]) + ring(["C", "D", "E"]) + ring(["F", "G", "H", "I"]))
    assert [c.length for c in find_chains(store, max_length=3)] == [2, 3]
    assert [c.length for c in find_chains(store, max_length=2)] == [2]


@pytest.mark.parametrize("max_length", [1, 11, 0, "5", 2.5, True])
def test_invalid_max_length_is_rejected(store, max_length):
    with pytest.raises(ValidationError):
        find_chains(store, max_length=max_length)


# ============================================================================
# Dedup and ordering
# ============================================================================

def test_same_people_in_another_order_collapse_into_one_chain():
    """A→B→C→A and A→C→B→A share a label set, so only the first is kept."""
    rows = [
        EdgeRow(from_id="A", to_id="B", priority=1),
        EdgeRow(from_id="B", to_id="C", priority=1),
        EdgeRow(from_id="C", to_id="A", priority=1),
        EdgeRow(from_id="A", to_id="C", priority=9),
        EdgeRow(from_id="C", to_id="B", priority=9),
        EdgeRow(from_id="B", to_id="A", priority=9),
    ]
    chains = chains_from_edges(rows)
    three = [c for c in chains if c.length == 3]
    assert len(three) == 1
    assert three[0].person_ids == ["A", "B", "C"]
    assert three[0].avg_priority == 1.0
    # the three 2-cycles (A,B), (A,C), (B,C) are all distinct
    assert sorted(tuple(c.person_ids) for c in chains if c.length == 2) == [("A", "B"), ("A", "C"), ("B", "C")]


def test_results_are_ordered_by_length_then_first_found():
    rows = [
        EdgeRow(from_id="A", to_id="B", priority=1),
        EdgeRow(from_id="B", to_id="C", priority=1),
        EdgeRow(from_id="C", to_id="A", priority=1),
        EdgeRow(from_id="X", to_id="Y", priority=1),
        EdgeRow(from_id="Y", to_id="X", priority=1),
        EdgeRow(from_id="D", to_id="E", priority=1),
        EdgeRow(from_id="E", to_id="D", priority=1),
    ]
    chains = chains_from_edges(rows)
    assert [tuple(c.person_ids) for c in chains] == [("D", "E"), ("X", "Y"), ("A", "B", "C")]


def test_chain_serializes_with_public_field_names(store):
    rebuild(store, [app("A", "B", 2), app("B", "A", 4)])
    (chain,) = find_chains(store)
    assert chain.model_dump(by_alias=True) == {
        "people": ["A", "B"],
        "person_ids": ["A", "B"],
        "length": 2,
        "avgPriority": 3.0,
    }
