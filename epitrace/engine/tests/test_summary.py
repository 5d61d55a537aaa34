"""Tests for degree and contact chain size."""

import random

import pytest

from epitrace.engine.index import build_contact_index
from epitrace.engine.summary import (
    RefinableVisits,
    Visitation,
    contact_chain,
    degree,
    merge_visit,
    should_revisit,
)


@pytest.fixture
def late_then_early():
    """Node 1 is first reached late (t=8) and only later early (t=3 via 2)."""
    return build_contact_index([0, 1, 0, 2], [1, 3, 2, 1], [8, 5, 2, 3], 4)


def test_degree_counts_distinct_neighbors_in_window():
    pair = build_contact_index([0, 0, 0, 0], [1, 1, 2, 3], [1, 2, 5, 30], 4)

    assert degree(pair.outgoing, 0, (0, 10)) == 2
    assert degree(pair.outgoing, 0, (0, 100)) == 3
    assert degree(pair.outgoing, 0, (40, 100)) == 0
    assert degree(pair.ingoing, 1, (0, 10)) == 1


def test_self_loops_never_count():
    pair = build_contact_index([0, 0, 0], [0, 0, 1], [1, 2, 3], 2)

    assert degree(pair.outgoing, 0, (0, 10)) == 1
    assert degree(pair.ingoing, 0, (0, 10)) == 0
    assert contact_chain(pair.outgoing, 0, (0, 10)) == 1
    assert contact_chain(pair.ingoing, 0, (0, 10)) == 0


def test_chain_revisits_node_when_window_extends(late_then_early):
    # Without the revisit, node 3 would be missed and the chain would be 2.
    assert contact_chain(late_then_early.outgoing, 0, (0, 100)) == 3
    assert degree(late_then_early.outgoing, 0, (0, 100)) == 2


def test_ingoing_chain_respects_narrowed_window():
    pair = build_contact_index([1, 0], [2, 1], [20, 30], 3)

    assert contact_chain(pair.ingoing, 2, (0, 100)) == 1


def test_ingoing_chain_revisit_with_later_end():
    # 1->2 at t=10, 2->3 at t=20, 1->3 at t=5, ids shifted to 0-based.
    pair = build_contact_index([0, 1, 0], [1, 2, 2], [10, 20, 5], 3)

    assert contact_chain(pair.ingoing, 2, (0, 100)) == 2
    assert degree(pair.ingoing, 2, (0, 100)) == 2
    assert contact_chain(pair.outgoing, 0, (0, 100)) == 2
    assert contact_chain(pair.ingoing, 0, (0, 100)) == 0


def test_root_without_contacts_in_window():
    pair = build_contact_index([0], [1], [50], 2)

    assert degree(pair.outgoing, 0, (0, 10)) == 0
    assert contact_chain(pair.outgoing, 0, (0, 10)) == 0


def test_should_revisit_only_when_bound_extends():
    fresh = Visitation()
    assert should_revisit(fresh, (5, 10), ingoing=True)

    ingoing = Visitation()
    merge_visit(ingoing, (0, 10), ingoing=True)
    assert not should_revisit(ingoing, (0, 10), ingoing=True)
    assert should_revisit(ingoing, (0, 11), ingoing=True)
    merge_visit(ingoing, (0, 4), ingoing=True)
    assert ingoing.bound == 10

    outgoing = Visitation()
    merge_visit(outgoing, (5, 50), ingoing=False)
    assert not should_revisit(outgoing, (5, 50), ingoing=False)
    assert should_revisit(outgoing, (4, 50), ingoing=False)
    merge_visit(outgoing, (2, 50), ingoing=False)
    assert outgoing.bound == 2


def test_refinable_visits_counts_distinct_nodes():
    visits = RefinableVisits(ingoing=False)
    visits.enter(0, (0, 10))
    visits.enter(1, (4, 10))
    visits.enter(1, (2, 10))

    assert len(visits) == 2
    assert visits.state(1).bound == 2
    assert not visits.state(5).visited


def test_degree_never_exceeds_chain():
    rng = random.Random(5)
    source = [rng.randrange(12) for _ in range(150)]
    destination = [rng.randrange(12) for _ in range(150)]
    t = [rng.randrange(60) for _ in range(150)]
    pair = build_contact_index(source, destination, t, 12)

    for contact_index in (pair.ingoing, pair.outgoing):
        for root in range(12):
            window = (10, 50)
            assert degree(contact_index, root, window) <= contact_chain(
                contact_index, root, window
            )
