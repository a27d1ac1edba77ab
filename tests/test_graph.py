import pytest

from ourpeople.graph import KinshipGraph, shortest_path
from ourpeople.schemas import Relationship


def rel(rel_id, a, b, rel_type):
    return Relationship(id=rel_id, person_a_id=a, person_b_id=b, type=rel_type)


def build(*relationships, order="insertion"):
    graph = KinshipGraph(order=order)
    for relationship in relationships:
        graph.add_edge(relationship)
    return graph


def edges_from(graph, person_id):
    return [(n.person_id, n.type) for n in graph.neighbors(person_id)]


def test_parent_edges_are_inverted():
    graph = build(rel("r1", "alice", "bob", "parent"))
    assert edges_from(graph, "alice") == [("bob", "child")]
    assert edges_from(graph, "bob") == [("alice", "parent")]


def test_child_relationship_entered_directly():
    graph = build(rel("r1", "bob", "alice", "child"))
    assert edges_from(graph, "bob") == [("alice", "parent")]
    assert edges_from(graph, "alice") == [("bob", "child")]


@pytest.mark.parametrize("rel_type", ["sibling", "spouse", "friend"])
def test_symmetric_types_look_the_same_from_both_ends(rel_type):
    graph = build(rel("r1", "a", "b", rel_type))
    assert edges_from(graph, "a") == [("b", rel_type)]
    assert edges_from(graph, "b") == [("a", rel_type)]


def test_remove_edge_drops_both_directions():
    graph = build(rel("r1", "a", "b", "parent"), rel("r2", "b", "c", "parent"))
    assert graph.remove_edge("r1")
    assert graph.neighbors("a") == []
    assert edges_from(graph, "b") == [("c", "child")]
    assert shortest_path(graph, "a", "c") is None
    assert not graph.remove_edge("r1")


def test_remove_person_returns_incident_relationships():
    graph = build(rel("r1", "a", "b", "parent"), rel("r2", "b", "c", "sibling"))
    removed = graph.remove_person("b")
    assert sorted(removed) == ["r1", "r2"]
    assert "b" not in graph
    assert graph.neighbors("a") == []
    assert not graph.has_edge("r2")


def test_neighbors_keep_insertion_order():
    graph = build(
        rel("r1", "me", "zed", "sibling"),
        rel("r2", "amy", "me", "parent"),
        rel("r3", "me", "zed", "friend"),
    )
    assert [(n.person_id, n.relationship_id) for n in graph.neighbors("me")] == [
        ("zed", "r1"),
        ("amy", "r2"),
        ("zed", "r3"),
    ]


def test_neighbors_can_be_ordered_by_id():
    graph = build(
        rel("r1", "me", "zed", "sibling"),
        rel("r2", "amy", "me", "parent"),
        order="id",
    )
    assert [n.person_id for n in graph.neighbors("me")] == ["amy", "zed"]


def test_unknown_order_rejected():
    with pytest.raises(ValueError):
        KinshipGraph(order="random")


def test_self_relationship_is_ignored():
    graph = build(rel("r1", "a", "a", "sibling"))
    assert len(graph) == 0


def test_shortest_path_self_is_empty():
    graph = KinshipGraph()
    path = shortest_path(graph, "x", "x")
    assert path is not None
    assert len(path) == 0
    assert path.person_ids == ["x"]


def test_shortest_path_prefers_fewest_hops():
    graph = build(
        rel("r1", "a", "b", "parent"),
        rel("r2", "b", "c", "parent"),
        rel("r3", "c", "d", "parent"),
        rel("r4", "a", "d", "friend"),
        rel("r5", "a", "e", "sibling"),
        rel("r6", "e", "d", "sibling"),
    )
    path = shortest_path(graph, "a", "d")
    assert len(path) == 1
    assert path.types == ["friend"]


def test_shortest_path_respects_max_depth():
    graph = build(
        rel("r1", "a", "b", "parent"),
        rel("r2", "b", "c", "parent"),
        rel("r3", "c", "d", "parent"),
    )
    assert shortest_path(graph, "a", "d", max_depth=2) is None
    path = shortest_path(graph, "a", "d", max_depth=3)
    assert path.types == ["child", "child", "child"]
    assert path.person_ids == ["a", "b", "c", "d"]


def test_friend_is_never_an_intermediate_hop():
    graph = build(rel("r1", "a", "b", "friend"), rel("r2", "b", "c", "parent"))
    assert shortest_path(graph, "a", "c") is None
    path = shortest_path(graph, "a", "b")
    assert path.types == ["friend"]


def test_terminal_types_are_configurable():
    graph = build(rel("r1", "a", "b", "friend"), rel("r2", "b", "c", "parent"))
    path = shortest_path(graph, "a", "c", terminal_types=())
    assert path.types == ["friend", "child"]


def test_readding_relationship_replaces_edges():
    graph = build(rel("r1", "a", "b", "parent"))
    graph.add_edge(rel("r1", "a", "b", "sibling"))
    assert edges_from(graph, "a") == [("b", "sibling")]
    assert len(graph) == 1
