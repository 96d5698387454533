import math

import pytest

from modules.isochrone.graph_builder import build_graph
from modules.isochrone.schemas import Edge, Graph, Node
from modules.isochrone.search import NodeLocator, bounded_search, expand_bounded

from conftest import ORIGIN_LAT, ORIGIN_LNG, make_grid_elements


def _graph(nodes, edges):
    adjacency = {}
    for u, v, w in edges:
        adjacency.setdefault(u, []).append(Edge(source=u, target=v, weight=w))
        adjacency.setdefault(v, []).append(Edge(source=v, target=u, weight=w))
    return Graph(nodes={n.id: n for n in nodes}, adjacency=adjacency)


def _line_graph(count=5, weight=300.0):
    nodes = [Node(id=f"n{i}", lat=0.0, lon=i * 0.01) for i in range(count)]
    edges = [(f"n{i}", f"n{i + 1}", weight) for i in range(count - 1)]
    return _graph(nodes, edges)


def test_line_graph_respects_time_budget():
    graph = _line_graph()
    reachable = bounded_search(graph, 0.0, 0.0, 15 * 60)

    assert list(reachable) == ["n0", "n1", "n2", "n3"]
    assert reachable == {"n0": 0.0, "n1": 300.0, "n2": 600.0, "n3": 900.0}
    assert "n4" not in reachable


def test_budget_below_next_hop_keeps_only_reached_prefix():
    reachable = bounded_search(_line_graph(), 0.0, 0.0, 899.0)
    assert list(reachable) == ["n0", "n1", "n2"]


def test_empty_graph_gives_empty_set():
    assert bounded_search(Graph(), 1.0, 1.0, 600) == {}


def test_negative_budget_gives_empty_set():
    assert bounded_search(_line_graph(), 0.0, 0.0, -1) == {}


def test_origin_snaps_to_nearest_node():
    graph = _line_graph()
    reachable = bounded_search(graph, 0.0005, 0.0405, 300)
    assert reachable["n4"] == 0.0
    assert set(reachable) == {"n3", "n4"}


def test_locator_scales_longitude_by_latitude():
    # At 60 degrees one degree of longitude is half a degree of latitude on the ground
    nodes = [Node(id="east", lat=60.0, lon=10.018), Node(id="north", lat=60.010, lon=10.0)]
    locator = NodeLocator(Graph(nodes={n.id: n for n in nodes}), 60.0)
    assert locator.nearest(60.0, 10.0) == "east"


def test_isolated_start_reaches_only_itself():
    nodes = [Node(id="a", lat=0.0, lon=0.0), Node(id="b", lat=1.0, lon=1.0)]
    graph = Graph(nodes={n.id: n for n in nodes})
    assert bounded_search(graph, 0.0, 0.0, 3600) == {"a": 0.0}


def test_shortest_of_alternative_paths_wins():
    nodes = [Node(id=i, lat=0.0, lon=0.0) for i in "sabt"]
    graph = _graph(nodes, [("s", "a", 100), ("a", "t", 100), ("s", "b", 50), ("b", "t", 60), ("s", "t", 500)])
    reachable, _ = expand_bounded(graph.adjacency, "s", 1000)
    assert reachable["t"] == 110


def test_path_through_over_budget_node_is_pruned():
    nodes = [Node(id=i, lat=0.0, lon=0.0) for i in "sxy"]
    graph = _graph(nodes, [("s", "x", 700), ("x", "y", 100)])
    reachable, _ = expand_bounded(graph.adjacency, "s", 750)
    assert reachable == {"s": 0.0, "x": 700.0}


def test_zero_weight_edges_are_traversed():
    nodes = [Node(id=i, lat=0.0, lon=0.0) for i in "abc"]
    graph = _graph(nodes, [("a", "b", 0.0), ("b", "c", 10.0)])
    reachable, _ = expand_bounded(graph.adjacency, "a", 10.0)
    assert reachable == {"a": 0.0, "b": 0.0, "c": 10.0}


def test_each_node_expanded_at_most_once():
    graph = build_graph(make_grid_elements(rows=12, cols=12), "walking", {"walking": 5.0})
    reachable, expansions = expand_bounded(graph.adjacency, "1000", math.inf)
    assert expansions == len(reachable) == len(graph.nodes)


def test_bounded_result_is_subset_of_unbounded():
    graph = build_graph(make_grid_elements(rows=10, cols=10), "walking", {"walking": 5.0})
    bounded = bounded_search(graph, ORIGIN_LAT, ORIGIN_LNG, 240)
    unbounded = bounded_search(graph, ORIGIN_LAT, ORIGIN_LNG, math.inf)

    assert 0 < len(bounded) < len(unbounded)
    assert set(bounded) <= set(unbounded)
    for node_id, seconds in bounded.items():
        assert seconds <= 240
        assert seconds == pytest.approx(unbounded[node_id])


def test_search_is_deterministic():
    graph = build_graph(make_grid_elements(rows=8, cols=8), "cycling", {"cycling": 15.0})
    first = bounded_search(graph, ORIGIN_LAT, ORIGIN_LNG, 120)
    second = bounded_search(graph, ORIGIN_LAT, ORIGIN_LNG, 120)
    assert list(first.items()) == list(second.items())
