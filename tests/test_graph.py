import queue

import pytest

from apclient.graph import NetGraph, Vertex
from apclient.packet import KnownNetworkGraph, NodeType


def v(node_id, node_type):
    return Vertex(node_id, node_type)


def test_vertex_type_mapping():
    assert v(1, NodeType.CLIENT).node_type == NodeType.CLIENT
    assert v(2, NodeType.DRONE).node_type == NodeType.DRONE
    assert v(3, NodeType.SERVER).node_type == NodeType.SERVER


def test_add_vertex_inserts_once():
    graph = NetGraph(0)
    vertex = v(1, NodeType.DRONE)
    graph.add_vertex(vertex)
    assert graph.contains_vertex(vertex)
    graph.add_vertex(vertex)
    assert graph.vertex_count() == 1


def test_insert_edge_bidirectional():
    graph = NetGraph(0)
    graph.insert_edge((1, NodeType.DRONE), (2, NodeType.DRONE))
    assert graph.contains_edge(v(1, NodeType.DRONE), v(2, NodeType.DRONE))
    assert graph.contains_edge(v(2, NodeType.DRONE), v(1, NodeType.DRONE))


def test_add_route_stops_on_client_or_server():
    graph = NetGraph(0)
    events = queue.Queue()
    graph.add_route([(1, NodeType.DRONE), (2, NodeType.CLIENT)], events)
    assert graph.vertex_count() <= 1
    assert events.empty()


def test_add_route_of_drones_reports_topology():
    graph = NetGraph(7)
    events = queue.Queue()
    graph.add_route([(7, NodeType.CLIENT), (1, NodeType.DRONE), (2, NodeType.DRONE)], events)
    event = events.get_nowait()
    assert isinstance(event, KnownNetworkGraph)
    assert event.source == 7
    neighbours = {node.node_id: sorted(node.neighbors) for node in event.graph}
    assert neighbours == {7: [1], 1: [2, 7], 2: [1]}


def test_get_edge_nodes_filters_drones():
    graph = NetGraph(0)
    graph.add_vertex(v(1, NodeType.DRONE))
    graph.add_vertex(v(2, NodeType.SERVER))
    assert graph.get_edge_nodes() == [(2, NodeType.SERVER)]


def test_get_edge_nodes_none_when_only_drones():
    graph = NetGraph(0)
    graph.add_vertex(v(1, NodeType.DRONE))
    assert graph.get_edge_nodes() is None


def test_compute_and_random_routes():
    graph = NetGraph(0)
    graph.insert_edge((1, NodeType.DRONE), (2, NodeType.DRONE))
    graph.insert_edge((2, NodeType.DRONE), (3, NodeType.DRONE))
    assert graph.compute_routes(v(1, NodeType.DRONE), v(3, NodeType.DRONE)) == [[1, 2, 3]]
    assert graph.get_random_route(v(1, NodeType.DRONE), v(3, NodeType.DRONE)) == [1, 2, 3]


def test_multiple_routes_and_missing_route():
    graph = NetGraph(0)
    graph.insert_edge((1, NodeType.DRONE), (2, NodeType.DRONE))
    graph.insert_edge((1, NodeType.DRONE), (3, NodeType.DRONE))
    graph.insert_edge((2, NodeType.DRONE), (4, NodeType.DRONE))
    graph.insert_edge((3, NodeType.DRONE), (4, NodeType.DRONE))
    routes = graph.compute_routes(v(1, NodeType.DRONE), v(4, NodeType.DRONE))
    assert sorted(routes) == [[1, 2, 4], [1, 3, 4]]
    assert graph.get_random_route(v(1, NodeType.DRONE), v(4, NodeType.DRONE)) in routes
    assert graph.get_random_route(v(1, NodeType.DRONE), v(9, NodeType.DRONE)) is None


def test_get_node_type_existing_and_missing():
    graph = NetGraph(0)
    graph.add_vertex(v(5, NodeType.SERVER))
    assert graph.get_node_type(5) == NodeType.SERVER
    with pytest.raises(LookupError):
        graph.get_node_type(99)


def test_reset_clears_graph():
    graph = NetGraph(0)
    graph.insert_edge((1, NodeType.DRONE), (2, NodeType.DRONE))
    graph.reset()
    assert graph.vertex_count() == 0
    assert graph.get_edge_nodes() is None