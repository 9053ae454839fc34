"""Directed network graph of discovered nodes, with bidirectional edges."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence

from apclient.packet import EventNetworkNode, KnownNetworkGraph, NodeType

log = logging.getLogger(__name__)

Node = tuple[int, NodeType]


@dataclass(frozen=True)
class Vertex:
    """A node of the graph: its id and type."""

    node_id: int
    node_type: NodeType

    @classmethod
    def of(cls, node: Node) -> Vertex:
        return cls(node[0], node[1])


class NetGraph:
    """Graph of known nodes kept by the node with the given id."""

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        self._adjacency: dict[Vertex, dict[Vertex, None]] = {}

    def add_vertex(self, vertex: Vertex) -> None:
        """Add a vertex if it is not yet in the graph."""
        if vertex not in self._adjacency:
            log.info("Inserting a new vertex to graph: %s", vertex)
            self._adjacency[vertex] = {}

    def insert_edge(self, before: Node, after: Node) -> None:
        """Insert edges in both directions between two nodes."""
        first, second = Vertex.of(before), Vertex.of(after)
        for a, b in ((first, second), (second, first)):
            self.add_vertex(a)
            self.add_vertex(b)
            if b not in self._adjacency[a]:
                log.info("Adding new edge between %s and %s", a, b)
                self._adjacency[a][b] = None

    def contains_vertex(self, vertex: Vertex) -> bool:
        return vertex in self._adjacency

    def contains_edge(self, before: Vertex, after: Vertex) -> bool:
        return after in self._adjacency.get(before, {})

    def vertex_count(self) -> int:
        return len(self._adjacency)

    def add_route(self, route: Sequence[Node], sc_events: Any) -> None:
        """Record a traced path and report the topology on sc_events.

        Stops silently, without reporting, at the first client or server after the start.
        """
        log.info("Saving a new path trace %s", route)
        for before, after in zip(route, route[1:]):
            if after[1] in (NodeType.CLIENT, NodeType.SERVER):
                return
            self.add_vertex(Vertex.of(before))
            self.add_vertex(Vertex.of(after))
            self.insert_edge(before, after)
        sc_events.put(KnownNetworkGraph(source=self.node_id, graph=self.known_topology()))

    def get_edge_nodes(self) -> Optional[list[Node]]:
        """All non-drone nodes, or None if there are none."""
        nodes = [(v.node_id, v.node_type) for v in self._adjacency if v.node_type is not NodeType.DRONE]
        return nodes or None

    def known_topology(self) -> list[EventNetworkNode]:
        """Every known node with the ids of its neighbours."""
        return [
            EventNetworkNode(v.node_id, v.node_type, [n.node_id for n in neighbours])
            for v, neighbours in self._adjacency.items()
        ]

    def _simple_paths(self, start: Vertex, end: Vertex) -> Iterator[list[Vertex]]:
        if start not in self._adjacency or end not in self._adjacency:
            return
        path = [start]
        visited = {start}

        def walk(node: Vertex) -> Iterator[list[Vertex]]:
            for nxt in self._adjacency[node]:
                if nxt in visited:
                    continue
                if nxt == end:
                    yield [*path, end]
                    continue
                path.append(nxt)
                visited.add(nxt)
                yield from walk(nxt)
                path.pop()
                visited.discard(nxt)

        yield from walk(start)

    def compute_routes(self, start: Vertex, end: Vertex) -> list[list[int]]:
        """All simple routes between two vertices, as lists of node ids."""
        return [[v.node_id for v in route] for route in self._simple_paths(start, end)]

    def get_random_route(self, start: Vertex, end: Vertex) -> Optional[list[int]]:
        """A randomly chosen simple route, or None if there is none."""
        routes = self.compute_routes(start, end)
        return random.choice(routes) if routes else None

    def get_node_type(self, node_id: int) -> NodeType:
        """Type of the node with this id; raises LookupError if it is unknown."""
        for vertex in self._adjacency:
            if vertex.node_id == node_id:
                return vertex.node_type
        raise LookupError("Queried for node type but did not find such node from graph!")

    def reset(self) -> None:
        """Remove all vertices and edges."""
        self._adjacency.clear()