"""
Generic graph engine.

This module provides:
- Node: identity-bearing vertex carrying a label payload
- Edge: (source, destination, optional weight) between two nodes
- Graph: mutable directed or undirected graph with topological sort

Nodes are stored in an arena keyed by their id and edges in adjacency lists
keyed by source id, so identity comparison is a UUID comparison and the
graph never needs back-references from nodes.

The graph itself does not require acyclicity; higher layers such as
RecipeStepGraph enforce their own cycle policy.
"""

import heapq
import uuid
from dataclasses import dataclass
from typing import Dict, Generic, Iterable, List, Optional, TypeVar

from src.services.exceptions import CycleDetected, MissingEndpoint

T = TypeVar("T")


class Node(Generic[T]):
    """
    A graph vertex.

    Attributes:
        id: Stable UUID assigned at construction; equality and hashing use it
        label: Payload carried by the node (text, a recipe step, ...)
        position: Layout position owned by the UI, ignored by the graph
    """

    def __init__(self, label: T = None, position=None, id: Optional[uuid.UUID] = None):
        self.id = id if id is not None else uuid.uuid4()
        self.label = label
        self.position = position

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={str(self.id)[:8]}, label={self.label!r})"


N = TypeVar("N", bound=Node)


@dataclass(frozen=True)
class Edge(Generic[N]):
    """
    An edge from source to destination.

    Two edges are equal when they join the same node ids with the same
    weight, so edges that differ only by weight can coexist in one graph.

    Raises:
        MissingEndpoint: If source or destination is None
    """

    source: N
    destination: N
    weight: Optional[float] = None

    def __post_init__(self):
        if self.source is None:
            raise MissingEndpoint("source")
        if self.destination is None:
            raise MissingEndpoint("destination")

    @property
    def reversed(self) -> "Edge[N]":
        return Edge(self.destination, self.source, self.weight)

    @property
    def is_loop(self) -> bool:
        return self.source.id == self.destination.id


class Graph(Generic[N]):
    """
    Mutable graph over identity-bearing nodes.

    Invariants:
        - Every edge endpoint is a node of the graph
        - Removing a node removes all of its incident edges
        - In an undirected graph every edge is stored together with its
          reverse; a self-loop is stored once

    Not thread-safe: callers serialize concurrent edits.
    """

    def __init__(self, is_directed: bool = True):
        self.is_directed = is_directed
        self._nodes: Dict[uuid.UUID, N] = {}
        self._adjacency: Dict[uuid.UUID, List[Edge[N]]] = {}
        self._revision = 0

    @property
    def revision(self) -> int:
        """Counter bumped on every structural change, for cache invalidation."""
        return self._revision

    def _changed(self) -> None:
        self._revision += 1

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[N]:
        """All nodes. The order is insertion order but is not part of the contract."""
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge[N]]:
        """All stored edges, including reverse edges of an undirected graph."""
        return [edge for edges in self._adjacency.values() for edge in edges]

    def get_node(self, node_id: uuid.UUID) -> Optional[N]:
        return self._nodes.get(node_id)

    def contains_node(self, node: N) -> bool:
        return node.id in self._nodes

    def contains_edge(self, edge: Edge[N]) -> bool:
        return edge in self._adjacency.get(edge.source.id, [])

    def __contains__(self, node: N) -> bool:
        return self.contains_node(node)

    def __len__(self) -> int:
        return len(self._nodes)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_node(self, node: N) -> None:
        """Insert a node; no-op if a node with the same id is present."""
        if node.id in self._nodes:
            return
        self._nodes[node.id] = node
        self._adjacency[node.id] = []
        self._changed()

    def remove_node(self, node: N) -> None:
        """Remove a node and every edge where it is source or destination."""
        if node.id not in self._nodes:
            return
        del self._nodes[node.id]
        del self._adjacency[node.id]
        for source_id, edges in self._adjacency.items():
            self._adjacency[source_id] = [
                edge for edge in edges if edge.destination.id != node.id
            ]
        self._changed()

    def add_edge(self, edge: Edge[N]) -> None:
        """
        Record an edge, inserting missing endpoints first.

        Identical edges are not added twice. Undirected graphs also record
        the reverse edge.
        """
        self.add_node(edge.source)
        self.add_node(edge.destination)
        self._store_edge(edge)
        if not self.is_directed and not edge.is_loop:
            self._store_edge(edge.reversed)

    def _store_edge(self, edge: Edge[N]) -> None:
        edges = self._adjacency[edge.source.id]
        if edge not in edges:
            edges.append(edge)
            self._changed()

    def remove_edge(self, edge: Edge[N]) -> None:
        """Remove an edge (and its reverse in an undirected graph); no-op if absent."""
        self._discard_edge(edge)
        if not self.is_directed:
            self._discard_edge(edge.reversed)

    def _discard_edge(self, edge: Edge[N]) -> None:
        edges = self._adjacency.get(edge.source.id)
        if edges is not None and edge in edges:
            edges.remove(edge)
            self._changed()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def successors(self, node: N) -> List[N]:
        """Nodes reachable from node through one edge."""
        seen: Dict[uuid.UUID, N] = {}
        for edge in self._adjacency.get(node.id, []):
            seen.setdefault(edge.destination.id, self._nodes[edge.destination.id])
        return list(seen.values())

    def predecessors(self, node: N) -> List[N]:
        """Nodes with an edge into node."""
        seen: Dict[uuid.UUID, N] = {}
        for source_id, edges in self._adjacency.items():
            if any(edge.destination.id == node.id for edge in edges):
                seen[source_id] = self._nodes[source_id]
        return list(seen.values())

    def has_path(self, start: N, end: N) -> bool:
        """True if end can be reached from start (every node reaches itself)."""
        if start.id not in self._nodes or end.id not in self._nodes:
            return False
        stack = [start.id]
        visited = set()
        while stack:
            current = stack.pop()
            if current == end.id:
                return True
            if current in visited:
                continue
            visited.add(current)
            stack.extend(edge.destination.id for edge in self._adjacency[current])
        return False

    def topological_sort(self) -> List[N]:
        """
        Order all nodes so that every edge's source precedes its destination.

        Uses Kahn's algorithm. Among nodes that are ready at the same time the
        one inserted first comes first, so equal graphs sort identically.

        Returns:
            List of all nodes in topological order

        Raises:
            CycleDetected: If the graph is not a DAG
        """
        insertion_index = {node_id: index for index, node_id in enumerate(self._nodes)}
        in_degree = {node_id: 0 for node_id in self._nodes}
        for edges in self._adjacency.values():
            for edge in edges:
                in_degree[edge.destination.id] += 1

        ready = [
            (insertion_index[node_id], node_id)
            for node_id, degree in in_degree.items()
            if degree == 0
        ]
        heapq.heapify(ready)

        ordered: List[N] = []
        while ready:
            _, node_id = heapq.heappop(ready)
            ordered.append(self._nodes[node_id])
            for edge in self._adjacency[node_id]:
                destination_id = edge.destination.id
                in_degree[destination_id] -= 1
                if in_degree[destination_id] == 0:
                    heapq.heappush(ready, (insertion_index[destination_id], destination_id))

        if len(ordered) != len(self._nodes):
            raise CycleDetected()
        return ordered

    def is_acyclic(self) -> bool:
        try:
            self.topological_sort()
        except CycleDetected:
            return False
        return True

    def add_nodes(self, nodes: Iterable[N]) -> None:
        for node in nodes:
            self.add_node(node)
