"""
Tests for the generic graph engine.

Tests cover:
- Node identity
- Node and edge insertion/removal in directed and undirected graphs
- Neighbour and reachability queries
- Topological sorting and cycle detection
"""

import pytest

from src.models.graph import Edge, Graph, Node
from src.services.exceptions import CycleDetected, GraphError, MissingEndpoint


def make_graph(*edges, is_directed=True):
    graph = Graph(is_directed=is_directed)
    for edge in edges:
        graph.add_edge(edge)
    return graph


class TestNode:
    """Test node identity."""

    def test_equal_labels_are_different_nodes(self):
        """Nodes are compared by id, not by label."""
        assert Node(1) != Node(1)

    def test_same_id_is_same_node(self):
        """A node rebuilt with the same id is equal to the original."""
        node = Node("a")
        assert Node("b", id=node.id) == node
        assert len({node, Node("b", id=node.id)}) == 1


class TestEdge:
    """Test edge construction."""

    def test_missing_source_raises(self):
        """An edge needs a source."""
        with pytest.raises(MissingEndpoint):
            Edge(None, Node(1))

    def test_missing_destination_raises(self):
        """An edge needs a destination."""
        with pytest.raises(GraphError):
            Edge(Node(1), None)

    def test_reversed(self):
        """reversed swaps the endpoints and keeps the weight."""
        source, destination = Node(1), Node(2)
        reverse = Edge(source, destination, 3.0).reversed
        assert reverse.source == destination
        assert reverse.destination == source
        assert reverse.weight == 3.0

    def test_equality_includes_weight(self):
        """Edges differing only by weight are different edges."""
        source, destination = Node(1), Node(2)
        assert Edge(source, destination) == Edge(source, destination)
        assert Edge(source, destination, 1.0) != Edge(source, destination, 2.0)


class TestGraphNodes:
    """Test node insertion and removal."""

    def test_construct_empty(self):
        """A new graph has no nodes or edges."""
        graph = Graph(is_directed=True)
        assert graph.nodes == []
        assert graph.edges == []

    def test_add_node(self):
        """Added nodes are contained."""
        node = Node(1)
        graph = Graph()
        graph.add_node(node)
        assert graph.contains_node(node)
        assert node in graph

    def test_add_existing_node_does_nothing(self):
        """Adding a node twice keeps one copy."""
        node = Node(1)
        graph = Graph()
        graph.add_node(node)
        graph.add_node(node)
        assert len(graph.nodes) == 1

    def test_remove_node(self):
        """Removed nodes are no longer contained."""
        node = Node(1)
        graph = Graph()
        graph.add_node(node)
        graph.remove_node(node)
        assert not graph.contains_node(node)

    def test_remove_node_removes_connected_edges(self):
        """Edges into and out of a removed node go with it."""
        removed = Node(1)
        into = Edge(Node(2), removed)
        out_of = Edge(removed, Node(3))
        unconnected = Edge(Node(2), Node(3))
        graph = make_graph(into, out_of, unconnected)

        graph.remove_node(removed)

        assert not graph.contains_edge(into)
        assert not graph.contains_edge(out_of)
        assert graph.contains_edge(unconnected)

    def test_remove_node_from_empty_graph_does_nothing(self):
        """Removing an absent node is a no-op."""
        graph = Graph()
        graph.remove_node(Node(1))
        assert graph.nodes == []


class TestGraphEdges:
    """Test edge insertion and removal."""

    def test_add_edge_between_existing_nodes(self):
        """An edge between existing nodes is recorded."""
        source, destination = Node(1), Node(2)
        graph = Graph()
        graph.add_node(source)
        graph.add_node(destination)
        edge = Edge(source, destination)

        graph.add_edge(edge)

        assert graph.contains_edge(edge)

    def test_add_edge_inserts_missing_nodes(self):
        """Endpoints not yet in the graph are added."""
        source, destination = Node(1), Node(2)
        graph = make_graph(Edge(source, destination))
        assert graph.contains_node(source)
        assert graph.contains_node(destination)

    def test_multiple_edges_with_different_weights(self):
        """Parallel edges with different weights coexist."""
        source, destination = Node(1), Node(2)
        first = Edge(source, destination, 1.0)
        second = Edge(source, destination, 2.0)
        graph = make_graph(first, second)
        assert set(graph.edges) == {first, second}

    def test_duplicate_edge_not_added_twice(self):
        """An identical edge is stored once."""
        source, destination = Node(1), Node(2)
        graph = make_graph(Edge(source, destination), Edge(source, destination))
        assert len(graph.edges) == 1

    def test_undirected_graph_adds_reverse(self):
        """Undirected graphs store the reverse edge too."""
        edge = Edge(Node(1), Node(2))
        graph = make_graph(edge, is_directed=False)
        assert graph.contains_edge(edge.reversed)
        assert len(graph.edges) == 2

    def test_undirected_loop_stored_once(self):
        """A self-loop in an undirected graph is one edge."""
        node = Node(1)
        graph = make_graph(Edge(node, node), is_directed=False)
        assert len(graph.edges) == 1

    def test_remove_edge(self):
        """Removed edges are no longer contained."""
        edge = Edge(Node(1), Node(2))
        graph = make_graph(edge)
        graph.remove_edge(edge)
        assert not graph.contains_edge(edge)
        assert len(graph.nodes) == 2

    def test_remove_absent_edge_does_nothing(self):
        """Removing an edge that isn't there is a no-op."""
        edge = Edge(Node(1), Node(2))
        graph = Graph()
        graph.remove_edge(edge)
        assert not graph.contains_edge(edge)

    def test_undirected_remove_edge_removes_reverse(self):
        """Removing an undirected edge removes its reverse."""
        edge = Edge(Node(1), Node(2))
        graph = make_graph(edge, is_directed=False)
        graph.remove_edge(edge)
        assert not graph.contains_edge(edge.reversed)
        assert graph.edges == []

    def test_revision_changes_on_mutation(self):
        """Every structural change bumps the revision."""
        graph = Graph()
        start = graph.revision
        node = Node(1)
        graph.add_node(node)
        after_add = graph.revision
        graph.add_node(node)
        assert after_add > start
        assert graph.revision == after_add


class TestGraphQueries:
    """Test neighbour, reachability and ordering queries."""

    def test_successors_and_predecessors(self):
        """Direct neighbours follow edge direction."""
        a, b, c = Node("a"), Node("b"), Node("c")
        graph = make_graph(Edge(a, b), Edge(a, c), Edge(b, c))
        assert set(graph.successors(a)) == {b, c}
        assert set(graph.predecessors(c)) == {a, b}
        assert graph.predecessors(a) == []

    def test_parallel_edges_list_neighbour_once(self):
        """A neighbour reached by two weighted edges is listed once."""
        a, b = Node("a"), Node("b")
        graph = make_graph(Edge(a, b, 1.0), Edge(a, b, 2.0))
        assert graph.successors(a) == [b]
        assert graph.predecessors(b) == [a]

    def test_has_path(self):
        """Reachability follows edges transitively but not backwards."""
        a, b, c = Node("a"), Node("b"), Node("c")
        graph = make_graph(Edge(a, b), Edge(b, c))
        assert graph.has_path(a, c)
        assert not graph.has_path(c, a)
        assert graph.has_path(b, b)

    def test_has_path_with_absent_node(self):
        """Nodes outside the graph reach nothing."""
        a = Node("a")
        graph = make_graph(Edge(a, Node("b")))
        assert not graph.has_path(a, Node("x"))

    def test_topological_sort_respects_edges(self):
        """Every edge's source comes before its destination."""
        a, b, c, d = Node("a"), Node("b"), Node("c"), Node("d")
        graph = make_graph(Edge(c, d), Edge(a, b), Edge(b, d), Edge(a, c))

        order = graph.topological_sort()
        position = {node.id: index for index, node in enumerate(order)}

        assert len(order) == 4
        for edge in graph.edges:
            assert position[edge.source.id] < position[edge.destination.id]

    def test_topological_sort_ties_follow_insertion_order(self):
        """Independent nodes keep the order they were added in."""
        nodes = [Node(i) for i in range(5)]
        graph = Graph()
        graph.add_nodes(nodes)
        assert graph.topological_sort() == nodes

    def test_topological_sort_cycle_raises(self):
        """A directed cycle cannot be sorted."""
        a, b, c = Node("a"), Node("b"), Node("c")
        graph = make_graph(Edge(a, b), Edge(b, c), Edge(c, a))
        with pytest.raises(CycleDetected):
            graph.topological_sort()
        assert not graph.is_acyclic()

    def test_undirected_graph_with_edge_is_cyclic(self):
        """An undirected edge and its reverse form a cycle."""
        graph = make_graph(Edge(Node(1), Node(2)), is_directed=False)
        assert not graph.is_acyclic()
