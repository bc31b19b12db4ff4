"""
Recipe step models.

This module provides:
- RecipeStep: one instruction of a recipe, with a derived time estimate
- RecipeStepNode: graph node carrying a RecipeStep
- RecipeStepGraph: acyclic dependency graph of recipe steps

An edge A -> B in a RecipeStepGraph means step A must be done before step B.
"""

from typing import Iterable, List, Optional, Tuple

from src.services.exceptions import CycleDetected, ValidationError
from src.utils.validators import validate_required_string, validate_string_length
from src.utils.constants import MAX_STEP_LENGTH

from .graph import Edge, Graph, Node


def _clean_content(content: str) -> str:
    content = validate_required_string(content, "Recipe step content")
    validate_string_length(content, MAX_STEP_LENGTH, "Recipe step content")
    return content


class RecipeStep:
    """
    A single recipe instruction.

    Attributes:
        content: Instruction text, trimmed and never empty

    Raises:
        ValidationError: If content is blank after trimming
    """

    def __init__(self, content: str):
        self._content = _clean_content(content)

    @property
    def content(self) -> str:
        return self._content

    @property
    def time_taken(self) -> int:
        """Estimated seconds for this step, derived from the content on each access."""
        from src.services.step_time_parser import parse_time_taken

        return parse_time_taken(self._content)

    def update_content(self, content: str) -> None:
        """Replace the content; the step is unchanged if validation fails."""
        self._content = _clean_content(content)

    def copy(self) -> "RecipeStep":
        return RecipeStep(self._content)

    def __repr__(self) -> str:
        return f"RecipeStep(content={self._content!r})"


class RecipeStepNode(Node[RecipeStep]):
    """Graph node whose label is a RecipeStep."""

    def __init__(self, step: RecipeStep, position=None, id=None):
        super().__init__(label=step, position=position, id=id)

    @property
    def step(self) -> RecipeStep:
        return self.label

    @property
    def time_taken(self) -> int:
        return self.label.time_taken


class RecipeStepGraph(Graph[RecipeStepNode]):
    """
    Directed acyclic graph of recipe steps.

    Edge insertion that would create a cycle raises CycleDetected and leaves
    the graph unchanged.

    Args:
        nodes: Initial step nodes
        edges: Initial edges between steps

    Raises:
        CycleDetected: If the initial edges contain a cycle
    """

    def __init__(
        self,
        nodes: Iterable[RecipeStepNode] = (),
        edges: Iterable[Edge[RecipeStepNode]] = (),
    ):
        super().__init__(is_directed=True)
        self._sorted_cache: Optional[Tuple[int, List[RecipeStepNode]]] = None
        for node in nodes:
            self.add_node(node)
        for edge in edges:
            self.add_edge(edge)

    @classmethod
    def from_step_contents(cls, contents: Iterable[str]) -> "RecipeStepGraph":
        """
        Build a linear chain where each step depends on the one before it.

        Blank contents are skipped.
        """
        nodes = []
        for content in contents:
            try:
                nodes.append(RecipeStepNode(RecipeStep(content)))
            except ValidationError:
                continue
        edges = [Edge(before, after) for before, after in zip(nodes, nodes[1:])]
        return cls(nodes, edges)

    # ------------------------------------------------------------------
    # Step CRUD
    # ------------------------------------------------------------------

    def add_step(self, content: str) -> RecipeStepNode:
        """Create a step from content and add it to the graph."""
        node = RecipeStepNode(RecipeStep(content))
        self.add_node(node)
        return node

    def update_step(self, node: RecipeStepNode, content: str) -> None:
        """
        Change the content of a step in place; its id and edges are kept.

        Raises:
            ValidationError: If content is blank or the node is not in the graph
        """
        stored = self.get_node(node.id)
        if stored is None:
            raise ValidationError(["Recipe step is not part of this recipe"])
        stored.label.update_content(content)

    def remove_step(self, node: RecipeStepNode) -> None:
        self.remove_node(node)

    def add_edge(self, edge: Edge[RecipeStepNode]) -> None:
        """
        Add a dependency edge.

        Raises:
            CycleDetected: If the edge is a self-loop or its destination can
                already reach its source
        """
        if edge.is_loop or self.has_path(edge.destination, edge.source):
            raise CycleDetected(
                f"Step '{edge.destination.label.content}' already leads to "
                f"'{edge.source.label.content}'"
            )
        super().add_edge(edge)

    def link_steps(self, before: RecipeStepNode, after: RecipeStepNode) -> Edge[RecipeStepNode]:
        """Make after depend on before and return the new edge."""
        edge = Edge(before, after)
        self.add_edge(edge)
        return edge

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def topologically_sorted_nodes(self) -> List[RecipeStepNode]:
        """Steps in dependency order, ties broken by insertion order; cached per revision."""
        if self._sorted_cache is None or self._sorted_cache[0] != self.revision:
            self._sorted_cache = (self.revision, self.topological_sort())
        return list(self._sorted_cache[1])

    @property
    def step_contents(self) -> List[str]:
        return [node.label.content for node in self.topologically_sorted_nodes]

    @property
    def total_time_taken(self) -> int:
        """Sum of the time estimates of all steps, in seconds."""
        return sum(node.time_taken for node in self.nodes)

    def copy(self) -> "RecipeStepGraph":
        """Independent copy; nodes keep their ids but get their own RecipeStep."""
        copies = {
            node.id: RecipeStepNode(node.label.copy(), position=node.position, id=node.id)
            for node in self.nodes
        }
        edges = [
            Edge(copies[edge.source.id], copies[edge.destination.id], edge.weight)
            for edge in self.edges
        ]
        return RecipeStepGraph(copies.values(), edges)
