"""
Cooking session step models.

A SessionRecipeStepGraph is the runtime overlay used while cooking: a frozen
snapshot of a RecipeStepGraph in which every step can be marked completed.

State machine per step:
    Pending -> Completed   only when every direct predecessor is Completed
    Completed -> Pending   always (undo); successors are left as they are

Sessions never share completion state. Each one starts with every step
pending and keeps its own copy of the step contents, so later edits to the
recipe do not reach a running session.
"""

import uuid
from typing import Dict, FrozenSet, List, Optional

from src.services.exceptions import StepNotCompletable, ValidationError

from .graph import Edge, Graph, Node
from .recipe_step import RecipeStep, RecipeStepGraph


class SessionRecipeStepNode(Node[RecipeStep]):
    """
    A step in a cooking session.

    The node keeps the id of the recipe step it was copied from, so callers
    can map between the recipe and the session.
    """

    def __init__(self, step: RecipeStep, position=None, id: Optional[uuid.UUID] = None):
        super().__init__(label=step, position=position, id=id)
        self._is_completed = False

    @property
    def step(self) -> RecipeStep:
        return self.label

    @property
    def is_completed(self) -> bool:
        return self._is_completed

    @property
    def time_taken(self) -> int:
        return self.label.time_taken


class SessionRecipeStepGraph:
    """
    Completion tracking over a frozen snapshot of a recipe step graph.

    Args:
        step_graph: Recipe step graph to snapshot

    Raises:
        CycleDetected: If step_graph is not acyclic
    """

    def __init__(self, step_graph: RecipeStepGraph):
        self._graph: Graph[SessionRecipeStepNode] = Graph(is_directed=True)
        for node in step_graph.nodes:
            self._graph.add_node(
                SessionRecipeStepNode(node.label.copy(), position=node.position, id=node.id)
            )
        for edge in step_graph.edges:
            self._graph.add_edge(
                Edge(
                    self._graph.get_node(edge.source.id),
                    self._graph.get_node(edge.destination.id),
                    edge.weight,
                )
            )

        self._predecessor_ids: Dict[uuid.UUID, FrozenSet[uuid.UUID]] = {
            node.id: frozenset(pred.id for pred in self._graph.predecessors(node))
            for node in self._graph.nodes
        }
        self._sorted_nodes = self._graph.topological_sort()

    # ------------------------------------------------------------------
    # Read-only graph views
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[SessionRecipeStepNode]:
        return self._graph.nodes

    @property
    def edges(self) -> List[Edge[SessionRecipeStepNode]]:
        return self._graph.edges

    @property
    def topologically_sorted_nodes(self) -> List[SessionRecipeStepNode]:
        return list(self._sorted_nodes)

    def get_node(self, node_id: uuid.UUID) -> Optional[SessionRecipeStepNode]:
        return self._graph.get_node(node_id)

    def contains_node(self, node: Node) -> bool:
        return self._graph.contains_node(node)

    def predecessors(self, node: Node) -> List[SessionRecipeStepNode]:
        stored = self._resolve(node)
        return [self._graph.get_node(pred_id) for pred_id in self._predecessor_ids[stored.id]]

    def __len__(self) -> int:
        return len(self._graph)

    # ------------------------------------------------------------------
    # Completion queries
    # ------------------------------------------------------------------

    def is_completable(self, node: Node) -> bool:
        """True iff every direct predecessor of node is completed."""
        stored = self._resolve(node)
        return all(
            self._graph.get_node(pred_id).is_completed
            for pred_id in self._predecessor_ids[stored.id]
        )

    @property
    def completable_nodes(self) -> List[SessionRecipeStepNode]:
        """Nodes whose direct predecessors are all completed, in step order."""
        return [node for node in self._sorted_nodes if self.is_completable(node)]

    @property
    def available_nodes(self) -> List[SessionRecipeStepNode]:
        """Pending nodes that can be completed now, in step order."""
        return [
            node
            for node in self._sorted_nodes
            if not node.is_completed and self.is_completable(node)
        ]

    @property
    def completed_nodes(self) -> List[SessionRecipeStepNode]:
        return [node for node in self._sorted_nodes if node.is_completed]

    @property
    def is_complete(self) -> bool:
        return all(node.is_completed for node in self._sorted_nodes)

    @property
    def total_time_taken(self) -> int:
        return sum(node.time_taken for node in self._sorted_nodes)

    @property
    def remaining_time_taken(self) -> int:
        """Estimated seconds of the steps still pending."""
        return sum(node.time_taken for node in self._sorted_nodes if not node.is_completed)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def complete_step(self, node: Node) -> None:
        """
        Mark a step completed; no-op if it already is.

        Raises:
            StepNotCompletable: If a direct predecessor is still pending
        """
        stored = self._resolve(node)
        if stored.is_completed:
            return
        pending = sum(
            1
            for pred_id in self._predecessor_ids[stored.id]
            if not self._graph.get_node(pred_id).is_completed
        )
        if pending:
            raise StepNotCompletable(stored.label.content, pending)
        stored._is_completed = True

    def uncomplete_step(self, node: Node) -> None:
        """Mark a step pending again. Always allowed."""
        self._resolve(node)._is_completed = False

    def toggle_step(self, node: Node) -> bool:
        """
        Flip the completion state of a step.

        Returns:
            The new completion state

        Raises:
            StepNotCompletable: If completing and a predecessor is pending
        """
        stored = self._resolve(node)
        if stored.is_completed:
            self.uncomplete_step(stored)
        else:
            self.complete_step(stored)
        return stored.is_completed

    def reset(self) -> None:
        """Mark every step pending."""
        for node in self._graph.nodes:
            node._is_completed = False

    def _resolve(self, node: Node) -> SessionRecipeStepNode:
        stored = self._graph.get_node(node.id)
        if stored is None:
            raise ValidationError(["Step is not part of this cooking session"])
        return stored
