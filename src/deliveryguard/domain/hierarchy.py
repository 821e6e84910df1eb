"""
Work breakdown tree: Module -> Component -> Task -> Subtask.

Nodes live in an arena (WorkTree) keyed by stable identifiers. Each node
holds the ids of the children it owns and, as a lookup only, the id of its
parent. A single node type carries a NodeKind tag; the kind restricts which
kind of child it may own, so traversal and aggregation stay generic.

Nodes are append-only for a run: there is no detach or delete.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from deliveryguard.domain.exceptions import InvalidHierarchy, InvalidStateTransition
from deliveryguard.domain.models import NodeKind, WorkNodeState

# Transition table shared by every node kind, leaf or composite.
VALID_TRANSITIONS: frozenset[tuple[WorkNodeState, WorkNodeState]] = frozenset(
    {
        (WorkNodeState.PENDING, WorkNodeState.IN_PROGRESS),
        (WorkNodeState.IN_PROGRESS, WorkNodeState.COMPLETE),
        (WorkNodeState.IN_PROGRESS, WorkNodeState.FAILED),
        (WorkNodeState.FAILED, WorkNodeState.IN_PROGRESS),  # retry
    }
)


def can_transition(current: WorkNodeState, target: WorkNodeState) -> bool:
    """Check a (current, target) pair against the transition table."""
    return (current, target) in VALID_TRANSITIONS


@dataclass
class WorkNode:
    """Mutable node in the work tree. State changes only via transition_to()."""

    node_id: str
    name: str
    kind: NodeKind
    parent_id: str | None = None
    child_ids: list[str] = field(default_factory=list)
    _state: WorkNodeState = field(default=WorkNodeState.PENDING, repr=False)

    @property
    def state(self) -> WorkNodeState:
        """Stored state. For composites use WorkTree.aggregate_state()."""
        return self._state

    @property
    def is_leaf(self) -> bool:
        return not self.child_ids

    def transition_to(self, target: WorkNodeState) -> None:
        """
        Move to a new state.

        Raises:
            InvalidStateTransition: If the table does not permit the move
        """
        if not can_transition(self._state, target):
            raise InvalidStateTransition(self._state, target)
        self._state = target


class WorkTree:
    """
    Arena owning every node of one module's work breakdown.

    Example:
        tree = WorkTree()
        tree.add_module("auth", "Authentication")
        tree.add_child("auth", "auth.login", "Login flow")
        tree.add_child("auth.login", "auth.login.form", "Render form")
    """

    def __init__(self) -> None:
        self._nodes: dict[str, WorkNode] = {}
        self._roots: list[str] = []

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add_module(self, node_id: str, name: str) -> WorkNode:
        """Create a root Module node."""
        node = self._create(node_id, name, NodeKind.MODULE, parent_id=None)
        self._roots.append(node_id)
        return node

    def add_child(self, parent_id: str, node_id: str, name: str) -> WorkNode:
        """
        Attach a new node under parent_id. Its kind is the parent's child kind.

        Raises:
            InvalidHierarchy: If the parent is unknown or is a Subtask
        """
        parent = self.get(parent_id)
        kind = parent.kind.child_kind
        if kind is None:
            raise InvalidHierarchy(
                f"{parent.kind.value} '{parent_id}' cannot own child nodes"
            )
        node = self._create(node_id, name, kind, parent_id=parent_id)
        parent.child_ids.append(node_id)
        return node

    def _create(
        self, node_id: str, name: str, kind: NodeKind, parent_id: str | None
    ) -> WorkNode:
        if not node_id:
            raise InvalidHierarchy("Node id must be non-empty")
        if node_id in self._nodes:
            raise InvalidHierarchy(f"Node '{node_id}' already exists")
        node = WorkNode(node_id=node_id, name=name, kind=kind, parent_id=parent_id)
        self._nodes[node_id] = node
        return node

    # -------------------------------------------------------------------------
    # Lookup and traversal
    # -------------------------------------------------------------------------

    def get(self, node_id: str) -> WorkNode:
        """
        Raises:
            InvalidHierarchy: If no node has this id
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise InvalidHierarchy(f"Unknown node '{node_id}'") from None

    def roots(self) -> list[WorkNode]:
        return [self._nodes[node_id] for node_id in self._roots]

    def children(self, node_id: str) -> list[WorkNode]:
        return [self._nodes[child_id] for child_id in self.get(node_id).child_ids]

    def parent(self, node_id: str) -> WorkNode | None:
        parent_id = self.get(node_id).parent_id
        return self._nodes[parent_id] if parent_id is not None else None

    def path(self, node_id: str) -> list[WorkNode]:
        """Nodes from the root down to node_id inclusive."""
        result = []
        current: WorkNode | None = self.get(node_id)
        while current is not None:
            result.append(current)
            current = self.parent(current.node_id)
        return list(reversed(result))

    def descendants(self, node_id: str) -> Iterator[WorkNode]:
        """All descendants, depth-first, in attach order."""
        for child in self.children(node_id):
            yield child
            yield from self.descendants(child.node_id)

    def leaves(self, node_id: str) -> Iterator[WorkNode]:
        node = self.get(node_id)
        if node.is_leaf:
            yield node
            return
        for child in self.children(node_id):
            yield from self.leaves(child.node_id)

    def find_by_name(self, name: str) -> WorkNode | None:
        """First node whose name matches case-insensitively."""
        lowered = name.casefold()
        for node in self._nodes.values():
            if node.name.casefold() == lowered:
                return node
        return None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def transition(self, node_id: str, target: WorkNodeState) -> WorkNode:
        """
        Transition one node. Other nodes are never touched.

        Raises:
            InvalidHierarchy: If the node does not exist
            InvalidStateTransition: If the move is not in the table
        """
        node = self.get(node_id)
        node.transition_to(target)
        return node

    def aggregate_state(self, node_id: str) -> WorkNodeState:
        """
        State of a node as derived from its direct children.

        Complete iff all children Complete; else Failed iff any child Failed;
        else InProgress iff any child InProgress or Complete; else Pending.
        A childless node reports its own stored state. Children report their
        own aggregate, so a module reflects its subtasks.
        """
        node = self.get(node_id)
        if node.is_leaf:
            return node.state

        states = [self.aggregate_state(child_id) for child_id in node.child_ids]
        return aggregate(states)


def aggregate(states: list[WorkNodeState]) -> WorkNodeState:
    """Fold child states into a parent state (see WorkTree.aggregate_state)."""
    if all(s is WorkNodeState.COMPLETE for s in states):
        return WorkNodeState.COMPLETE
    if any(s is WorkNodeState.FAILED for s in states):
        return WorkNodeState.FAILED
    if any(s in (WorkNodeState.IN_PROGRESS, WorkNodeState.COMPLETE) for s in states):
        return WorkNodeState.IN_PROGRESS
    return WorkNodeState.PENDING
