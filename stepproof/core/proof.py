"""
Closure checking and proof extraction.

Neither function mutates the state it is given.
"""

from .state import TableauxState, ResolutionState


CLOSED_MESSAGE = "The proof is closed"
OPEN_MESSAGE = "The proof is not closed"


def is_closed(state) -> bool:
    """A tableaux proof is closed when its root is; a resolution proof when it holds []."""
    if isinstance(state, TableauxState):
        return state.root.is_closed
    if isinstance(state, ResolutionState):
        return any(c.is_empty for c in state.clause_set)
    raise TypeError(f"Unknown proof state {type(state).__name__}")


def check_closed(state) -> tuple:
    """Returns (closed, human-readable message)."""
    closed = is_closed(state)
    return closed, CLOSED_MESSAGE if closed else OPEN_MESSAGE


def extract_branches(state: TableauxState) -> list:
    """
    Every root-to-leaf branch as (leaf id, [node ids], closing ancestor or None).

    Useful for reporting which branches are still open.
    """
    branches = []
    for leaf_id in state.leaves():
        leaf = state.nodes[leaf_id]
        branches.append((leaf_id, state.path_to(leaf_id), leaf.close_ref))
    return branches
