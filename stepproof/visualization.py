"""
Reporting utilities for the CLI.
"""

from .core.proof import extract_branches
from .core.state import TableauxState, ResolutionState


def print_state(state):
    """Print a summary of the current proof state."""
    print(f"\n{'='*60}")
    print(f"Calculus: {state.calculus}")
    print(f"Clauses ({len(state.clause_set)}):")
    for i, clause in enumerate(state.clause_set):
        marker = "  <- newest" if isinstance(state, ResolutionState) and i == state.newest_node else ""
        print(f"  [{i}] {clause}{marker}")

    if isinstance(state, TableauxState):
        p = state.params
        print(f"Connectedness: {p.connectedness} | Regular: {p.regular} | "
              f"Backtracking: {p.backtracking}")
        print(f"Nodes ({len(state.nodes)}):")
        for i, node in enumerate(state.nodes):
            depth = len(state.path_to(i)) - 1
            status = "closed" if node.is_closed else ("open" if node.is_leaf else "")
            extra = []
            if node.close_ref is not None:
                extra.append(f"closed by {node.close_ref}")
            if node.lemma_source is not None:
                extra.append(f"lemma of {node.lemma_source}")
            note = f" ({', '.join(extra)})" if extra else ""
            print(f"  {'  ' * depth}[{i}] {node} {status}{note}".rstrip())

        open_branches = [b for b in extract_branches(state) if b[2] is None]
        print(f"Open branches ({len(open_branches)}):")
        for leaf_id, path, _ in open_branches:
            print(f"  leaf {leaf_id}: " + " -> ".join(str(state.nodes[i]) for i in path))
    print(f"{'='*60}")


def print_history(state):
    """Print the recorded move history of a tableaux proof."""
    if not isinstance(state, TableauxState) or not state.params.backtracking:
        return
    print(f"\nMove history ({len(state.move_history)}):")
    for i, move in enumerate(state.move_history):
        d = move.to_dict()
        print(f"  {i+1}. {move.type} {d['id1']} {d['id2']}")
    if state.used_backtracking:
        print("  (undo has been used in this proof)")


def print_close_message(closed: bool, message: str):
    print(f"\n{'='*60}")
    print(f"  {'QED' if closed else '...'}: {message}")
    print(f"{'='*60}")
